import json
from pathlib import Path
from random import Random

import pytest

from studydeck.diagnostics.checklist import run_checklist
from studydeck.diagnostics.pack_simulator import PackSimulator
from studydeck.domain.cards import Card, LevelRequirement, Rarity
from studydeck.loaders import SeedDefinition, parse_seed_dict
from studydeck.testing import PackFactory

SEED_PATH = Path(__file__).resolve().parent.parent / "examples" / "seed.json"


@pytest.fixture()
def seed():
    return parse_seed_dict(json.loads(SEED_PATH.read_text(encoding="utf-8")))


def test_checklist_passes_for_example_seed(seed):
    assert run_checklist(seed) == []


def test_checklist_flags_balancing_issues():
    card = Card(card_id="c1", name="Swinub", rarity=Rarity.COMMON)
    odd = PackFactory().build(
        [card], code="odd", slots=[[(Rarity.COMMON, 50.0), (Rarity.RARE, 30.0)]]
    )
    empty = PackFactory().build(
        [Card(card_id="gone", name="Gone", rarity=Rarity.RARE)], code="empty"
    )
    definition = SeedDefinition(
        cards=(card,),
        packs=(odd, empty),
        levels=(
            LevelRequirement(level=1, experience_required=50),
            LevelRequirement(level=3, experience_required=40),
        ),
    )

    issues = run_checklist(definition)
    messages = [issue.message for issue in issues]

    assert ("error", "Pack empty resolves to no cards.") in [
        (issue.severity, issue.message) for issue in issues
    ]
    assert any("chances add up to 80" in message for message in messages)
    assert any("can roll Rare" in message for message in messages)
    assert any("jumps from 1 to 3" in message for message in messages)
    assert any("requires no more experience" in message for message in messages)


def test_checklist_requires_packs_and_warns_without_levels():
    issues = run_checklist(SeedDefinition(cards=(), packs=(), levels=()))
    assert [issue.severity for issue in issues] == ["error", "warning"]


def test_simulator_counts_every_slot(seed):
    result = PackSimulator(seed, rng=Random(11)).simulate("eevee", pulls=200)

    assert result.cards_drawn == 200 * 6
    assert result.coins_spent == 200 * 20
    assert result.fallbacks == 0
    assert result.rarities[Rarity.COMMON] == 200
    assert result.rarities[Rarity.UNCOMMON] == 200
    assert result.share(Rarity.COMMON) == pytest.approx(1 / 6)
    assert result.unique_cards <= len(seed.cards)


def test_simulator_rejects_bad_input(seed):
    simulator = PackSimulator(seed, rng=Random(1))
    with pytest.raises(ValueError):
        simulator.simulate("eevee", pulls=0)
    with pytest.raises(KeyError):
        simulator.simulate("missing")
