from random import Random

import pytest

from studydeck.domain.cards import Card, CardPack, PackSlot, Rarity, RarityChance
from studydeck.domain.exceptions import InternalError
from studydeck.domain.packs import draw_card, draw_pack, select_rarity
from studydeck.testing import ScriptedRandom


def _slot(*entries, slot=1):
    return PackSlot(
        slot=slot,
        probabilities=tuple(RarityChance(rarity=rarity, chance=chance) for rarity, chance in entries),
    )


COMMON = Card(card_id="c1", name="Swinub", rarity=Rarity.COMMON)
COMMON_2 = Card(card_id="c2", name="Torchic", rarity=Rarity.COMMON)
RARE = Card(card_id="r1", name="Espeon", rarity=Rarity.RARE)


def test_select_rarity_walks_cumulative_chances():
    slot = _slot((Rarity.RARE, 60), (Rarity.ILLUSTRATION_RARE, 30), (Rarity.DOUBLE_RARE, 10))
    rng = ScriptedRandom([0.0, 0.599, 0.6, 0.899, 0.95])
    picks = [select_rarity(slot, rng) for _ in range(5)]
    assert picks == [
        Rarity.RARE,
        Rarity.RARE,
        Rarity.ILLUSTRATION_RARE,
        Rarity.ILLUSTRATION_RARE,
        Rarity.DOUBLE_RARE,
    ]


def test_select_rarity_falls_back_to_last_listed_when_chances_fall_short():
    slot = _slot((Rarity.COMMON, 50), (Rarity.UNCOMMON, 30))
    assert select_rarity(slot, ScriptedRandom([0.95])) is Rarity.UNCOMMON


def test_select_rarity_rejects_empty_distribution():
    with pytest.raises(InternalError):
        select_rarity(PackSlot(slot=1, probabilities=()), ScriptedRandom([0.1]))


def test_draw_card_prefers_matching_rarity():
    card, fallback = draw_card([RARE, COMMON, COMMON_2], Rarity.COMMON, ScriptedRandom([], pick=1))
    assert card is COMMON_2
    assert fallback is False


def test_draw_card_uses_whole_pool_when_rarity_missing():
    card, fallback = draw_card([COMMON, RARE], Rarity.DOUBLE_RARE, ScriptedRandom([], pick=1))
    assert card is RARE
    assert fallback is True


def test_draw_pack_returns_one_card_per_slot_in_order():
    pack = CardPack(
        code="mixed",
        name="Mixed",
        cost=10,
        cards=("c1", "r1"),
        slots=(
            _slot((Rarity.COMMON, 100), slot=1),
            _slot((Rarity.RARE, 100), slot=2),
            _slot((Rarity.SPECIAL_ILLUSTRATION_RARE, 100), slot=3),
        ),
    )
    draws = draw_pack(pack, [COMMON, RARE], Random(3))
    assert [draw.slot for draw in draws] == [1, 2, 3]
    assert draws[0].card is COMMON
    assert draws[1].card is RARE
    assert draws[2].rarity is Rarity.SPECIAL_ILLUSTRATION_RARE
    assert draws[2].fallback is True
    assert draws[2].card in (COMMON, RARE)


def test_rarity_values_match_seed_strings():
    assert Rarity("Special Illustration Rare") is Rarity.SPECIAL_ILLUSTRATION_RARE
    assert [rarity.rank for rarity in Rarity] == list(range(6))
