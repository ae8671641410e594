"""Automated checks to highlight balancing issues."""

from __future__ import annotations

import math
from dataclasses import dataclass

from ..domain.cards import cards_by_rarity
from ..loaders.json_loader import SeedDefinition


@dataclass(slots=True)
class ChecklistIssue:
    severity: str
    message: str


def run_checklist(definition: SeedDefinition) -> list[ChecklistIssue]:
    issues: list[ChecklistIssue] = []
    catalog = {card.card_id: card for card in definition.cards}

    if not definition.packs:
        issues.append(ChecklistIssue("error", "No packs defined."))

    for pack in definition.packs:
        pool = [catalog[card_id] for card_id in pack.cards if card_id in catalog]
        if not pool:
            issues.append(ChecklistIssue("error", f"Pack {pack.code} resolves to no cards."))
            continue
        by_rarity = cards_by_rarity(pool)
        for slot in pack.slots:
            total = slot.total_chance
            if not math.isclose(total, 100.0):
                issues.append(
                    ChecklistIssue(
                        "warning",
                        f"Pack {pack.code} slot {slot.slot} chances add up to {total:g}, not 100; "
                        f"the last rarity absorbs the remainder.",
                    )
                )
            for entry in slot.probabilities:
                if entry.chance > 0 and entry.rarity not in by_rarity:
                    issues.append(
                        ChecklistIssue(
                            "warning",
                            f"Pack {pack.code} slot {slot.slot} can roll {entry.rarity.value} "
                            f"but the pool has no such card.",
                        )
                    )

    levels = sorted(definition.levels, key=lambda requirement: requirement.level)
    if not levels:
        issues.append(ChecklistIssue("warning", "No level requirements defined; users never level up."))
    for previous, current in zip(levels, levels[1:]):
        if current.level != previous.level + 1:
            issues.append(
                ChecklistIssue(
                    "error",
                    f"Level table jumps from {previous.level} to {current.level}; "
                    f"leveling stops at the gap.",
                )
            )
        if current.experience_required <= previous.experience_required:
            issues.append(
                ChecklistIssue(
                    "warning",
                    f"Level {current.level} requires no more experience than level {previous.level}.",
                )
            )

    return issues
