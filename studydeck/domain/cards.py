"""Card catalog and pack definition models."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Sequence


class Rarity(str, Enum):
    COMMON = "Common"
    UNCOMMON = "Uncommon"
    RARE = "Rare"
    DOUBLE_RARE = "Double Rare"
    ILLUSTRATION_RARE = "Illustration Rare"
    SPECIAL_ILLUSTRATION_RARE = "Special Illustration Rare"

    @property
    def rank(self) -> int:
        return _RARITY_ORDER.index(self)


_RARITY_ORDER = list(Rarity)


@dataclass(frozen=True, slots=True)
class Card:
    """Immutable catalog entry."""

    card_id: str
    name: str
    rarity: Rarity
    types: tuple[str, ...] = ()
    image_small: str | None = None
    image_large: str | None = None


@dataclass(frozen=True, slots=True)
class RarityChance:
    rarity: Rarity
    chance: float


@dataclass(frozen=True, slots=True)
class PackSlot:
    """One position in a pack with its rarity distribution (chances in percent)."""

    slot: int
    probabilities: tuple[RarityChance, ...]

    @property
    def total_chance(self) -> float:
        return sum(entry.chance for entry in self.probabilities)


@dataclass(frozen=True, slots=True)
class CardPack:
    """Declarative pack definition: price, card pool and ordered slots."""

    code: str
    name: str
    cost: int
    cards: tuple[str, ...]
    slots: tuple[PackSlot, ...]
    description: str = ""

    @property
    def num_of_cards(self) -> int:
        return len(self.slots)


@dataclass(frozen=True, slots=True)
class PackSummary:
    code: str
    name: str
    cost: int
    description: str = ""


@dataclass(frozen=True, slots=True)
class LevelRequirement:
    level: int
    experience_required: int
    reward_coins: int = 0


def cards_by_rarity(cards: Sequence[Card]) -> dict[Rarity, list[Card]]:
    """Partition a card pool by rarity, preserving pool order inside each bucket."""
    buckets: dict[Rarity, list[Card]] = {}
    for card in cards:
        buckets.setdefault(card.rarity, []).append(card)
    return buckets
