"""Factories for tests and prototyping."""

from __future__ import annotations

from dataclasses import dataclass, field
from random import Random
from typing import Iterable, Sequence

from faker import Faker

from ..domain.cards import Card, CardPack, PackSlot, Rarity, RarityChance
from ..storage.base import UserRecord

POKEMON_TYPES = (
    "Colorless",
    "Darkness",
    "Dragon",
    "Fairy",
    "Fighting",
    "Fire",
    "Grass",
    "Lightning",
    "Metal",
    "Psychic",
    "Water",
)


@dataclass(slots=True)
class CardFactory:
    faker: Faker = field(default_factory=Faker)
    rng: Random = field(default_factory=Random)

    def build(self, rarity: Rarity | None = None) -> Card:
        rarity = rarity or self.rng.choice(list(Rarity))
        card_id = f"sv{self.rng.randint(1, 9)}-{self.faker.unique.random_int(min=1, max=99999)}"
        return Card(
            card_id=card_id,
            name=self.faker.word().title(),
            rarity=rarity,
            types=(self.rng.choice(POKEMON_TYPES),),
            image_small=f"https://images.example.com/{card_id}.png",
            image_large=f"https://images.example.com/{card_id}_hires.png",
        )

    def batch(self, count: int, rarity: Rarity | None = None) -> Iterable[Card]:
        for _ in range(count):
            yield self.build(rarity=rarity)


@dataclass(slots=True)
class PackFactory:
    faker: Faker = field(default_factory=Faker)

    def build(
        self,
        cards: Sequence[Card],
        *,
        code: str | None = None,
        cost: int = 20,
        slots: Sequence[Sequence[tuple[Rarity, float]]] | None = None,
    ) -> CardPack:
        """Pack over ``cards``; default is one guaranteed-Common slot."""
        slots = slots or [[(Rarity.COMMON, 100.0)]]
        return CardPack(
            code=code or self.faker.unique.slug(),
            name=self.faker.catch_phrase(),
            cost=cost,
            cards=tuple(card.card_id for card in cards),
            slots=tuple(
                PackSlot(
                    slot=position,
                    probabilities=tuple(
                        RarityChance(rarity=rarity, chance=chance) for rarity, chance in slot
                    ),
                )
                for position, slot in enumerate(slots, start=1)
            ),
        )


@dataclass(slots=True)
class UserFactory:
    faker: Faker = field(default_factory=Faker)

    def build(
        self,
        user_id: str | None = None,
        *,
        coins: int = 0,
        experience: int = 0,
        level: int = 0,
    ) -> UserRecord:
        return UserRecord(
            user_id=user_id or f"user_{self.faker.unique.uuid4()}",
            username=self.faker.user_name(),
            coins=coins,
            experience=experience,
            level=level,
        )


class ScriptedRandom:
    """Stand-in for ``random.Random`` that replays fixed ``random()`` values.

    ``choice`` returns the element at ``pick`` (clamped), so card picks are
    predictable too.
    """

    def __init__(self, values: Iterable[float], *, pick: int = 0) -> None:
        self._values = list(values)
        self._pick = pick

    def random(self) -> float:
        if not self._values:
            raise AssertionError("ScriptedRandom ran out of values")
        return self._values.pop(0)

    def choice(self, seq):
        return seq[min(self._pick, len(seq) - 1)]
