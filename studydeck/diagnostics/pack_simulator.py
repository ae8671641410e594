"""Monte-Carlo pack openings using the real draw engine."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from random import Random
from typing import Dict

from ..domain.cards import Rarity
from ..domain.packs import draw_pack
from ..loaders.json_loader import SeedDefinition


@dataclass(slots=True)
class SimulationResult:
    pack_code: str
    pulls: int
    cards_drawn: int = 0
    rarities: Dict[Rarity, int] = field(default_factory=dict)
    fallbacks: int = 0
    unique_cards: int = 0
    coins_spent: int = 0

    def share(self, rarity: Rarity) -> float:
        if not self.cards_drawn:
            return 0.0
        return self.rarities.get(rarity, 0) / self.cards_drawn


class PackSimulator:
    """Open a pack many times and summarise what comes out."""

    def __init__(self, definition: SeedDefinition, *, rng: Random | None = None) -> None:
        self._definition = definition
        self._rng = rng or Random()

    def simulate(self, pack_code: str, *, pulls: int = 1000) -> SimulationResult:
        if pulls <= 0:
            raise ValueError("Pulls must be positive")
        packs = {pack.code: pack for pack in self._definition.packs}
        try:
            pack = packs[pack_code]
        except KeyError as exc:
            raise KeyError(f"Pack {pack_code} not found") from exc
        catalog = {card.card_id: card for card in self._definition.cards}
        pool = [catalog[card_id] for card_id in pack.cards if card_id in catalog]
        if not pool:
            raise ValueError(f"Pack {pack_code} resolves to no cards")

        rarities: Counter[Rarity] = Counter()
        seen: set[str] = set()
        result = SimulationResult(pack_code=pack_code, pulls=pulls)
        for _ in range(pulls):
            for draw in draw_pack(pack, pool, self._rng):
                rarities[draw.card.rarity] += 1
                seen.add(draw.card.card_id)
                result.cards_drawn += 1
                if draw.fallback:
                    result.fallbacks += 1
            result.coins_spent += pack.cost
        result.rarities = dict(rarities)
        result.unique_cards = len(seen)
        return result
