"""Pack resolution: weighted rarity per slot, uniform card within rarity."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from random import Random
from typing import Sequence

from .cards import Card, CardPack, PackSlot, PackSummary, Rarity
from .concurrency import retry_on_conflict
from .events import EventBus, PackOpened
from .exceptions import Forbidden, InternalError, NotFound
from .inventory import merge_cards
from ..storage.base import CardStore, PackStore, UserStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SlotDraw:
    slot: int
    rarity: Rarity
    card: Card
    fallback: bool = False


def select_rarity(slot: PackSlot, rng: Random) -> Rarity:
    """Pick a rarity from the slot's cumulative percentage table.

    ``r`` is uniform in [0, 100). Chances need not add up to 100; when ``r`` lands
    past the running total the last listed rarity wins.
    """
    if not slot.probabilities:
        raise InternalError(f"Slot {slot.slot} has no rarity probabilities")
    threshold = rng.random() * 100
    cumulative = 0.0
    for entry in slot.probabilities:
        cumulative += entry.chance
        if threshold < cumulative:
            return entry.rarity
    return slot.probabilities[-1].rarity


def draw_card(pool: Sequence[Card], rarity: Rarity, rng: Random) -> tuple[Card, bool]:
    """Pick a card of ``rarity`` from the pool, or any pool card if none match.

    Returns the card and whether the pool-wide fallback was used. ``pool`` must
    not be empty.
    """
    matching = [card for card in pool if card.rarity is rarity]
    if matching:
        return rng.choice(matching), False
    return rng.choice(pool), True


def draw_pack(pack: CardPack, pool: Sequence[Card], rng: Random) -> list[SlotDraw]:
    """Resolve every slot of ``pack`` in declared order."""
    draws: list[SlotDraw] = []
    for slot in pack.slots:
        rarity = select_rarity(slot, rng)
        card, fallback = draw_card(pool, rarity, rng)
        draws.append(SlotDraw(slot=slot.slot, rarity=rarity, card=card, fallback=fallback))
    return draws


class PackService:
    """Open packs for users: debit coins, draw cards, merge them into inventory."""

    def __init__(
        self,
        pack_store: PackStore,
        card_store: CardStore,
        user_store: UserStore,
        event_bus: EventBus,
        *,
        rng: Random | None = None,
        max_write_attempts: int = 3,
    ) -> None:
        self._packs = pack_store
        self._cards = card_store
        self._users = user_store
        self._event_bus = event_bus
        self._rng = rng or Random()
        self._max_write_attempts = max_write_attempts

    async def list_packs(self) -> list[PackSummary]:
        packs = await self._packs.all()
        return [
            PackSummary(code=pack.code, name=pack.name, cost=pack.cost, description=pack.description)
            for pack in packs
        ]

    async def get_pack(self, code: str) -> CardPack:
        pack = await self._packs.find_by_code(code)
        if pack is None:
            raise NotFound("CardPack not found")
        return pack

    async def open_pack(self, code: str, user_id: str) -> list[Card]:
        pack = await self.get_pack(code)

        async def attempt() -> list[Card]:
            record = await self._users.get(user_id)
            if record is None:
                raise NotFound("User not found")
            if record.coins < pack.cost:
                raise Forbidden("Not enough coins to open this pack")

            pool = await self._cards.find_by_ids(pack.cards)
            if not pool:
                raise InternalError("No cards found in pack")

            draws = draw_pack(pack, pool, self._rng)
            for draw in draws:
                if draw.fallback:
                    logger.warning(
                        "No cards found for rarity %s in slot %s of pack %s; drew %s instead.",
                        draw.rarity.value,
                        draw.slot,
                        code,
                        draw.card.card_id,
                    )
            drawn = [draw.card for draw in draws]
            merge_cards(record, drawn, datetime.now(timezone.utc))
            record.coins -= pack.cost
            await self._users.save(record)
            return drawn

        cards = await retry_on_conflict(
            f"open_pack:{code}:{user_id}", attempt, attempts=self._max_write_attempts
        )
        logger.info(
            "User %s opened pack %s: %s",
            user_id,
            code,
            ", ".join(f"{card.name} ({card.rarity.value})" for card in cards),
        )
        await self._event_bus.publish(
            PackOpened(
                user_id=user_id,
                pack_code=code,
                card_ids=tuple(card.card_id for card in cards),
                cost=pack.cost,
            )
        )
        return cards
