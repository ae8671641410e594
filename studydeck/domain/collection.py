"""Read-side views over the card catalog and user collections."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Literal

from .cards import Card, Rarity
from .exceptions import NotFound
from ..storage.base import CardStore, UserStore

SortKey = Literal["recent", "types", "rarity", "duplicates"]
SortOrder = Literal["asc", "desc"]

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass(frozen=True, slots=True)
class OwnedCard:
    card: Card
    copies: int
    collected_at: datetime | None


class CollectionService:
    def __init__(self, card_store: CardStore, user_store: UserStore) -> None:
        self._cards = card_store
        self._users = user_store

    async def search_catalog(
        self, *, rarity: Rarity | None = None, name: str | None = None
    ) -> list[Card]:
        cards = await self._cards.all()
        return [card for card in cards if _matches(card, rarity, name)]

    async def user_cards(
        self,
        user_id: str,
        *,
        rarity: Rarity | None = None,
        name: str | None = None,
        sort_by: str | None = None,
        order: SortOrder = "asc",
    ) -> list[OwnedCard]:
        record = await self._users.get(user_id)
        if record is None:
            raise NotFound("User not found")
        catalog = await self._cards.find_by_ids(record.inventory.keys())
        owned = [
            OwnedCard(
                card=card,
                copies=record.inventory[card.card_id].copies,
                collected_at=record.inventory[card.card_id].collected_at,
            )
            for card in catalog
            if _matches(card, rarity, name)
        ]
        return sort_owned(owned, sort_by, order)


def sort_owned(
    cards: list[OwnedCard], sort_by: str | None, order: SortOrder = "asc"
) -> list[OwnedCard]:
    """Sort a collection view; unknown keys keep the given order.

    ``recent`` is newest-first for ``asc`` to match how the collection screen
    lists fresh pulls.
    """
    reverse = order == "desc"
    if sort_by == "recent":
        return sorted(cards, key=lambda item: item.collected_at or _EPOCH, reverse=not reverse)
    if sort_by == "types":
        return sorted(cards, key=lambda item: item.card.types[0] if item.card.types else "", reverse=reverse)
    if sort_by == "rarity":
        return sorted(cards, key=lambda item: item.card.rarity.rank, reverse=reverse)
    if sort_by == "duplicates":
        return sorted(cards, key=lambda item: item.copies, reverse=reverse)
    return list(cards)


def _matches(card: Card, rarity: Rarity | None, name: str | None) -> bool:
    if rarity is not None and card.rarity is not rarity:
        return False
    if name and name.lower() not in card.name.lower():
        return False
    return True
