"""Inventory mutation shared by everything that awards cards."""

from __future__ import annotations

from datetime import datetime
from typing import Iterable

from .cards import Card
from ..storage.base import CollectedCard, UserRecord


def merge_cards(record: UserRecord, cards: Iterable[Card], now: datetime) -> list[str]:
    """Add drawn cards to the user's inventory and return ids that were new.

    Owned cards gain one copy and a refreshed ``collected_at``; unknown ones get
    a fresh entry with a single copy. Duplicates within ``cards`` count once each.
    """
    new_ids: list[str] = []
    for card in cards:
        entry = record.inventory.get(card.card_id)
        if entry is None:
            record.inventory[card.card_id] = CollectedCard(copies=1, collected_at=now)
            new_ids.append(card.card_id)
        else:
            entry.copies += 1
            entry.collected_at = now
    return new_ids
