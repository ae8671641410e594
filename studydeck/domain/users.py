"""User-centric utilities."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Mapping, Sequence

from .concurrency import retry_on_conflict
from .exceptions import InvalidArgument, NotFound
from ..storage.base import UserRecord, UserStore

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class UserProfile:
    user_id: str
    username: str | None
    coins: int
    experience: int
    level: int
    inventory: Mapping[str, int]
    active_session_id: str | None
    card_display: list[str] = field(default_factory=list)


class UserService:
    """Expose read operations, account creation and the card showcase."""

    def __init__(self, store: UserStore, *, max_write_attempts: int = 3) -> None:
        self._store = store
        self._max_write_attempts = max_write_attempts

    async def register(
        self, user_id: str, username: str | None = None, *, coins: int = 0
    ) -> UserProfile:
        """Create the user if the identity provider reports a new account."""
        if coins < 0:
            raise ValueError("Starting coins cannot be negative")
        record = await self._store.get(user_id)
        if record is None:
            record = UserRecord(user_id=user_id, username=username, coins=coins)
            await self._store.save(record)
        return self._to_profile(record)

    async def fetch(self, user_id: str) -> UserProfile:
        record = await self._get(user_id)
        return self._to_profile(record)

    async def get_card_display(self, user_id: str) -> list[str]:
        record = await self._get(user_id)
        return list(record.card_display)

    async def update_card_display(self, user_id: str, card_ids: Sequence[str]) -> list[str]:
        """Replace the showcased cards; every id must be in the user's inventory."""

        async def attempt() -> list[str]:
            record = await self._get(user_id)
            unowned = [card_id for card_id in card_ids if card_id not in record.inventory]
            if unowned:
                raise InvalidArgument(f"Invalid card IDs: {', '.join(unowned)}")
            record.card_display = list(card_ids)
            await self._store.save(record)
            return list(record.card_display)

        display = await retry_on_conflict(
            f"card_display:{user_id}", attempt, attempts=self._max_write_attempts
        )
        logger.info("User %s now shows %s card(s).", user_id, len(display))
        return display

    async def _get(self, user_id: str) -> UserRecord:
        record = await self._store.get(user_id)
        if record is None:
            raise NotFound("User not found")
        return record

    def _to_profile(self, record: UserRecord) -> UserProfile:
        return UserProfile(
            user_id=record.user_id,
            username=record.username,
            coins=record.coins,
            experience=record.experience,
            level=record.level,
            inventory={card_id: entry.copies for card_id, entry in record.inventory.items()},
            active_session_id=record.active_session_id,
            card_display=list(record.card_display),
        )
