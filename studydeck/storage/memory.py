"""In-memory storage backend for StudyDeck."""

from __future__ import annotations

import copy
from datetime import datetime
from typing import Iterable, Sequence
from uuid import uuid4

from ..domain.cards import Card, CardPack, LevelRequirement
from ..domain.exceptions import ConcurrentModification
from .base import (
    CardStore,
    LevelStore,
    PackStore,
    SessionRecord,
    SessionStatus,
    SessionStore,
    UserRecord,
    UserStore,
)


class InMemoryUserStore(UserStore):
    def __init__(self) -> None:
        self._records: dict[str, UserRecord] = {}

    async def get(self, user_id: str) -> UserRecord | None:
        record = self._records.get(user_id)
        return copy.deepcopy(record) if record else None

    async def save(self, record: UserRecord) -> None:
        stored = self._records.get(record.user_id)
        current_version = stored.version if stored else 0
        if current_version != record.version:
            raise ConcurrentModification("User", record.user_id, record.version)
        record.version += 1
        self._records[record.user_id] = copy.deepcopy(record)


class InMemoryCardStore(CardStore):
    def __init__(self) -> None:
        self._cards: dict[str, Card] = {}

    async def find_by_ids(self, card_ids: Iterable[str]) -> Sequence[Card]:
        seen: set[str] = set()
        found: list[Card] = []
        for card_id in card_ids:
            if card_id in seen or card_id not in self._cards:
                continue
            seen.add(card_id)
            found.append(self._cards[card_id])
        return found

    async def all(self) -> Sequence[Card]:
        return list(self._cards.values())

    async def add(self, card: Card) -> None:
        self._cards[card.card_id] = card


class InMemoryPackStore(PackStore):
    def __init__(self) -> None:
        self._packs: dict[str, CardPack] = {}

    async def find_by_code(self, code: str) -> CardPack | None:
        return self._packs.get(code)

    async def all(self) -> Sequence[CardPack]:
        return list(self._packs.values())

    async def add(self, pack: CardPack) -> None:
        if pack.code in self._packs:
            raise ValueError(f"Pack {pack.code} already registered")
        self._packs[pack.code] = pack

    async def upsert(self, pack: CardPack) -> None:
        self._packs[pack.code] = pack


class InMemorySessionStore(SessionStore):
    def __init__(self) -> None:
        self._sessions: dict[str, SessionRecord] = {}

    async def get(self, session_id: str) -> SessionRecord | None:
        record = self._sessions.get(session_id)
        return copy.deepcopy(record) if record else None

    async def create(
        self, user_id: str, planned_duration: int, start_time: datetime
    ) -> SessionRecord:
        record = SessionRecord(
            session_id=uuid4().hex,
            user_id=user_id,
            planned_duration=planned_duration,
            start_time=start_time,
            version=1,
        )
        self._sessions[record.session_id] = copy.deepcopy(record)
        return record

    async def save(self, record: SessionRecord) -> None:
        stored = self._sessions.get(record.session_id)
        current_version = stored.version if stored else 0
        if current_version != record.version:
            raise ConcurrentModification("Session", record.session_id, record.version)
        record.version += 1
        self._sessions[record.session_id] = copy.deepcopy(record)

    async def fail_active_for_user(self, user_id: str, ended_at: datetime) -> int:
        count = 0
        for record in self._sessions.values():
            if (
                record.user_id == user_id
                and record.status is SessionStatus.ACTIVE
                and record.end_time is None
            ):
                record.status = SessionStatus.FAILED
                record.end_time = ended_at
                record.actual_duration = 0
                record.version += 1
                count += 1
        return count

    def for_user(self, user_id: str) -> list[SessionRecord]:
        return [
            copy.deepcopy(record)
            for record in self._sessions.values()
            if record.user_id == user_id
        ]


class InMemoryLevelStore(LevelStore):
    def __init__(self) -> None:
        self._levels: dict[int, LevelRequirement] = {}

    async def find(self, level: int) -> LevelRequirement | None:
        return self._levels.get(level)

    async def add(self, requirement: LevelRequirement) -> None:
        if requirement.level in self._levels:
            raise ValueError(f"Level {requirement.level} already defined")
        self._levels[requirement.level] = requirement

    async def upsert(self, requirement: LevelRequirement) -> None:
        self._levels[requirement.level] = requirement
