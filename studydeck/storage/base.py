"""Storage abstractions used by the StudyDeck services."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Iterable, Protocol, Sequence

if TYPE_CHECKING:
    from ..domain.cards import Card, CardPack, LevelRequirement


class SessionStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self is not SessionStatus.ACTIVE


@dataclass(slots=True)
class CollectedCard:
    copies: int
    collected_at: datetime


@dataclass(slots=True)
class UserRecord:
    user_id: str
    username: str | None = None
    coins: int = 0
    experience: int = 0
    level: int = 0
    inventory: dict[str, CollectedCard] = field(default_factory=dict)
    friends: set[str] = field(default_factory=set)
    card_display: list[str] = field(default_factory=list)
    active_session_id: str | None = None
    version: int = 0


@dataclass(slots=True)
class SessionReward:
    coins: int = 0
    experience: int = 0


@dataclass(slots=True)
class SessionRecord:
    session_id: str
    user_id: str
    planned_duration: int
    start_time: datetime
    status: SessionStatus = SessionStatus.ACTIVE
    end_time: datetime | None = None
    actual_duration: int | None = None
    rewards: SessionReward | None = None
    version: int = 0


class UserStore(Protocol):
    async def get(self, user_id: str) -> UserRecord | None:
        ...

    async def save(self, record: UserRecord) -> None:
        """Compare-and-swap on ``record.version``; bumps the version on success."""
        ...


class CardStore(Protocol):
    async def find_by_ids(self, card_ids: Iterable[str]) -> Sequence[Card]:
        ...

    async def all(self) -> Sequence[Card]:
        ...

    async def add(self, card: Card) -> None:
        ...


class PackStore(Protocol):
    async def find_by_code(self, code: str) -> CardPack | None:
        ...

    async def all(self) -> Sequence[CardPack]:
        ...

    async def add(self, pack: CardPack) -> None:
        ...

    async def upsert(self, pack: CardPack) -> None:
        """Insert or replace the pack with the same code."""
        ...


class SessionStore(Protocol):
    async def get(self, session_id: str) -> SessionRecord | None:
        ...

    async def create(
        self, user_id: str, planned_duration: int, start_time: datetime
    ) -> SessionRecord:
        ...

    async def save(self, record: SessionRecord) -> None:
        ...

    async def fail_active_for_user(self, user_id: str, ended_at: datetime) -> int:
        """Mark every unfinished active session of the user as failed; return how many."""
        ...


class LevelStore(Protocol):
    async def find(self, level: int) -> LevelRequirement | None:
        ...

    async def add(self, requirement: LevelRequirement) -> None:
        ...

    async def upsert(self, requirement: LevelRequirement) -> None:
        ...
