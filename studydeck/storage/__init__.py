"""Storage backends for StudyDeck."""

from .base import (
    CardStore,
    CollectedCard,
    LevelStore,
    PackStore,
    SessionRecord,
    SessionReward,
    SessionStatus,
    SessionStore,
    UserRecord,
    UserStore,
)
from .memory import (
    InMemoryCardStore,
    InMemoryLevelStore,
    InMemoryPackStore,
    InMemorySessionStore,
    InMemoryUserStore,
)
from .sqlalchemy import AsyncSQLAlchemyStorage

__all__ = [
    "CardStore",
    "CollectedCard",
    "LevelStore",
    "PackStore",
    "SessionRecord",
    "SessionReward",
    "SessionStatus",
    "SessionStore",
    "UserRecord",
    "UserStore",
    "InMemoryCardStore",
    "InMemoryLevelStore",
    "InMemoryPackStore",
    "InMemorySessionStore",
    "InMemoryUserStore",
    "AsyncSQLAlchemyStorage",
]
