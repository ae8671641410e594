"""Top level application object for StudyDeck."""

from __future__ import annotations

from random import Random
from typing import Any

from .config import StudyDeckConfig
from .domain.collection import CollectionService
from .domain.events import EventBus
from .domain.leveling import LevelingService
from .domain.packs import PackService
from .domain.sessions import SessionService
from .domain.users import UserService
from .storage.base import CardStore, LevelStore, PackStore, SessionStore, UserStore
from .storage.memory import (
    InMemoryCardStore,
    InMemoryLevelStore,
    InMemoryPackStore,
    InMemorySessionStore,
    InMemoryUserStore,
)
from .storage.sqlalchemy import AsyncSQLAlchemyStorage


class StudyApp:
    """Central dependency container used by the API, CLI and tests."""

    def __init__(
        self,
        config: StudyDeckConfig,
        *,
        user_store: UserStore | None = None,
        card_store: CardStore | None = None,
        pack_store: PackStore | None = None,
        session_store: SessionStore | None = None,
        level_store: LevelStore | None = None,
        event_bus: EventBus | None = None,
        rng: Random | None = None,
    ) -> None:
        self.config = config
        self.event_bus = event_bus or EventBus()
        self.rng = rng or (Random(config.rng_seed) if config.rng_seed is not None else Random())

        self._sqlalchemy_storage: AsyncSQLAlchemyStorage | None = None
        (
            self.user_store,
            self.card_store,
            self.pack_store,
            self.session_store,
            self.level_store,
        ) = self._wire_storage(user_store, card_store, pack_store, session_store, level_store)

        attempts = config.max_write_attempts
        self.user_service = UserService(self.user_store, max_write_attempts=attempts)
        self.collection_service = CollectionService(self.card_store, self.user_store)
        self.pack_service = PackService(
            self.pack_store,
            self.card_store,
            self.user_store,
            self.event_bus,
            rng=self.rng,
            max_write_attempts=attempts,
        )
        self.leveling_service = LevelingService(self.level_store, self.event_bus)
        self.session_service = SessionService(
            self.session_store,
            self.user_store,
            self.leveling_service,
            self.event_bus,
            config=config.session,
            max_write_attempts=attempts,
        )

    def _wire_storage(
        self,
        user_store: UserStore | None,
        card_store: CardStore | None,
        pack_store: PackStore | None,
        session_store: SessionStore | None,
        level_store: LevelStore | None,
    ) -> tuple[UserStore, CardStore, PackStore, SessionStore, LevelStore]:
        given = (user_store, card_store, pack_store, session_store, level_store)
        if all(store is not None for store in given):
            return given  # type: ignore[return-value]

        backend = self.config.storage.backend
        if backend == "memory":
            return (
                user_store or InMemoryUserStore(),
                card_store or InMemoryCardStore(),
                pack_store or InMemoryPackStore(),
                session_store or InMemorySessionStore(),
                level_store or InMemoryLevelStore(),
            )
        if backend == "sqlalchemy":
            dsn = self.config.storage.resolve_dsn()
            if not dsn:
                raise ValueError("SQLAlchemy backend requires a DSN")
            storage = AsyncSQLAlchemyStorage(dsn, echo=self.config.storage.echo_sql)
            self._sqlalchemy_storage = storage
            return (
                user_store or storage.user_store(),
                card_store or storage.card_store(),
                pack_store or storage.pack_store(),
                session_store or storage.session_store(),
                level_store or storage.level_store(),
            )
        raise ValueError(f"Unsupported storage backend {backend}")

    async def snapshot(self) -> dict[str, Any]:
        """Export current configuration for debugging."""
        return {
            "storage": self.config.storage.backend,
            "cards": [card.card_id for card in await self.card_store.all()],
            "packs": [pack.code for pack in await self.pack_store.all()],
            "session_reward": {
                "coins": self.config.session.reward_coins,
                "experience": self.config.session.reward_experience,
            },
        }

    async def init_backend(self) -> None:
        """Initialize storage backend resources (e.g., database tables)."""
        if self._sqlalchemy_storage:
            await self._sqlalchemy_storage.init_models()

    async def close(self) -> None:
        if self._sqlalchemy_storage:
            await self._sqlalchemy_storage.dispose()
