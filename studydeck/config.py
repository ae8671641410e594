"""Configuration models for StudyDeck."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Literal


StorageBackend = Literal["memory", "sqlalchemy"]

_TRUTHY = {"1", "true", "yes"}


@dataclass(slots=True)
class StorageConfig:
    """Configure where users, sessions and catalog data are persisted."""

    backend: StorageBackend = "memory"
    dsn: str | None = None
    echo_sql: bool = False

    def resolve_dsn(self) -> str | None:
        if self.dsn:
            return self.dsn
        if self.backend == "sqlalchemy":
            return "sqlite+aiosqlite:///./studydeck.db"
        return None


@dataclass(slots=True)
class SessionConfig:
    """Rewards granted for a completed study session."""

    reward_coins: int = 50
    reward_experience: int = 20
    # Stored duration of every completed session (one Pomodoro unit).
    canonical_duration_minutes: int = 25


@dataclass(slots=True)
class StudyDeckConfig:
    """Top-level configuration container."""

    storage: StorageConfig = field(default_factory=StorageConfig)
    session: SessionConfig = field(default_factory=SessionConfig)
    max_write_attempts: int = 3
    rng_seed: int | None = None
    log_level: str = "INFO"
    seed_path: str | None = None

    @classmethod
    def from_env(cls) -> "StudyDeckConfig":
        """Create config from environment variables prefixed with STUDYDECK_."""
        prefix = "STUDYDECK_"
        storage = StorageConfig(
            backend=os.getenv(f"{prefix}STORAGE_BACKEND", "memory"),
            dsn=os.getenv(f"{prefix}STORAGE_DSN"),
            echo_sql=os.getenv(f"{prefix}STORAGE_ECHO_SQL", "false").lower() in _TRUTHY,
        )
        session = SessionConfig(
            reward_coins=int(os.getenv(f"{prefix}SESSION_REWARD_COINS", "50")),
            reward_experience=int(os.getenv(f"{prefix}SESSION_REWARD_EXPERIENCE", "20")),
            canonical_duration_minutes=int(
                os.getenv(f"{prefix}SESSION_CANONICAL_DURATION", "25")
            ),
        )
        max_attempts = int(os.getenv(f"{prefix}MAX_WRITE_ATTEMPTS", "3"))
        if max_attempts <= 0:
            raise ValueError(f"{prefix}MAX_WRITE_ATTEMPTS must be positive")

        return cls(
            storage=storage,
            session=session,
            max_write_attempts=max_attempts,
            rng_seed=(
                int(os.getenv(f"{prefix}RNG_SEED")) if os.getenv(f"{prefix}RNG_SEED") else None
            ),
            log_level=os.getenv(f"{prefix}LOG_LEVEL", "INFO").upper(),
            seed_path=os.getenv(f"{prefix}SEED_PATH") or None,
        )
