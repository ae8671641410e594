"""Study session lifecycle: active -> completed | failed."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from .concurrency import retry_on_conflict
from .events import EventBus, SessionCompleted, SessionFailed, SessionStarted
from .exceptions import InvalidState, NotFound, StudyDeckError
from .leveling import LevelingService, UserLevelInfo
from ..config import SessionConfig
from ..storage.base import SessionRecord, SessionReward, SessionStatus, SessionStore, UserStore

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SessionOutcome:
    session: SessionRecord
    level_info: UserLevelInfo


def elapsed_minutes(start: datetime, end: datetime) -> int:
    """Whole minutes between two instants; naive values are treated as UTC."""
    start = _as_utc(start)
    end = _as_utc(end)
    return max(0, int((end - start).total_seconds() // 60))


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None or value.tzinfo.utcoffset(value) is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class SessionService:
    """Drive a user's single active study session and pay out its reward."""

    def __init__(
        self,
        session_store: SessionStore,
        user_store: UserStore,
        leveling: LevelingService,
        event_bus: EventBus,
        *,
        config: SessionConfig | None = None,
        max_write_attempts: int = 3,
    ) -> None:
        self._sessions = session_store
        self._users = user_store
        self._leveling = leveling
        self._event_bus = event_bus
        self._config = config or SessionConfig()
        self._max_write_attempts = max_write_attempts

    async def start_session(self, user_id: str, planned_duration: int) -> SessionRecord:
        if planned_duration <= 0:
            raise ValueError("Planned duration must be positive")
        abandoned = 0

        async def attempt() -> SessionRecord:
            nonlocal abandoned
            record = await self._users.get(user_id)
            if record is None:
                raise NotFound("User not found")
            now = datetime.now(timezone.utc)
            # Recover sessions left active by a killed client.
            abandoned += await self._sessions.fail_active_for_user(user_id, now)
            session = await self._sessions.create(user_id, planned_duration, now)
            record.active_session_id = session.session_id
            await self._users.save(record)
            return session

        session = await retry_on_conflict(
            f"start_session:{user_id}", attempt, attempts=self._max_write_attempts
        )
        if abandoned:
            logger.info("Failed %s abandoned session(s) for user %s.", abandoned, user_id)
        logger.info(
            "Started session %s for user %s (%s min planned).",
            session.session_id,
            user_id,
            planned_duration,
        )
        await self._event_bus.publish(
            SessionStarted(
                user_id=user_id,
                session_id=session.session_id,
                planned_duration=planned_duration,
                abandoned_sessions=abandoned,
            )
        )
        return session

    async def complete_session(self, session_id: str) -> SessionOutcome:
        async def finish() -> SessionRecord:
            session = await self._get_active(session_id)
            session.end_time = datetime.now(timezone.utc)
            session.actual_duration = elapsed_minutes(session.start_time, session.end_time)
            # Eligibility uses the measured time; the stored duration is always
            # the canonical Pomodoro length.
            if session.actual_duration >= session.planned_duration:
                session.rewards = SessionReward(
                    coins=self._config.reward_coins,
                    experience=self._config.reward_experience,
                )
            session.actual_duration = self._config.canonical_duration_minutes
            session.status = SessionStatus.COMPLETED
            await self._sessions.save(session)
            return session

        session = await retry_on_conflict(
            f"complete_session:{session_id}", finish, attempts=self._max_write_attempts
        )

        async def pay_out() -> UserLevelInfo:
            record = await self._users.get(session.user_id)
            if record is None:
                raise NotFound("User not found")
            info = await self._leveling.apply_reward(record, session.rewards)
            if record.active_session_id == session.session_id:
                record.active_session_id = None
            await self._users.save(record)
            return info

        try:
            level_info = await retry_on_conflict(
                f"reward:{session.user_id}", pay_out, attempts=self._max_write_attempts
            )
        except StudyDeckError as exc:
            logger.warning(
                "Reward for session %s could not be paid (%s); reopening it.",
                session.session_id,
                exc.reason,
            )
            await self._reopen(session)
            raise
        rewards = session.rewards or SessionReward()
        logger.info(
            "Completed session %s for user %s (+%s coins, +%s xp).",
            session.session_id,
            session.user_id,
            rewards.coins,
            rewards.experience,
        )
        await self._event_bus.publish(
            SessionCompleted(
                user_id=session.user_id,
                session_id=session.session_id,
                reward_coins=rewards.coins,
                reward_experience=rewards.experience,
            )
        )
        await self._leveling.announce(level_info)
        return SessionOutcome(session=session, level_info=level_info)

    async def fail_session(self, session_id: str) -> None:
        async def fail() -> SessionRecord:
            session = await self._get_active(session_id)
            session.end_time = datetime.now(timezone.utc)
            session.actual_duration = elapsed_minutes(session.start_time, session.end_time)
            session.status = SessionStatus.FAILED
            session.rewards = SessionReward(coins=0, experience=0)
            await self._sessions.save(session)
            return session

        session = await retry_on_conflict(
            f"fail_session:{session_id}", fail, attempts=self._max_write_attempts
        )

        async def unlink() -> None:
            record = await self._users.get(session.user_id)
            if record is None:
                logger.warning(
                    "Session %s belongs to unknown user %s.", session_id, session.user_id
                )
                return
            if record.active_session_id != session.session_id:
                return
            record.active_session_id = None
            await self._users.save(record)

        await retry_on_conflict(
            f"unlink_session:{session.user_id}", unlink, attempts=self._max_write_attempts
        )
        logger.info(
            "Failed session %s for user %s after %s min.",
            session.session_id,
            session.user_id,
            session.actual_duration,
        )
        await self._event_bus.publish(
            SessionFailed(
                user_id=session.user_id,
                session_id=session.session_id,
                actual_duration=session.actual_duration or 0,
            )
        )

    async def get_session(self, session_id: str) -> SessionRecord:
        session = await self._sessions.get(session_id)
        if session is None:
            raise NotFound("Session not found")
        return session

    async def _get_active(self, session_id: str) -> SessionRecord:
        session = await self.get_session(session_id)
        if session.status.is_terminal:
            raise InvalidState("Session is not active")
        return session

    async def _reopen(self, session: SessionRecord) -> None:
        """Undo a completion whose payout failed so the client can complete again."""
        session.status = SessionStatus.ACTIVE
        session.end_time = None
        session.actual_duration = None
        session.rewards = None
        await self._sessions.save(session)
