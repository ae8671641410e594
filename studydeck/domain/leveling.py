"""Apply session rewards to a user and resolve level-ups."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .events import EventBus, LevelUp
from ..storage.base import LevelStore, SessionReward, UserRecord

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class UserLevelInfo:
    """Snapshot returned to the client after a reward was applied."""

    user_id: str
    level: int
    coins: int
    level_up_coins: int = 0
    experience: int = 0
    is_level_up: bool = False
    next_level_needed_experience: int = 0
    next_level_experience: int | None = None


class LevelingService:
    """Credit coins/experience and advance at most one level per reward."""

    def __init__(self, level_store: LevelStore, event_bus: EventBus) -> None:
        self._levels = level_store
        self._event_bus = event_bus

    async def apply_reward(self, record: UserRecord, reward: SessionReward | None) -> UserLevelInfo:
        """Mutate ``record`` in place; the caller persists it.

        Only the requirement for ``level + 1`` is checked, so a reward that
        crosses two thresholds still yields a single level-up. The following
        threshold is looked up only to fill the snapshot.
        """
        record.coins = record.coins or 0
        record.experience = record.experience or 0
        record.level = record.level or 0

        next_requirement = await self._levels.find(record.level + 1)

        if reward is not None:
            record.coins += reward.coins or 0
            record.experience += reward.experience or 0

        info = UserLevelInfo(
            user_id=record.user_id,
            level=record.level,
            coins=record.coins,
            experience=record.experience,
        )
        # Post-reward balances even when there is no next level to reach.
        if next_requirement is None:
            return info

        if record.experience < next_requirement.experience_required:
            info.next_level_needed_experience = (
                next_requirement.experience_required - record.experience
            )
            info.next_level_experience = next_requirement.experience_required
            return info

        record.level += 1
        record.coins += next_requirement.reward_coins
        info.level = record.level
        info.coins = record.coins
        info.is_level_up = True
        info.level_up_coins = next_requirement.reward_coins

        # Top of the table: needed stays 0 and next stays None.
        following = await self._levels.find(record.level + 1)
        if following is not None:
            info.next_level_needed_experience = following.experience_required - record.experience
            info.next_level_experience = following.experience_required
        logger.info(
            "User %s reached level %s (+%s coins).",
            record.user_id,
            record.level,
            next_requirement.reward_coins,
        )
        return info

    async def announce(self, info: UserLevelInfo) -> None:
        if info.is_level_up:
            await self._event_bus.publish(
                LevelUp(user_id=info.user_id, level=info.level, reward_coins=info.level_up_coins)
            )
