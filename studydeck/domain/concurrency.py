"""Retry helper for optimistic (versioned) writes."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from .exceptions import ConcurrentModification

T = TypeVar("T")

logger = logging.getLogger(__name__)


async def retry_on_conflict(
    label: str,
    operation: Callable[[], Awaitable[T]],
    *,
    attempts: int = 3,
) -> T:
    """Run a read-mutate-write operation, re-running it when the write loses a race.

    ``operation`` must re-read everything it mutates on every call. The last
    ``ConcurrentModification`` is re-raised once ``attempts`` are exhausted.
    """
    attempt = 0
    while True:
        attempt += 1
        try:
            return await operation()
        except ConcurrentModification as exc:
            if attempt >= attempts:
                logger.warning(
                    "Write '%s' still conflicting after %s attempts (%s).",
                    label,
                    attempt,
                    exc.reason,
                )
                raise
            logger.info(
                "Write '%s' lost a race on %s %s; retrying (attempt %s/%s).",
                label,
                exc.entity,
                exc.key,
                attempt + 1,
                attempts,
            )
