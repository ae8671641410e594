"""Domain events published after successful writes."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import Awaitable, Callable, DefaultDict, Iterable, Sequence, Union


@dataclass(frozen=True, slots=True)
class PackOpened:
    user_id: str
    pack_code: str
    card_ids: Sequence[str]
    cost: int


@dataclass(frozen=True, slots=True)
class SessionStarted:
    user_id: str
    session_id: str
    planned_duration: int
    abandoned_sessions: int


@dataclass(frozen=True, slots=True)
class SessionCompleted:
    user_id: str
    session_id: str
    reward_coins: int
    reward_experience: int


@dataclass(frozen=True, slots=True)
class SessionFailed:
    user_id: str
    session_id: str
    actual_duration: int


@dataclass(frozen=True, slots=True)
class LevelUp:
    user_id: str
    level: int
    reward_coins: int


DomainEvent = Union[PackOpened, SessionStarted, SessionCompleted, SessionFailed, LevelUp]
EventListener = Callable[[DomainEvent], Awaitable[None]]


class EventBus:
    """Async pub-sub keyed by event class."""

    def __init__(self) -> None:
        self._listeners: DefaultDict[type, list[EventListener]] = defaultdict(list)

    def subscribe(self, event_type: type, listener: EventListener) -> None:
        self._listeners[event_type].append(listener)

    async def publish(self, event: DomainEvent) -> None:
        for listener in list(self._listeners.get(type(event), ())):
            await listener(event)

    def clear(self) -> None:
        self._listeners.clear()

    def listeners(self, event_type: type) -> Iterable[EventListener]:
        return tuple(self._listeners.get(event_type, ()))
