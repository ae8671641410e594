"""Exceptions raised by StudyDeck domain services."""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Machine-readable error categories callers can branch on."""

    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    INVALID_STATE = "invalid_state"
    INVALID_ARGUMENT = "invalid_argument"
    INTERNAL = "internal"
    CONFLICT = "conflict"


class StudyDeckError(RuntimeError):
    """Base class for domain exceptions."""

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class NotFound(StudyDeckError):
    """Raised when a referenced pack, user or session does not exist."""

    kind = ErrorKind.NOT_FOUND


class Forbidden(StudyDeckError):
    """Raised when a business rule denies the operation (e.g. insufficient coins)."""

    kind = ErrorKind.FORBIDDEN


class InvalidState(StudyDeckError):
    """Raised when an operation is not valid for the current session state."""

    kind = ErrorKind.INVALID_STATE


class InvalidArgument(StudyDeckError):
    """Raised when a request references data the user may not use (e.g. unowned cards)."""

    kind = ErrorKind.INVALID_ARGUMENT


class InternalError(StudyDeckError):
    """Raised when stored data violates an invariant the engine relies on."""

    kind = ErrorKind.INTERNAL


class ConcurrentModification(StudyDeckError):
    """Raised by stores when a versioned write lost a race."""

    kind = ErrorKind.CONFLICT

    def __init__(self, entity: str, key: str, expected_version: int) -> None:
        super().__init__(f"{entity} {key} was modified concurrently")
        self.entity = entity
        self.key = key
        self.expected_version = expected_version
