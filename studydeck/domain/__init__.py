"""Domain models and services."""

from .cards import Card, CardPack, LevelRequirement, PackSlot, PackSummary, Rarity, RarityChance
from .exceptions import (
    ConcurrentModification,
    ErrorKind,
    Forbidden,
    InternalError,
    InvalidArgument,
    InvalidState,
    NotFound,
    StudyDeckError,
)
from .events import EventBus
from .collection import CollectionService, OwnedCard
from .leveling import LevelingService, UserLevelInfo
from .packs import PackService, SlotDraw, draw_card, draw_pack, select_rarity
from .sessions import SessionOutcome, SessionService
from .users import UserProfile, UserService

__all__ = [
    "Card",
    "CardPack",
    "LevelRequirement",
    "PackSlot",
    "PackSummary",
    "Rarity",
    "RarityChance",
    "ConcurrentModification",
    "ErrorKind",
    "Forbidden",
    "InternalError",
    "InvalidArgument",
    "InvalidState",
    "NotFound",
    "StudyDeckError",
    "EventBus",
    "CollectionService",
    "OwnedCard",
    "LevelingService",
    "UserLevelInfo",
    "PackService",
    "SlotDraw",
    "draw_card",
    "draw_pack",
    "select_rarity",
    "SessionOutcome",
    "SessionService",
    "UserProfile",
    "UserService",
]
