"""StudyDeck: study sessions, rewards and card packs."""

from .app import StudyApp
from .config import StudyDeckConfig

__all__ = [
    "StudyApp",
    "StudyDeckConfig",
]
