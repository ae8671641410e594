"""Testing utilities for StudyDeck."""

from .factory import CardFactory, PackFactory, ScriptedRandom, UserFactory
from .fixtures import app_fixture, memory_app

__all__ = [
    "CardFactory",
    "PackFactory",
    "ScriptedRandom",
    "UserFactory",
    "app_fixture",
    "memory_app",
]
