"""Pytest fixtures for StudyDeck."""

from __future__ import annotations

from random import Random

import pytest

from ..app import StudyApp
from ..config import StudyDeckConfig


@pytest.fixture()
def memory_app() -> StudyApp:
    return StudyApp(StudyDeckConfig(rng_seed=7))


def app_fixture(*, rng: Random | None = None, **kwargs) -> StudyApp:
    """Helper for ad-hoc tests where pytest is not available."""
    return StudyApp(StudyDeckConfig(**kwargs), rng=rng)
