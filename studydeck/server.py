"""ASGI application factory."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from importlib.metadata import PackageNotFoundError, version as pkg_version

from fastapi import FastAPI

from .api import cards_router, health_router, packs_router, sessions_router, users_router
from .api.errors import register_error_handlers
from .app import StudyApp
from .config import StudyDeckConfig
from .loaders import load_seed_from_json


def _version() -> str:
    try:
        return pkg_version("studydeck")
    except PackageNotFoundError:
        return "0.0.0"


def create_api(study_app: StudyApp | None = None) -> FastAPI:
    """Build the HTTP API around ``study_app`` (configured from env if omitted)."""
    study = study_app or StudyApp(StudyDeckConfig.from_env())

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
        await study.init_backend()
        if study.config.seed_path:
            await load_seed_from_json(study, study.config.seed_path)
        yield
        await study.close()

    api = FastAPI(title="StudyDeck", version=_version(), lifespan=lifespan)
    api.state.study_app = study
    register_error_handlers(api)

    api.include_router(health_router)
    api.include_router(packs_router)
    api.include_router(sessions_router)
    api.include_router(cards_router)
    api.include_router(users_router)
    return api
