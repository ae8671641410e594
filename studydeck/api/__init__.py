from .cards import router as cards_router
from .health import router as health_router
from .packs import router as packs_router
from .sessions import router as sessions_router
from .users import router as users_router

__all__ = [
    "cards_router",
    "health_router",
    "packs_router",
    "sessions_router",
    "users_router",
]
