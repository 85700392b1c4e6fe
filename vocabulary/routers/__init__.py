"""API routers module."""

from .entries import router as entries_router
from .review import router as review_router
from .sessions import router as sessions_router

__all__ = [
    "entries_router",
    "review_router",
    "sessions_router",
]
