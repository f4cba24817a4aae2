"""API endpoints for the knowledge-base matcher."""

from .entries import router as entries_router
from .health import router as health_router
from .matches import router as matches_router

__all__ = [
    "entries_router",
    "health_router",
    "matches_router",
]
