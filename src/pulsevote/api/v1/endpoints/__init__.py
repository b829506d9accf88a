"""API endpoint modules for version 1."""

from .admin import router as admin_router
from .groups import router as groups_router
from .preferences import router as preferences_router
from .surveys import router as surveys_router

__all__ = [
    "admin_router",
    "groups_router",
    "preferences_router",
    "surveys_router",
]
