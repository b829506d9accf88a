"""Version 1 API endpoints."""

from .endpoints import (
    admin_router,
    groups_router,
    preferences_router,
    surveys_router,
)

__all__ = [
    "admin_router",
    "groups_router",
    "preferences_router",
    "surveys_router",
]
