"""
API route handlers for the Real Estate Listing API.
"""

from .auth import router as auth_router
from .properties import router as properties_router
from .schedules import router as schedules_router
from .upload import router as upload_router
from .users import router as users_router
from .health import router as health_router

__all__ = [
    "auth_router",
    "properties_router",
    "schedules_router",
    "upload_router",
    "users_router",
    "health_router",
]
