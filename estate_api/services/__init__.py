"""
Service layer for business logic implementation.
Contains services for authentication, listings, viewing schedules,
uploads, user administration and error handling.
"""

from .auth import AuthService
from .property import PropertyService
from .schedule import ScheduleService
from .upload import UploadService
from .user import UserService
from .error_handler import ErrorHandlerService

__all__ = [
    "AuthService",
    "PropertyService",
    "ScheduleService",
    "UploadService",
    "UserService",
    "ErrorHandlerService"
]
