"""
Pydantic schemas for request/response validation.
"""

# Authentication schemas
from .auth import (
    RegisterRequest,
    LoginRequest,
    AuthResponse
)

# User schemas
from .user import (
    UserResponse,
    UserListResponse,
    UserRoleUpdate
)

# Property schemas
from .property import (
    PropertyCreate,
    PropertyUpdate,
    PropertyStatusUpdate,
    PropertyResponse,
    PropertyListResponse,
    PropertyMessageResponse,
    AgentContact
)

# Image schemas
from .image import (
    PropertyImageResponse,
    ImageUploadResponse
)

# Schedule schemas
from .schedule import (
    ScheduleCreate,
    ScheduleStatusUpdate,
    ScheduleResponse,
    ScheduleListResponse,
    ScheduleMessageResponse
)

__all__ = [
    # Authentication
    "RegisterRequest",
    "LoginRequest",
    "AuthResponse",

    # User
    "UserResponse",
    "UserListResponse",
    "UserRoleUpdate",

    # Property
    "PropertyCreate",
    "PropertyUpdate",
    "PropertyStatusUpdate",
    "PropertyResponse",
    "PropertyListResponse",
    "PropertyMessageResponse",
    "AgentContact",

    # Image
    "PropertyImageResponse",
    "ImageUploadResponse",

    # Schedule
    "ScheduleCreate",
    "ScheduleStatusUpdate",
    "ScheduleResponse",
    "ScheduleListResponse",
    "ScheduleMessageResponse",
]
