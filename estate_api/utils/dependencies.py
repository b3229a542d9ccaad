"""
FastAPI dependency injection utilities for authentication and services.
Provides reusable dependencies for route protection and user extraction.
"""

from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from estate_api.config import Settings, get_settings
from estate_api.database import get_db
from estate_api.models.user import User, UserRole
from estate_api.services.auth import AuthService
from estate_api.services.property import PropertyService
from estate_api.services.schedule import ScheduleService
from estate_api.services.user import UserService
from estate_api.services.upload import UploadService
from estate_api.utils.exceptions import (
    UnauthorizedError,
    InsufficientPermissionsError
)


# HTTP Bearer token security scheme
security = HTTPBearer(auto_error=False)


async def get_auth_service(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings)
) -> AuthService:
    return AuthService(db, settings=settings)


async def get_property_service(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings)
) -> PropertyService:
    return PropertyService(db, settings=settings)


async def get_schedule_service(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings)
) -> ScheduleService:
    return ScheduleService(db, settings=settings)


async def get_user_service(db: AsyncSession = Depends(get_db)) -> UserService:
    return UserService(db)


async def get_upload_service(settings: Settings = Depends(get_settings)) -> UploadService:
    return UploadService(settings)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> User:
    """
    Get current authenticated user from the bearer token.

    Raises:
        UnauthorizedError: If no token is provided, or the token is invalid or expired
        InactiveUserError: If the user account is inactive
    """
    if not credentials:
        raise UnauthorizedError("Authentication token required")

    return await auth_service.get_current_user(credentials.credentials)


def authorize(*allowed_roles: UserRole):
    """
    Create a dependency that admits only callers holding one of ``allowed_roles``.

    Unauthenticated callers get 401; authenticated callers with another
    role get 403.

    Example:
        @router.post("/", dependencies=[Depends(authorize(UserRole.AGENT, UserRole.ADMIN))])
    """
    allowed = frozenset(allowed_roles)

    async def role_dependency(
        current_user: User = Depends(get_current_user)
    ) -> User:
        if current_user.role not in allowed:
            roles = ", ".join(sorted(role.value for role in allowed))
            raise InsufficientPermissionsError(f"perform this action (requires role: {roles})")
        return current_user

    return role_dependency


get_current_admin_user = authorize(UserRole.ADMIN)
get_current_agent_user = authorize(UserRole.AGENT, UserRole.ADMIN)


# Optional authentication dependency (public endpoints that vary with the caller)
async def get_optional_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> Optional[User]:
    """
    Get current user if a valid token is provided, otherwise None.

    A missing, expired or invalid token is treated as anonymous access.
    """
    if not credentials:
        return None

    return await auth_service.get_optional_user(credentials.credentials)
