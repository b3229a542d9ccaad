"""
User administration endpoints (administrators only).
"""

from fastapi import APIRouter, Depends, Query, Path
from typing import Optional
from uuid import UUID

from estate_api.models.user import User
from estate_api.services.user import UserService
from estate_api.schemas.user import UserResponse, UserListResponse, UserRoleUpdate, parse_role
from estate_api.schemas.error import get_error_responses
from estate_api.utils.dependencies import get_current_admin_user, get_user_service
from estate_api.utils.exceptions import ValidationError


router = APIRouter(prefix="/users", tags=["Users"])


@router.get(
    "",
    response_model=UserListResponse,
    summary="List users",
    description="All accounts, newest first, optionally filtered by role",
    responses=get_error_responses(400, 401, 403)
)
async def list_users(
    role: Optional[str] = Query(None, description="user, agent or admin"),
    current_user: User = Depends(get_current_admin_user),
    user_service: UserService = Depends(get_user_service)
) -> UserListResponse:
    try:
        role_filter = parse_role(role)
    except ValueError as e:
        raise ValidationError(str(e))

    users = await user_service.list_users(current_user, role_filter)
    return UserListResponse(
        users=[UserResponse.model_validate(user) for user in users],
        total=len(users)
    )


@router.patch(
    "/{user_id}/role",
    response_model=UserResponse,
    summary="Change a user's role",
    description="Grant or revoke agent/admin rights. Administrators cannot change their own role.",
    responses=get_error_responses(401, 403, 404, 422)
)
async def update_user_role(
    role_data: UserRoleUpdate,
    user_id: UUID = Path(..., description="User ID"),
    current_user: User = Depends(get_current_admin_user),
    user_service: UserService = Depends(get_user_service)
) -> UserResponse:
    user = await user_service.update_user_role(user_id, role_data.role, current_user)
    return UserResponse.model_validate(user)
