"""
Authentication API endpoints for registration, login and the caller's profile.
"""

from fastapi import APIRouter, Depends, status
from estate_api.models.user import User
from estate_api.services.auth import AuthService
from estate_api.schemas.auth import RegisterRequest, LoginRequest, AuthResponse
from estate_api.schemas.user import UserResponse
from estate_api.schemas.error import get_error_responses
from estate_api.utils.dependencies import get_auth_service, get_current_user


router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new account",
    description="Create an account and return a session token. Admin accounts cannot be self-registered.",
    responses=get_error_responses(400, 403, 422)
)
async def register(
    register_data: RegisterRequest,
    auth_service: AuthService = Depends(get_auth_service)
) -> AuthResponse:
    """
    Register a user and sign them in.

    Raises:
        DuplicateEmailError: If the email is already registered
        ForbiddenError: If the admin role was requested
    """
    user, token = await auth_service.register(register_data)

    return AuthResponse(
        message="User registered successfully",
        user=UserResponse.model_validate(user),
        token=token,
        expires_in=auth_service.token_lifetime_seconds
    )


@router.post(
    "/login",
    response_model=AuthResponse,
    status_code=status.HTTP_200_OK,
    summary="User login",
    description="Authenticate with email and password and return a session token",
    responses=get_error_responses(401, 422)
)
async def login(
    login_data: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service)
) -> AuthResponse:
    user, token = await auth_service.login(
        email=login_data.email,
        password=login_data.password
    )

    return AuthResponse(
        message="Login successful",
        user=UserResponse.model_validate(user),
        token=token,
        expires_in=auth_service.token_lifetime_seconds
    )


@router.get(
    "/profile",
    response_model=UserResponse,
    status_code=status.HTTP_200_OK,
    summary="Get current user",
    description="Get the authenticated user's profile",
    responses=get_error_responses(401, 403, 404)
)
async def get_profile(
    current_user: User = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service)
) -> UserResponse:
    user = await auth_service.get_profile(current_user.id)
    return UserResponse.model_validate(user)
