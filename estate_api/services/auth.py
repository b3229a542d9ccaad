"""
Authentication service for registration, login and token resolution.
Handles credential checks, role rules for self-service signup and
session token issuance.
"""

from typing import Optional, Tuple
from datetime import timedelta
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from estate_api.config import Settings, get_settings
from estate_api.repositories.user import UserRepository
from estate_api.repositories.interfaces import UserStore
from estate_api.models.user import User, UserRole
from estate_api.schemas.auth import RegisterRequest
from estate_api.utils.auth import create_access_token, verify_token, ExpiredTokenError
from estate_api.utils.exceptions import (
    APIException,
    DuplicateEmailError,
    ForbiddenError,
    InvalidCredentialsError,
    InvalidTokenError,
    TokenExpiredError,
    InactiveUserError,
    UserNotFoundError,
    ValidationError
)
from jose import JWTError
import uuid
import logging

logger = logging.getLogger(__name__)


class AuthService:
    """
    Authentication service for managing registration, login and session tokens.
    """

    def __init__(
        self,
        db_session: Optional[AsyncSession] = None,
        settings: Optional[Settings] = None,
        user_repo: Optional[UserStore] = None
    ):
        self.settings = settings or get_settings()
        self.user_repo = user_repo or UserRepository(db_session)

    @property
    def token_lifetime_seconds(self) -> int:
        return self.settings.access_token_expire_minutes * 60

    def create_token(self, user: User) -> str:
        """Issue a session token encoding the user's id, email and role."""
        return create_access_token(
            user_id=user.id,
            email=user.email,
            role=user.role,
            expires_delta=timedelta(minutes=self.settings.access_token_expire_minutes),
            settings=self.settings
        )

    def _resolve_signup_role(self, requested: Optional[UserRole]) -> UserRole:
        """
        Decide the role for a self-service registration.

        Signup always yields the user role. Admin requests are refused
        outright; agent requests are downgraded, since only an
        administrator may promote an account.
        """
        if requested == UserRole.ADMIN:
            raise ForbiddenError("Administrator accounts cannot be self-registered")
        if requested is not None and requested != UserRole.USER:
            logger.info(f"Signup requested role {requested.value}, registering as user")
        return UserRole.USER

    async def register(self, data: RegisterRequest) -> Tuple[User, str]:
        """
        Register a new account and sign it in.

        Returns:
            Tuple of (created user, session token)

        Raises:
            DuplicateEmailError: If the email is already registered
            ForbiddenError: If the admin role was requested
            ValidationError: If the email or password cannot be stored
        """
        try:
            role = self._resolve_signup_role(data.role)

            if await self.user_repo.email_exists(data.email):
                logger.warning(f"Registration rejected, email already registered: {data.email}")
                raise DuplicateEmailError()

            user = await self.user_repo.create_user({
                "email": data.email,
                "password": data.password,
                "full_name": data.full_name,
                "phone": data.phone,
                "role": role,
            })

            logger.info(f"User registered: {user.email} (ID: {user.id}, role: {user.role.value})")
            return user, self.create_token(user)

        except APIException:
            raise
        except IntegrityError:
            # Lost a race with a concurrent registration of the same email
            raise DuplicateEmailError()
        except ValueError as e:
            raise ValidationError(str(e))

    async def authenticate_user(self, email: str, password: str) -> User:
        """
        Check an email/password pair.

        Unknown email, wrong password and an inactive account all produce
        the same error so that callers cannot probe for accounts.

        Raises:
            InvalidCredentialsError: If the credentials are not accepted
        """
        if not email or not password:
            raise InvalidCredentialsError()

        user = await self.user_repo.get_by_email(email)

        if user is None:
            logger.warning(f"Failed login attempt for unknown email: {email}")
            raise InvalidCredentialsError()

        if not user.verify_password(password):
            logger.warning(f"Failed login attempt (bad password) for: {email}")
            raise InvalidCredentialsError()

        if not user.is_active:
            logger.warning(f"Failed login attempt for inactive account: {email}")
            raise InvalidCredentialsError()

        return user

    async def login(self, email: str, password: str) -> Tuple[User, str]:
        """
        Authenticate user and issue a fresh token.

        Returns:
            Tuple of (user, session token)
        """
        user = await self.authenticate_user(email, password)
        logger.info(f"User logged in: {user.email}")
        return user, self.create_token(user)

    async def get_profile(self, user_id: uuid.UUID) -> User:
        """
        Get the profile of the signed-in user.

        Raises:
            UserNotFoundError: If the account no longer exists
        """
        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise UserNotFoundError(str(user_id))
        return user

    async def get_current_user(self, token: str) -> User:
        """
        Resolve the user behind a session token.

        Raises:
            InvalidTokenError: If the token is malformed, tampered with or its user is gone
            TokenExpiredError: If the token is expired
            InactiveUserError: If the user account is inactive
        """
        try:
            payload = verify_token(token, settings=self.settings)
            user_id = uuid.UUID(payload.user_id)
        except ExpiredTokenError:
            raise TokenExpiredError()
        except (JWTError, ValueError) as e:
            logger.debug(f"Rejected token: {e}")
            raise InvalidTokenError()

        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise InvalidTokenError("Token user no longer exists")

        if not user.is_active:
            raise InactiveUserError()

        return user

    async def get_optional_user(self, token: str) -> Optional[User]:
        """Like ``get_current_user`` but returns None instead of raising auth errors."""
        try:
            return await self.get_current_user(token)
        except (InvalidTokenError, TokenExpiredError, InactiveUserError):
            return None
