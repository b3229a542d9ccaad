"""
User repository for authentication and user management operations.
Emails are stored lower-cased and looked up case-insensitively.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, desc
from estate_api.repositories.base import BaseRepository
from estate_api.models.user import User, UserRole
from typing import Optional, List, Dict, Any
import uuid
import logging

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    """
    Repository for user management with authentication support.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(User, db)

    async def create_user(self, user_data: Dict[str, Any]) -> User:
        """
        Create a new user with email normalization and password hashing.

        Args:
            user_data: Dictionary containing user information
                      Must include: email, password, full_name
                      Optional: phone, role (defaults to USER), profile_image

        Returns:
            Created user instance

        Raises:
            ValueError: If the email is malformed or the password empty
        """
        data = dict(user_data)
        email = User.normalize_email(data.pop("email"))
        password_hash = User.hash_password(data.pop("password"))

        create_data = {
            **data,
            "email": email,
            "password_hash": password_hash,
            "role": data.get("role") or UserRole.USER,
            "is_active": data.get("is_active", True),
        }

        created_user = await self.create(create_data)
        logger.info(f"Created user: {created_user.email} (ID: {created_user.id})")
        return created_user

    async def get_by_email(self, email: str) -> Optional[User]:
        """
        Get user by email address, ignoring case and surrounding whitespace.
        """
        try:
            normalized_email = email.strip().lower()
            query = select(User).where(func.lower(User.email) == normalized_email)

            result = await self.db.execute(query)
            user = result.scalar_one_or_none()

            if user:
                logger.debug(f"Retrieved user by email: {normalized_email}")
            else:
                logger.debug(f"User with email {normalized_email} not found")

            return user
        except Exception as e:
            logger.error(f"Failed to get user by email {email}: {e}")
            raise

    async def email_exists(self, email: str) -> bool:
        """Check whether an account already uses this email."""
        return await self.get_by_email(email) is not None

    async def list_users(self, role: Optional[UserRole] = None) -> List[User]:
        """
        List users newest first, optionally restricted to one role.
        """
        try:
            query = select(User)
            if role is not None:
                query = query.where(User.role == role)
            query = query.order_by(desc(User.created_at))

            result = await self.db.execute(query)
            users = result.scalars().all()

            logger.debug(f"Retrieved {len(users)} users (role={role.value if role else 'any'})")
            return list(users)
        except Exception as e:
            logger.error(f"Failed to list users: {e}")
            raise

    async def update_user_role(self, user_id: uuid.UUID, new_role: UserRole) -> Optional[User]:
        """
        Update user's role.

        Returns:
            Updated user instance or None if not found
        """
        updated_user = await self.update(user_id, {"role": new_role})

        if updated_user:
            logger.info(f"User {updated_user.email} role updated to {new_role.value}")

        return updated_user

    async def update_user_status(self, user_id: uuid.UUID, is_active: bool) -> Optional[User]:
        """
        Update user's active status.

        Returns:
            Updated user instance or None if not found
        """
        updated_user = await self.update(user_id, {"is_active": is_active})

        if updated_user:
            status = "activated" if is_active else "deactivated"
            logger.info(f"User {updated_user.email} {status}")

        return updated_user
