"""
User administration service: account listing and privileged role changes.
"""

from typing import Optional, List
from sqlalchemy.ext.asyncio import AsyncSession
from estate_api.repositories.user import UserRepository
from estate_api.repositories.interfaces import UserStore
from estate_api.models.user import User, UserRole
from estate_api.utils.exceptions import (
    ForbiddenError,
    InsufficientPermissionsError,
    UserNotFoundError
)
import uuid
import logging

logger = logging.getLogger(__name__)


class UserService:
    """
    Administrative operations on user accounts.
    Role changes are the only way to grant agent or admin rights after signup.
    """

    def __init__(self, db_session: Optional[AsyncSession] = None, user_repo: Optional[UserStore] = None):
        self.user_repo = user_repo or UserRepository(db_session)

    async def list_users(self, current_user: User, role: Optional[UserRole] = None) -> List[User]:
        if not self._can_manage_users(current_user):
            raise InsufficientPermissionsError("list users")
        return await self.user_repo.list_users(role)

    async def update_user_role(
        self,
        user_id: uuid.UUID,
        new_role: UserRole,
        current_user: User
    ) -> User:
        """
        Update user role with permission validation.

        Raises:
            InsufficientPermissionsError: If the caller is not an admin
            ForbiddenError: If an admin tries to change their own role
            UserNotFoundError: If user doesn't exist
        """
        if not self._can_manage_users(current_user):
            raise InsufficientPermissionsError("update user roles")

        # Prevent admins from locking themselves out
        if user_id == current_user.id:
            raise ForbiddenError("Users cannot change their own role")

        updated_user = await self.user_repo.update_user_role(user_id, new_role)
        if updated_user is None:
            raise UserNotFoundError(str(user_id))

        logger.info(f"User role updated by {current_user.email}: {user_id} -> {new_role.value}")
        return updated_user

    @staticmethod
    def _can_manage_users(user: User) -> bool:
        """Check if user can manage other users."""
        return user.role == UserRole.ADMIN and user.is_active
