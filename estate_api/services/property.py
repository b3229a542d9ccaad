"""
Property service for managing listings with business rule validation.
Handles search visibility, ownership checks, image set edits and
cleanup of stored image files.
"""

from typing import Optional, List, Tuple, Set
from sqlalchemy.ext.asyncio import AsyncSession
from estate_api.config import Settings, get_settings
from estate_api.repositories.property import PropertyRepository, PropertySearchFilters
from estate_api.repositories.user import UserRepository
from estate_api.repositories.interfaces import PropertyStore, UserStore
from estate_api.models.property import Property, PropertyStatus, PUBLIC_STATUSES
from estate_api.models.user import User, UserRole
from estate_api.schemas.property import PropertyCreate, PropertyUpdate
from estate_api.utils.file_utils import FileStorage
from estate_api.utils.exceptions import (
    APIException,
    ValidationError,
    InsufficientPermissionsError,
    InvalidStatusError,
    PropertyNotFoundError,
    PropertyOwnershipError
)
import uuid
import logging

logger = logging.getLogger(__name__)


class PropertyService:
    """
    Property service for listing CRUD, search and lifecycle status.
    """

    def __init__(
        self,
        db_session: Optional[AsyncSession] = None,
        settings: Optional[Settings] = None,
        property_repo: Optional[PropertyStore] = None,
        user_repo: Optional[UserStore] = None,
        file_storage: Optional[FileStorage] = None
    ):
        self.settings = settings or get_settings()
        self.property_repo = property_repo or PropertyRepository(db_session)
        self.user_repo = user_repo or UserRepository(db_session)
        self.file_storage = file_storage or FileStorage(self.settings)

    @staticmethod
    def visible_statuses(
        current_user: Optional[User],
        agent_id: Optional[uuid.UUID]
    ) -> Optional[Set[PropertyStatus]]:
        """
        Statuses a caller may see in a listing search; None means all.

        Admins see everything and agents browsing their own listings see
        all of them. Everyone else only sees public listings.
        """
        if current_user is not None:
            if current_user.role == UserRole.ADMIN:
                return None
            if agent_id is not None and agent_id == current_user.id:
                return None
        return set(PUBLIC_STATUSES)

    async def list_properties(
        self,
        filters: PropertySearchFilters,
        current_user: Optional[User] = None,
        page: Optional[int] = None,
        page_size: Optional[int] = None
    ) -> Tuple[List[Property], int]:
        """
        Search listings visible to the caller.

        Results are ordered featured first, then newest first. Without
        ``page_size`` every match is returned.

        Returns:
            Tuple of (properties, total number of matches)

        Raises:
            ValidationError: If the price range or paging values are invalid
        """
        if (filters.min_price is not None and filters.max_price is not None
                and filters.min_price > filters.max_price):
            raise ValidationError("Minimum price cannot be greater than maximum price")

        skip, limit = 0, None
        if page_size is not None:
            if page_size < 1 or page_size > self.settings.max_page_size:
                raise ValidationError(f"page_size must be between 1 and {self.settings.max_page_size}")
            page = page or 1
            if page < 1:
                raise ValidationError("page must be 1 or greater")
            skip, limit = (page - 1) * page_size, page_size

        filters.visible_statuses = self.visible_statuses(current_user, filters.agent_id)

        properties, total = await self.property_repo.search_properties(filters, skip=skip, limit=limit)
        logger.debug(f"Listing search matched {total} properties")
        return properties, total

    async def get_property(self, property_id: uuid.UUID) -> Property:
        """
        Get a property with its images and agent.

        Sold and rented listings are still returned; ``is_public`` tells
        them apart from available ones.

        Raises:
            PropertyNotFoundError: If property doesn't exist
        """
        property_obj = await self.property_repo.get_by_id(property_id)
        if property_obj is None:
            raise PropertyNotFoundError(str(property_id))
        return property_obj

    async def create_property(self, property_data: PropertyCreate, current_user: User) -> Property:
        """
        Create a listing owned by the caller, with its images, in one transaction.

        Raises:
            InsufficientPermissionsError: If the caller is not an agent or admin,
                or a non-admin tries to assign the listing to someone else
            ValidationError: If the assigned agent does not exist
        """
        try:
            if current_user.role not in (UserRole.AGENT, UserRole.ADMIN):
                raise InsufficientPermissionsError("create properties")

            create_data = property_data.model_dump(exclude={"images", "agent_id"})
            create_data["agent_id"] = current_user.id

            if "agent_id" in property_data.model_fields_set and property_data.agent_id != current_user.id:
                if current_user.role != UserRole.ADMIN:
                    raise InsufficientPermissionsError("assign listings to another agent")
                await self._ensure_agent_exists(property_data.agent_id)
                create_data["agent_id"] = property_data.agent_id

            property_obj = await self.property_repo.create_with_images(create_data, property_data.images)

            logger.info(f"Property created by user {current_user.email}: {property_obj.title} (ID: {property_obj.id})")
            return property_obj

        except APIException:
            raise
        except Exception as e:
            logger.error(f"Failed to create property for user {current_user.id}: {e}")
            raise

    async def update_property(
        self,
        property_id: uuid.UUID,
        property_data: PropertyUpdate,
        current_user: User
    ) -> Property:
        """
        Overwrite the provided fields and apply image edits atomically.

        Raises:
            PropertyNotFoundError: If property doesn't exist
            PropertyOwnershipError: If the caller is neither owner nor admin
            InsufficientPermissionsError: If a non-admin tries to reassign the agent
            ValidationError: If image ids do not belong to the property
        """
        try:
            existing = await self.get_property(property_id)
            self._ensure_can_manage(existing, current_user)

            changes = property_data.field_changes()

            if "agent_id" in changes:
                if changes["agent_id"] == existing.agent_id:
                    changes.pop("agent_id")
                elif current_user.role != UserRole.ADMIN:
                    raise InsufficientPermissionsError("reassign listings")
                else:
                    await self._ensure_agent_exists(changes["agent_id"])

            existing_images = {image.id: image for image in existing.images}
            remove_ids = set(property_data.remove_image_ids)

            unknown = remove_ids - existing_images.keys()
            if unknown:
                raise ValidationError(
                    f"Images do not belong to this property: {', '.join(sorted(str(i) for i in unknown))}"
                )

            primary_id = property_data.primary_image_id
            if primary_id is not None and (primary_id not in existing_images or primary_id in remove_ids):
                raise ValidationError("primary_image_id must refer to an image kept on this property")

            removed_urls = [existing_images[image_id].image_url for image_id in remove_ids]

            updated = await self.property_repo.update_with_images(
                property_id,
                changes,
                new_image_urls=property_data.images,
                remove_image_ids=remove_ids,
                primary_image_id=primary_id
            )
            if updated is None:
                raise PropertyNotFoundError(str(property_id))

            self._delete_stored_images(removed_urls)

            logger.info(f"Property updated by user {current_user.email}: {property_id}")
            return updated

        except APIException:
            raise
        except Exception as e:
            logger.error(f"Failed to update property {property_id}: {e}")
            raise

    async def delete_property(self, property_id: uuid.UUID, current_user: User) -> None:
        """
        Delete a listing with its images and viewing requests.

        Raises:
            PropertyNotFoundError: If property doesn't exist
            PropertyOwnershipError: If the caller is neither owner nor admin
        """
        try:
            existing = await self.get_property(property_id)
            self._ensure_can_manage(existing, current_user)

            removed_urls = await self.property_repo.delete_with_dependents(property_id)
            if removed_urls is None:
                raise PropertyNotFoundError(str(property_id))

            self._delete_stored_images(removed_urls)
            logger.info(f"Property deleted by user {current_user.email}: {property_id}")

        except APIException:
            raise
        except Exception as e:
            logger.error(f"Failed to delete property {property_id}: {e}")
            raise

    async def update_status(
        self,
        property_id: uuid.UUID,
        status_value: Optional[str],
        current_user: User
    ) -> Property:
        """
        Move a listing to another lifecycle status, e.g. mark it sold.

        Raises:
            InvalidStatusError: If the value is not a known status
            PropertyNotFoundError: If property doesn't exist
            PropertyOwnershipError: If the caller is neither owner nor admin
        """
        new_status = self.parse_status(status_value)

        existing = await self.get_property(property_id)
        self._ensure_can_manage(existing, current_user)

        updated = await self.property_repo.update_status(property_id, new_status)
        if updated is None:
            raise PropertyNotFoundError(str(property_id))

        logger.info(f"Property {property_id} status changed to {new_status.value} by {current_user.email}")
        return updated

    @staticmethod
    def parse_status(value: Optional[str]) -> PropertyStatus:
        allowed = [status.value for status in PropertyStatus]
        if not isinstance(value, str) or value.strip().lower() not in allowed:
            raise InvalidStatusError(value, allowed)
        return PropertyStatus(value.strip().lower())

    # Private helper methods for business logic validation

    @staticmethod
    def _ensure_can_manage(property_obj: Property, current_user: User) -> None:
        if not current_user.can_manage_property(property_obj.agent_id):
            logger.warning(f"User {current_user.email} denied access to property {property_obj.id}")
            raise PropertyOwnershipError()

    async def _ensure_agent_exists(self, agent_id: Optional[uuid.UUID]) -> None:
        if agent_id is None:
            return
        if await self.user_repo.get_by_id(agent_id) is None:
            raise ValidationError(f"Assigned agent does not exist: {agent_id}")

    def _delete_stored_images(self, urls: List[str]) -> None:
        """Remove locally stored files; external URLs are left alone."""
        for url in urls:
            self.file_storage.delete_by_url(url)
