"""
Storage contracts used by the services.

The SQLAlchemy repositories are the shipped implementation; any other
backend only has to provide these methods.
"""

from typing import Any, Collection, Dict, List, Optional, Protocol, Tuple
import uuid

from estate_api.models.user import User, UserRole
from estate_api.models.property import Property, PropertyStatus
from estate_api.models.schedule import Schedule, ScheduleStatus
from estate_api.repositories.property import PropertySearchFilters


class UserStore(Protocol):
    async def create_user(self, user_data: Dict[str, Any]) -> User: ...

    async def get_by_id(self, id: uuid.UUID) -> Optional[User]: ...

    async def get_by_email(self, email: str) -> Optional[User]: ...

    async def email_exists(self, email: str) -> bool: ...

    async def list_users(self, role: Optional[UserRole] = None) -> List[User]: ...

    async def update_user_role(self, user_id: uuid.UUID, new_role: UserRole) -> Optional[User]: ...


class PropertyStore(Protocol):
    async def get_by_id(self, id: uuid.UUID) -> Optional[Property]: ...

    async def search_properties(
        self,
        filters: PropertySearchFilters,
        skip: int = 0,
        limit: Optional[int] = None
    ) -> Tuple[List[Property], int]: ...

    async def create_with_images(self, property_data: Dict[str, Any], image_urls: List[str]) -> Property: ...

    async def update_with_images(
        self,
        property_id: uuid.UUID,
        fields: Dict[str, Any],
        new_image_urls: Optional[List[str]] = None,
        remove_image_ids: Optional[Collection[uuid.UUID]] = None,
        primary_image_id: Optional[uuid.UUID] = None
    ) -> Optional[Property]: ...

    async def update_status(self, property_id: uuid.UUID, status: PropertyStatus) -> Optional[Property]: ...

    async def delete_with_dependents(self, property_id: uuid.UUID) -> Optional[List[str]]: ...


class ScheduleStore(Protocol):
    async def create(self, obj_in: Dict[str, Any]) -> Schedule: ...

    async def get_by_id(self, id: uuid.UUID) -> Optional[Schedule]: ...

    async def list_for_user(self, user_id: uuid.UUID) -> List[Schedule]: ...

    async def list_for_agent(self, agent_id: uuid.UUID) -> List[Schedule]: ...

    async def list_all(self) -> List[Schedule]: ...

    async def update_status(
        self,
        schedule_id: uuid.UUID,
        status: ScheduleStatus,
        admin_notes: Optional[str] = None
    ) -> Optional[Schedule]: ...

    async def delete(self, id: uuid.UUID) -> bool: ...
