"""
Schedule service for property viewing requests.
Handles request creation against a property's agent, per-user and admin
listings, status changes through the viewing workflow and deletion.
"""

from typing import Optional, List
from sqlalchemy.ext.asyncio import AsyncSession
from estate_api.config import Settings, get_settings
from estate_api.repositories.property import PropertyRepository
from estate_api.repositories.schedule import ScheduleRepository
from estate_api.repositories.interfaces import PropertyStore, ScheduleStore
from estate_api.models.schedule import Schedule, ScheduleStatus
from estate_api.models.user import User, UserRole
from estate_api.schemas.schedule import ScheduleCreate
from estate_api.utils.exceptions import (
    ValidationError,
    InsufficientPermissionsError,
    InvalidStatusError,
    NoAssignedAgentError,
    PropertyNotFoundError,
    ScheduleNotFoundError,
    StatusTransitionError
)
import uuid
import logging

logger = logging.getLogger(__name__)


class ScheduleService:
    """
    Viewing-request workflow.

    A request starts ``pending``; the agent or an admin confirms or
    cancels it and a confirmed visit is finally marked ``completed``.
    The requester may cancel their own request.
    """

    def __init__(
        self,
        db_session: Optional[AsyncSession] = None,
        settings: Optional[Settings] = None,
        schedule_repo: Optional[ScheduleStore] = None,
        property_repo: Optional[PropertyStore] = None
    ):
        self.settings = settings or get_settings()
        self.schedule_repo = schedule_repo or ScheduleRepository(db_session)
        self.property_repo = property_repo or PropertyRepository(db_session)

    async def create_schedule(self, data: ScheduleCreate, requester: User) -> Schedule:
        """
        Request a viewing of a property.

        Raises:
            ValidationError: If property, date or time is missing, the property
                has no assigned agent or is no longer on the market
            PropertyNotFoundError: If the property does not exist
        """
        missing = [
            field for field in ("property_id", "visit_date", "visit_time")
            if getattr(data, field) is None
        ]
        if missing:
            raise ValidationError(
                f"Missing required fields: {', '.join(missing)}",
                field_errors=[{"field": field, "message": "Field required"} for field in missing]
            )

        property_obj = await self.property_repo.get_by_id(data.property_id)
        if property_obj is None:
            raise PropertyNotFoundError(str(data.property_id))

        if property_obj.agent_id is None:
            logger.warning(f"Viewing requested for agentless property {property_obj.id}")
            raise NoAssignedAgentError()

        if not property_obj.is_public:
            raise ValidationError(f"Property is no longer available for viewings ({property_obj.status.value})")

        schedule = await self.schedule_repo.create({
            "property_id": property_obj.id,
            "user_id": requester.id,
            "agent_id": property_obj.agent_id,
            "visit_date": data.visit_date,
            "visit_time": data.visit_time,
            "message": data.message,
            "status": ScheduleStatus.PENDING,
        })

        logger.info(f"Schedule {schedule.id} created by {requester.email} for property {property_obj.id}")
        return schedule

    async def list_for_user(self, user: User) -> List[Schedule]:
        """The caller's own requests, newest first."""
        return await self.schedule_repo.list_for_user(user.id)

    async def list_for_agent(self, agent: User) -> List[Schedule]:
        """Requests addressed to the calling agent."""
        return await self.schedule_repo.list_for_agent(agent.id)

    async def list_all(self, current_user: User) -> List[Schedule]:
        """
        Every request; administrators only.

        Raises:
            InsufficientPermissionsError: If the caller is not an admin
        """
        if current_user.role != UserRole.ADMIN:
            raise InsufficientPermissionsError("view all schedules")
        return await self.schedule_repo.list_all()

    async def update_status(
        self,
        schedule_id: uuid.UUID,
        status_value: Optional[str],
        current_user: User,
        admin_notes: Optional[str] = None
    ) -> Schedule:
        """
        Change the status of a viewing request.

        The value is checked before anything is read or written, so an
        invalid status never touches the stored record.

        Raises:
            InvalidStatusError: If the value is not one of the four statuses
            ScheduleNotFoundError: If the schedule does not exist
            InsufficientPermissionsError: If the caller may not make this change
            StatusTransitionError: If the workflow does not allow the move
        """
        new_status = self.parse_status(status_value)

        schedule = await self.schedule_repo.get_by_id(schedule_id)
        if schedule is None:
            raise ScheduleNotFoundError(str(schedule_id))

        self._ensure_can_set_status(schedule, new_status, current_user)

        if self.settings.enforce_schedule_transitions and not schedule.can_transition_to(new_status):
            raise StatusTransitionError(schedule.status.value, new_status.value)

        if new_status == schedule.status and admin_notes is None:
            logger.debug(f"Schedule {schedule_id} already {new_status.value}")
            return schedule

        updated = await self.schedule_repo.update_status(schedule_id, new_status, admin_notes)
        if updated is None:
            raise ScheduleNotFoundError(str(schedule_id))

        logger.info(f"Schedule {schedule_id} moved to {new_status.value} by {current_user.email}")
        return updated

    async def delete_schedule(self, schedule_id: uuid.UUID, current_user: User) -> None:
        """
        Remove a viewing request; administrators only.

        Raises:
            InsufficientPermissionsError: If the caller is not an admin
            ScheduleNotFoundError: If the schedule does not exist
        """
        if current_user.role != UserRole.ADMIN:
            raise InsufficientPermissionsError("delete schedules")

        if not await self.schedule_repo.delete(schedule_id):
            raise ScheduleNotFoundError(str(schedule_id))

        logger.info(f"Schedule {schedule_id} deleted by {current_user.email}")

    @staticmethod
    def parse_status(value: Optional[str]) -> ScheduleStatus:
        allowed = [status.value for status in ScheduleStatus]
        if not isinstance(value, str) or value.strip().lower() not in allowed:
            raise InvalidStatusError(value, allowed)
        return ScheduleStatus(value.strip().lower())

    @staticmethod
    def _ensure_can_set_status(schedule: Schedule, new_status: ScheduleStatus, user: User) -> None:
        if user.role == UserRole.ADMIN:
            return
        if schedule.agent_id is not None and schedule.agent_id == user.id:
            return
        if schedule.user_id == user.id and new_status == ScheduleStatus.CANCELLED:
            return
        raise InsufficientPermissionsError("change the status of this schedule")
