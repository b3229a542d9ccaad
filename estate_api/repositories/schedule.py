"""
Schedule repository for viewing requests.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, desc
from estate_api.repositories.base import BaseRepository
from estate_api.models.schedule import Schedule, ScheduleStatus
from typing import Optional, List
import uuid
import logging

logger = logging.getLogger(__name__)


class ScheduleRepository(BaseRepository[Schedule]):
    """
    Repository for viewing requests. Property, requester and agent
    are loaded with every schedule for display.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(Schedule, db)

    async def list_for_user(self, user_id: uuid.UUID) -> List[Schedule]:
        """Requests made by one user, newest first."""
        try:
            query = (
                select(Schedule)
                .where(Schedule.user_id == user_id)
                .order_by(desc(Schedule.created_at))
            )
            result = await self.db.execute(query)
            schedules = result.scalars().all()

            logger.debug(f"Retrieved {len(schedules)} schedules for user {user_id}")
            return list(schedules)
        except Exception as e:
            logger.error(f"Failed to list schedules for user {user_id}: {e}")
            raise

    async def list_for_agent(self, agent_id: uuid.UUID) -> List[Schedule]:
        """Requests addressed to one agent, by visit date and time, latest first."""
        try:
            query = (
                select(Schedule)
                .where(Schedule.agent_id == agent_id)
                .order_by(desc(Schedule.visit_date), desc(Schedule.visit_time))
            )
            result = await self.db.execute(query)
            schedules = result.scalars().all()

            logger.debug(f"Retrieved {len(schedules)} schedules for agent {agent_id}")
            return list(schedules)
        except Exception as e:
            logger.error(f"Failed to list schedules for agent {agent_id}: {e}")
            raise

    async def list_all(self) -> List[Schedule]:
        """Every request, by visit date and time, latest first."""
        try:
            query = select(Schedule).order_by(desc(Schedule.visit_date), desc(Schedule.visit_time))
            result = await self.db.execute(query)
            schedules = result.scalars().all()

            logger.debug(f"Retrieved {len(schedules)} schedules")
            return list(schedules)
        except Exception as e:
            logger.error(f"Failed to list schedules: {e}")
            raise

    async def update_status(
        self,
        schedule_id: uuid.UUID,
        status: ScheduleStatus,
        admin_notes: Optional[str] = None
    ) -> Optional[Schedule]:
        """
        Overwrite the status, and the notes when given.

        Returns:
            Updated schedule or None if not found
        """
        changes = {"status": status}
        if admin_notes is not None:
            changes["admin_notes"] = admin_notes

        updated = await self.update(schedule_id, changes)
        if updated:
            logger.info(f"Schedule {schedule_id} status set to {status.value}")
        return updated
