"""
Schedule model for property viewing requests.
A requester asks to visit a property; the property's agent answers.
"""

from sqlalchemy import String, Text, Date, Time, Enum as SQLEnum, ForeignKey, Index, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from estate_api.database import Base
from datetime import date, time
import enum
import uuid
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from estate_api.models.user import User
    from estate_api.models.property import Property


class ScheduleStatus(str, enum.Enum):
    """Viewing request status."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


# Allowed status moves; staying in the same state is always a no-op
SCHEDULE_TRANSITIONS = {
    ScheduleStatus.PENDING: frozenset({ScheduleStatus.CONFIRMED, ScheduleStatus.CANCELLED}),
    ScheduleStatus.CONFIRMED: frozenset({ScheduleStatus.COMPLETED}),
    ScheduleStatus.CANCELLED: frozenset(),
    ScheduleStatus.COMPLETED: frozenset(),
}


class Schedule(Base):
    """
    Viewing request linking a requesting user to a property and its agent.
    The agent is copied from the property when the request is created.
    """

    __tablename__ = "schedules"

    property_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Requesting user"
    )

    agent_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
        comment="Agent resolved from the property at creation time"
    )

    visit_date: Mapped[date] = mapped_column(Date, nullable=False)
    visit_time: Mapped[time] = mapped_column(Time, nullable=False)

    message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    status: Mapped[ScheduleStatus] = mapped_column(
        SQLEnum(
            ScheduleStatus,
            name="schedule_status",
            values_callable=lambda e: [m.value for m in e]
        ),
        nullable=False,
        default=ScheduleStatus.PENDING,
        index=True
    )

    admin_notes: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)

    property_rel: Mapped["Property"] = relationship("Property", lazy="selectin")
    requester: Mapped["User"] = relationship("User", foreign_keys=[user_id], lazy="selectin")
    agent: Mapped[Optional["User"]] = relationship("User", foreign_keys=[agent_id], lazy="selectin")

    def __repr__(self) -> str:
        return f"<Schedule(id={self.id}, property_id={self.property_id}, status={self.status})>"

    def can_transition_to(self, new_status: ScheduleStatus) -> bool:
        """Check whether the status graph allows moving to ``new_status``."""
        if new_status == self.status:
            return True
        return new_status in SCHEDULE_TRANSITIONS[self.status]


# Index for the admin overview ordering
visit_order_index = Index(
    "idx_schedules_visit_order",
    Schedule.visit_date.desc(),
    Schedule.visit_time.desc()
)
