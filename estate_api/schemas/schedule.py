"""
Pydantic schemas for viewing-schedule requests and responses.
"""

from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import date, time, datetime
from estate_api.models.schedule import Schedule, ScheduleStatus
import uuid


class ScheduleCreate(BaseModel):
    """
    Request to visit a property.

    All three of property, date and time are needed; they are optional
    here so that a missing value is reported as a validation error by
    the schedule service rather than as a schema error.
    """

    property_id: Optional[uuid.UUID] = Field(None, description="Property to visit")
    visit_date: Optional[date] = Field(None, description="Requested day", examples=["2026-11-02"])
    visit_time: Optional[time] = Field(None, description="Requested time", examples=["14:30"])
    message: Optional[str] = Field(
        None,
        max_length=2000,
        description="Note for the agent",
        examples=["Is the unit pet friendly?"]
    )


class ScheduleStatusUpdate(BaseModel):
    """Status change, optionally with a note from the reviewer."""

    status: Optional[str] = Field(
        None,
        description="pending, confirmed, cancelled or completed",
        examples=["confirmed"]
    )
    admin_notes: Optional[str] = Field(None, max_length=1000, examples=["Agent will meet you at the lobby"])


class ScheduleResponse(BaseModel):
    """Viewing request with property and requester details for display."""

    id: uuid.UUID
    property_id: uuid.UUID
    user_id: uuid.UUID
    agent_id: Optional[uuid.UUID] = None
    visit_date: date
    visit_time: time
    message: Optional[str] = None
    status: ScheduleStatus
    admin_notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    property_title: Optional[str] = None
    property_address: Optional[str] = None
    property_city: Optional[str] = None
    user_name: Optional[str] = None
    user_email: Optional[str] = None

    @classmethod
    def from_schedule(cls, schedule: Schedule) -> "ScheduleResponse":
        """Flatten a schedule and its loaded relationships."""
        prop = schedule.property_rel
        requester = schedule.requester
        return cls(
            id=schedule.id,
            property_id=schedule.property_id,
            user_id=schedule.user_id,
            agent_id=schedule.agent_id,
            visit_date=schedule.visit_date,
            visit_time=schedule.visit_time,
            message=schedule.message,
            status=schedule.status,
            admin_notes=schedule.admin_notes,
            created_at=schedule.created_at,
            updated_at=schedule.updated_at,
            property_title=prop.title if prop else None,
            property_address=prop.address if prop else None,
            property_city=prop.city if prop else None,
            user_name=requester.full_name if requester else None,
            user_email=requester.email if requester else None,
        )


class ScheduleListResponse(BaseModel):
    schedules: List[ScheduleResponse]
    total: int


class ScheduleMessageResponse(BaseModel):
    message: str = Field(..., examples=["Schedule created successfully"])
    schedule: ScheduleResponse
