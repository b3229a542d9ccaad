"""
Viewing schedule API endpoints.
"""

from fastapi import APIRouter, Depends, status, Path
from uuid import UUID

from estate_api.models.user import User
from estate_api.services.schedule import ScheduleService
from estate_api.schemas.schedule import (
    ScheduleCreate,
    ScheduleStatusUpdate,
    ScheduleResponse,
    ScheduleListResponse,
    ScheduleMessageResponse
)
from estate_api.schemas.error import get_error_responses
from estate_api.utils.dependencies import (
    get_current_user,
    get_current_agent_user,
    get_schedule_service
)


router = APIRouter(prefix="/schedules", tags=["Schedules"])


def _list_response(schedules) -> ScheduleListResponse:
    return ScheduleListResponse(
        schedules=[ScheduleResponse.from_schedule(schedule) for schedule in schedules],
        total=len(schedules)
    )


@router.get(
    "/all",
    response_model=ScheduleListResponse,
    summary="List every viewing request",
    description="All viewing requests ordered by visit date. Administrators only.",
    responses=get_error_responses(401, 403)
)
async def list_all_schedules(
    current_user: User = Depends(get_current_user),
    schedule_service: ScheduleService = Depends(get_schedule_service)
) -> ScheduleListResponse:
    return _list_response(await schedule_service.list_all(current_user))


@router.get(
    "/user",
    response_model=ScheduleListResponse,
    summary="List my viewing requests",
    description="Viewing requests made by the caller, newest first",
    responses=get_error_responses(401)
)
async def list_user_schedules(
    current_user: User = Depends(get_current_user),
    schedule_service: ScheduleService = Depends(get_schedule_service)
) -> ScheduleListResponse:
    return _list_response(await schedule_service.list_for_user(current_user))


@router.get(
    "/agent",
    response_model=ScheduleListResponse,
    summary="List viewing requests for my listings",
    description="Viewing requests addressed to the calling agent",
    responses=get_error_responses(401, 403)
)
async def list_agent_schedules(
    current_user: User = Depends(get_current_agent_user),
    schedule_service: ScheduleService = Depends(get_schedule_service)
) -> ScheduleListResponse:
    return _list_response(await schedule_service.list_for_agent(current_user))


@router.post(
    "",
    response_model=ScheduleMessageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Request a viewing",
    description="Request a visit to a listing. The request is routed to the listing's agent.",
    responses=get_error_responses(400, 401, 404, 422)
)
async def create_schedule(
    schedule_data: ScheduleCreate,
    current_user: User = Depends(get_current_user),
    schedule_service: ScheduleService = Depends(get_schedule_service)
) -> ScheduleMessageResponse:
    """
    Create a pending viewing request.

    Raises:
        ValidationError: If fields are missing or the property has no agent
        PropertyNotFoundError: If the property does not exist
    """
    schedule = await schedule_service.create_schedule(schedule_data, current_user)

    return ScheduleMessageResponse(
        message="Schedule created successfully",
        schedule=ScheduleResponse.from_schedule(schedule)
    )


@router.patch(
    "/{schedule_id}/status",
    response_model=ScheduleMessageResponse,
    summary="Change viewing request status",
    description="Confirm, cancel or complete a viewing request",
    responses=get_error_responses(400, 401, 403, 404)
)
async def update_schedule_status(
    status_data: ScheduleStatusUpdate,
    schedule_id: UUID = Path(..., description="Schedule ID"),
    current_user: User = Depends(get_current_user),
    schedule_service: ScheduleService = Depends(get_schedule_service)
) -> ScheduleMessageResponse:
    schedule = await schedule_service.update_status(
        schedule_id,
        status_data.status,
        current_user,
        admin_notes=status_data.admin_notes
    )

    return ScheduleMessageResponse(
        message="Schedule status updated successfully",
        schedule=ScheduleResponse.from_schedule(schedule)
    )


@router.delete(
    "/{schedule_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete viewing request",
    description="Remove a viewing request. Administrators only.",
    responses=get_error_responses(401, 403, 404)
)
async def delete_schedule(
    schedule_id: UUID = Path(..., description="Schedule ID"),
    current_user: User = Depends(get_current_user),
    schedule_service: ScheduleService = Depends(get_schedule_service)
) -> None:
    await schedule_service.delete_schedule(schedule_id, current_user)
