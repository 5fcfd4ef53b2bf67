# webinar_manager/api/routes/meetings.py
from http import HTTPStatus

from fastapi import APIRouter, Depends, Path

from webinar_manager.api.dependencies.admin_auth import require_admin_session
from webinar_manager.core.config import get_settings
from webinar_manager.core.errors import ValidationError
from webinar_manager.schemas.meeting import (
    ExternalMeeting,
    MeetingCreate,
    MeetingUpdate,
    OperationAck,
)
from webinar_manager.schemas.slot import DashboardResponse
from webinar_manager.services.weekly_scheduler import load_reconciled_slots
from webinar_manager.services.zoom_client import ZoomClient, get_zoom_client

router = APIRouter(
    prefix="/api/zoom",
    tags=["Meetings"],
    dependencies=[Depends(require_admin_session)],
)


@router.get(
    "/meetings",
    response_model=list[ExternalMeeting],
    summary="List scheduled Zoom meetings",
    responses={401: {"description": "Admin session required."}},
)
async def list_meetings(zoom: ZoomClient = Depends(get_zoom_client)) -> list[ExternalMeeting]:
    return await zoom.list_meetings()


@router.post(
    "/meetings",
    response_model=ExternalMeeting,
    status_code=HTTPStatus.OK,
    summary="Schedule a webinar on a given date",
    description=(
        "Creates a Zoom meeting on `date` at the configured local start hour. "
        "Only the wall-clock time and timezone name are sent, so Zoom handles DST."
    ),
    responses={
        400: {"description": "Topic and date are required."},
        401: {"description": "Admin session required."},
    },
)
async def create_meeting(
    payload: MeetingCreate,
    zoom: ZoomClient = Depends(get_zoom_client),
) -> ExternalMeeting:
    if not payload.topic or payload.date is None:
        raise ValidationError("Topic and date are required.")

    return await zoom.create_meeting(
        topic=payload.topic,
        meeting_date=payload.date,
        duration_minutes=payload.duration or get_settings().MEETING_DURATION_MINUTES,
        agenda=payload.agenda,
    )


@router.patch(
    "/meetings/{meeting_id}",
    response_model=OperationAck,
    summary="Update a meeting's topic and/or agenda",
)
async def update_meeting(
    payload: MeetingUpdate,
    meeting_id: str = Path(..., description="Zoom meeting identifier."),
    zoom: ZoomClient = Depends(get_zoom_client),
) -> OperationAck:
    await zoom.update_meeting(meeting_id, topic=payload.topic, agenda=payload.agenda)
    return OperationAck()


@router.delete(
    "/meetings/{meeting_id}",
    response_model=OperationAck,
    summary="Cancel a meeting",
)
async def delete_meeting(
    meeting_id: str = Path(..., description="Zoom meeting identifier."),
    zoom: ZoomClient = Depends(get_zoom_client),
) -> OperationAck:
    await zoom.delete_meeting(meeting_id)
    return OperationAck()


@router.get(
    "/slots",
    response_model=DashboardResponse,
    summary="Upcoming weekly slots paired with their meetings",
)
async def list_slots(zoom: ZoomClient = Depends(get_zoom_client)) -> DashboardResponse:
    settings = get_settings()
    return DashboardResponse(
        timezone=settings.MEETING_TIMEZONE,
        start_hour=settings.MEETING_START_HOUR,
        slots=await load_reconciled_slots(zoom),
    )
