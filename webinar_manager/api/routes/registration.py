# webinar_manager/api/routes/registration.py
from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from webinar_manager.core.config import get_settings
from webinar_manager.schemas.registration import (
    RegistrationRequest,
    RegistrationResponse,
    WebinarListing,
)
from webinar_manager.services.registration import RegistrationService, registrant_from_request
from webinar_manager.services.webinar_listing import list_upcoming_webinars
from webinar_manager.services.zoom_client import ZoomClient, get_zoom_client

router = APIRouter(tags=["Registration"])


def get_registration_service() -> RegistrationService:
    return RegistrationService(settings=get_settings())


async def _upcoming_webinars(zoom: ZoomClient) -> list[WebinarListing]:
    settings = get_settings()
    meetings = await zoom.list_meetings()
    return list_upcoming_webinars(
        meetings,
        now=datetime.now(tz=timezone.utc),
        topic_keyword=settings.WEBINAR_TOPIC_KEYWORD,
        tz_name=settings.MEETING_TIMEZONE,
        limit=settings.WEEKLY_SLOT_COUNT,
    )


@router.get(
    "/register",
    response_model=list[WebinarListing],
    summary="Upcoming webinars open for registration",
    description=(
        "Public data behind the registration page: the next webinars (by topic "
        "keyword) with local date/time labels and a Google Calendar link."
    ),
)
async def registration_page(zoom: ZoomClient = Depends(get_zoom_client)) -> list[WebinarListing]:
    return await _upcoming_webinars(zoom)


@router.get(
    "/api/registration/webinars",
    response_model=list[WebinarListing],
    summary="Upcoming webinars open for registration (API alias)",
)
async def list_webinars(zoom: ZoomClient = Depends(get_zoom_client)) -> list[WebinarListing]:
    return await _upcoming_webinars(zoom)


@router.post(
    "/api/hubspot/register",
    response_model=RegistrationResponse,
    summary="Register for a webinar",
    description=(
        "Finds or creates the HubSpot contact for the registrant (keyed on email), "
        "attaches a registration note and returns the meeting's join URL.\n\n"
        "The marketing-form submission and the note are best-effort: their "
        "failures are listed under `diagnostics` without failing the request."
    ),
    responses={
        400: {"description": "A required field is missing."},
        500: {"description": "HubSpot credentials are not configured."},
        502: {"description": "HubSpot rejected the contact search/create/update."},
    },
)
async def register(
    payload: RegistrationRequest,
    service: RegistrationService = Depends(get_registration_service),
) -> RegistrationResponse:
    result = await service.upsert(registrant_from_request(payload))
    return RegistrationResponse(
        contact_id=result.contact_id,
        join_url=result.join_url,
        diagnostics=result.diagnostics,
    )
