# webinar_manager/api/routes/pages.py
from http import HTTPStatus
from typing import Union

from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse

from webinar_manager.api.dependencies.admin_auth import has_admin_session
from webinar_manager.core.config import get_settings
from webinar_manager.schemas.slot import DashboardResponse
from webinar_manager.services.weekly_scheduler import load_reconciled_slots
from webinar_manager.services.zoom_client import ZoomClient, get_zoom_client

router = APIRouter(tags=["Pages"])

LOGIN_PATH = "/login"
REGISTER_PATH = "/register"


@router.get(
    "/",
    response_model=None,
    summary="Admin dashboard entry point",
    description=(
        "- Requests for `PUBLIC_REGISTRATION_HOST` are redirected to `/register`.\n"
        "- Without a valid admin session cookie the caller is redirected to `/login`.\n"
        "- Otherwise returns the upcoming weekly slots and their Zoom meetings."
    ),
)
async def dashboard(
    request: Request,
    zoom: ZoomClient = Depends(get_zoom_client),
) -> Union[RedirectResponse, DashboardResponse]:
    settings = get_settings()

    public_host = settings.PUBLIC_REGISTRATION_HOST
    if public_host and request.url.hostname == public_host.lower():
        return RedirectResponse(REGISTER_PATH, status_code=HTTPStatus.TEMPORARY_REDIRECT)

    if not has_admin_session(request):
        return RedirectResponse(LOGIN_PATH, status_code=HTTPStatus.TEMPORARY_REDIRECT)

    return DashboardResponse(
        timezone=settings.MEETING_TIMEZONE,
        start_hour=settings.MEETING_START_HOUR,
        slots=await load_reconciled_slots(zoom),
    )
