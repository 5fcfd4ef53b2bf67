# webinar_manager/api/routes/internal.py
from http import HTTPStatus

from fastapi import APIRouter, Depends

from webinar_manager.api.dependencies.internal_auth import verify_cron_secret
from webinar_manager.schemas.schedule import WeeklyScheduleSummary
from webinar_manager.services.weekly_scheduler import schedule_weekly_meetings
from webinar_manager.services.zoom_client import ZoomClient, get_zoom_client

router = APIRouter(
    prefix="/api/cron",
    tags=["Internal"],
    dependencies=[Depends(verify_cron_secret)],
)


@router.get(
    "/create-weekly-meetings",
    response_model=WeeklyScheduleSummary,
    status_code=HTTPStatus.OK,
    summary="Ensure the upcoming weekly webinars exist on Zoom",
    description=(
        "Intended to be called by a scheduler (e.g. every Wednesday morning).\n\n"
        "**Logic:**\n"
        "- Compute the next `WEEKLY_SLOT_COUNT` webinar dates from today.\n"
        "- List the meetings already scheduled on Zoom and match them by local date.\n"
        "- Create a meeting for every date that has none; existing dates are skipped.\n\n"
        "A failed creation is reported for its date without stopping the others. "
        "Protected via `Authorization: Bearer <CRON_SECRET>` when configured."
    ),
    responses={
        200: {
            "description": "Every slot was processed; see per-date actions.",
            "content": {
                "application/json": {
                    "example": {
                        "success": True,
                        "reference_date": "2025-01-15",
                        "results": [
                            {"date": "2025-01-15", "action": "skipped", "meeting_id": 84512345678},
                            {
                                "date": "2025-01-22",
                                "action": "created",
                                "topic": "Nekst Tips & Tricks Webinar - Wednesday, January 22, 2025",
                                "meeting_id": 84512399999,
                            },
                            {"date": "2025-01-29", "action": "failed", "error": "429 Too Many Requests"},
                        ],
                    }
                }
            },
        },
        401: {"description": "Missing or invalid cron secret (if configured)."},
    },
)
async def create_weekly_meetings(
    zoom: ZoomClient = Depends(get_zoom_client),
) -> WeeklyScheduleSummary:
    """
    Run one weekly scheduling pass. Safe to call repeatedly: dates that
    already have a meeting are never scheduled twice.
    """
    return await schedule_weekly_meetings(zoom)
