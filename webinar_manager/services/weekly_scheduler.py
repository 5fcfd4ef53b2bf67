# webinar_manager/services/weekly_scheduler.py
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import List, Optional

from webinar_manager.core.config import get_settings
from webinar_manager.core.errors import UpstreamError
from webinar_manager.schemas.schedule import SlotAction, SlotOutcome, WeeklyScheduleSummary
from webinar_manager.schemas.slot import Slot, SlotReconciliation
from webinar_manager.services.reconciler import reconcile
from webinar_manager.services.slots import compute_slots, local_date
from webinar_manager.services.zoom_client import ZoomClient

logger = logging.getLogger(__name__)


def build_topic(slot: Slot, base_topic: str) -> str:
    return f"{base_topic} - {slot.label}"


def upcoming_slots(now: Optional[datetime] = None) -> List[Slot]:
    """
    The configured number of upcoming weekly slots, computed from `now`.
    """
    settings = get_settings()
    if now is None:
        now = datetime.now(tz=timezone.utc)
    return compute_slots(
        settings.WEEKLY_SLOT_COUNT,
        now,
        weekday=settings.MEETING_WEEKDAY,
        tz_name=settings.MEETING_TIMEZONE,
    )


async def load_reconciled_slots(
    zoom: ZoomClient,
    now: Optional[datetime] = None,
) -> List[SlotReconciliation]:
    """
    Upcoming slots paired with the meetings Zoom already has for them.

    Zoom is re-listed on every call; meeting existence is never cached.
    """
    settings = get_settings()
    slots = upcoming_slots(now)
    existing = await zoom.list_meetings()
    return reconcile(slots, existing, tz_name=settings.MEETING_TIMEZONE)


async def schedule_weekly_meetings(
    zoom: ZoomClient,
    now: Optional[datetime] = None,
) -> WeeklyScheduleSummary:
    """
    Ensure a meeting exists for each upcoming weekly slot.

    Behavior
    --------
    1) Compute the upcoming slots from `now`.
    2) List the meetings already scheduled on Zoom. A listing failure
       propagates: without it we cannot tell which slots are covered.
    3) Skip slots whose local date already has a meeting.
    4) Create the remaining ones sequentially. A failed creation is recorded
       as that slot's outcome and the loop moves on to the next slot.

    Running this twice in a row therefore creates nothing the second time.
    """
    settings = get_settings()
    if now is None:
        now = datetime.now(tz=timezone.utc)

    pairs = await load_reconciled_slots(zoom, now)
    results: List[SlotOutcome] = []

    for pair in pairs:
        slot = pair.slot

        if pair.meeting is not None:
            results.append(
                SlotOutcome(date=slot.date, action=SlotAction.SKIPPED, meeting_id=pair.meeting.id)
            )
            continue

        topic = build_topic(slot, settings.WEBINAR_TOPIC)
        try:
            meeting = await zoom.create_meeting(
                topic=topic,
                meeting_date=slot.date,
                duration_minutes=settings.MEETING_DURATION_MINUTES,
            )
        except UpstreamError as exc:
            logger.warning("Could not create meeting for %s: %s", slot.date.isoformat(), exc)
            results.append(
                SlotOutcome(
                    date=slot.date,
                    action=SlotAction.FAILED,
                    topic=topic,
                    error=exc.status_text,
                )
            )
            continue

        results.append(
            SlotOutcome(
                date=slot.date,
                action=SlotAction.CREATED,
                topic=topic,
                meeting_id=meeting.id,
            )
        )

    summary = WeeklyScheduleSummary(
        reference_date=local_date(now, settings.MEETING_TIMEZONE),
        results=results,
    )
    logger.info(
        "Weekly scheduling run: %d slot(s), %d created, %d failed",
        len(results),
        summary.created_count,
        summary.failed_count,
    )
    return summary
