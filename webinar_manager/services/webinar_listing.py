# webinar_manager/services/webinar_listing.py
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Iterable, List
from urllib.parse import quote
from zoneinfo import ZoneInfo

from webinar_manager.schemas.meeting import ExternalMeeting
from webinar_manager.schemas.registration import WebinarListing
from webinar_manager.services.slots import format_slot_label

# Calendar invites always block one hour, whatever the Zoom duration.
CALENDAR_EVENT_LENGTH = timedelta(hours=1)


def _as_utc(instant: datetime) -> datetime:
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc)


def format_time_label(instant: datetime, tz_name: str) -> str:
    """
    e.g. "2:00 PM EST"
    """
    local = _as_utc(instant).astimezone(ZoneInfo(tz_name))
    hour = local.hour % 12 or 12
    meridiem = "AM" if local.hour < 12 else "PM"
    return f"{hour}:{local.minute:02d} {meridiem} {local.tzname()}"


def google_calendar_url(meeting: ExternalMeeting) -> str:
    """
    Build an "add to Google Calendar" link for `meeting`.
    """
    start = _as_utc(meeting.start_time)
    end = start + CALENDAR_EVENT_LENGTH
    dates = f"{start:%Y%m%dT%H%M%SZ}/{end:%Y%m%dT%H%M%SZ}"
    join_url = meeting.join_url or ""

    return (
        "https://calendar.google.com/calendar/render?action=TEMPLATE"
        f"&text={quote(meeting.topic, safe='')}"
        f"&dates={dates}"
        f"&details={quote(f'Join URL: {join_url}', safe='')}"
        f"&location={quote(join_url, safe='')}"
    )


def list_upcoming_webinars(
    meetings: Iterable[ExternalMeeting],
    now: datetime,
    topic_keyword: str,
    tz_name: str,
    limit: int = 3,
) -> List[WebinarListing]:
    """
    Select the webinars a visitor can still register for.

    Keeps meetings starting after `now` whose topic contains `topic_keyword`
    (case-insensitive), soonest first, at most `limit` of them.
    """
    keyword = topic_keyword.lower()
    now_utc = _as_utc(now)
    zone = ZoneInfo(tz_name)

    upcoming = sorted(
        (
            m
            for m in meetings
            if _as_utc(m.start_time) > now_utc and keyword in m.topic.lower()
        ),
        key=lambda m: _as_utc(m.start_time),
    )

    listings: List[WebinarListing] = []
    for meeting in upcoming[: max(limit, 0)]:
        local_day = _as_utc(meeting.start_time).astimezone(zone).date()
        listings.append(
            WebinarListing(
                meeting_id=meeting.id,
                topic=meeting.topic,
                start_time=meeting.start_time,
                date_label=format_slot_label(local_day),
                time_label=format_time_label(meeting.start_time, tz_name),
                join_url=meeting.join_url,
                google_calendar_url=google_calendar_url(meeting),
            )
        )
    return listings
