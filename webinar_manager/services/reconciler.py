# webinar_manager/services/reconciler.py
from __future__ import annotations

from datetime import date as date_type, timezone
from typing import Dict, Iterable, List, Sequence

from webinar_manager.schemas.meeting import ExternalMeeting
from webinar_manager.schemas.slot import Slot, SlotReconciliation
from webinar_manager.services.slots import DEFAULT_TIMEZONE, local_date


def meeting_local_date(meeting: ExternalMeeting, tz_name: str = DEFAULT_TIMEZONE) -> date_type:
    """
    Date on which `meeting` starts, as observed in `tz_name`.

    Zoom reports absolute instants; a naive value is treated as UTC. The
    comparison key must be the local date, since a meeting shortly after
    midnight UTC belongs to the previous evening in the Americas.
    """
    start = meeting.start_time
    if start.tzinfo is None:
        start = start.replace(tzinfo=timezone.utc)
    return local_date(start, tz_name)


def index_meetings_by_local_date(
    meetings: Iterable[ExternalMeeting],
    tz_name: str = DEFAULT_TIMEZONE,
) -> Dict[date_type, ExternalMeeting]:
    """
    Build a local-date -> meeting lookup.

    When several meetings share a local date the first one in provider
    listing order is kept.
    """
    lookup: Dict[date_type, ExternalMeeting] = {}
    for meeting in meetings:
        lookup.setdefault(meeting_local_date(meeting, tz_name), meeting)
    return lookup


def reconcile(
    slots: Sequence[Slot],
    meetings: Iterable[ExternalMeeting],
    tz_name: str = DEFAULT_TIMEZONE,
) -> List[SlotReconciliation]:
    """
    Pair every slot with the meeting already scheduled on its local date.

    Slots whose date has no meeting are returned with `meeting=None`; those
    are the candidates for creation. Output order follows `slots`.
    """
    lookup = index_meetings_by_local_date(meetings, tz_name)
    return [SlotReconciliation(slot=slot, meeting=lookup.get(slot.date)) for slot in slots]
