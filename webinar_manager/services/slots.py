# webinar_manager/services/slots.py
from __future__ import annotations

from datetime import date as date_type, datetime, timedelta
from typing import List
from zoneinfo import ZoneInfo

from webinar_manager.schemas.slot import Slot

WEDNESDAY = 2
DEFAULT_TIMEZONE = "America/New_York"


def local_date(instant: datetime, tz_name: str = DEFAULT_TIMEZONE) -> date_type:
    """
    Calendar date of `instant` as observed in `tz_name`.

    Naive datetimes are assumed to already be local wall-clock time.
    """
    if instant.tzinfo is None:
        return instant.date()
    return instant.astimezone(ZoneInfo(tz_name)).date()


def format_slot_label(day: date_type) -> str:
    """
    e.g. "Wednesday, January 15, 2025"
    """
    return f"{day:%A}, {day:%B} {day.day}, {day.year}"


def compute_slots(
    count: int,
    reference: datetime,
    weekday: int = WEDNESDAY,
    tz_name: str = DEFAULT_TIMEZONE,
) -> List[Slot]:
    """
    Compute the next `count` weekly slots on `weekday`, starting from the
    local date of `reference`.

    Rules
    -----
    - The reference instant is converted to `tz_name` and truncated to its
      calendar date.
    - If that date already falls on `weekday`, it is the first slot.
    - Subsequent slots are exactly 7 days apart.

    Pure and total: identical inputs always give identical output, and a
    non-positive `count` returns an empty list.
    """
    start = local_date(reference, tz_name)
    first = start + timedelta(days=(weekday - start.weekday()) % 7)

    slots: List[Slot] = []
    for i in range(max(count, 0)):
        day = first + timedelta(weeks=i)
        slots.append(Slot(date=day, label=format_slot_label(day)))
    return slots
