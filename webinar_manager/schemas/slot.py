# webinar_manager/schemas/slot.py
from datetime import date as date_type

from pydantic import BaseModel, ConfigDict, Field

from webinar_manager.schemas.meeting import ExternalMeeting


class Slot(BaseModel):
    """
    One instance of the recurring webinar, identified by its local date.
    """

    model_config = ConfigDict(frozen=True)

    date: date_type = Field(..., description="Calendar date in the meeting timezone.", examples=["2025-01-15"])
    label: str = Field(..., description="Human-readable date.", examples=["Wednesday, January 15, 2025"])


class SlotReconciliation(BaseModel):
    """
    Pairing of a desired slot with the meeting already scheduled on that
    local date, or None when the slot is still unmet.
    """

    slot: Slot
    meeting: ExternalMeeting | None = None

    @property
    def is_scheduled(self) -> bool:
        return self.meeting is not None


class DashboardResponse(BaseModel):
    """
    Payload backing the admin dashboard: upcoming slots and their meetings.
    """

    timezone: str = Field(..., examples=["America/New_York"])
    start_hour: int = Field(..., description="Local wall-clock start hour.", examples=[14])
    slots: list[SlotReconciliation]
