# webinar_manager/schemas/schedule.py
from datetime import date as date_type
from enum import Enum

from pydantic import BaseModel, Field


class SlotAction(str, Enum):
    """
    Outcome of one slot during a weekly scheduling run.
    """

    CREATED = "created"
    SKIPPED = "skipped"
    FAILED = "failed"


class SlotOutcome(BaseModel):
    date: date_type = Field(..., examples=["2025-01-15"])
    action: SlotAction = Field(..., examples=["created"])
    topic: str | None = Field(None, description="Topic of the created meeting.")
    meeting_id: int | str | None = Field(
        None,
        description="Meeting created for the slot, or the one that already covered it.",
    )
    error: str | None = Field(None, description="Upstream status text when creation failed.")


class WeeklyScheduleSummary(BaseModel):
    """
    Payload returned by the scheduled trigger endpoint.
    """

    success: bool = Field(
        True,
        description="True once every slot has been processed, even if some creations failed.",
    )
    reference_date: date_type = Field(..., description="Local date the slots were computed from.")
    results: list[SlotOutcome] = Field(default_factory=list)

    @property
    def created_count(self) -> int:
        return sum(1 for r in self.results if r.action == SlotAction.CREATED)

    @property
    def failed_count(self) -> int:
        return sum(1 for r in self.results if r.action == SlotAction.FAILED)
