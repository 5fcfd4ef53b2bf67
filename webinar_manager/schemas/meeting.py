# webinar_manager/schemas/meeting.py
from datetime import date as date_type, datetime

from pydantic import BaseModel, ConfigDict, Field


class ExternalMeeting(BaseModel):
    """
    A meeting as owned and persisted by Zoom.

    Only the fields this service reads are declared; everything else in the
    Zoom payload is ignored. Instances are rebuilt from the provider on every
    read and never stored locally.
    """

    model_config = ConfigDict(extra="ignore")

    id: int | str = Field(..., description="Zoom meeting identifier.", examples=[84512345678])
    topic: str = Field("", description="Free-text meeting topic.")
    start_time: datetime = Field(
        ...,
        description="Absolute start instant as reported by Zoom (ISO 8601 with offset).",
        examples=["2025-01-15T19:00:00Z"],
    )
    duration: int = Field(60, description="Scheduled duration in minutes.")
    join_url: str | None = Field(None, description="Participant join link.")
    password: str | None = Field(None, description="Meeting passcode, if any.")
    agenda: str | None = Field(None, description="Optional agenda text.")
    timezone: str | None = Field(None, description="Zoom-side display timezone.")


class MeetingCreate(BaseModel):
    """
    Payload accepted by POST /api/zoom/meetings.

    Topic and date are validated by the handler so that a missing value is
    reported as a 400, matching the rest of the API.
    """

    topic: str | None = Field(None, examples=["Nekst Tips & Tricks Webinar"])
    date: date_type | None = Field(None, examples=["2025-01-15"])
    duration: int | None = Field(None, gt=0, description="Minutes; defaults to the configured duration.")
    agenda: str | None = None


class MeetingUpdate(BaseModel):
    """
    Payload accepted by PATCH /api/zoom/meetings/{meeting_id}.
    """

    topic: str | None = None
    agenda: str | None = None


class OperationAck(BaseModel):
    success: bool = True
