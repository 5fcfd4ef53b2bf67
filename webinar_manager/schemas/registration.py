# webinar_manager/schemas/registration.py
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    """
    The registration page posts camelCase JSON; accept either spelling.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MeetingReference(BaseModel):
    """
    The meeting a registrant signed up for, as displayed on the public page.

    Only `id` is required (checked by the registration service); the
    remaining fields feed the CRM note.
    """

    id: int | str | None = None
    date_label: str | None = None
    start_time: datetime | None = None
    topic: str | None = None
    join_url: str | None = None


class Registrant(BaseModel):
    """
    A single registration submission. Constructed per request, never stored.
    """

    first_name: str = ""
    last_name: str = ""
    email: str = ""
    company: str | None = None
    role: str | None = None
    meeting: MeetingReference


class RegistrationRequest(_CamelModel):
    """
    Payload accepted by POST /api/hubspot/register.

    Required fields are checked by the registration service rather than by
    pydantic so the caller gets a 400 naming the problem.
    """

    first_name: str | None = Field(None, examples=["Ada"])
    last_name: str | None = Field(None, examples=["Lovelace"])
    email: str | None = Field(None, examples=["ada@example.com"])
    company: str | None = None
    role: str | None = None
    meeting_id: int | str | None = Field(None, examples=[84512345678])
    meeting_date: str | None = Field(None, examples=["Wednesday, January 15, 2025"])
    meeting_start_time: datetime | None = Field(None, examples=["2025-01-15T19:00:00Z"])
    meeting_topic: str | None = None
    join_url: str | None = None


class StepFailure(BaseModel):
    """
    A best-effort sub-step that failed without failing the registration.
    """

    step: str = Field(..., examples=["note"])
    status_text: str = Field(..., examples=["502 Bad Gateway"])


class RegistrationResult(BaseModel):
    contact_id: str
    join_url: str | None = None
    created: bool = Field(False, description="True when a new CRM contact was created.")
    diagnostics: list[StepFailure] = Field(default_factory=list)


class RegistrationResponse(_CamelModel):
    success: bool = True
    contact_id: str
    join_url: str | None = None
    diagnostics: list[StepFailure] = Field(default_factory=list)


class WebinarListing(_CamelModel):
    """
    One upcoming webinar as shown on the public registration page.
    """

    meeting_id: int | str
    topic: str
    start_time: datetime
    date_label: str = Field(..., examples=["Wednesday, January 15, 2025"])
    time_label: str = Field(..., examples=["2:00 PM EST"])
    join_url: str | None = None
    google_calendar_url: str
