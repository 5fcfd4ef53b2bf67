# webinar_manager/services/registration.py
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from webinar_manager.core.config import get_settings
from webinar_manager.core.errors import ConfigurationError, UpstreamError, ValidationError
from webinar_manager.schemas.registration import (
    MeetingReference,
    Registrant,
    RegistrationRequest,
    RegistrationResult,
    StepFailure,
)
from webinar_manager.services.hubspot_client import HubSpotClient
from webinar_manager.services.slots import format_slot_label, local_date

logger = logging.getLogger(__name__)


def registrant_from_request(payload: RegistrationRequest) -> Registrant:
    """
    Map the public page's payload onto a Registrant.

    Missing values become blanks here and are rejected by the upsert.
    """
    return Registrant(
        first_name=(payload.first_name or "").strip(),
        last_name=(payload.last_name or "").strip(),
        email=(payload.email or "").strip(),
        company=payload.company or None,
        role=payload.role or None,
        meeting=MeetingReference(
            id=payload.meeting_id,
            date_label=payload.meeting_date,
            start_time=payload.meeting_start_time,
            topic=payload.meeting_topic,
            join_url=payload.join_url,
        ),
    )


def _missing_fields(registrant: Registrant) -> List[str]:
    missing = []
    if not registrant.first_name:
        missing.append("firstName")
    if not registrant.last_name:
        missing.append("lastName")
    if not registrant.email:
        missing.append("email")
    if registrant.meeting.id in (None, ""):
        missing.append("meetingId")
    return missing


class RegistrationService:
    """
    Find-or-create a HubSpot contact for a webinar registrant.

    Steps
    -----
    1) Marketing-form submission (optional, best-effort).
    2) Contact search by email (fatal on failure).
    3) Patch the existing contact or create a new one (fatal on failure).
    4) Registration note on the contact (best-effort).

    Best-effort failures are logged and returned as diagnostics; the contact
    record is what the upsert guarantees.
    """

    def __init__(
        self,
        settings: Any = None,
        hubspot: Optional[HubSpotClient] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._hubspot = hubspot
        self._clock = clock or (lambda: datetime.now(tz=timezone.utc))

    def _require_configuration(self) -> HubSpotClient:
        s = self._settings
        if not s.HUBSPOT_PRIVATE_APP_TOKEN:
            raise ConfigurationError("HUBSPOT_PRIVATE_APP_TOKEN must be configured.")
        if s.HUBSPOT_FORM_SUBMISSION_ENABLED and not (s.HUBSPOT_PORTAL_ID and s.HUBSPOT_FORM_ID):
            raise ConfigurationError(
                "HUBSPOT_PORTAL_ID and HUBSPOT_FORM_ID must be configured when form "
                "submission is enabled."
            )

        if self._hubspot is None:
            self._hubspot = HubSpotClient(
                private_token=s.HUBSPOT_PRIVATE_APP_TOKEN,
                portal_id=s.HUBSPOT_PORTAL_ID,
                form_id=s.HUBSPOT_FORM_ID,
                api_base_url=s.HUBSPOT_API_BASE_URL,
                forms_base_url=s.HUBSPOT_FORMS_BASE_URL,
                timeout_seconds=s.HTTP_TIMEOUT_SECONDS,
            )
        return self._hubspot

    def _webinar_date(self, registrant: Registrant) -> Optional[str]:
        start = registrant.meeting.start_time
        if start is None:
            return None
        if start.tzinfo is None:
            start = start.replace(tzinfo=timezone.utc)
        return local_date(start, self._settings.MEETING_TIMEZONE).isoformat()

    def _contact_properties(self, registrant: Registrant) -> Dict[str, str]:
        properties = {
            "firstname": registrant.first_name,
            "lastname": registrant.last_name,
        }
        if registrant.company:
            properties["company"] = registrant.company
        if registrant.role:
            properties["type_mktg"] = registrant.role

        # Drives HubSpot workflow triggers (YYYY-MM-DD).
        webinar_date = self._webinar_date(registrant)
        if webinar_date:
            properties["webinar_date"] = webinar_date
        return properties

    def build_note_body(self, registrant: Registrant) -> str:
        meeting = registrant.meeting
        date_text = meeting.date_label
        if not date_text and meeting.start_time is not None:
            start = meeting.start_time
            if start.tzinfo is None:
                start = start.replace(tzinfo=timezone.utc)
            date_text = format_slot_label(local_date(start, self._settings.MEETING_TIMEZONE))

        return "\n".join(
            [
                f"Registered for {self._settings.WEBINAR_TOPIC}",
                f"Date: {date_text or 'unknown'}",
                f"Topic: {meeting.topic or ''}",
                f"Join URL: {meeting.join_url or ''}",
                f"Meeting ID: {meeting.id}",
            ]
        )

    async def _submit_form(self, hubspot: HubSpotClient, registrant: Registrant) -> None:
        fields = {
            "firstname": registrant.first_name,
            "lastname": registrant.last_name,
            "email": registrant.email,
        }
        if registrant.company:
            fields["company"] = registrant.company
        if registrant.role:
            fields["type_mktg"] = registrant.role

        await hubspot.submit_form(
            fields,
            page_uri=self._settings.REGISTRATION_PAGE_URI,
            page_name=self._settings.REGISTRATION_PAGE_NAME,
        )

    async def upsert(self, registrant: Registrant) -> RegistrationResult:
        """
        Create or update the CRM contact for `registrant`, keyed on email.

        Raises
        ------
        ValidationError
            First name, last name, email or meeting id is missing.
        ConfigurationError
            HubSpot credentials are not configured.
        UpstreamError
            The contact search, create or patch call failed.
        """
        missing = _missing_fields(registrant)
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

        hubspot = self._require_configuration()
        diagnostics: List[StepFailure] = []

        if self._settings.HUBSPOT_FORM_SUBMISSION_ENABLED:
            try:
                await self._submit_form(hubspot, registrant)
            except UpstreamError as exc:
                logger.warning("HubSpot form submission failed, continuing: %s", exc)
                diagnostics.append(StepFailure(step="form_submission", status_text=exc.status_text))

        properties = self._contact_properties(registrant)
        contact_id = await hubspot.find_contact_id_by_email(registrant.email)
        created = contact_id is None

        if contact_id is not None:
            await hubspot.update_contact(contact_id, properties)
            logger.info("Updated HubSpot contact %s for registration", contact_id)
        else:
            contact_id = await hubspot.create_contact({"email": registrant.email, **properties})
            logger.info("Created HubSpot contact %s for registration", contact_id)

        try:
            await hubspot.create_contact_note(
                contact_id,
                self.build_note_body(registrant),
                timestamp=self._clock(),
            )
        except UpstreamError as exc:
            logger.warning("HubSpot note creation failed for contact %s: %s", contact_id, exc)
            diagnostics.append(StepFailure(step="note", status_text=exc.status_text))

        return RegistrationResult(
            contact_id=contact_id,
            join_url=registrant.meeting.join_url,
            created=created,
            diagnostics=diagnostics,
        )
