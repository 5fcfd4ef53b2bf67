# tests/test_registration_service.py
from datetime import datetime, timezone

import httpx
import pytest

from tests.fakes import FakeResponse
from webinar_manager.core.errors import ConfigurationError, UpstreamError, ValidationError
from webinar_manager.schemas.registration import MeetingReference, Registrant, RegistrationRequest
from webinar_manager.services.hubspot_client import HubSpotClient
from webinar_manager.services.registration import RegistrationService, registrant_from_request


class DummySettings:
    HUBSPOT_PRIVATE_APP_TOKEN = "pat-123"
    HUBSPOT_PORTAL_ID = "portal-1"
    HUBSPOT_FORM_ID = "form-1"
    HUBSPOT_FORM_SUBMISSION_ENABLED = True
    HUBSPOT_API_BASE_URL = "https://api.hubapi.com"
    HUBSPOT_FORMS_BASE_URL = "https://api.hsforms.com"
    HTTP_TIMEOUT_SECONDS = 5.0
    REGISTRATION_PAGE_URI = "https://webinar.example.com/register"
    REGISTRATION_PAGE_NAME = "Webinar Registration"
    MEETING_TIMEZONE = "America/New_York"
    WEBINAR_TOPIC = "Nekst Tips & Tricks Webinar"


class FakeHubSpot:
    """
    Records every call; individual steps can be made to fail.
    """

    def __init__(self, existing_contacts=None, failing=()):
        self.contacts = dict(existing_contacts or {})  # email -> id
        self.failing = set(failing)
        self.calls = []

    def _maybe_fail(self, step, operation):
        if step in self.failing:
            raise UpstreamError(operation, "500 Internal Server Error")

    async def submit_form(self, fields, page_uri, page_name):
        self.calls.append(("form", fields))
        self._maybe_fail("form", "form submission")

    async def find_contact_id_by_email(self, email):
        self.calls.append(("search", email))
        self._maybe_fail("search", "contact search")
        return self.contacts.get(email)

    async def create_contact(self, properties):
        self.calls.append(("create", properties))
        self._maybe_fail("create", "contact create")
        new_id = str(900 + len(self.contacts))
        self.contacts[properties["email"]] = new_id
        return new_id

    async def update_contact(self, contact_id, properties):
        self.calls.append(("update", contact_id, properties))
        self._maybe_fail("update", "contact update")

    async def create_contact_note(self, contact_id, body, timestamp):
        self.calls.append(("note", contact_id, body))
        self._maybe_fail("note", "note create")
        return "note-1"

    def steps(self):
        return [c[0] for c in self.calls]


def _registrant(**overrides) -> Registrant:
    values = {
        "first_name": "Ada",
        "last_name": "Lovelace",
        "email": "ada@example.com",
        "company": "Analytical Engines",
        "role": "Agent",
        "meeting": MeetingReference(
            id=84512345678,
            date_label="Wednesday, January 15, 2025",
            start_time=datetime(2025, 1, 16, 2, 0, tzinfo=timezone.utc),
            topic="Nekst Tips & Tricks Webinar",
            join_url="https://zoom.us/j/84512345678",
        ),
    }
    values.update(overrides)
    return Registrant(**values)


def _service(hubspot, settings=None) -> RegistrationService:
    return RegistrationService(settings=settings or DummySettings(), hubspot=hubspot)


@pytest.mark.asyncio
async def test_existing_email_patches_contact_instead_of_creating():
    hubspot = FakeHubSpot(existing_contacts={"ada@example.com": "501"})

    result = await _service(hubspot).upsert(_registrant())

    assert result.contact_id == "501"
    assert result.created is False
    assert "create" not in hubspot.steps()
    update = next(c for c in hubspot.calls if c[0] == "update")
    assert update[1] == "501"
    assert update[2]["firstname"] == "Ada"
    assert update[2]["company"] == "Analytical Engines"
    assert update[2]["type_mktg"] == "Agent"


@pytest.mark.asyncio
async def test_unknown_email_creates_contact_with_email():
    hubspot = FakeHubSpot()

    result = await _service(hubspot).upsert(_registrant())

    assert result.created is True
    assert result.join_url == "https://zoom.us/j/84512345678"
    create = next(c for c in hubspot.calls if c[0] == "create")
    assert create[1]["email"] == "ada@example.com"
    assert create[1]["lastname"] == "Lovelace"
    assert hubspot.steps() == ["form", "search", "create", "note"]


@pytest.mark.asyncio
async def test_webinar_date_uses_meeting_timezone():
    hubspot = FakeHubSpot()

    await _service(hubspot).upsert(_registrant())

    create = next(c for c in hubspot.calls if c[0] == "create")
    # 02:00 UTC on the 16th is the evening of the 15th in New York.
    assert create[1]["webinar_date"] == "2025-01-15"


@pytest.mark.asyncio
async def test_note_failure_still_reports_success_with_diagnostic():
    hubspot = FakeHubSpot(existing_contacts={"ada@example.com": "501"}, failing={"note"})

    result = await _service(hubspot).upsert(_registrant())

    assert result.contact_id == "501"
    assert [d.step for d in result.diagnostics] == ["note"]
    assert result.diagnostics[0].status_text == "500 Internal Server Error"


@pytest.mark.asyncio
async def test_form_submission_failure_does_not_block_upsert():
    hubspot = FakeHubSpot(failing={"form"})

    result = await _service(hubspot).upsert(_registrant())

    assert result.created is True
    assert [d.step for d in result.diagnostics] == ["form_submission"]
    assert "note" in hubspot.steps()


@pytest.mark.asyncio
async def test_form_submission_can_be_disabled():
    settings = DummySettings()
    settings.HUBSPOT_FORM_SUBMISSION_ENABLED = False
    settings.HUBSPOT_PORTAL_ID = None
    settings.HUBSPOT_FORM_ID = None
    hubspot = FakeHubSpot()

    await _service(hubspot, settings).upsert(_registrant())

    assert "form" not in hubspot.steps()


@pytest.mark.asyncio
async def test_note_body_carries_meeting_details():
    hubspot = FakeHubSpot()

    await _service(hubspot).upsert(_registrant())

    body = next(c for c in hubspot.calls if c[0] == "note")[2]
    assert "Date: Wednesday, January 15, 2025" in body
    assert "Topic: Nekst Tips & Tricks Webinar" in body
    assert "Join URL: https://zoom.us/j/84512345678" in body
    assert "Meeting ID: 84512345678" in body


@pytest.mark.asyncio
@pytest.mark.parametrize("field", ["first_name", "last_name", "email"])
async def test_missing_required_field_raises_validation_error(field):
    hubspot = FakeHubSpot()

    with pytest.raises(ValidationError):
        await _service(hubspot).upsert(_registrant(**{field: ""}))

    assert hubspot.calls == []


@pytest.mark.asyncio
async def test_missing_meeting_id_raises_validation_error():
    hubspot = FakeHubSpot()

    with pytest.raises(ValidationError) as excinfo:
        await _service(hubspot).upsert(_registrant(meeting=MeetingReference()))

    assert "meetingId" in str(excinfo.value)


@pytest.mark.asyncio
async def test_missing_private_token_raises_configuration_error():
    settings = DummySettings()
    settings.HUBSPOT_PRIVATE_APP_TOKEN = None
    hubspot = FakeHubSpot()

    with pytest.raises(ConfigurationError):
        await _service(hubspot, settings).upsert(_registrant())

    assert hubspot.calls == []


@pytest.mark.asyncio
async def test_missing_form_ids_raise_configuration_error_when_form_enabled():
    settings = DummySettings()
    settings.HUBSPOT_FORM_ID = None

    with pytest.raises(ConfigurationError):
        await _service(FakeHubSpot(), settings).upsert(_registrant())


@pytest.mark.asyncio
async def test_contact_search_failure_is_fatal():
    hubspot = FakeHubSpot(failing={"search"})

    with pytest.raises(UpstreamError):
        await _service(hubspot).upsert(_registrant())

    assert "create" not in hubspot.steps()


def test_registrant_from_request_accepts_camel_case_payload():
    payload = RegistrationRequest.model_validate(
        {
            "firstName": " Ada ",
            "lastName": "Lovelace",
            "email": "ada@example.com",
            "meetingId": 84512345678,
            "meetingStartTime": "2025-01-15T19:00:00Z",
            "joinUrl": "https://zoom.us/j/84512345678",
        }
    )

    registrant = registrant_from_request(payload)

    assert registrant.first_name == "Ada"
    assert registrant.meeting.id == 84512345678
    assert registrant.meeting.join_url == "https://zoom.us/j/84512345678"
    assert registrant.company is None


def _hubspot_over_http() -> HubSpotClient:
    return HubSpotClient(private_token="pat-123", portal_id="portal-1", form_id="form-1")


@pytest.mark.asyncio
async def test_unreachable_forms_endpoint_does_not_block_upsert(fake_http):
    fake_http.add(
        "POST",
        "/submissions/v3/integration/submit/portal-1/form-1",
        httpx.ConnectError("forms endpoint unreachable"),
    )
    fake_http.add("POST", "/crm/v3/objects/contacts/search", FakeResponse(200, {"total": 0, "results": []}))
    fake_http.add("POST", "/crm/v3/objects/contacts", FakeResponse(201, {"id": "777"}))
    fake_http.add("POST", "/crm/v3/objects/notes", FakeResponse(201, {"id": "n-1"}))

    result = await _service(_hubspot_over_http()).upsert(_registrant())

    assert result.contact_id == "777"
    assert result.created is True
    assert [(d.step, d.status_text) for d in result.diagnostics] == [("form_submission", "network error")]


@pytest.mark.asyncio
async def test_note_timeout_still_returns_contact(fake_http):
    fake_http.add("POST", "/submissions/v3/integration/submit/portal-1/form-1", FakeResponse(200, {}))
    fake_http.add(
        "POST",
        "/crm/v3/objects/contacts/search",
        FakeResponse(200, {"total": 1, "results": [{"id": "501"}]}),
    )
    fake_http.add("PATCH", "/crm/v3/objects/contacts/501", FakeResponse(200, {"id": "501"}))
    fake_http.add("POST", "/crm/v3/objects/notes", httpx.ReadTimeout("timed out"))

    result = await _service(_hubspot_over_http()).upsert(_registrant())

    assert result.contact_id == "501"
    assert [(d.step, d.status_text) for d in result.diagnostics] == [("note", "network error")]
