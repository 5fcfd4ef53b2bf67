# webinar_manager/services/hubspot_client.py
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

import httpx

from webinar_manager.core.errors import UpstreamError, status_text_for

logger = logging.getLogger(__name__)

# HubSpot-defined association type for note -> contact.
NOTE_TO_CONTACT_ASSOCIATION_TYPE = 202


class HubSpotClient:
    """
    Minimal HubSpot client covering the calls the registration flow needs.

    - CRM v3 contacts: search by email, create, patch.
    - CRM v3 notes: create with a contact association.
    - Forms v3: unauthenticated marketing-form submission.

    Non-2xx responses, transport failures and unreadable bodies raise
    UpstreamError; the response body is logged only.
    """

    def __init__(
        self,
        private_token: str,
        portal_id: Optional[str] = None,
        form_id: Optional[str] = None,
        api_base_url: str = "https://api.hubapi.com",
        forms_base_url: str = "https://api.hsforms.com",
        timeout_seconds: float = 10.0,
    ) -> None:
        self._private_token = private_token
        self._portal_id = portal_id
        self._form_id = form_id
        self._api_base_url = api_base_url.rstrip("/")
        self._forms_base_url = forms_base_url.rstrip("/")
        self._timeout_seconds = timeout_seconds

    async def _request(
        self,
        method: str,
        url: str,
        operation: str,
        *,
        json: Any = None,
        authenticated: bool = True,
    ) -> httpx.Response:
        headers = {"Content-Type": "application/json"}
        if authenticated:
            headers["Authorization"] = f"Bearer {self._private_token}"

        try:
            async with httpx.AsyncClient(timeout=self._timeout_seconds) as client:
                resp = await client.request(method=method, url=url, headers=headers, json=json)
        except httpx.HTTPError as exc:
            logger.error("HubSpot %s could not reach %s: %s", operation, url, exc)
            raise UpstreamError(operation, "network error") from exc

        if resp.status_code // 100 != 2:
            logger.error(
                "HubSpot %s failed (status=%s): %s", operation, resp.status_code, resp.text
            )
            raise UpstreamError(operation, status_text_for(resp.status_code))
        return resp

    @staticmethod
    def _decode(resp: httpx.Response, operation: str) -> Dict[str, Any]:
        try:
            payload = resp.json()
        except ValueError:
            payload = None
        if not isinstance(payload, dict):
            logger.error("HubSpot %s returned an unreadable body: %s", operation, resp.text)
            raise UpstreamError(operation, "invalid response")
        return payload

    @staticmethod
    def _object_id(payload: Dict[str, Any], operation: str) -> str:
        object_id = payload.get("id")
        if object_id in (None, ""):
            logger.error("HubSpot %s response carried no id: %s", operation, payload)
            raise UpstreamError(operation, "invalid response")
        return str(object_id)

    async def submit_form(
        self,
        fields: Dict[str, str],
        page_uri: str,
        page_name: str,
    ) -> None:
        """
        Record a marketing-form submission for the given field values.
        """
        url = (
            f"{self._forms_base_url}/submissions/v3/integration/submit/"
            f"{self._portal_id}/{self._form_id}"
        )
        body = {
            "fields": [{"name": name, "value": value} for name, value in fields.items()],
            "context": {"pageUri": page_uri, "pageName": page_name},
        }
        await self._request("POST", url, "form submission", json=body, authenticated=False)

    async def find_contact_id_by_email(self, email: str) -> Optional[str]:
        """
        Return the id of the contact whose email equals `email`, if any.

        Matching semantics (case-sensitivity) are HubSpot's.
        """
        body = {
            "filterGroups": [
                {"filters": [{"propertyName": "email", "operator": "EQ", "value": email}]}
            ],
            "properties": ["email", "firstname", "lastname"],
            "limit": 1,
        }
        resp = await self._request(
            "POST",
            f"{self._api_base_url}/crm/v3/objects/contacts/search",
            "contact search",
            json=body,
        )
        results: List[Any] = self._decode(resp, "contact search").get("results") or []
        if not results:
            return None
        if not isinstance(results[0], dict):
            logger.error("HubSpot contact search returned a malformed result: %s", results[0])
            raise UpstreamError("contact search", "invalid response")
        return self._object_id(results[0], "contact search")

    async def create_contact(self, properties: Dict[str, str]) -> str:
        resp = await self._request(
            "POST",
            f"{self._api_base_url}/crm/v3/objects/contacts",
            "contact create",
            json={"properties": properties},
        )
        return self._object_id(self._decode(resp, "contact create"), "contact create")

    async def update_contact(self, contact_id: str, properties: Dict[str, str]) -> None:
        await self._request(
            "PATCH",
            f"{self._api_base_url}/crm/v3/objects/contacts/{contact_id}",
            "contact update",
            json={"properties": properties},
        )

    async def create_contact_note(
        self,
        contact_id: str,
        body: str,
        timestamp: datetime,
    ) -> str:
        payload = {
            "properties": {
                "hs_note_body": body,
                "hs_timestamp": timestamp.isoformat(),
            },
            "associations": [
                {
                    "to": {"id": contact_id},
                    "types": [
                        {
                            "associationCategory": "HUBSPOT_DEFINED",
                            "associationTypeId": NOTE_TO_CONTACT_ASSOCIATION_TYPE,
                        }
                    ],
                }
            ],
        }
        resp = await self._request(
            "POST",
            f"{self._api_base_url}/crm/v3/objects/notes",
            "note create",
            json=payload,
        )
        return self._object_id(self._decode(resp, "note create"), "note create")
