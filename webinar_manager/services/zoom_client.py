# webinar_manager/services/zoom_client.py
from __future__ import annotations

import base64
import logging
from dataclasses import dataclass
from datetime import date as date_type, datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional

import httpx
from pydantic import ValidationError as PydanticValidationError

from webinar_manager.core.config import get_settings
from webinar_manager.core.errors import (
    ConfigurationError,
    UpstreamAuthError,
    UpstreamError,
    status_text_for,
)
from webinar_manager.schemas.meeting import ExternalMeeting

logger = logging.getLogger(__name__)

# A cached token is never handed out inside this window before its expiry.
TOKEN_REFRESH_MARGIN = timedelta(seconds=60)

# Zoom caps page_size at 300 for the meeting list endpoint.
LIST_PAGE_SIZE = 300

DEFAULT_MEETING_SETTINGS: Dict[str, Any] = {
    "host_video": True,
    "participant_video": False,
    "join_before_host": False,
    "mute_upon_entry": True,
    "waiting_room": True,
    "approval_type": 2,  # no registration required
    "audio": "both",
    "auto_recording": "none",
}


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


@dataclass
class _TokenState:
    access_token: str
    expires_at: datetime


class ZoomTokenCache:
    """
    Single-slot, process-wide cache for the Zoom server-to-server OAuth token.

    Responsibilities
    ----------------
    - Exchange the account credentials for a bearer token.
    - Hand out the cached token until it is within 60 seconds of expiry.
    - Allow callers to drop the token explicitly via `invalidate()`.

    Notes
    -----
    - There is exactly one provider identity, so one token serves every request.
    - No lock guards the refresh path. Two concurrent refreshes both produce a
      valid token and the last writer wins.
    """

    def __init__(
        self,
        account_id: Optional[str],
        client_id: Optional[str],
        client_secret: Optional[str],
        oauth_url: str = "https://zoom.us/oauth/token",
        timeout_seconds: float = 10.0,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._account_id = account_id
        self._client_id = client_id
        self._client_secret = client_secret
        self._oauth_url = oauth_url
        self._timeout_seconds = timeout_seconds
        self._clock = clock or _utcnow

        self._token_state: Optional[_TokenState] = None

    @property
    def is_configured(self) -> bool:
        return bool(self._account_id and self._client_id and self._client_secret)

    def _basic_credentials(self) -> str:
        raw = f"{self._client_id}:{self._client_secret}".encode("utf-8")
        return base64.b64encode(raw).decode("ascii")

    async def _fetch_token(self) -> _TokenState:
        """
        Perform the account-credentials exchange against Zoom's OAuth endpoint.
        """
        params = {
            "grant_type": "account_credentials",
            "account_id": self._account_id,
        }
        headers = {
            "Authorization": f"Basic {self._basic_credentials()}",
            "Content-Type": "application/x-www-form-urlencoded",
        }

        try:
            async with httpx.AsyncClient(timeout=self._timeout_seconds) as client:
                resp = await client.post(self._oauth_url, params=params, headers=headers)
        except httpx.HTTPError as exc:
            logger.error("Zoom token exchange could not reach %s: %s", self._oauth_url, exc)
            raise UpstreamAuthError("token exchange", "network error") from exc

        if resp.status_code != 200:
            logger.error(
                "Zoom token exchange rejected (status=%s): %s", resp.status_code, resp.text
            )
            raise UpstreamAuthError("token exchange", status_text_for(resp.status_code))

        try:
            payload = resp.json()
        except ValueError:
            payload = None
        if not isinstance(payload, dict):
            payload = {}
        access_token = payload.get("access_token")
        expires_in = payload.get("expires_in")

        if not access_token or not isinstance(expires_in, (int, float)):
            logger.error("Zoom token response missing access_token/expires_in")
            raise UpstreamAuthError("token exchange", "invalid token response")

        expires_at = self._clock() + timedelta(seconds=float(expires_in))
        logger.info("Obtained Zoom access token valid until %s", expires_at.isoformat())
        return _TokenState(access_token=access_token, expires_at=expires_at)

    async def get_token(self) -> str:
        """
        Return a bearer token, exchanging credentials only when needed.

        Raises ConfigurationError before any network call when a credential
        is missing.
        """
        if not self.is_configured:
            raise ConfigurationError(
                "ZOOM_ACCOUNT_ID, ZOOM_CLIENT_ID and ZOOM_CLIENT_SECRET must be configured."
            )

        state = self._token_state
        if state is not None and self._clock() < state.expires_at - TOKEN_REFRESH_MARGIN:
            return state.access_token

        self._token_state = await self._fetch_token()
        return self._token_state.access_token

    def invalidate(self) -> None:
        self._token_state = None


class ZoomClient:
    """
    Thin gateway over the Zoom meetings API.

    Every operation takes its bearer token from the shared ZoomTokenCache,
    issues exactly one HTTP call per page and maps any non-2xx status,
    transport failure or unreadable body to UpstreamError. Nothing is retried.
    """

    def __init__(
        self,
        token_cache: ZoomTokenCache,
        base_url: str = "https://api.zoom.us/v2",
        timeout_seconds: float = 10.0,
        meeting_timezone: str = "America/New_York",
        start_hour: int = 14,
        default_duration_minutes: int = 60,
    ) -> None:
        self._tokens = token_cache
        self._base_url = base_url.rstrip("/")
        self._timeout_seconds = timeout_seconds
        self.meeting_timezone = meeting_timezone
        self.start_hour = start_hour
        self.default_duration_minutes = default_duration_minutes

    async def _request(
        self,
        method: str,
        path: str,
        operation: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
    ) -> httpx.Response:
        """
        Issue one authenticated call and raise UpstreamError on non-2xx.
        """
        token = await self._tokens.get_token()
        url = f"{self._base_url}/{path.lstrip('/')}"

        headers = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/json",
        }

        try:
            async with httpx.AsyncClient(timeout=self._timeout_seconds) as client:
                resp = await client.request(
                    method=method.upper(),
                    url=url,
                    headers=headers,
                    params=params,
                    json=json,
                )
        except httpx.HTTPError as exc:
            logger.error("Zoom %s could not reach %s: %s", operation, url, exc)
            raise UpstreamError(operation, "network error") from exc

        if resp.status_code == 401:
            # Token revoked or rotated upstream; force a fresh exchange next time.
            self._tokens.invalidate()

        if resp.status_code // 100 != 2:
            logger.error(
                "Zoom %s failed (status=%s): %s", operation, resp.status_code, resp.text
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
            logger.error("Zoom %s returned an unreadable body: %s", operation, resp.text)
            raise UpstreamError(operation, "invalid response")
        return payload

    @staticmethod
    def _meeting(data: Any, operation: str) -> ExternalMeeting:
        try:
            return ExternalMeeting.model_validate(data)
        except PydanticValidationError as exc:
            logger.error("Zoom %s returned a malformed meeting: %s", operation, exc)
            raise UpstreamError(operation, "invalid response") from exc

    async def list_meetings(self) -> List[ExternalMeeting]:
        """
        Return every upcoming scheduled meeting of the account owner.
        """
        meetings: List[ExternalMeeting] = []
        params: Dict[str, Any] = {"type": "scheduled", "page_size": LIST_PAGE_SIZE}

        while True:
            resp = await self._request("GET", "/users/me/meetings", "list meetings", params=params)
            payload = self._decode(resp, "list meetings")
            meetings.extend(
                self._meeting(m, "list meetings") for m in payload.get("meetings") or []
            )

            next_token = payload.get("next_page_token")
            if not next_token:
                break
            params = {**params, "next_page_token": next_token}

        return meetings

    async def create_meeting(
        self,
        topic: str,
        meeting_date: date_type,
        duration_minutes: Optional[int] = None,
        agenda: Optional[str] = None,
    ) -> ExternalMeeting:
        """
        Schedule a meeting on `meeting_date` at the configured wall-clock hour.

        The start time is sent without an offset together with the named
        timezone, so Zoom resolves the absolute instant (and DST) itself.
        """
        payload = {
            "topic": topic,
            "type": 2,  # scheduled meeting
            "start_time": f"{meeting_date.isoformat()}T{self.start_hour:02d}:00:00",
            "duration": duration_minutes or self.default_duration_minutes,
            "timezone": self.meeting_timezone,
            "agenda": agenda or "",
            "settings": dict(DEFAULT_MEETING_SETTINGS),
        }

        resp = await self._request("POST", "/users/me/meetings", "create meeting", json=payload)
        return self._meeting(self._decode(resp, "create meeting"), "create meeting")

    async def update_meeting(
        self,
        meeting_id: int | str,
        topic: Optional[str] = None,
        agenda: Optional[str] = None,
    ) -> None:
        body: Dict[str, Any] = {}
        if topic is not None:
            body["topic"] = topic
        if agenda is not None:
            body["agenda"] = agenda

        await self._request("PATCH", f"/meetings/{meeting_id}", "update meeting", json=body)

    async def delete_meeting(self, meeting_id: int | str) -> None:
        await self._request("DELETE", f"/meetings/{meeting_id}", "delete meeting")


# Simple singleton-style accessor wired to app settings
_zoom_client_instance: Optional[ZoomClient] = None


def get_zoom_client() -> ZoomClient:
    """
    Lazily construct the process-wide ZoomClient (and its token cache).

    Missing credentials do not fail here; they surface as ConfigurationError
    on the first operation, before any network call.
    """
    global _zoom_client_instance
    if _zoom_client_instance is None:
        settings = get_settings()
        token_cache = ZoomTokenCache(
            account_id=settings.ZOOM_ACCOUNT_ID,
            client_id=settings.ZOOM_CLIENT_ID,
            client_secret=settings.ZOOM_CLIENT_SECRET,
            oauth_url=settings.ZOOM_OAUTH_URL,
            timeout_seconds=settings.HTTP_TIMEOUT_SECONDS,
        )
        _zoom_client_instance = ZoomClient(
            token_cache=token_cache,
            base_url=settings.ZOOM_API_BASE_URL,
            timeout_seconds=settings.HTTP_TIMEOUT_SECONDS,
            meeting_timezone=settings.MEETING_TIMEZONE,
            start_hour=settings.MEETING_START_HOUR,
            default_duration_minutes=settings.MEETING_DURATION_MINUTES,
        )
    return _zoom_client_instance


def reset_zoom_client() -> None:
    """
    Drop the shared client so the next access rebuilds it from settings.
    """
    global _zoom_client_instance
    _zoom_client_instance = None
