# webinar_manager/core/errors.py
from __future__ import annotations

from http import HTTPStatus


class WebinarManagerError(RuntimeError):
    """
    Base class for every error raised by the webinar manager services.
    """


class ConfigurationError(WebinarManagerError):
    """
    Raised when a required secret or credential group is not configured.

    The message names the missing group for the server log; it is never
    echoed back to HTTP callers.
    """


class UpstreamError(WebinarManagerError):
    """
    Raised when Zoom or HubSpot answers a call with a non-success status.
    """

    def __init__(self, operation: str, status_text: str) -> None:
        self.operation = operation
        self.status_text = status_text
        super().__init__(f"{operation} failed: {status_text}")


class UpstreamAuthError(UpstreamError):
    """
    Raised when the provider rejects the OAuth credential exchange.
    """


class ValidationError(WebinarManagerError):
    """
    Raised when caller-supplied input is missing required fields.
    """


class UnauthorizedError(WebinarManagerError):
    """
    Raised when a session cookie or trigger secret is missing or wrong.
    """


def status_text_for(status_code: int) -> str:
    """
    Render an HTTP status as "<code> <reason>", e.g. "404 Not Found".
    """
    try:
        phrase = HTTPStatus(status_code).phrase
    except ValueError:
        phrase = ""
    return f"{status_code} {phrase}".strip()
