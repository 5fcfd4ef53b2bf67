# webinar_manager/api/dependencies/internal_auth.py
import secrets
from typing import Optional

from fastapi import Header

from webinar_manager.core.config import get_settings
from webinar_manager.core.errors import UnauthorizedError


async def verify_cron_secret(
    authorization: Optional[str] = Header(
        default=None,
        alias="Authorization",
        description="`Bearer <CRON_SECRET>`; required only when CRON_SECRET is configured.",
    ),
) -> None:
    """
    Dependency protecting the scheduled-trigger endpoints.

    Rules
    -----
    - CRON_SECRET not set -> endpoint is open (manual/local invocation).
    - CRON_SECRET set     -> header must be exactly `Bearer <CRON_SECRET>`,
                             otherwise 401 with no further detail.
    """
    settings = get_settings()
    expected = getattr(settings, "CRON_SECRET", None)

    if not expected:
        return

    if not authorization or not secrets.compare_digest(authorization, f"Bearer {expected}"):
        raise UnauthorizedError("Missing or invalid cron secret.")
