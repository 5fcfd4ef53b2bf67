# webinar_manager/api/dependencies/admin_auth.py
from fastapi import Request

from webinar_manager.core.errors import UnauthorizedError

ADMIN_COOKIE_NAME = "admin_auth"
ADMIN_COOKIE_VALUE = "authenticated"
ADMIN_COOKIE_MAX_AGE = 60 * 60 * 24 * 7  # 7 days


def has_admin_session(request: Request) -> bool:
    return request.cookies.get(ADMIN_COOKIE_NAME) == ADMIN_COOKIE_VALUE


async def require_admin_session(request: Request) -> None:
    """
    Dependency guarding the admin meeting API behind the session cookie.
    """
    if not has_admin_session(request):
        raise UnauthorizedError("Admin session cookie missing or invalid.")
