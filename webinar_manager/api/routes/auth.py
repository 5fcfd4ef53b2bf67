# webinar_manager/api/routes/auth.py
import logging
import secrets
from http import HTTPStatus

from fastapi import APIRouter, HTTPException, Response

from webinar_manager.api.dependencies.admin_auth import (
    ADMIN_COOKIE_MAX_AGE,
    ADMIN_COOKIE_NAME,
    ADMIN_COOKIE_VALUE,
)
from webinar_manager.core.config import get_settings
from webinar_manager.core.errors import ConfigurationError
from webinar_manager.schemas.auth import LoginRequest
from webinar_manager.schemas.meeting import OperationAck

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post(
    "/login",
    response_model=OperationAck,
    summary="Unlock the admin dashboard",
    description=(
        "Compares the submitted password with `ADMIN_PASSWORD` and, on success, "
        "sets the `admin_auth` session cookie for 7 days."
    ),
    responses={
        401: {"description": "Incorrect password."},
        500: {"description": "ADMIN_PASSWORD is not configured."},
    },
)
async def login(payload: LoginRequest, response: Response) -> OperationAck:
    settings = get_settings()
    expected = settings.ADMIN_PASSWORD

    if not expected:
        raise ConfigurationError("ADMIN_PASSWORD must be configured.")

    if not secrets.compare_digest(payload.password.encode("utf-8"), expected.encode("utf-8")):
        logger.info("Rejected admin login attempt")
        raise HTTPException(status_code=HTTPStatus.UNAUTHORIZED, detail="Incorrect password.")

    response.set_cookie(
        key=ADMIN_COOKIE_NAME,
        value=ADMIN_COOKIE_VALUE,
        max_age=ADMIN_COOKIE_MAX_AGE,
        path="/",
        httponly=True,
        samesite="lax",
        secure=(settings.APP_ENV or "local").lower() not in ("local", "test"),
    )
    return OperationAck()


@router.post("/logout", response_model=OperationAck, summary="Clear the admin session cookie")
async def logout(response: Response) -> OperationAck:
    response.delete_cookie(key=ADMIN_COOKIE_NAME, path="/")
    return OperationAck()
