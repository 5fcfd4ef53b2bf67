# webinar_manager/main.py
import logging
from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from webinar_manager.api.routes import auth, health, internal, meetings, pages, registration
from webinar_manager.core.config import get_settings
from webinar_manager.core.errors import (
    ConfigurationError,
    UnauthorizedError,
    UpstreamError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    # Reduce verbosity of third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Translate service errors into structured JSON responses.

    Secrets and upstream response bodies stay in the server log; callers get
    a generic message except for validation problems, which name the issue.
    """

    @app.exception_handler(ConfigurationError)
    async def configuration_error_handler(request: Request, exc: ConfigurationError):
        logger.error("Configuration error on %s: %s", request.url.path, exc)
        return JSONResponse(
            status_code=HTTPStatus.INTERNAL_SERVER_ERROR,
            content={"detail": "Service is not configured."},
        )

    @app.exception_handler(UpstreamError)
    async def upstream_error_handler(request: Request, exc: UpstreamError):
        logger.error("Upstream error on %s: %s", request.url.path, exc)
        return JSONResponse(
            status_code=HTTPStatus.BAD_GATEWAY,
            content={"detail": "Upstream service request failed."},
        )

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        return JSONResponse(status_code=HTTPStatus.BAD_REQUEST, content={"detail": str(exc)})

    @app.exception_handler(UnauthorizedError)
    async def unauthorized_error_handler(request: Request, exc: UnauthorizedError):
        return JSONResponse(status_code=HTTPStatus.UNAUTHORIZED, content={"detail": "Unauthorized"})


def create_app() -> FastAPI:
    """
    Application factory for the Webinar Manager service.
    """
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title=settings.APP_NAME,
        description=(
            "Schedules the recurring weekly webinar on Zoom, serves the public\n"
            "registration flow backed by HubSpot contacts, and guards the admin\n"
            "dashboard behind a shared password."
        ),
        version="0.1.0",
    )

    register_exception_handlers(app)

    # Routers
    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(pages.router)
    app.include_router(meetings.router)
    app.include_router(registration.router)
    app.include_router(internal.router)

    return app


app = create_app()
