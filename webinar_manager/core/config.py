# webinar_manager/core/config.py
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Global application configuration.

    Values are loaded from environment variables (or a local `.env` file) at
    runtime. Credentials default to None so that a missing group surfaces as a
    ConfigurationError on the endpoints that need it instead of failing the
    whole process at startup.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    APP_NAME: str = "Webinar Manager"
    APP_ENV: str = Field("local", description="Environment name: local/dev/stage/prod")
    LOG_LEVEL: str = Field("INFO", description="Root logging level.")

    # --- Admin dashboard ---
    ADMIN_PASSWORD: str | None = Field(
        default=None,
        description="Shared password that unlocks the admin dashboard.",
    )

    # --- Zoom (server-to-server OAuth app) ---
    ZOOM_ACCOUNT_ID: str | None = None
    ZOOM_CLIENT_ID: str | None = None
    ZOOM_CLIENT_SECRET: str | None = None
    ZOOM_OAUTH_URL: str = "https://zoom.us/oauth/token"
    ZOOM_API_BASE_URL: str = "https://api.zoom.us/v2"
    HTTP_TIMEOUT_SECONDS: float = Field(
        default=10.0,
        description="Timeout applied to every outbound HTTP call.",
    )

    # --- Recurring webinar schedule ---
    MEETING_TIMEZONE: str = Field(
        default="America/New_York",
        description="IANA timezone in which the webinar's wall-clock time is fixed.",
    )
    MEETING_WEEKDAY: int = Field(
        default=2,
        ge=0,
        le=6,
        description="Target weekday, Monday=0 ... Sunday=6 (default Wednesday).",
    )
    MEETING_START_HOUR: int = Field(default=14, ge=0, le=23)
    MEETING_DURATION_MINUTES: int = Field(default=60, gt=0)
    WEEKLY_SLOT_COUNT: int = Field(
        default=3,
        ge=1,
        description="How many upcoming weekly slots are scheduled and displayed.",
    )
    WEBINAR_TOPIC: str = "Nekst Tips & Tricks Webinar"
    WEBINAR_TOPIC_KEYWORD: str = Field(
        default="nekst tips",
        description="Case-insensitive substring identifying webinar meetings on the public page.",
    )

    # --- HubSpot ---
    HUBSPOT_PORTAL_ID: str | None = None
    HUBSPOT_FORM_ID: str | None = None
    HUBSPOT_PRIVATE_APP_TOKEN: str | None = None
    HUBSPOT_FORM_SUBMISSION_ENABLED: bool = Field(
        default=True,
        description="Submit the marketing form before upserting the contact.",
    )
    HUBSPOT_API_BASE_URL: str = "https://api.hubapi.com"
    HUBSPOT_FORMS_BASE_URL: str = "https://api.hsforms.com"
    REGISTRATION_PAGE_URI: str = "https://webinar.nekst.com/register"
    REGISTRATION_PAGE_NAME: str = "Nekst Tips & Tricks Webinar Registration"

    # --- Routing / scheduled trigger ---
    CRON_SECRET: str | None = Field(
        default=None,
        description="Bearer secret required on the cron endpoint when set.",
    )
    PUBLIC_REGISTRATION_HOST: str | None = Field(
        default=None,
        description="Hostname whose root path redirects straight to /register.",
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Cached accessor for application settings.
    """
    return Settings()
