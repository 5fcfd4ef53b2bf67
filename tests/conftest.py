# tests/conftest.py
from typing import Any, Callable

import httpx
import pytest
from fastapi.testclient import TestClient

from tests.fakes import FakeHTTP
from webinar_manager.core.config import get_settings
from webinar_manager.main import create_app
from webinar_manager.services.zoom_client import reset_zoom_client

_MANAGED_ENV = (
    "APP_ENV",
    "ADMIN_PASSWORD",
    "ZOOM_ACCOUNT_ID",
    "ZOOM_CLIENT_ID",
    "ZOOM_CLIENT_SECRET",
    "HUBSPOT_PORTAL_ID",
    "HUBSPOT_FORM_ID",
    "HUBSPOT_PRIVATE_APP_TOKEN",
    "HUBSPOT_FORM_SUBMISSION_ENABLED",
    "CRON_SECRET",
    "PUBLIC_REGISTRATION_HOST",
    "WEEKLY_SLOT_COUNT",
)


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch):
    """
    Every test starts from default settings and a fresh Zoom client/token cache.
    """
    for name in _MANAGED_ENV:
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    reset_zoom_client()
    yield
    get_settings.cache_clear()
    reset_zoom_client()


@pytest.fixture
def configure(monkeypatch) -> Callable[..., None]:
    """
    Set environment-backed settings for the current test, e.g.
    `configure(CRON_SECRET="s3cret")`.
    """

    def _configure(**values: Any) -> None:
        for key, value in values.items():
            monkeypatch.setenv(key, str(value))
        get_settings.cache_clear()
        reset_zoom_client()

    return _configure


@pytest.fixture(scope="session")
def app():
    return create_app()


@pytest.fixture
def client(app):
    """
    TestClient per test so cookies and dependency overrides never leak.
    """
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def fake_http(monkeypatch) -> FakeHTTP:
    """
    Patch httpx.AsyncClient so outbound calls hit a FakeHTTP script.
    """
    fake = FakeHTTP()
    monkeypatch.setattr(httpx, "AsyncClient", fake.client_class())
    return fake
