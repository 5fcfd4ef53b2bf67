# tests/test_admin_session.py
from http import HTTPStatus

from webinar_manager.api.dependencies.admin_auth import (
    ADMIN_COOKIE_MAX_AGE,
    ADMIN_COOKIE_NAME,
    ADMIN_COOKIE_VALUE,
)


def test_login_500_when_password_not_configured(client):
    resp = client.post("/api/auth/login", json={"password": "anything"})

    assert resp.status_code == HTTPStatus.INTERNAL_SERVER_ERROR
    assert resp.json() == {"detail": "Service is not configured."}


def test_login_401_on_wrong_password(client, configure):
    configure(ADMIN_PASSWORD="correct-horse")

    resp = client.post("/api/auth/login", json={"password": "battery-staple"})

    assert resp.status_code == HTTPStatus.UNAUTHORIZED
    assert ADMIN_COOKIE_NAME not in resp.cookies


def test_login_sets_seven_day_session_cookie(client, configure):
    configure(ADMIN_PASSWORD="correct-horse")

    resp = client.post("/api/auth/login", json={"password": "correct-horse"})

    assert resp.status_code == HTTPStatus.OK
    assert resp.json() == {"success": True}
    assert resp.cookies.get(ADMIN_COOKIE_NAME) == ADMIN_COOKIE_VALUE

    set_cookie = resp.headers["set-cookie"].lower()
    assert f"max-age={ADMIN_COOKIE_MAX_AGE}" in set_cookie
    assert "httponly" in set_cookie
    assert "samesite=lax" in set_cookie


def test_logout_clears_cookie(client):
    client.cookies.set(ADMIN_COOKIE_NAME, ADMIN_COOKIE_VALUE)

    resp = client.post("/api/auth/logout")

    assert resp.status_code == HTTPStatus.OK
    assert f"{ADMIN_COOKIE_NAME}=" in resp.headers["set-cookie"]
    assert "max-age=0" in resp.headers["set-cookie"].lower()


def test_dashboard_redirects_to_login_without_session(client):
    resp = client.get("/", follow_redirects=False)

    assert resp.status_code == HTTPStatus.TEMPORARY_REDIRECT
    assert resp.headers["location"] == "/login"


def test_dashboard_rejects_wrong_cookie_value(client):
    client.cookies.set(ADMIN_COOKIE_NAME, "nope")

    resp = client.get("/", follow_redirects=False)

    assert resp.headers["location"] == "/login"


def test_public_host_root_redirects_to_registration(client, configure):
    configure(PUBLIC_REGISTRATION_HOST="webinar.example.com")

    resp = client.get("/", headers={"host": "webinar.example.com"}, follow_redirects=False)

    assert resp.status_code == HTTPStatus.TEMPORARY_REDIRECT
    assert resp.headers["location"] == "/register"


def test_public_host_redirect_applies_before_session_check(client, configure):
    configure(PUBLIC_REGISTRATION_HOST="webinar.example.com")
    client.cookies.set(ADMIN_COOKIE_NAME, ADMIN_COOKIE_VALUE)

    resp = client.get("/", headers={"host": "webinar.example.com"}, follow_redirects=False)

    assert resp.headers["location"] == "/register"


def test_admin_meeting_api_requires_session(client):
    resp = client.get("/api/zoom/meetings")

    assert resp.status_code == HTTPStatus.UNAUTHORIZED
    assert resp.json() == {"detail": "Unauthorized"}
