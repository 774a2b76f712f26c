import pytest

from hr_portal.core.config import DEFAULT_PROTECTED_PREFIXES
from hr_portal.middlewares import path_is_guarded

PROTECTED_PATHS = [
    "/dashboard",
    "/employees",
    "/employees/e1",
    "/employees/e1/edit",
    "/payroll",
    "/payroll/p1",
    "/kpi",
    "/approval",
    "/attendance",
]


@pytest.mark.parametrize("path", PROTECTED_PATHS)
def test_protected_path_without_session_redirects_to_login(client, path):
    response = client.get(path, follow_redirects=False)
    assert response.status_code == 307
    assert response.headers["location"].startswith("/login")


@pytest.mark.parametrize("path", PROTECTED_PATHS)
def test_protected_path_with_session_passes_through(logged_in, path):
    response = logged_in.get(path, follow_redirects=False)
    assert response.status_code == 200


def test_login_redirect_remembers_requested_page(client):
    response = client.get("/payroll/p1", follow_redirects=False)
    assert response.headers["location"] == "/login?next=%2Fpayroll%2Fp1"


def test_login_with_session_redirects_to_dashboard(logged_in):
    response = logged_in.get("/login", follow_redirects=False)
    assert response.status_code == 307
    assert response.headers["location"] == "/dashboard"


def test_login_without_session_passes_through(client):
    response = client.get("/login", follow_redirects=False)
    assert response.status_code == 200
    assert "Sign in" in response.text


def test_unmatched_paths_bypass_the_guard(client):
    assert client.get("/health").json() == {"ok": True}
    assert client.get("/static/app.css").status_code == 200


def test_root_routes_by_session(client):
    response = client.get("/", follow_redirects=False)
    assert response.headers["location"] == "/login"
    client.post("/login", data={"email": "jane.doe@example.com", "password": "secret"})
    response = client.get("/", follow_redirects=False)
    assert response.headers["location"] == "/dashboard"


def test_logout_ends_the_session_for_guard_and_store(logged_in):
    response = logged_in.post("/logout", follow_redirects=False)
    assert response.status_code == 303
    assert response.headers["location"] == "/login"

    response = logged_in.get("/dashboard", follow_redirects=False)
    assert response.status_code == 307
    assert response.headers["location"].startswith("/login")


def test_tampered_cookie_is_not_a_session(client):
    client.cookies.set("auth_token", "forged-value")
    response = client.get("/dashboard", follow_redirects=False)
    assert response.status_code == 307


def test_expired_backend_token_is_rejected(backend, client):
    from datetime import datetime, timedelta, timezone

    from jose import jwt

    past = datetime.now(tz=timezone.utc) - timedelta(minutes=1)
    backend.token = jwt.encode({"sub": "u1", "exp": int(past.timestamp())}, "k", algorithm="HS256")
    client.post("/login", data={"email": "jane.doe@example.com", "password": "secret"}, follow_redirects=False)

    response = client.get("/dashboard", follow_redirects=False)
    assert response.status_code == 307
    assert response.headers["location"].startswith("/login")


def test_path_matching_rules():
    assert path_is_guarded("/login", DEFAULT_PROTECTED_PREFIXES, "/login")
    assert path_is_guarded("/kpi/k1", DEFAULT_PROTECTED_PREFIXES, "/login")
    assert not path_is_guarded("/login/help", DEFAULT_PROTECTED_PREFIXES, "/login")
    assert not path_is_guarded("/dashboards", DEFAULT_PROTECTED_PREFIXES, "/login")
    assert not path_is_guarded("/", DEFAULT_PROTECTED_PREFIXES, "/login")
