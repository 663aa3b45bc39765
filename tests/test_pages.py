"""Tests for dashboard pages and role redirects."""

import pytest

from tests.conftest import DEFAULT_PASSWORD


async def test_health(client):
    response = await client.get("/health")

    assert response.json() == {"status": "ok", "version": "1.0.0"}


async def test_index_and_static_pages(client):
    for path in ("/", "/paypal/success", "/paypal/cancel"):
        response = await client.get(path)
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")

    response = await client.get("/assets/app.js")
    assert response.status_code == 200


@pytest.mark.parametrize("path", ["/admin", "/client", "/designer", "/editor", "/reviewer/dashboard"])
async def test_dashboards_redirect_anonymous_users(client, path):
    response = await client.get(path)

    assert response.status_code == 307
    assert response.headers["location"] == "/"


@pytest.mark.parametrize(
    "role, path",
    [
        ("owner", "/admin"),
        ("admin", "/admin/dashboard"),
        ("client", "/client"),
        ("designer", "/designer"),
        ("editor", "/editor/dashboard"),
        ("reviewer", "/reviewer/dashboard"),
    ],
)
async def test_dashboard_for_matching_role(client, make_user, auth_headers, role, path):
    user = await make_user(role)

    response = await client.get(path, headers=await auth_headers(user))

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")


async def test_dashboard_for_other_role_redirects_home(client, make_user, auth_headers):
    editor = await make_user("editor")

    response = await client.get("/client", headers=await auth_headers(editor))

    assert response.status_code == 307
    assert response.headers["location"] == "/"


async def test_dashboard_accepts_session_cookie(client, make_user):
    user = await make_user("designer")
    await client.post("/api/auth/sign-in/email", json={"email": user.email, "password": DEFAULT_PASSWORD})

    response = await client.get("/designer")

    assert response.status_code == 200


async def test_reviewer_root_redirects_to_dashboard(client):
    response = await client.get("/reviewer")

    assert response.status_code == 307
    assert response.headers["location"] == "/reviewer/dashboard"


async def test_auth_redirect(client, make_user, auth_headers):
    response = await client.get("/auth-redirect")
    assert response.headers["location"] == "/"

    user = await make_user("client")
    response = await client.get("/auth-redirect", headers=await auth_headers(user))
    assert response.headers["location"] == "/client"


async def test_unknown_section(client):
    response = await client.get("/unknown")

    assert response.status_code == 404
    assert response.json() == {"error": "Not found"}
