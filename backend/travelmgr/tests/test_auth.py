"""
Tests for authentication endpoints.
"""
import inspect
from datetime import timedelta

from fastapi.routing import APIRoute

from travelmgr.core.security import create_access_token
from travelmgr.main import app


def signup(client, name="Test User", email="test@example.com", password="testpassword123"):
    return client.post(
        "/api/auth/signup",
        json={"name": name, "email": email, "password": password},
    )


def test_signup(client):
    """Test user signup."""
    response = signup(client)
    assert response.status_code == 201
    body = response.json()
    assert body["name"] == "Test User"
    assert body["email"] == "test@example.com"
    assert "hashed_password" not in body


def test_signup_duplicate_email(client):
    signup(client)
    response = signup(client, name="Someone Else", email="TEST@example.com")
    assert response.status_code == 400
    assert response.json()["detail"] == "Email already exists"


def test_signup_rejects_short_password(client):
    response = signup(client, password="123")
    assert response.status_code == 400


def test_login(client):
    """Test user login."""
    signup(client, email="test2@example.com")

    response = client.post(
        "/api/auth/login",
        json={"email": "test2@example.com", "password": "testpassword123"},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["token_type"] == "bearer"
    assert body["user"]["email"] == "test2@example.com"

    me = client.get("/api/users/me", headers={"Authorization": f"Bearer {body['access_token']}"})
    assert me.status_code == 200
    assert me.json()["name"] == "Test User"


def test_login_invalid_credentials(client):
    """Test login with invalid credentials."""
    signup(client)
    response = client.post(
        "/api/auth/login",
        json={"email": "test@example.com", "password": "wrongpassword"},
    )
    assert response.status_code == 401

    response = client.post(
        "/api/auth/login",
        json={"email": "nobody@example.com", "password": "testpassword123"},
    )
    assert response.status_code == 401


def test_protected_route_requires_token(client):
    assert client.get("/api/expenses").status_code == 401
    response = client.get("/api/expenses", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401


def test_expired_token_rejected(client, alice):
    token = create_access_token(alice.id, alice.email, expires_delta=timedelta(seconds=-1))
    response = client.get("/api/users/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


def test_user_search(client, headers, alice, bob, carol):
    response = client.get("/api/users/search", params={"email": "O"}, headers=headers(alice))
    assert response.status_code == 200
    emails = [user["email"] for user in response.json()]
    assert emails == ["bob@example.com", "carol@example.com"]

    response = client.get("/api/users/search", params={"email": "alice"}, headers=headers(alice))
    assert response.json() == []


def test_user_search_requires_query(client, headers, alice):
    response = client.get("/api/users/search", params={"email": "  "}, headers=headers(alice))
    assert response.status_code == 400


def test_api_handlers_run_in_threadpool():
    """Handlers do blocking database work, so none of them may be a coroutine."""
    api_routes = [r for r in app.routes if isinstance(r, APIRoute) and r.path != "/api/health"]
    assert api_routes
    assert [r.path for r in api_routes if inspect.iscoroutinefunction(r.endpoint)] == []
