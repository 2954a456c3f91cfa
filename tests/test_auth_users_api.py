"""
Tests for the auth and users endpoints.

These tests verify:
- Registration (first account is admin), duplicate email and login
- Token validation on protected endpoints
- Profile read and update
- Directory search with lenient pagination
"""

from app.core.security import create_access_token
from conftest import create_user, headers_for


# ---------------------------------------------------------------------------
# AUTH
# ---------------------------------------------------------------------------

class TestAuth:
    """Tests for /auth/register and /auth/login."""

    def test_register_and_login(self, client):
        response = client.post("/auth/register", json={
            "email": "new@example.com",
            "password": "secret123",
            "display_name": "  New Person  ",
        })
        assert response.status_code == 201
        body = response.json()
        assert body["display_name"] == "New Person"
        assert body["role"] == "admin"
        assert "hashed_password" not in body

        response = client.post("/auth/login", json={"email": "new@example.com", "password": "secret123"})
        assert response.status_code == 200
        assert response.json()["token_type"] == "bearer"

    def test_later_accounts_are_regular_users(self, client, test_user):
        response = client.post("/auth/register", json={"email": "second@example.com", "password": "secret123"})

        assert response.status_code == 201
        assert response.json()["role"] == "user"

    def test_duplicate_email(self, client, test_user):
        response = client.post("/auth/register", json={"email": "test@example.com", "password": "secret123"})
        assert response.status_code == 400

    def test_short_password(self, client):
        response = client.post("/auth/register", json={"email": "a@example.com", "password": "123"})
        assert response.status_code == 422

    def test_wrong_password(self, client, test_user):
        response = client.post("/auth/login", json={"email": "test@example.com", "password": "nope"})
        assert response.status_code == 401

    def test_inactive_user_cannot_log_in(self, client, db):
        create_user(db, "off@example.com", "Off", is_active=False)
        response = client.post("/auth/login", json={"email": "off@example.com", "password": "testpassword"})
        assert response.status_code == 403


# ---------------------------------------------------------------------------
# PROFILE
# ---------------------------------------------------------------------------

class TestProfile:
    """Tests for /users/me."""

    def test_requires_token(self, client):
        assert client.get("/users/me").status_code in (401, 403)

    def test_rejects_bad_token(self, client):
        response = client.get("/users/me", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401

    def test_rejects_token_for_unknown_user(self, client):
        token = create_access_token(subject="00000000-0000-0000-0000-000000000000")
        response = client.get("/users/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_read_profile(self, client, test_user, auth_headers):
        response = client.get("/users/me", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["email"] == "test@example.com"

    def test_update_profile(self, client, test_user, auth_headers):
        response = client.put("/users/me", headers=auth_headers, json={"avatar": "https://cdn.example.com/t.png"})

        assert response.status_code == 200
        assert response.json()["avatar"] == "https://cdn.example.com/t.png"
        assert response.json()["display_name"] == "Test User"


# ---------------------------------------------------------------------------
# SEARCH
# ---------------------------------------------------------------------------

class TestSearch:
    """Tests for /users/search."""

    def test_matches_name_or_email(self, client, test_user, ann, bob, auth_headers):
        response = client.get("/users/search", headers=auth_headers, params={"keyword": "ann"})

        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 1
        assert body["items"][0]["display_name"] == "Ann Lee"

        response = client.get("/users/search", headers=auth_headers, params={"keyword": "BOB@"})
        assert [u["display_name"] for u in response.json()["items"]] == ["Bob Stone"]

    def test_pagination(self, client, test_user, ann, bob, auth_headers):
        response = client.get("/users/search", headers=auth_headers, params={"page": "2", "page_size": "2"})

        body = response.json()
        assert body["total"] == 3
        assert body["page"] == 2
        assert body["page_size"] == 2
        assert len(body["items"]) == 1

    def test_invalid_pagination_falls_back(self, client, test_user, auth_headers):
        """Should use the defaults instead of failing."""
        response = client.get(
            "/users/search", headers=auth_headers, params={"page": "0", "page_size": "abc"}
        )

        assert response.status_code == 200
        assert response.json()["page"] == 1
        assert response.json()["page_size"] == 20

        response = client.get("/users/search", headers=auth_headers, params={"page_size": "500"})
        assert response.json()["page_size"] == 20

    def test_inactive_users_hidden(self, client, db, test_user, auth_headers):
        create_user(db, "gone@example.com", "Gone", is_active=False)
        response = client.get("/users/search", headers=auth_headers, params={"keyword": "gone"})
        assert response.json()["total"] == 0

    def test_other_user_token(self, client, ann):
        response = client.get("/users/me", headers=headers_for(ann))
        assert response.json()["display_name"] == "Ann Lee"
