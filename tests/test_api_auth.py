"""
tests/test_api_auth.py -- Integration tests for /api/v1/auth routes.

These tests exercise the full stack: FastAPI routing -> access dependency ->
AuthService -> UserStore -> response model serialization.

Coverage:
  - POST /register: 201 as employee, no password in body, 400/409 mapping
  - POST /login: 200 with bearer token, identical 401 for unknown email and
    wrong password, Cache-Control: no-store
  - GET /me: 401 without/with bad token, 200 with claims and profile

Fixtures used (from conftest.py):
  - api_client: (client, tokens) -- tokens maps role name -> (user_id, token)
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from fastapi.testclient import TestClient

from auth.roles import Role
from auth.tokens import TokenIssuer


class TestRegister:
    def test_register_creates_employee(self, api_client: tuple[TestClient, dict]) -> None:
        client, _tokens = api_client
        body = {"name": "Ann", "email": "ann@x.com", "password": "secret1"}
        resp = client.post("/api/v1/auth/register", json=body)
        assert resp.status_code == 201, resp.text
        data = resp.json()
        assert data["id"]
        assert data["role"] == "employee"
        assert data["email"] == "ann@x.com"
        assert "password" not in data
        assert "password_hash" not in data
        assert "secret1" not in resp.text

    def test_register_ignores_requested_role(self, api_client: tuple[TestClient, dict]) -> None:
        client, _tokens = api_client
        body = {"name": "Mal", "email": "mal@x.com", "password": "secret1", "role": "admin"}
        resp = client.post("/api/v1/auth/register", json=body)
        assert resp.status_code == 201
        assert resp.json()["role"] == "employee"

    def test_register_duplicate_is_409(self, api_client: tuple[TestClient, dict]) -> None:
        client, _tokens = api_client
        body = {"name": "Dup", "email": "dup@x.com", "password": "secret1"}
        assert client.post("/api/v1/auth/register", json=body).status_code == 201
        resp = client.post("/api/v1/auth/register", json={**body, "password": "other"})
        assert resp.status_code == 409
        assert resp.json()["error"]["code"] == "conflict"

    def test_register_invalid_email_is_400(self, api_client: tuple[TestClient, dict]) -> None:
        client, _tokens = api_client
        resp = client.post("/api/v1/auth/register", json={"name": "X", "email": "nope", "password": "pw"})
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "validation_error"

    def test_register_missing_field_is_400(self, api_client: tuple[TestClient, dict]) -> None:
        client, _tokens = api_client
        resp = client.post("/api/v1/auth/register", json={"name": "", "email": "e@x.com", "password": "pw"})
        assert resp.status_code == 400

    def test_register_disabled_is_403(self, api_client: tuple[TestClient, dict], settings, monkeypatch) -> None:
        client, _tokens = api_client
        monkeypatch.setattr(settings, "self_registration_enabled", False)
        resp = client.post("/api/v1/auth/register", json={"name": "X", "email": "off@x.com", "password": "pw"})
        assert resp.status_code == 403
        assert resp.json()["error"]["code"] == "registration_disabled"

    def test_register_malformed_body_is_422(self, api_client: tuple[TestClient, dict]) -> None:
        client, _tokens = api_client
        resp = client.post("/api/v1/auth/register", json={"name": "X"})
        assert resp.status_code == 422
        assert resp.json()["error"]["code"] == "validation_error"


class TestLogin:
    def test_login_success(self, api_client: tuple[TestClient, dict]) -> None:
        client, tokens = api_client
        resp = client.post(
            "/api/v1/auth/login",
            json={"email": "trainer@portal.example.com", "password": "trainerpass123"},
        )
        assert resp.status_code == 200, resp.text
        assert resp.headers["cache-control"] == "no-store"
        data = resp.json()
        assert data["token_type"] == "bearer"
        assert data["role"] == "trainer"
        assert data["user_id"] == tokens["trainer"][0]
        assert data["expires_in"] == 72 * 3600

        me = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {data['access_token']}"})
        assert me.status_code == 200
        assert me.json()["user_id"] == tokens["trainer"][0]

    def test_wrong_password_and_unknown_email_are_identical(self, api_client: tuple[TestClient, dict]) -> None:
        client, _tokens = api_client
        wrong_pw = client.post(
            "/api/v1/auth/login",
            json={"email": "trainer@portal.example.com", "password": "wrong"},
        )
        no_user = client.post("/api/v1/auth/login", json={"email": "nobody@x.com", "password": "trainerpass123"})
        assert wrong_pw.status_code == no_user.status_code == 401
        assert wrong_pw.json() == no_user.json()
        assert wrong_pw.headers["cache-control"] == "no-store"
        assert wrong_pw.json()["error"]["code"] == "unauthorized"
        assert wrong_pw.headers["www-authenticate"] == no_user.headers["www-authenticate"] == "Bearer"


class TestMe:
    def test_me_without_token(self, api_client: tuple[TestClient, dict]) -> None:
        client, _tokens = api_client
        resp = client.get("/api/v1/auth/me")
        assert resp.status_code == 401
        assert resp.headers["www-authenticate"] == "Bearer"
        assert resp.json()["error"]["code"] == "unauthorized"

    def test_me_with_malformed_header(self, api_client: tuple[TestClient, dict]) -> None:
        client, tokens = api_client
        resp = client.get("/api/v1/auth/me", headers={"Authorization": tokens["admin"][1]})
        assert resp.status_code == 401

    def test_me_with_invalid_token(self, api_client: tuple[TestClient, dict]) -> None:
        client, _tokens = api_client
        resp = client.get("/api/v1/auth/me", headers={"Authorization": "Bearer invalid-token"})
        assert resp.status_code == 401

    def test_me_with_expired_token(self, api_client: tuple[TestClient, dict], settings) -> None:
        client, tokens = api_client
        issuer = TokenIssuer(secret_key=settings.secret_key, expire_seconds=3600)
        stale = issuer.issue(tokens["admin"][0], Role.admin, now=datetime.now(timezone.utc) - timedelta(hours=2))
        resp = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {stale}"})
        assert resp.status_code == 401

    def test_me_with_foreign_secret(self, api_client: tuple[TestClient, dict]) -> None:
        client, tokens = api_client
        forged = TokenIssuer(secret_key="f" * 64, expire_seconds=3600).issue(tokens["admin"][0], Role.admin)
        resp = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {forged}"})
        assert resp.status_code == 401

    def test_me_returns_claims_and_profile(self, api_client: tuple[TestClient, dict]) -> None:
        client, tokens = api_client
        uid, token = tokens["employee"]
        resp = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 200
        data = resp.json()
        assert data["user_id"] == uid
        assert data["role"] == "employee"
        assert data["user"]["email"] == "employee@portal.example.com"
        assert "password_hash" not in data["user"]
