"""Authentication route tests for register/login/logout flows."""

from __future__ import annotations

import uuid
from datetime import timedelta

import pytest

from palate.core.security import create_access_token, decode_access_token, decode_token


def _make_credentials():
    suffix = uuid.uuid4().hex[:8]
    return {
        "email": f"tester_{suffix}@example.com",
        "password": "safepassword123",
        "display_name": f"Tester {suffix}",
    }


@pytest.mark.asyncio
async def test_register_and_login_flow(client):
    creds = _make_credentials()

    register_res = await client.post("/api/auth/register", json=creds)
    assert register_res.status_code == 201
    register_body = register_res.json()
    assert register_body["user"]["email"] == creds["email"]
    assert register_body["token_type"] == "bearer"
    assert register_res.cookies.get("access_token")
    claims = decode_token(register_body["access_token"])
    assert claims["sub"] == register_body["user"]["id"]
    assert claims["role"] == "consumer"

    login_res = await client.post(
        "/api/auth/login",
        json={"email": creds["email"], "password": creds["password"]},
    )
    assert login_res.status_code == 200
    assert login_res.json()["user"]["email"] == creds["email"]
    assert login_res.cookies.get("access_token")


@pytest.mark.asyncio
async def test_duplicate_email_and_bad_password_are_rejected(client):
    creds = _make_credentials()
    await client.post("/api/auth/register", json=creds)

    duplicate = await client.post("/api/auth/register", json=creds)
    assert duplicate.status_code == 400

    wrong = await client.post("/api/auth/login", json={"email": creds["email"], "password": "not-the-password"})
    assert wrong.status_code == 401


@pytest.mark.asyncio
async def test_cookie_session_and_logout(client):
    creds = _make_credentials()
    await client.post("/api/auth/register", json=creds)

    me = await client.get("/api/me")
    assert me.status_code == 200
    assert me.json()["email"] == creds["email"]

    logout_res = await client.post("/api/auth/logout")
    assert logout_res.status_code == 204
    assert "access_token=" in logout_res.headers.get("set-cookie", "")

    client.cookies.clear()
    assert (await client.get("/api/me")).status_code == 401


@pytest.mark.asyncio
async def test_garbage_token_is_rejected(client):
    res = await client.get("/api/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert res.status_code == 401


def test_access_claims_reject_expired_and_foreign_tokens():
    claims = decode_access_token(create_access_token("user-1", role="business"))
    assert claims is not None
    assert claims.user_id == "user-1"
    assert claims.role == "business"

    assert decode_access_token(create_access_token("user-1", ttl=timedelta(seconds=-5))) is None
    assert decode_access_token("not-a-jwt") is None


@pytest.mark.asyncio
async def test_expired_bearer_token_is_rejected(client):
    creds = _make_credentials()
    body = (await client.post("/api/auth/register", json=creds)).json()
    client.cookies.clear()
    expired = create_access_token(body["user"]["id"], ttl=timedelta(seconds=-5))
    res = await client.get("/api/me", headers={"Authorization": f"Bearer {expired}"})
    assert res.status_code == 401
