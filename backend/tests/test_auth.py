"""Tests for authentication endpoints."""
import pytest

from app.auth.security import create_access_token, decode_token


@pytest.mark.asyncio
async def test_register_success(client):
    response = await client.post(
        "/api/auth/register",
        json={"name": "New User", "email": "new@example.com", "password": "StrongPass1"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["token_type"] == "bearer"
    assert decode_token(data["access_token"])["type"] == "access"
    assert decode_token(data["refresh_token"])["type"] == "refresh"


@pytest.mark.asyncio
async def test_register_duplicate_email(client, create_user):
    await create_user(email="taken@example.com")

    response = await client.post(
        "/api/auth/register",
        json={"name": "Someone", "email": "taken@example.com", "password": "StrongPass1"},
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Email already registered"


@pytest.mark.asyncio
@pytest.mark.parametrize("password", ["short1A", "alllowercase1", "ALLUPPERCASE1", "NoDigitsHere"])
async def test_register_weak_password(client, password):
    response = await client.post(
        "/api/auth/register",
        json={"name": "Weak", "email": "weak@example.com", "password": password},
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_login_success(client, create_user):
    await create_user(email="login@example.com")

    response = await client.post(
        "/api/auth/login",
        json={"email": "login@example.com", "password": "Test1234a"},
    )

    assert response.status_code == 200
    assert "access_token" in response.json()


@pytest.mark.asyncio
async def test_login_wrong_password(client, create_user):
    await create_user(email="login@example.com")

    response = await client.post(
        "/api/auth/login",
        json={"email": "login@example.com", "password": "WrongPass1"},
    )

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_me(client, provider, auth_headers):
    response = await client.get("/api/auth/me", headers=auth_headers(provider))

    assert response.status_code == 200
    data = response.json()
    assert data["email"] == "provider@example.com"
    assert data["is_provider"] is True
    assert "password_hash" not in data


@pytest.mark.asyncio
async def test_me_invalid_token(client):
    response = await client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_refresh_token(client, create_user):
    await create_user(email="refresh@example.com")
    login = await client.post(
        "/api/auth/login",
        json={"email": "refresh@example.com", "password": "Test1234a"},
    )

    response = await client.post(
        "/api/auth/refresh",
        json={"refresh_token": login.json()["refresh_token"]},
    )

    assert response.status_code == 200
    assert decode_token(response.json()["access_token"])["type"] == "access"


@pytest.mark.asyncio
async def test_refresh_rejects_access_token(client, create_user):
    user = await create_user()
    access_token = create_access_token(data={"sub": user.uuid, "email": user.email, "role": user.user_role})

    response = await client.post("/api/auth/refresh", json={"refresh_token": access_token})

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")
    assert response.json() == {"status": "ok"}
