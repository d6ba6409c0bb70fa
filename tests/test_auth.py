"""Tests for staff authentication"""

import pytest
from httpx import AsyncClient


async def login(client, email, password):
    return await client.post("/auth/login", data={"username": email, "password": password})


@pytest.mark.asyncio
async def test_login(client: AsyncClient, test_user):
    response = await login(client, "employee@example.com", "testpass123")

    assert response.status_code == 200
    data = response.json()
    assert data["token_type"] == "bearer"
    assert data["access_token"]
    assert data["refresh_token"]


@pytest.mark.asyncio
async def test_login_wrong_password(client: AsyncClient, test_user):
    response = await login(client, "employee@example.com", "wrong-password")

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_me(client: AsyncClient, test_user):
    tokens = (await login(client, "employee@example.com", "testpass123")).json()

    response = await client.get(
        "/auth/me",
        headers={"Authorization": f"Bearer {tokens['access_token']}"},
    )

    assert response.status_code == 200
    assert response.json()["email"] == "employee@example.com"
    assert response.json()["role"] == "employee"


@pytest.mark.asyncio
async def test_refresh_token_rotates(client: AsyncClient, test_user):
    tokens = (await login(client, "employee@example.com", "testpass123")).json()

    response = await client.post("/auth/refresh", json={"refresh_token": tokens["refresh_token"]})

    assert response.status_code == 200
    assert response.json()["refresh_token"] != tokens["refresh_token"]

    # the old refresh token is no longer accepted
    response = await client.post("/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_access_token_is_not_a_refresh_token(client: AsyncClient, test_user):
    tokens = (await login(client, "employee@example.com", "testpass123")).json()

    response = await client.post("/auth/refresh", json={"refresh_token": tokens["access_token"]})

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_logout_revokes_refresh_token(client: AsyncClient, test_user):
    tokens = (await login(client, "employee@example.com", "testpass123")).json()
    headers = {"Authorization": f"Bearer {tokens['access_token']}"}

    response = await client.post("/auth/logout", headers=headers)
    assert response.status_code == 200

    response = await client.post("/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_admin_creates_user(admin_client: AsyncClient):
    response = await admin_client.post(
        "/auth/users",
        json={
            "email": "chef@example.com",
            "phone": "+15550001111",
            "first_name": "Chef",
            "last_name": "Kim",
            "role": "manager",
            "password": "kitchen42",
        },
    )

    assert response.status_code == 201
    assert response.json()["role"] == "manager"

    response = await login(admin_client, "chef@example.com", "kitchen42")
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_duplicate_user_email(admin_client: AsyncClient, test_user):
    response = await admin_client.post(
        "/auth/users",
        json={
            "email": "employee@example.com",
            "phone": "+15550001111",
            "first_name": "Dup",
            "last_name": "User",
        },
    )

    assert response.status_code == 409


@pytest.mark.asyncio
async def test_manager_cannot_create_user(manager_client: AsyncClient):
    response = await manager_client.post(
        "/auth/users",
        json={
            "email": "new@example.com",
            "phone": "+15550001111",
            "first_name": "New",
            "last_name": "User",
        },
    )

    assert response.status_code == 403
