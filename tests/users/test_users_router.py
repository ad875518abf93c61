"""Tests for the user CRUD endpoints."""

import pytest
from sqlalchemy import select
from sqlalchemy.orm import undefer

from tests.factories import DEFAULT_PASSWORD_HASH, UserFactory
from user_service.models import User


@pytest.mark.asyncio
async def test_list_users_empty(public_client):
    response = await public_client.get("/user")

    assert response.status_code == 200
    assert response.json()["data"] == {"items": [], "total": 0}


@pytest.mark.asyncio
async def test_list_users_first_page_ascending(public_client, db):
    await UserFactory.create_batch_async(db, 12)

    response = await public_client.get("/user")

    assert response.status_code == 200
    data = response.json()["data"]
    ids = [item["id"] for item in data["items"]]
    assert len(ids) == 10
    assert ids == sorted(ids)
    assert data["total"] == 12
    assert all("password" not in item for item in data["items"])


@pytest.mark.asyncio
async def test_list_users_descending(public_client, db):
    users = await UserFactory.create_batch_async(db, 3)

    response = await public_client.get("/user", params={"order": "desc"})

    ids = [item["id"] for item in response.json()["data"]["items"]]
    assert ids == sorted((user.id for user in users), reverse=True)


@pytest.mark.asyncio
async def test_list_users_rejects_unknown_order(public_client):
    response = await public_client.get("/user", params={"order": "sideways"})

    assert response.status_code == 400
    assert set(response.json()["errors"]) == {"order"}


@pytest.mark.asyncio
async def test_create_user(public_client):
    response = await public_client.post(
        "/user", json={"name": "Alice", "email": "Alice@Example.com", "password": "secret1"}
    )

    assert response.status_code == 200
    user = response.json()["data"]
    assert user["name"] == "Alice"
    assert user["email"] == "alice@example.com"
    assert user["id"] >= 1
    assert "password" not in user
    assert user["created_at"]
    assert user["updated_at"]


@pytest.mark.asyncio
async def test_create_user_duplicate_email(public_client, test_user):
    response = await public_client.post(
        "/user", json={"name": "Someone", "email": test_user.email, "password": "secret1"}
    )

    assert response.status_code == 409
    assert response.json()["errors"] == {"email": "Email already exists"}


@pytest.mark.asyncio
async def test_create_user_short_name(public_client):
    response = await public_client.post("/user", json={"name": "Al", "email": "al@example.com", "password": "secret1"})

    assert response.status_code == 400
    assert response.json()["errors"] == {"name": "Name must be between 3 and 255 characters"}


@pytest.mark.asyncio
async def test_get_user(public_client, test_user):
    response = await public_client.get(f"/user/{test_user.id}")

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["id"] == test_user.id
    assert data["email"] == test_user.email
    assert "password" not in data


@pytest.mark.asyncio
async def test_get_missing_user_is_not_found(public_client):
    response = await public_client.get("/user/999999")

    assert response.status_code == 404
    assert response.json() == {"code": 404, "success": False, "message": "User not found"}


@pytest.mark.asyncio
async def test_non_numeric_id_is_a_routing_miss(public_client):
    response = await public_client.get("/user/abc")

    assert response.status_code == 404
    assert response.json()["message"] == "Route not found"


@pytest.mark.asyncio
async def test_patch_updates_only_name(public_client, database, test_user):
    response = await public_client.patch(
        f"/user/{test_user.id}",
        json={"name": "Renamed User", "email": "hijack@example.com", "password": "another1"},
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["name"] == "Renamed User"
    assert data["email"] == test_user.email

    async with database.session() as session:
        result = await session.execute(
            select(User).where(User.id == test_user.id).options(undefer(User.password))
        )
        stored = result.scalar_one()
    assert stored.name == "Renamed User"
    assert stored.email == "test-user@example.com"
    assert stored.password == DEFAULT_PASSWORD_HASH


@pytest.mark.asyncio
async def test_patch_invalid_name(public_client, test_user):
    response = await public_client.patch(f"/user/{test_user.id}", json={"name": "x"})

    assert response.status_code == 400
    assert response.json()["errors"] == {"name": "Name must be between 3 and 255 characters"}


@pytest.mark.asyncio
async def test_patch_missing_user(public_client):
    response = await public_client.patch("/user/424242", json={"name": "Nobody Here"})

    assert response.status_code == 404
    assert response.json()["message"] == "User not found"


@pytest.mark.asyncio
async def test_delete_user_returns_snapshot(public_client, test_user):
    response = await public_client.delete(f"/user/{test_user.id}")

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["id"] == test_user.id
    assert data["name"] == "Test User"

    again = await public_client.delete(f"/user/{test_user.id}")
    assert again.status_code == 404

    lookup = await public_client.get(f"/user/{test_user.id}")
    assert lookup.status_code == 404


@pytest.mark.asyncio
@pytest.mark.parametrize(("method", "path"), [("GET", "/nope"), ("PUT", "/user/1"), ("POST", "/me")])
async def test_unmatched_routes_use_envelope(public_client, method, path):
    response = await public_client.request(method, path)

    assert response.status_code == 404
    assert response.json() == {"code": 404, "success": False, "message": "Route not found"}


@pytest.mark.asyncio
@pytest.mark.parametrize("method", ["GET", "PATCH", "DELETE"])
@pytest.mark.parametrize("user_id", ["2147483648", "99999999999999999999", "0"])
async def test_out_of_range_id_is_not_found(public_client, method, user_id):
    response = await public_client.request(method, f"/user/{user_id}", json={"name": "Valid Name"})

    assert response.status_code == 404
    assert response.json() == {"code": 404, "success": False, "message": "User not found"}
