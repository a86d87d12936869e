"""Integration tests for users API endpoints"""
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, patch

import pytest
from httpx import AsyncClient

from authentication import AuthHandler
from exceptions import ResourceNotFoundException
from models.users import Availability, parse_user
from tests.fixtures.data_fixtures import create_test_availability, create_test_user


@pytest.fixture
def user_service():
    with patch("routers.users.UserService") as service_class:
        yield service_class.return_value


@pytest.fixture
def availability_service():
    with patch("routers.users.AvailabilityService") as service_class:
        yield service_class.return_value


@pytest.mark.asyncio
class TestRegister:
    """Test POST /users/register"""

    async def test_register_success(self, client: AsyncClient, user_service):
        user_service.get_user_by_email = AsyncMock(return_value=None)
        user = create_test_user(name="Alice", email="alice@example.com")
        user_service.create_user = AsyncMock(return_value=user)

        response = await client.post(
            "/users/register",
            json={"name": "Alice", "email": "Alice@Example.com", "password": "secret123"},
        )

        assert response.status_code == 201
        assert response.json()["user"] == {
            "_id": user["_id"],
            "name": "Alice",
            "email": "alice@example.com",
            "role": "player",
        }
        new_user, password_hash = user_service.create_user.await_args.args
        assert new_user.email == "alice@example.com"
        assert password_hash.startswith("$argon2")

    async def test_register_duplicate_email(self, client: AsyncClient, user_service):
        user_service.get_user_by_email = AsyncMock(return_value=create_test_user(email="alice@example.com"))
        user_service.create_user = AsyncMock()

        response = await client.post(
            "/users/register",
            json={"name": "Alice", "email": "alice@example.com", "password": "secret123"},
        )

        assert response.status_code == 400
        assert response.json()["error"]["message"] == "User already exists"
        user_service.create_user.assert_not_awaited()

    async def test_register_short_password(self, client: AsyncClient, user_service):
        response = await client.post(
            "/users/register",
            json={"name": "Alice", "email": "alice@example.com", "password": "123"},
        )

        assert response.status_code == 400


@pytest.mark.asyncio
class TestLogin:
    """Test login and token refresh"""

    async def test_login_success(self, client: AsyncClient, user_service):
        auth = AuthHandler()
        user = create_test_user(email="alice@example.com", password=auth.get_password_hash("secret123"))
        user_service.get_user_by_email = AsyncMock(return_value=user)
        user_service.update_password_hash = AsyncMock()

        response = await client.post("/users/login", json={"email": "alice@example.com", "password": "secret123"})

        assert response.status_code == 200
        data = response.json()
        assert data["token_type"] == "bearer"
        assert data["expires_in"] == 900
        assert auth.decode_token(data["access_token"]).sub == user["_id"]
        assert "password" not in data["user"]
        user_service.update_password_hash.assert_not_awaited()

    async def test_login_upgrades_legacy_hash(self, client: AsyncClient, user_service):
        auth = AuthHandler()
        user = create_test_user(password=auth.pwd_content_legacy.hash("secret123"))
        user_service.get_user_by_email = AsyncMock(return_value=user)
        user_service.update_password_hash = AsyncMock()

        response = await client.post("/users/login", json={"email": user["email"], "password": "secret123"})

        assert response.status_code == 200
        user_id, new_hash = user_service.update_password_hash.await_args.args
        assert user_id == user["_id"]
        assert new_hash.startswith("$argon2")

    async def test_login_wrong_password(self, client: AsyncClient, user_service):
        user = create_test_user(password=AuthHandler().get_password_hash("secret123"))
        user_service.get_user_by_email = AsyncMock(return_value=user)

        response = await client.post("/users/login", json={"email": user["email"], "password": "wrong-password"})

        assert response.status_code == 401

    async def test_login_unknown_email(self, client: AsyncClient, user_service):
        user_service.get_user_by_email = AsyncMock(return_value=None)

        response = await client.post("/users/login", json={"email": "nobody@example.com", "password": "secret123"})

        assert response.status_code == 401

    async def test_refresh(self, client: AsyncClient, user_service):
        auth = AuthHandler()
        user = create_test_user()
        user_service.get_user = AsyncMock(return_value=parse_user(user))

        response = await client.post(
            "/users/refresh", json={"refresh_token": auth.encode_refresh_token(user)}
        )

        assert response.status_code == 200
        assert auth.decode_token(response.json()["access_token"]).sub == user["_id"]

    async def test_refresh_with_access_token(self, client: AsyncClient, user_service):
        token = AuthHandler().encode_token(create_test_user())

        response = await client.post("/users/refresh", json={"refresh_token": token})

        assert response.status_code == 401


@pytest.mark.asyncio
class TestProfile:
    """Test profile endpoints"""

    async def test_me(self, client: AsyncClient, auth_headers, user_service, player_id):
        user_service.get_user = AsyncMock(return_value=parse_user(create_test_user(_id=player_id)))

        response = await client.get("/users/me", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["_id"] == player_id
        user_service.get_user.assert_awaited_once_with(player_id)

    async def test_get_user_not_found(self, client: AsyncClient, user_service):
        user_service.get_user = AsyncMock(side_effect=ResourceNotFoundException("User", "missing"))

        response = await client.get("/users/missing")

        assert response.status_code == 404

    async def test_update_own_profile(self, client: AsyncClient, auth_headers, user_service, player_id):
        user_service.update_user = AsyncMock(
            return_value=parse_user(create_test_user(_id=player_id, position="MID", bio="Box to box"))
        )

        response = await client.patch(
            f"/users/{player_id}", json={"position": "MID", "bio": "Box to box"}, headers=auth_headers
        )

        assert response.status_code == 200
        assert response.json()["position"] == "MID"
        changes = user_service.update_user.await_args.args[1]
        assert changes.model_dump(exclude_unset=True) == {"position": "MID", "bio": "Box to box"}

    async def test_update_other_profile_forbidden(self, client: AsyncClient, auth_headers, user_service, other_player_id):
        user_service.update_user = AsyncMock()

        response = await client.patch(f"/users/{other_player_id}", json={"bio": "hacked"}, headers=auth_headers)

        assert response.status_code == 403
        user_service.update_user.assert_not_awaited()

    @pytest.mark.parametrize("body", [{"name": None}, {"skills": None}])
    async def test_update_profile_rejects_null_required_field(
        self, client: AsyncClient, auth_headers, user_service, player_id, body
    ):
        user_service.update_user = AsyncMock()

        response = await client.patch(f"/users/{player_id}", json=body, headers=auth_headers)

        assert response.status_code == 400
        user_service.update_user.assert_not_awaited()


@pytest.mark.asyncio
class TestAvailability:
    """Test availability endpoints"""

    async def test_get_own_availability(self, client: AsyncClient, auth_headers, availability_service, player_id):
        availability_service.get_availability = AsyncMock(return_value=Availability(**create_test_availability()))

        response = await client.get(f"/users/{player_id}/availability", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["availability"]["isAvailable"] is True

    async def test_get_other_availability_forbidden(self, client: AsyncClient, auth_headers, availability_service, other_player_id):
        response = await client.get(f"/users/{other_player_id}/availability", headers=auth_headers)

        assert response.status_code == 403

    async def test_set_availability(self, client: AsyncClient, auth_headers, availability_service, player_id):
        until = datetime.now(timezone.utc) + timedelta(hours=2)
        availability_service.set_availability = AsyncMock(
            return_value=Availability(**create_test_availability(availableUntil=until))
        )

        response = await client.put(
            f"/users/{player_id}/availability",
            json={
                "isAvailable": True,
                "availableUntil": until.isoformat(),
                "preferredPositions": ["MID"],
                "maxDistance": 10,
                "location": {"latitude": 48.8566, "longitude": 2.3522},
            },
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json()["availability"]["preferredPositions"] == ["MID"]
        user_id, update = availability_service.set_availability.await_args.args
        assert user_id == player_id
        assert update.isAvailable is True

    async def test_set_availability_invalid_position(self, client: AsyncClient, auth_headers, availability_service, player_id):
        response = await client.put(
            f"/users/{player_id}/availability",
            json={"isAvailable": True, "preferredPositions": ["STRIKER"]},
            headers=auth_headers,
        )

        assert response.status_code == 400

    async def test_set_availability_not_a_player(self, client: AsyncClient, auth_headers, availability_service, player_id):
        availability_service.set_availability = AsyncMock(side_effect=ResourceNotFoundException("Player", player_id))

        response = await client.put(f"/users/{player_id}/availability", json={"isAvailable": False}, headers=auth_headers)

        assert response.status_code == 404
