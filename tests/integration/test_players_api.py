"""Integration tests for players API endpoints"""
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, patch

import pytest
from httpx import AsyncClient

from models.ratings import AverageRatings, RatingView
from models.users import AvailablePlayer
from tests.fixtures.data_fixtures import create_test_rating


@pytest.fixture
def availability_service():
    with patch("routers.players.AvailabilityService") as service_class:
        yield service_class.return_value


@pytest.fixture
def rating_service():
    with patch("routers.players.RatingService") as service_class:
        yield service_class.return_value


@pytest.mark.asyncio
class TestAvailablePlayers:
    """Test GET /players/available"""

    async def test_available_players(self, client: AsyncClient, auth_headers, availability_service, player_id, other_player_id):
        player = AvailablePlayer(
            id=other_player_id,
            name="Bob",
            position=["GK"],
            availableUntil=datetime.now(timezone.utc) + timedelta(hours=1),
            distance=0.41,
        )
        availability_service.find_available_players = AsyncMock(return_value=[player])

        response = await client.get(
            "/players/available",
            params={"latitude": 48.86, "longitude": 2.35, "distance": 5, "position": "GK"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        players = response.json()["players"]
        assert players[0]["_id"] == other_player_id
        assert players[0]["maxDistance"] == 10
        assert players[0]["distance"] == 0.41
        kwargs = availability_service.find_available_players.await_args.kwargs
        assert kwargs["radius_km"] == 5
        assert kwargs["position"] == "GK"
        assert kwargs["exclude_player_id"] == player_id

    async def test_available_players_default_radius(self, client: AsyncClient, auth_headers, availability_service):
        availability_service.find_available_players = AsyncMock(return_value=[])

        response = await client.get("/players/available", params={"latitude": 48.86, "longitude": 2.35}, headers=auth_headers)

        assert response.status_code == 200
        assert response.json() == {"players": []}
        assert availability_service.find_available_players.await_args.kwargs["radius_km"] == 10

    async def test_available_players_requires_auth(self, client: AsyncClient, availability_service):
        response = await client.get("/players/available", params={"latitude": 48.86, "longitude": 2.35})

        assert response.status_code == 401

    async def test_available_players_invalid_latitude(self, client: AsyncClient, auth_headers, availability_service):
        response = await client.get("/players/available", params={"latitude": 95, "longitude": 2.35}, headers=auth_headers)

        assert response.status_code == 400


@pytest.mark.asyncio
class TestPlayerRatings:
    """Test player rating endpoints"""

    async def test_player_ratings_paginated(self, client: AsyncClient, rating_service, player_id):
        rating = create_test_rating(playerId=player_id)
        view = RatingView(**{**rating, "raterId": {"_id": rating["raterId"], "name": "Rater"}})
        rating_service.get_player_ratings = AsyncMock(return_value=([view], 11))

        response = await client.get(
            f"/players/{player_id}/ratings",
            params={"limit": 5, "skip": 5, "sortBy": "rating", "order": "asc"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["data"][0]["raterId"]["name"] == "Rater"
        assert data["pagination"]["page"] == 2
        assert data["pagination"]["totalPages"] == 3
        assert data["pagination"]["hasNext"] is True
        kwargs = rating_service.get_player_ratings.await_args.kwargs
        assert kwargs["sort_by"] == "rating"
        assert kwargs["order"] == "asc"

    async def test_player_ratings_invalid_sort(self, client: AsyncClient, rating_service, player_id):
        response = await client.get(f"/players/{player_id}/ratings", params={"sortBy": "name"})

        assert response.status_code == 400

    async def test_average_ratings_without_ratings(self, client: AsyncClient, rating_service, player_id):
        rating_service.get_player_average_ratings = AsyncMock(return_value=AverageRatings())

        response = await client.get(f"/players/{player_id}/ratings/average")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["overall"] == 0
        assert data["totalRatings"] == 0
        assert data["skills"]["pace"] == 0
