"""Unit tests for AvailabilityService"""
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from exceptions import ResourceNotFoundException
from models.users import AvailabilityUpdate
from services.availability_service import AvailabilityService
from tests.fixtures.data_fixtures import create_test_availability, create_test_user, make_cursor


@pytest.fixture
def availability_service(mock_db):
    """AvailabilityService instance with mocked database"""
    return AvailabilityService(mock_db)


@pytest.fixture
def available_player():
    """Player available at Paris city centre"""
    return create_test_user(name="Alice Martin", availability=create_test_availability())


class TestFindAvailablePlayers:
    """Test proximity search"""

    @pytest.mark.asyncio
    async def test_player_within_radius(self, availability_service, mock_db, available_player):
        mock_db._users.find.return_value = make_cursor([available_player])

        players = await availability_service.find_available_players(48.86, 2.35, radius_km=5)

        assert len(players) == 1
        assert players[0].id == available_player["_id"]
        assert players[0].name == "Alice Martin"
        assert players[0].position == ["MID"]
        assert players[0].distance == pytest.approx(0.41, abs=0.01)

    @pytest.mark.asyncio
    async def test_player_outside_radius(self, availability_service, mock_db, available_player):
        mock_db._users.find.return_value = make_cursor([available_player])

        players = await availability_service.find_available_players(48.86, 2.35, radius_km=0.3)

        assert players == []

    @pytest.mark.asyncio
    async def test_query_requires_live_availability(self, availability_service, mock_db, player_id):
        await availability_service.find_available_players(
            48.86, 2.35, position="GK", exclude_player_id=player_id
        )

        query = mock_db._users.find.call_args.args[0]
        assert query["role"] == "player"
        assert query["availability.isAvailable"] is True
        assert query["availability.availableUntil"]["$gt"] <= datetime.now(timezone.utc)
        assert query["availability.preferredPositions"] == "GK"
        assert query["_id"] == {"$ne": player_id}

    @pytest.mark.asyncio
    async def test_players_without_location_are_skipped(self, availability_service, mock_db):
        player = create_test_user(availability=create_test_availability(location=None))
        mock_db._users.find.return_value = make_cursor([player])

        assert await availability_service.find_available_players(48.86, 2.35) == []

    @pytest.mark.asyncio
    async def test_nearest_first_and_default_max_distance(self, availability_service, mock_db):
        farther = create_test_user(
            availability=create_test_availability(location={"latitude": 48.88, "longitude": 2.36})
        )
        nearer = create_test_user(availability=create_test_availability(maxDistance=None))
        mock_db._users.find.return_value = make_cursor([farther, nearer])

        players = await availability_service.find_available_players(48.8566, 2.3522, radius_km=10)

        assert [p.id for p in players] == [nearer["_id"], farther["_id"]]
        assert players[0].maxDistance == 10


class TestGetSetAvailability:
    """Test reading and replacing the availability record"""

    @pytest.mark.asyncio
    async def test_get_availability(self, availability_service, mock_db, available_player):
        mock_db._users.find_one = AsyncMock(return_value=available_player)

        availability = await availability_service.get_availability(available_player["_id"])

        assert availability.isAvailable is True
        assert availability.location.latitude == 48.8566

    @pytest.mark.asyncio
    async def test_get_availability_not_set(self, availability_service, mock_db, player_id):
        mock_db._users.find_one = AsyncMock(return_value={"_id": player_id})

        assert await availability_service.get_availability(player_id) is None

    @pytest.mark.asyncio
    async def test_get_availability_not_a_player(self, availability_service, player_id):
        with pytest.raises(ResourceNotFoundException):
            await availability_service.get_availability(player_id)

    @pytest.mark.asyncio
    async def test_set_availability(self, availability_service, mock_db, player_id):
        until = datetime.now(timezone.utc) + timedelta(hours=2)
        update = AvailabilityUpdate(
            isAvailable=True,
            availableUntil=until,
            preferredPositions=["FWD"],
            maxDistance=15,
            location={"latitude": 48.85, "longitude": 2.35},
        )

        async def echo(filter_, change, **kwargs):
            return {"_id": player_id, "availability": change["$set"]["availability"]}

        mock_db._users.find_one_and_update = AsyncMock(side_effect=echo)

        availability = await availability_service.set_availability(player_id, update)

        assert availability.isAvailable is True
        assert availability.preferredPositions == ["FWD"]
        assert availability.lastUpdated is not None
        filter_ = mock_db._users.find_one_and_update.await_args.args[0]
        assert filter_ == {"_id": player_id, "role": "player"}

    @pytest.mark.asyncio
    async def test_set_availability_not_a_player(self, availability_service, player_id):
        with pytest.raises(ResourceNotFoundException):
            await availability_service.set_availability(player_id, AvailabilityUpdate(isAvailable=False))
