"""
Availability Service - Player availability and proximity search
"""
from typing import Any

from pymongo import ReturnDocument

from exceptions import ResourceNotFoundException
from logging_config import logger
from models.users import Availability, AvailabilityUpdate, AvailablePlayer, Position
from services.db_operation import with_retry
from utils import as_utc, calculate_distance, utc_now

DEFAULT_RADIUS_KM = 10
DEFAULT_MAX_DISTANCE_KM = 10


class AvailabilityService:
    """Service for reading, setting and searching player availability"""

    def __init__(self, mongodb):
        self.db = mongodb

    @with_retry("get_availability")
    async def get_availability(self, player_id: str) -> Availability | None:
        player = await self.db["users"].find_one({"_id": player_id, "role": "player"}, {"availability": 1})
        if player is None:
            raise ResourceNotFoundException(resource_type="Player", resource_id=player_id)
        availability = player.get("availability")
        return Availability(**availability) if availability else None

    @with_retry("set_availability")
    async def set_availability(self, player_id: str, update: AvailabilityUpdate) -> Availability:
        """Replace a player's availability; lastUpdated defaults to now"""
        data = update.model_dump()
        data["preferredPositions"] = data["preferredPositions"] or []
        data["lastUpdated"] = data["lastUpdated"] or utc_now()
        availability = Availability(**data)

        player = await self.db["users"].find_one_and_update(
            {"_id": player_id, "role": "player"},
            {"$set": {"availability": availability.model_dump(), "updatedAt": utc_now()}},
            projection={"availability": 1},
            return_document=ReturnDocument.AFTER,
        )
        if player is None:
            raise ResourceNotFoundException(resource_type="Player", resource_id=player_id)

        logger.bind(is_available=availability.isAvailable).info(
            f"Availability set for player {player_id}"
        )
        return Availability(**player["availability"])

    @with_retry("find_available_players")
    async def find_available_players(
        self,
        latitude: float,
        longitude: float,
        radius_km: float = DEFAULT_RADIUS_KM,
        position: Position | str | None = None,
        exclude_player_id: str | None = None,
    ) -> list[AvailablePlayer]:
        """
        Players currently available within radius_km of a point, nearest first

        A player qualifies when flagged available, availableUntil lies in the
        future, a location is set and, if given, position is among their
        preferred positions.
        """
        query: dict[str, Any] = {
            "role": "player",
            "availability.isAvailable": True,
            "availability.availableUntil": {"$gt": utc_now()},
        }
        if position:
            query["availability.preferredPositions"] = Position(position).value
        if exclude_player_id:
            query["_id"] = {"$ne": exclude_player_id}

        players = await self.db["users"].find(query, {"name": 1, "availability": 1}).to_list(length=None)

        available = []
        for player in players:
            availability = player.get("availability") or {}
            location = availability.get("location")
            if not location:
                continue
            distance = calculate_distance(latitude, longitude, location["latitude"], location["longitude"])
            if distance > radius_km:
                continue
            available.append(
                AvailablePlayer(
                    id=player["_id"],
                    name=player.get("name"),
                    position=availability.get("preferredPositions") or [],
                    maxDistance=availability.get("maxDistance") or DEFAULT_MAX_DISTANCE_KM,
                    availableUntil=as_utc(availability.get("availableUntil")),
                    distance=round(distance, 2),
                )
            )
        available.sort(key=lambda p: p.distance)

        logger.bind(position=position).debug(
            f"Found {len(available)} available players within {radius_km}km"
        )
        return available
