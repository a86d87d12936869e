"""
Match Service - Business logic for match lifecycle and rosters

Handles match creation, listing, proximity search, roster joins and invites,
status/score updates and deletion.
"""
from datetime import datetime
from typing import Any

from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from exceptions import (
    AuthorizationException,
    ConflictException,
    InvalidStateException,
    ResourceNotFoundException,
    ValidationException,
)
from logging_config import logger
from models.matches import STATUS_ORDER, Location, MatchDB, MatchStatus, MatchView, Scores
from services.db_operation import with_retry
from services.pagination import DEFAULT_LIMIT, PaginationHelper
from utils import calculate_distance, utc_now


class MatchService:
    """Service for managing matches and their rosters"""

    def __init__(self, mongodb):
        self.db = mongodb

    async def _get_match(self, match_id: str) -> dict:
        """Get match document or raise exception"""
        match = await self.db["matches"].find_one({"_id": match_id})
        if match is None:
            raise ResourceNotFoundException(resource_type="Match", resource_id=match_id)
        return match

    @staticmethod
    def _validate_team_flag(team: str) -> str:
        team = (team or "").lower()
        if team not in ["home", "away"]:
            raise ValidationException(field="team", message=f"Must be 'home' or 'away', got '{team}'")
        return team

    @staticmethod
    def _check_creator(match: dict, user_id: str, action: str) -> None:
        if match.get("createdBy") != user_id:
            raise AuthorizationException(
                message=f"Only the match creator can {action} this match",
                details={"match_id": match["_id"], "user_id": user_id},
            )

    async def _resolve_names(self, user_ids: list[str]) -> dict[str, str | None]:
        ids = list({user_id for user_id in user_ids if user_id})
        if not ids:
            return {}
        users = await self.db["users"].find({"_id": {"$in": ids}}, {"name": 1}).to_list(length=None)
        return {user["_id"]: user.get("name") for user in users}

    async def _populate(self, matches: list[dict]) -> list[MatchView]:
        """Resolve roster entries and creators of the given matches to names"""
        user_ids = []
        for match in matches:
            teams = match.get("teams") or {}
            user_ids.extend(teams.get("home") or [])
            user_ids.extend(teams.get("away") or [])
            user_ids.append(match.get("createdBy"))
        names = await self._resolve_names(user_ids)

        views = []
        for match in matches:
            teams = match.get("teams") or {}
            data = {
                **match,
                "teams": {
                    flag: [{"_id": pid, "name": names.get(pid)} for pid in teams.get(flag) or []]
                    for flag in ("home", "away")
                },
                "createdBy": {"_id": match.get("createdBy"), "name": names.get(match.get("createdBy"))},
            }
            views.append(MatchView(**data))
        return views

    @staticmethod
    def _check_joinable(match: dict, player_id: str, conflict_status: int = 409) -> None:
        current_status = match.get("status")
        if current_status != MatchStatus.scheduled.value:
            raise InvalidStateException(
                resource_type="Match",
                current_state=current_status,
                message="Cannot join a match that is not in scheduled status",
                details={"match_id": match["_id"]},
            )
        teams = match.get("teams") or {}
        if player_id in (teams.get("home") or []) or player_id in (teams.get("away") or []):
            raise ConflictException(
                resource_type="Match",
                message="Player is already in a team",
                details={"match_id": match["_id"], "player_id": player_id},
                status_code=conflict_status,
            )

    @with_retry("add_to_roster")
    async def _add_to_roster(
        self, match_id: str, player_id: str, team: str, conflict_status: int = 409
    ) -> dict:
        """
        Append a player to a roster in one atomic conditional update.

        The filter only matches a scheduled match that has the player on neither
        roster, so two concurrent joins can never both push the same id.
        Callers check the player is absent beforehand: finding the player on
        the requested roster after a miss means an earlier attempt was applied.
        """
        updated = await self.db["matches"].find_one_and_update(
            {
                "_id": match_id,
                "status": MatchStatus.scheduled.value,
                "teams.home": {"$ne": player_id},
                "teams.away": {"$ne": player_id},
            },
            {"$push": {f"teams.{team}": player_id}, "$set": {"updatedAt": utc_now()}},
            return_document=ReturnDocument.AFTER,
        )
        if updated is not None:
            return updated

        match = await self._get_match(match_id)
        if player_id in ((match.get("teams") or {}).get(team) or []):
            logger.debug(f"Player {player_id} already on {team} of match {match_id}, push was applied")
            return match
        self._check_joinable(match, player_id, conflict_status)
        raise ConflictException(
            resource_type="Match",
            message="Roster changed during the update, please retry",
            details={"match_id": match_id, "player_id": player_id},
            status_code=conflict_status,
        )

    async def create_match(self, date: datetime, location: Location, created_by: str) -> MatchDB:
        """
        Create a scheduled match with empty rosters and a 0-0 score

        The document id is generated here, outside the retried insert, so a
        retry after a lost acknowledgement cannot store the match twice.
        """
        now = utc_now()
        match = MatchDB(
            date=date,
            location=location,
            createdBy=created_by,
            createdAt=now,
            updatedAt=now,
        )
        await self._insert_match(match.model_dump(by_alias=True))
        logger.bind(created_by=created_by).info(f"Match created: {match.id}")
        return match

    @with_retry("create_match")
    async def _insert_match(self, document: dict) -> None:
        try:
            await self.db["matches"].insert_one(document)
        except DuplicateKeyError:
            # an earlier attempt stored this document before its connection dropped
            logger.debug(f"Match {document['_id']} already stored by a previous attempt")

    @with_retry("get_match_by_id")
    async def get_match_by_id(self, match_id: str) -> MatchView:
        match = await self._get_match(match_id)
        views = await self._populate([match])
        return views[0]

    @with_retry("get_matches")
    async def get_matches(
        self,
        status: MatchStatus | str | None = None,
        city: str | None = None,
        date_from: datetime | None = None,
        date_to: datetime | None = None,
        limit: int = DEFAULT_LIMIT,
        skip: int = 0,
    ) -> tuple[list[MatchView], int]:
        """
        Get a page of matches sorted by date, filters are combined with AND

        Returns:
            Tuple of (matches, total_count)
        """
        query: dict[str, Any] = {}
        if status:
            query["status"] = MatchStatus(status).value
        if city:
            query["location.city"] = city
        if date_from or date_to:
            query["date"] = {}
            if date_from:
                query["date"]["$gte"] = date_from
            if date_to:
                query["date"]["$lte"] = date_to

        logger.bind(query=query, limit=limit, skip=skip).debug("Fetching matches")

        items, total_count = await PaginationHelper.paginate_query(
            collection=self.db["matches"],
            query=query,
            skip=skip,
            limit=limit,
            sort=[("date", 1)],
        )
        return await self._populate(items), total_count

    @with_retry("get_matches_near")
    async def get_matches_near(
        self,
        latitude: float,
        longitude: float,
        radius_km: float,
        status: MatchStatus | str | None = None,
    ) -> list[MatchView]:
        """Matches within radius_km of a point, nearest first, each with its distance in km"""
        query: dict[str, Any] = {"location.coordinates": {"$exists": True}}
        if status:
            query["status"] = MatchStatus(status).value

        matches = await self.db["matches"].find(query).sort("date", 1).to_list(length=None)

        nearby = []
        for match in matches:
            coordinates = match["location"]["coordinates"]
            distance = calculate_distance(
                latitude, longitude, coordinates["latitude"], coordinates["longitude"]
            )
            if distance <= radius_km:
                match["distance"] = round(distance, 2)
                nearby.append(match)
        nearby.sort(key=lambda m: m["distance"])

        return await self._populate(nearby)

    @with_retry("join_match")
    async def join_match(self, match_id: str, player_id: str, team: str) -> MatchDB:
        team = self._validate_team_flag(team)
        match = await self._get_match(match_id)
        self._check_joinable(match, player_id)

        updated = await self._add_to_roster(match_id, player_id, team)

        logger.info(f"Player {player_id} joined match {match_id} ({team})")
        return MatchDB(**updated)

    @with_retry("invite_player")
    async def invite_player(self, match_id: str, player_id: str, invited_by: str) -> MatchDB:
        """Creator adds a player to whichever roster is shorter (home on ties)"""
        match = await self._get_match(match_id)
        self._check_creator(match, invited_by, "invite players to")

        current_status = match.get("status")
        if current_status != MatchStatus.scheduled.value:
            raise InvalidStateException(
                resource_type="Match",
                current_state=current_status,
                message="Can only invite players to scheduled matches",
                details={"match_id": match_id},
            )

        if await self.db["users"].find_one({"_id": player_id}, {"_id": 1}) is None:
            raise ResourceNotFoundException(resource_type="Player", resource_id=player_id)

        teams = match.get("teams") or {}
        home = teams.get("home") or []
        away = teams.get("away") or []
        if player_id in home or player_id in away:
            raise ConflictException(
                resource_type="Match",
                message="Player is already in the match",
                details={"match_id": match_id, "player_id": player_id},
                status_code=400,
            )

        team = "home" if len(home) <= len(away) else "away"
        updated = await self._add_to_roster(match_id, player_id, team, conflict_status=400)

        logger.info(f"Player {player_id} invited to match {match_id} ({team}) by {invited_by}")
        return MatchDB(**updated)

    @staticmethod
    def _log_transition(match: dict, new_status: MatchStatus) -> None:
        """Any transition is allowed, anything but one step forward is flagged"""
        current = match.get("status")
        if current == new_status.value:
            return
        order = [status.value for status in STATUS_ORDER]
        if current not in order or order.index(new_status.value) != order.index(current) + 1:
            logger.bind(match_id=match["_id"], from_status=current, to_status=new_status.value).warning(
                f"Out-of-order status transition for match {match['_id']}: {current} -> {new_status.value}"
            )

    @with_retry("update_match_status")
    async def update_match_status(
        self,
        match_id: str,
        status: MatchStatus | str,
        scores: Scores | None = None,
        requested_by: str | None = None,
    ) -> MatchDB:
        new_status = MatchStatus(status)
        match = await self._get_match(match_id)
        if requested_by is not None:
            self._check_creator(match, requested_by, "update")

        self._log_transition(match, new_status)

        update: dict[str, Any] = {"status": new_status.value, "updatedAt": utc_now()}
        if scores is not None:
            update["scores"] = scores.model_dump()

        updated = await self.db["matches"].find_one_and_update(
            {"_id": match_id}, {"$set": update}, return_document=ReturnDocument.AFTER
        )
        if updated is None:
            raise ResourceNotFoundException(resource_type="Match", resource_id=match_id)

        logger.info(f"Match {match_id} status set to {new_status.value}")
        return MatchDB(**updated)

    @with_retry("delete_match")
    async def delete_match(self, match_id: str, requested_by: str | None = None) -> None:
        if requested_by is not None:
            match = await self._get_match(match_id)
            self._check_creator(match, requested_by, "delete")

        result = await self.db["matches"].delete_one({"_id": match_id})
        if result.deleted_count == 0:
            raise ResourceNotFoundException(resource_type="Match", resource_id=match_id)

        logger.info(f"Match deleted: {match_id}")
