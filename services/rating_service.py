"""
Rating Service - Peer skill ratings for players of completed matches

Ratings are immutable in match/player/rater and unique per that triple. Every
write refreshes the player's stored averageRating.
"""
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
from models.matches import MatchStatus
from models.ratings import (
    SKILL_NAMES,
    AverageRatings,
    RatingDB,
    RatingView,
    Skills,
    SkillsUpdate,
)
from services.db_operation import with_retry
from services.pagination import DEFAULT_LIMIT, PaginationHelper
from utils import utc_now

SORT_FIELDS = {"date": "createdAt", "rating": "averageRating"}


class RatingService:
    """Service for creating, querying and aggregating player ratings"""

    def __init__(self, mongodb):
        self.db = mongodb

    async def _get_rating(self, rating_id: str) -> dict:
        rating = await self.db["ratings"].find_one({"_id": rating_id})
        if rating is None:
            raise ResourceNotFoundException(resource_type="Rating", resource_id=rating_id)
        return rating

    @staticmethod
    def _check_rater(rating: dict, user_id: str, action: str) -> None:
        if rating.get("raterId") != user_id:
            raise AuthorizationException(
                message=f"Only the rater can {action} this rating",
                details={"rating_id": rating["_id"], "user_id": user_id},
            )

    async def _find_by_ids(self, collection: str, ids: list[str], projection: dict) -> dict[str, dict]:
        unique_ids = list({doc_id for doc_id in ids if doc_id})
        if not unique_ids:
            return {}
        docs = await self.db[collection].find({"_id": {"$in": unique_ids}}, projection).to_list(length=None)
        return {doc["_id"]: doc for doc in docs}

    async def _populate(self, ratings: list[dict], with_match: bool = False, with_player: bool = False) -> list[RatingView]:
        """Resolve the referenced rater, and optionally match and player, of each rating"""
        user_ids = [r["raterId"] for r in ratings]
        if with_player:
            user_ids += [r["playerId"] for r in ratings]
        users = await self._find_by_ids("users", user_ids, {"name": 1})
        matches = {}
        if with_match:
            matches = await self._find_by_ids("matches", [r["matchId"] for r in ratings], {"date": 1, "location": 1})

        views = []
        for rating in ratings:
            data = {**rating}
            data["raterId"] = {"_id": rating["raterId"], "name": users.get(rating["raterId"], {}).get("name")}
            if with_player:
                data["playerId"] = {"_id": rating["playerId"], "name": users.get(rating["playerId"], {}).get("name")}
            if with_match and rating["matchId"] in matches:
                data["matchId"] = matches[rating["matchId"]]
            views.append(RatingView(**data))
        return views

    async def _compute_averages(self, player_id: str) -> AverageRatings:
        group: dict[str, Any] = {"_id": None, "totalRatings": {"$sum": 1}}
        for name in SKILL_NAMES:
            group[name] = {"$avg": f"$skills.{name}"}

        results = await self.db["ratings"].aggregate(
            [{"$match": {"playerId": player_id}}, {"$group": group}]
        ).to_list(length=1)
        if not results:
            return AverageRatings()

        row = results[0]
        skills = {name: round(row.get(name) or 0, 1) for name in SKILL_NAMES}
        overall = round(sum(skills.values()) / len(SKILL_NAMES), 1)
        return AverageRatings(overall=overall, skills=skills, totalRatings=row["totalRatings"])

    @with_retry("refresh_player_average")
    async def _refresh_player_average(self, player_id: str) -> None:
        averages = await self._compute_averages(player_id)
        await self.db["users"].update_one(
            {"_id": player_id, "role": "player"},
            {"$set": {"averageRating": averages.overall}},
        )
        logger.debug(f"Player {player_id} averageRating refreshed to {averages.overall}")

    async def create_rating(
        self,
        match_id: str,
        player_id: str,
        rater_id: str,
        skills: Skills,
        comments: str | None = None,
    ) -> RatingDB:
        """
        Rate a participant of a completed match

        The rating id is generated here, outside the retried insert, so an
        insert replayed after a lost acknowledgement is recognised as ours.
        """
        await self._check_rateable(match_id, player_id)

        now = utc_now()
        rating = RatingDB(
            matchId=match_id,
            playerId=player_id,
            raterId=rater_id,
            skills=skills,
            comments=comments,
            averageRating=skills.average(),
            createdAt=now,
            updatedAt=now,
        )
        await self._insert_rating(rating.model_dump(by_alias=True))

        await self._refresh_player_average(player_id)
        logger.bind(match_id=match_id, player_id=player_id, rater_id=rater_id).info(
            f"Rating created: {rating.id}"
        )
        return rating

    @with_retry("create_rating")
    async def _check_rateable(self, match_id: str, player_id: str) -> None:
        match = await self.db["matches"].find_one({"_id": match_id}, {"status": 1, "teams": 1})
        if match is None:
            raise ResourceNotFoundException(resource_type="Match", resource_id=match_id)

        current_status = match.get("status")
        if current_status != MatchStatus.completed.value:
            raise InvalidStateException(
                resource_type="Match",
                current_state=current_status,
                message="Can only rate players after match is completed",
                details={"match_id": match_id},
            )

        teams = match.get("teams") or {}
        if player_id not in (teams.get("home") or []) + (teams.get("away") or []):
            raise ValidationException(
                field="playerId",
                message="Player was not in this match",
                details={"match_id": match_id, "player_id": player_id},
            )

    @with_retry("create_rating")
    async def _insert_rating(self, document: dict) -> None:
        try:
            await self.db["ratings"].insert_one(document)
        except DuplicateKeyError as e:
            triple = {key: document[key] for key in ("matchId", "playerId", "raterId")}
            stored = await self.db["ratings"].find_one(triple, {"_id": 1})
            if stored is not None and stored["_id"] == document["_id"]:
                logger.debug(f"Rating {document['_id']} already stored by a previous attempt")
                return
            raise ConflictException(
                resource_type="Rating",
                message="Player has already been rated by this user for this match",
                details={
                    "match_id": triple["matchId"],
                    "player_id": triple["playerId"],
                    "rater_id": triple["raterId"],
                },
            ) from e

    @with_retry("get_rating_by_id")
    async def get_rating_by_id(self, rating_id: str) -> RatingDB:
        return RatingDB(**await self._get_rating(rating_id))

    @with_retry("get_player_ratings")
    async def get_player_ratings(
        self,
        player_id: str,
        limit: int = DEFAULT_LIMIT,
        skip: int = 0,
        sort_by: str = "date",
        order: str = "desc",
    ) -> tuple[list[RatingView], int]:
        """
        Page through a player's ratings, newest first by default

        Args:
            sort_by: "date" (creation time) or "rating" (average of the six skills)
            order: "asc" or "desc"

        Returns:
            Tuple of (ratings, total_count), match and rater resolved
        """
        if sort_by not in SORT_FIELDS:
            raise ValidationException(field="sortBy", message=f"Must be one of {list(SORT_FIELDS)}")
        if order not in ["asc", "desc"]:
            raise ValidationException(field="order", message="Must be 'asc' or 'desc'")

        items, total_count = await PaginationHelper.paginate_query(
            collection=self.db["ratings"],
            query={"playerId": player_id},
            skip=skip,
            limit=limit,
            sort=[(SORT_FIELDS[sort_by], -1 if order == "desc" else 1)],
        )
        return await self._populate(items, with_match=True), total_count

    @with_retry("get_match_ratings")
    async def get_match_ratings(self, match_id: str) -> list[RatingView]:
        ratings = await self.db["ratings"].find({"matchId": match_id}).sort("createdAt", -1).to_list(length=None)
        return await self._populate(ratings, with_player=True)

    @with_retry("get_player_average_ratings")
    async def get_player_average_ratings(self, player_id: str) -> AverageRatings:
        return await self._compute_averages(player_id)

    @with_retry("update_rating")
    async def update_rating(
        self,
        rating_id: str,
        skills: SkillsUpdate | None = None,
        comments: str | None = None,
        requested_by: str | None = None,
    ) -> RatingDB:
        """Change skill scores and/or comments; ids and createdAt stay untouched"""
        rating = await self._get_rating(rating_id)
        if requested_by is not None:
            self._check_rater(rating, requested_by, "update")

        changes = skills.model_dump(exclude_none=True) if skills else {}
        merged = Skills(**{**rating["skills"], **changes})

        update: dict[str, Any] = {"updatedAt": utc_now(), "averageRating": merged.average()}
        for name, value in changes.items():
            update[f"skills.{name}"] = value
        if comments is not None:
            update["comments"] = comments

        updated = await self.db["ratings"].find_one_and_update(
            {"_id": rating_id}, {"$set": update}, return_document=ReturnDocument.AFTER
        )
        if updated is None:
            raise ResourceNotFoundException(resource_type="Rating", resource_id=rating_id)

        await self._refresh_player_average(updated["playerId"])
        logger.info(f"Rating updated: {rating_id}")
        return RatingDB(**updated)

    @with_retry("delete_rating")
    async def delete_rating(self, rating_id: str, requested_by: str | None = None) -> None:
        rating = await self._get_rating(rating_id)
        if requested_by is not None:
            self._check_rater(rating, requested_by, "delete")

        result = await self.db["ratings"].delete_one({"_id": rating_id})
        if result.deleted_count == 0:
            raise ResourceNotFoundException(resource_type="Rating", resource_id=rating_id)

        await self._refresh_player_average(rating["playerId"])
        logger.info(f"Rating deleted: {rating_id}")
