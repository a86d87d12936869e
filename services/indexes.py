"""
MongoDB index definitions

Applied at application startup and by scripts/create_indexes.py. The unique
indexes back the one-account-per-email and one-rating-per-rater rules.
"""
from pymongo.errors import OperationFailure

from logging_config import logger

INDEXES: dict[str, list[tuple[list[tuple[str, int]], dict]]] = {
    "users": [
        ([("email", 1)], {"name": "email_unique_idx", "unique": True}),
        ([("role", 1), ("availability.isAvailable", 1)], {"name": "role_availability_idx"}),
    ],
    "matches": [
        ([("date", 1)], {"name": "date_idx"}),
        ([("status", 1), ("date", 1)], {"name": "status_date_idx"}),
        ([("location.city", 1)], {"name": "city_idx"}),
        ([("createdBy", 1)], {"name": "created_by_idx"}),
    ],
    "ratings": [
        (
            [("matchId", 1), ("playerId", 1), ("raterId", 1)],
            {"name": "match_player_rater_unique_idx", "unique": True},
        ),
        ([("playerId", 1), ("createdAt", -1)], {"name": "player_created_idx"}),
        ([("raterId", 1)], {"name": "rater_idx"}),
    ],
}


async def create_index_safe(collection, keys, **kwargs) -> None:
    """Create an index, skipping it if it already exists"""
    index_name = kwargs.get("name", "unnamed")
    try:
        await collection.create_index(keys, **kwargs)
        logger.info(f"  ✓ Created index: {index_name}")
    except OperationFailure as e:
        if "already exists" in str(e) or "IndexOptionsConflict" in str(e):
            logger.info(f"  ↷ Index already exists: {index_name}")
        else:
            logger.error(f"  ✗ Failed to create index {index_name}: {str(e)}")
            raise


async def ensure_indexes(db) -> None:
    for collection_name, indexes in INDEXES.items():
        logger.info(f"Creating {collection_name} collection indexes...")
        for keys, options in indexes:
            await create_index_safe(db[collection_name], keys, **options)
