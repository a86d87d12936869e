"""
Pagination utilities for API responses.

Provides helpers for paginating database queries with skip/limit and for
deriving page numbers from them.
"""

import asyncio
from typing import Any

from motor.motor_asyncio import AsyncIOMotorCollection

from config import settings

DEFAULT_LIMIT = 10
MAX_LIMIT = 100


class PaginationHelper:
    """Helper class for database query pagination"""

    @staticmethod
    def validate_params(skip: int = 0, limit: int = DEFAULT_LIMIT) -> tuple[int, int]:
        """Clamp skip to >= 0 and limit to 1..MAX_LIMIT"""
        return max(0, skip), max(1, min(limit, MAX_LIMIT))

    @staticmethod
    async def paginate_query(
        collection: AsyncIOMotorCollection,
        query: dict[str, Any],
        skip: int = 0,
        limit: int = DEFAULT_LIMIT,
        sort: list[tuple[str, int]] | None = None,
        projection: dict[str, int] | None = None,
    ) -> tuple[list[dict[str, Any]], int]:
        """
        Paginate a MongoDB query.

        Args:
            collection: MongoDB collection to query
            query: MongoDB query filter
            skip: Number of documents to skip
            limit: Maximum number of documents to return
            sort: Optional list of (field, direction) tuples for sorting
            projection: Optional MongoDB projection specification

        Returns:
            Tuple of (items, total_count)
        """
        skip, limit = PaginationHelper.validate_params(skip, limit)
        max_time_ms = int(settings.DB_TIMEOUT_SECONDS * 1000)

        cursor = collection.find(query, projection).max_time_ms(max_time_ms)
        if sort:
            cursor = cursor.sort(sort)
        cursor = cursor.skip(skip).limit(limit)

        items, total_count = await asyncio.gather(
            cursor.to_list(length=limit),
            collection.count_documents(query, maxTimeMS=max_time_ms),
        )
        return items, total_count

    @staticmethod
    def page_info(skip: int, limit: int, total_count: int) -> dict[str, int]:
        """Page number (1-indexed) and page count for a skip/limit window"""
        skip, limit = PaginationHelper.validate_params(skip, limit)
        return {
            "page": skip // limit + 1,
            "totalPages": (total_count + limit - 1) // limit,
        }
