"""
Standard Response Models

Envelope for rating payloads, used wherever a rating is returned:
/matches/{id}/ratings, /players/{id}/ratings[/average] and /ratings/{id}.
Match, user and availability payloads keep their bare shapes.
Includes pagination support and metadata.
"""

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class PaginationMetadata(BaseModel):
    """Pagination information for list responses"""

    page: int = Field(description="Current page number (1-indexed)")
    limit: int = Field(description="Number of items per page")
    skip: int = Field(description="Number of items skipped")
    total: int = Field(description="Total number of items available")
    totalPages: int = Field(description="Total number of pages")
    hasNext: bool = Field(description="Whether there is a next page")
    hasPrev: bool = Field(description="Whether there is a previous page")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "page": 1,
                "limit": 10,
                "skip": 0,
                "total": 25,
                "totalPages": 3,
                "hasNext": True,
                "hasPrev": False,
            }
        }
    )

    @classmethod
    def from_query(cls, skip: int, limit: int, total: int) -> "PaginationMetadata":
        """Create pagination metadata from skip/limit query parameters"""
        total_pages = (total + limit - 1) // limit if limit > 0 else 0
        page = skip // limit + 1 if limit > 0 else 1

        return cls(
            page=page,
            limit=limit,
            skip=skip,
            total=total,
            totalPages=total_pages,
            hasNext=skip + limit < total,
            hasPrev=skip > 0,
        )


class StandardResponse(BaseModel, Generic[T]):
    """Standard response wrapper for single resource"""

    success: bool = Field(default=True, description="Whether the operation was successful")
    data: T | None = Field(description="Response data")
    message: str | None = Field(default=None, description="Optional success message")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "success": True,
                "data": {"_id": "123", "overall": 7.5},
                "message": "Resource retrieved successfully",
            }
        }
    )


class PaginatedResponse(BaseModel, Generic[T]):
    """Standard response wrapper for paginated lists"""

    success: bool = Field(default=True, description="Whether the operation was successful")
    data: list[T] = Field(description="List of items")
    pagination: PaginationMetadata = Field(description="Pagination information")
    message: str | None = Field(default=None, description="Optional success message")
