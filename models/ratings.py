from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from models.matches import Location, MongoBaseModel, UserRef
from utils import prevent_empty_str

SKILL_NAMES = ("pace", "shooting", "passing", "dribbling", "defending", "physical")


class Skills(BaseModel):
    pace: int = Field(..., ge=1, le=10)
    shooting: int = Field(..., ge=1, le=10)
    passing: int = Field(..., ge=1, le=10)
    dribbling: int = Field(..., ge=1, le=10)
    defending: int = Field(..., ge=1, le=10)
    physical: int = Field(..., ge=1, le=10)

    def average(self) -> float:
        return round(sum(getattr(self, name) for name in SKILL_NAMES) / len(SKILL_NAMES), 1)


class SkillsUpdate(BaseModel):
    pace: int | None = Field(default=None, ge=1, le=10)
    shooting: int | None = Field(default=None, ge=1, le=10)
    passing: int | None = Field(default=None, ge=1, le=10)
    dribbling: int | None = Field(default=None, ge=1, le=10)
    defending: int | None = Field(default=None, ge=1, le=10)
    physical: int | None = Field(default=None, ge=1, le=10)


class RatingBase(MongoBaseModel):
    matchId: str = Field(...)
    playerId: str = Field(...)
    raterId: str = Field(...)
    skills: Skills = Field(...)
    comments: str | None = Field(default=None, max_length=500)
    averageRating: float = 0
    createdAt: datetime | None = None
    updatedAt: datetime | None = None


class RatingDB(RatingBase):
    pass


class RatedMatch(BaseModel):
    id: str = Field(..., alias="_id")
    date: datetime | None = None
    location: Location | None = None


class RatingView(MongoBaseModel):
    """Rating with match, player and rater references resolved for display"""

    matchId: str | RatedMatch
    playerId: str | UserRef
    raterId: str | UserRef
    skills: Skills
    comments: str | None = None
    averageRating: float = 0
    createdAt: datetime | None = None
    updatedAt: datetime | None = None


# --- request bodies


class RatingCreate(BaseModel):
    playerId: str = Field(...)
    skills: Skills = Field(...)
    comments: str | None = Field(default=None, max_length=500)

    @field_validator("playerId", mode="before")
    @classmethod
    def validate_null_strings(cls, v, info):
        return prevent_empty_str(v, info.field_name)


class RatingUpdate(BaseModel):
    skills: SkillsUpdate = Field(default_factory=SkillsUpdate)
    comments: str | None = Field(default=None, max_length=500)


RatingSortField = Literal["date", "rating"]
SortOrder = Literal["asc", "desc"]


# --- responses


class AverageRatings(BaseModel):
    overall: float = 0
    skills: dict[str, float] = Field(default_factory=lambda: {name: 0 for name in SKILL_NAMES})
    totalRatings: int = 0
