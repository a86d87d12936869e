from datetime import datetime
from enum import Enum
from typing import Literal

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_core import core_schema

from utils import prevent_empty_str


class PyObjectId(ObjectId):

    @classmethod
    def __get_pydantic_core_schema__(cls, source_type, handler):

        def validate_object_id(value: str, _info) -> ObjectId:
            if isinstance(value, ObjectId):
                return value
            if not ObjectId.is_valid(value):
                raise ValueError("Invalid ObjectId")
            return ObjectId(value)

        return core_schema.with_info_plain_validator_function(
            validate_object_id,
            serialization=core_schema.plain_serializer_function_ser_schema(
                lambda x: str(x), return_schema=core_schema.str_schema()
            ),
        )

    @classmethod
    def __get_pydantic_json_schema__(cls, schema, handler):
        return {"type": "string", "format": "objectid"}


class MongoBaseModel(BaseModel):
    model_config = ConfigDict(
        populate_by_name=True,
        arbitrary_types_allowed=True,
        use_enum_values=True,
        validate_default=True,
    )

    id: PyObjectId = Field(default_factory=PyObjectId, alias="_id")


class MatchStatus(str, Enum):
    scheduled = "scheduled"
    in_progress = "in-progress"
    completed = "completed"


# lifecycle order used to flag out-of-order transitions
STATUS_ORDER = [MatchStatus.scheduled, MatchStatus.in_progress, MatchStatus.completed]

TeamFlag = Literal["home", "away"]


# --- sub documents without _id


class Coordinates(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class Location(BaseModel):
    name: str = Field(...)
    address: str = Field(...)
    city: str = Field(...)
    coordinates: Coordinates = Field(...)

    @field_validator("name", "address", "city", mode="before")
    @classmethod
    def validate_null_strings(cls, v, info):
        return prevent_empty_str(v, info.field_name)


class Teams(BaseModel):
    home: list[str] = Field(default_factory=list)
    away: list[str] = Field(default_factory=list)


class Scores(BaseModel):
    home: int = Field(default=0, ge=0)
    away: int = Field(default=0, ge=0)


class UserRef(BaseModel):
    """A user id resolved to its display name"""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id")
    name: str | None = None


class TeamsView(BaseModel):
    home: list[UserRef] = Field(default_factory=list)
    away: list[UserRef] = Field(default_factory=list)


# --- main document


class MatchBase(MongoBaseModel):
    date: datetime = Field(...)
    location: Location = Field(...)
    teams: Teams = Field(default_factory=Teams)
    status: MatchStatus = MatchStatus.scheduled
    scores: Scores = Field(default_factory=Scores)
    createdBy: str = Field(...)
    createdAt: datetime | None = None
    updatedAt: datetime | None = None


class MatchDB(MatchBase):
    pass


class MatchView(MongoBaseModel):
    """Match as returned by the read endpoints, rosters and creator resolved to names"""

    date: datetime
    location: Location
    teams: TeamsView = Field(default_factory=TeamsView)
    status: MatchStatus
    scores: Scores = Field(default_factory=Scores)
    createdBy: UserRef
    createdAt: datetime | None = None
    updatedAt: datetime | None = None
    distance: float | None = None


# --- request bodies


class MatchCreate(BaseModel):
    date: datetime = Field(...)
    location: Location = Field(...)


class MatchStatusUpdate(BaseModel):
    status: MatchStatus = Field(...)
    scores: Scores | None = None


class JoinMatch(BaseModel):
    team: TeamFlag = Field(...)


class InvitePlayer(BaseModel):
    playerId: str = Field(...)

    @field_validator("playerId", mode="before")
    @classmethod
    def validate_null_strings(cls, v, info):
        return prevent_empty_str(v, info.field_name)


# --- responses


class MatchListResponse(BaseModel):
    matches: list[MatchView]
    total: int
    page: int
    totalPages: int
