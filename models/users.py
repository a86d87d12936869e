from datetime import datetime
from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, EmailStr, Field, TypeAdapter, field_validator

from models.matches import Coordinates, MongoBaseModel
from utils import empty_str_to_none, prevent_empty_str


class Role(str, Enum):
    player = "player"
    team = "team"
    scout = "scout"


class Position(str, Enum):
    GK = "GK"
    DEF = "DEF"
    MID = "MID"
    FWD = "FWD"


class DominantFoot(str, Enum):
    left = "left"
    right = "right"
    both = "both"


class Availability(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    isAvailable: bool = False
    availableUntil: datetime | None = None
    preferredPositions: list[Position] = Field(default_factory=list)
    maxDistance: float | None = Field(default=None, ge=1, le=100)
    location: Coordinates | None = None
    lastUpdated: datetime | None = None


# --- role-discriminated user documents


class UserBase(MongoBaseModel):
    name: str = Field(..., min_length=2, max_length=50)
    email: EmailStr
    profilePicture: str | None = None
    bio: str | None = Field(default=None, max_length=500)
    location: str | None = None
    createdAt: datetime | None = None
    updatedAt: datetime | None = None


class PlayerUser(UserBase):
    role: Literal["player"] = "player"
    position: Position | None = None
    skills: list[str] = Field(default_factory=list)
    age: int | None = Field(default=None, ge=0)
    height: float | None = Field(default=None, gt=0)
    weight: float | None = Field(default=None, gt=0)
    dominantFoot: DominantFoot | None = None
    averageRating: float = 0
    matchesPlayed: int = 0
    availability: Availability = Field(default_factory=Availability)


class TeamUser(UserBase):
    role: Literal["team"] = "team"
    players: list[str] = Field(default_factory=list)
    matches: list[str] = Field(default_factory=list)
    foundedAt: datetime | None = None


class ScoutUser(UserBase):
    role: Literal["scout"] = "scout"
    organization: str | None = None
    playersTracked: list[str] = Field(default_factory=list)


User = Annotated[Union[PlayerUser, TeamUser, ScoutUser], Field(discriminator="role")]

# documents keep the password hash next to the profile, parsing drops it
user_adapter: TypeAdapter[User] = TypeAdapter(User)

USER_MODELS: dict[Role, type[UserBase]] = {
    Role.player: PlayerUser,
    Role.team: TeamUser,
    Role.scout: ScoutUser,
}


def parse_user(document: dict) -> PlayerUser | TeamUser | ScoutUser:
    return user_adapter.validate_python(document)


# --- request bodies


class UserRegister(BaseModel):
    name: str = Field(..., min_length=2, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=6)
    role: Role = Role.player

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v, info):
        return prevent_empty_str(v, info.field_name)

    @field_validator("email")
    @classmethod
    def lower_email(cls, v):
        return v.strip().lower()


class LoginBase(BaseModel):
    email: EmailStr
    password: str = Field(...)


class RefreshRequest(BaseModel):
    refresh_token: str = Field(...)


class UserUpdate(BaseModel):
    """Profile changes; role-specific fields are only accepted for the matching role"""

    model_config = ConfigDict(use_enum_values=True)

    name: str | None = Field(default=None, min_length=2, max_length=50)
    profilePicture: str | None = None
    bio: str | None = Field(default=None, max_length=500)
    location: str | None = None
    # player
    position: Position | None = None
    skills: list[str] | None = None
    age: int | None = Field(default=None, ge=0)
    height: float | None = Field(default=None, gt=0)
    weight: float | None = Field(default=None, gt=0)
    dominantFoot: DominantFoot | None = None
    # team
    foundedAt: datetime | None = None
    # scout
    organization: str | None = None

    # required on the stored user: may change, never clear
    @field_validator("name", "skills", mode="before")
    @classmethod
    def validate_not_null(cls, v, info):
        return prevent_empty_str(v, info.field_name)

    @field_validator("profilePicture", "bio", "location", "organization", mode="before")
    @classmethod
    def validate_empty_strings(cls, v, info):
        return empty_str_to_none(v, info.field_name)


ROLE_FIELDS: dict[Role, set[str]] = {
    Role.player: {"position", "skills", "age", "height", "weight", "dominantFoot"},
    Role.team: {"foundedAt"},
    Role.scout: {"organization"},
}


class AvailabilityUpdate(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    isAvailable: bool = Field(...)
    availableUntil: datetime | None = None
    preferredPositions: list[Position] | None = None
    maxDistance: float | None = Field(default=None, ge=1, le=100)
    location: Coordinates | None = None
    lastUpdated: datetime | None = None


# --- responses


class RegisteredUser(BaseModel):
    id: str = Field(..., serialization_alias="_id")
    name: str
    email: str
    role: Role


class AvailablePlayer(BaseModel):
    id: str = Field(..., serialization_alias="_id")
    name: str
    position: list[Position] = Field(default_factory=list)
    maxDistance: float = 10
    availableUntil: datetime | None = None
    distance: float
