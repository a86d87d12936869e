"""Test data fixtures and helper functions for creating test documents"""
from datetime import datetime, timedelta, timezone
from typing import Any
from unittest.mock import AsyncMock, MagicMock

from bson import ObjectId
from faker import Faker

fake = Faker()

PARIS = {"latitude": 48.8566, "longitude": 2.3522}


def generate_test_id() -> str:
    """Generate a unique document id"""
    return str(ObjectId())


def make_cursor(items=None):
    """
    Chainable stand-in for a Motor cursor.

    sort(), skip(), limit() and max_time_ms() return the cursor itself,
    to_list() resolves to items.
    """
    cursor = MagicMock()
    for method in ("sort", "skip", "limit", "max_time_ms"):
        getattr(cursor, method).return_value = cursor
    cursor.to_list = AsyncMock(return_value=list(items or []))
    return cursor


def create_test_user(role: str = "player", **overrides) -> dict[str, Any]:
    """Create a user document as stored in MongoDB"""
    now = datetime.now(timezone.utc)
    user = {
        "_id": generate_test_id(),
        "name": fake.name()[:50],
        "email": fake.unique.email().lower(),
        "password": "$argon2id$v=19$m=65536,t=3,p=4$...",
        "role": role,
        "createdAt": now,
        "updatedAt": now,
    }
    user.update(overrides)
    return user


def create_test_availability(**overrides) -> dict[str, Any]:
    """Availability record of a player looking for a game right now"""
    now = datetime.now(timezone.utc)
    availability = {
        "isAvailable": True,
        "availableUntil": now + timedelta(hours=3),
        "preferredPositions": ["MID"],
        "maxDistance": 10,
        "location": dict(PARIS),
        "lastUpdated": now,
    }
    availability.update(overrides)
    return availability


def create_test_location(**overrides) -> dict[str, Any]:
    location = {
        "name": "Park",
        "address": "1 Main St",
        "city": "Paris",
        "coordinates": {"latitude": 48.85, "longitude": 2.35},
    }
    location.update(overrides)
    return location


def create_test_match(**overrides) -> dict[str, Any]:
    """Create a scheduled match document with empty rosters"""
    now = datetime.now(timezone.utc)
    match = {
        "_id": generate_test_id(),
        "date": datetime(2025, 6, 1, 18, 0, tzinfo=timezone.utc),
        "location": create_test_location(),
        "teams": {"home": [], "away": []},
        "status": "scheduled",
        "scores": {"home": 0, "away": 0},
        "createdBy": generate_test_id(),
        "createdAt": now,
        "updatedAt": now,
    }
    match.update(overrides)
    return match


def create_test_skills(**overrides) -> dict[str, int]:
    skills = {
        "pace": 7,
        "shooting": 6,
        "passing": 8,
        "dribbling": 7,
        "defending": 5,
        "physical": 6,
    }
    skills.update(overrides)
    return skills


def create_test_rating(**overrides) -> dict[str, Any]:
    """Create a rating document; averageRating follows the skills"""
    now = datetime.now(timezone.utc)
    rating = {
        "_id": generate_test_id(),
        "matchId": generate_test_id(),
        "playerId": generate_test_id(),
        "raterId": generate_test_id(),
        "skills": create_test_skills(),
        "comments": fake.sentence(),
        "createdAt": now,
        "updatedAt": now,
    }
    rating.update(overrides)
    rating.setdefault("averageRating", round(sum(rating["skills"].values()) / 6, 1))
    return rating
