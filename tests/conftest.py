"""
Shared pytest fixtures for all tests.
This file is automatically loaded by pytest.
"""
import os
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from bson import ObjectId
from httpx import ASGITransport, AsyncClient

# CRITICAL: environment must be set BEFORE importing any settings
os.environ["DB_URL"] = "mongodb://localhost:27017"
os.environ["DB_NAME"] = "kickabout_test"
os.environ["SECRET_KEY"] = "test-secret-key-do-not-use-in-production"
os.environ["ENVIRONMENT"] = "test"
os.environ["DEBUG_LEVEL"] = "0"

from main import app  # noqa: E402
from tests.fixtures.data_fixtures import make_cursor  # noqa: E402


# Override the lifespan to prevent a database connection during tests
@asynccontextmanager
async def test_lifespan(app):
    """Test lifespan that doesn't connect to any database"""
    yield


app.router.lifespan_context = test_lifespan


@pytest.fixture
def mock_db():
    """
    Mock MongoDB database with users, matches and ratings collections.

    Collections are reachable as db["matches"] and as db._matches etc. so
    tests can set return values.
    """
    db = MagicMock()
    collections = {}
    for name in ("users", "matches", "ratings"):
        collection = MagicMock()
        collection.find_one = AsyncMock(return_value=None)
        collection.find_one_and_update = AsyncMock(return_value=None)
        collection.insert_one = AsyncMock()
        collection.update_one = AsyncMock()
        collection.delete_one = AsyncMock(return_value=MagicMock(deleted_count=1))
        collection.count_documents = AsyncMock(return_value=0)
        collection.find = MagicMock(return_value=make_cursor())
        collection.aggregate = MagicMock(return_value=make_cursor())
        collections[name] = collection
        setattr(db, f"_{name}", collection)

    db.__getitem__ = MagicMock(side_effect=lambda name: collections.get(name))
    return db


@pytest.fixture
def no_retry_delay(monkeypatch):
    """Skip the backoff sleeps of the database operation guard"""
    sleep = AsyncMock()
    monkeypatch.setattr("services.db_operation.asyncio.sleep", sleep)
    return sleep


@pytest.fixture
def player_id():
    return str(ObjectId())


@pytest.fixture
def other_player_id():
    return str(ObjectId())


@pytest.fixture
def auth_headers(player_id):
    """Bearer header for a player account"""
    from authentication import AuthHandler

    token = AuthHandler().encode_token(
        {"_id": player_id, "role": "player", "name": "Test Player", "email": "player@example.com"}
    )
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def client():
    """HTTP client for API testing, services are patched per test"""
    app.state.mongodb = MagicMock()
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.state.mongodb = None
