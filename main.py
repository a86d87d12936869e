#!/usr/bin/env python
import traceback
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import certifi
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from motor.motor_asyncio import AsyncIOMotorClient
from starlette.exceptions import HTTPException

from config import settings
from exceptions import KickaboutException
from logging_config import logger
from routers.configs import router as configs_router
from routers.matches import router as matches_router
from routers.players import router as players_router
from routers.ratings import router as ratings_router
from routers.root import router as root_router
from routers.users import router as users_router
from services.indexes import ensure_indexes


def create_mongo_client() -> AsyncIOMotorClient:
    options = {
        "maxPoolSize": settings.DB_MAX_POOL_SIZE,
        "minPoolSize": settings.DB_MIN_POOL_SIZE,
        "connectTimeoutMS": 10000,
        "serverSelectionTimeoutMS": 10000,
        "socketTimeoutMS": 45000,
        "retryWrites": True,
        "retryReads": True,
        "tz_aware": True,
    }
    if settings.uses_tls():
        options["tlsCAFile"] = certifi.where()
    return AsyncIOMotorClient(settings.DB_URL, **options)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info("Starting Kickabout API server...")
    logger.info(f"Connecting to MongoDB: {settings.DB_NAME}")
    app.state.client = create_mongo_client()
    app.state.mongodb = app.state.client[settings.DB_NAME]
    await ensure_indexes(app.state.mongodb)
    logger.info("MongoDB connection established")

    yield

    # Shutdown
    logger.info("Shutting down Kickabout API server...")
    app.state.client.close()
    logger.info("MongoDB connection closed")


app = FastAPI(
    lifespan=lifespan,
    title="Kickabout API",
    version="1.0.0",
    description="""
## Kickabout API

Backend for pickup football: find a game, fill a roster, rate the players you played with.

### Key Features

* **Matches** - Create, list, join and invite players to matches, browse them on a map
* **Availability** - Flag yourself available and find available players nearby
* **Ratings** - Rate players on six skills after a completed match
* **Authentication** - JWT-based authentication with refresh tokens

### Authentication

Most write endpoints require authentication. Include the access token in the Authorization header:

```
Authorization: Bearer <your_access_token>
```

Access tokens are short-lived. Use the `/users/refresh` endpoint to get a new token.

### Pagination

List endpoints take `limit` (default 10, max 100) and `skip` query parameters.

### Error Handling

All errors return a standardized format with correlation IDs for debugging:

```json
{
  "error": {
    "message": "Match with resource ID '...' not found",
    "status_code": 404,
    "correlation_id": "uuid",
    "timestamp": "ISO-8601",
    "path": "/matches/..."
  }
}
```
    """,
    openapi_tags=[
        {"name": "matches", "description": "Match lifecycle, rosters and match ratings"},
        {"name": "players", "description": "Available players and player ratings"},
        {"name": "ratings", "description": "Single rating operations"},
        {"name": "users", "description": "Registration, authentication, profiles and availability"},
        {"name": "configs", "description": "Option lists and map configuration"},
    ],
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def error_response(request: Request, message, status_code: int, correlation_id: str, details=None) -> JSONResponse:
    error = {
        "message": message,
        "status_code": status_code,
        "correlation_id": correlation_id,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "path": request.url.path,
    }
    if details is not None:
        error["details"] = details
    return JSONResponse(status_code=status_code, content={"error": error})


# Exception Handlers
# Context goes through bind(): messages carry client input and must not be str.format()ed
@app.exception_handler(KickaboutException)
async def kickabout_exception_handler(request: Request, exc: KickaboutException):
    """Handle all Kickabout custom exceptions"""
    correlation_id = str(uuid.uuid4())

    logger.bind(
        correlation_id=correlation_id,
        status_code=exc.status_code,
        path=request.url.path,
        details=exc.details,
    ).error(f"[{correlation_id}] {exc.__class__.__name__}: {exc.message}")

    return error_response(request, exc.message, exc.status_code, correlation_id, details=exc.details)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies and query parameters are client errors (400)"""
    correlation_id = str(uuid.uuid4())
    errors = jsonable_encoder(exc.errors(), exclude={"ctx", "input"})

    logger.bind(correlation_id=correlation_id, path=request.url.path, errors=errors).error(
        f"[{correlation_id}] RequestValidationError"
    )

    return error_response(request, "Validation error", 400, correlation_id, details={"errors": errors})


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Handle FastAPI HTTPExceptions with consistent format"""
    correlation_id = str(uuid.uuid4())

    logger.bind(
        correlation_id=correlation_id,
        status_code=exc.status_code,
        path=request.url.path,
    ).error(f"[{correlation_id}] HTTPException: {exc.detail}")

    return error_response(request, exc.detail, exc.status_code, correlation_id)


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Catch-all handler for unexpected exceptions"""
    correlation_id = str(uuid.uuid4())

    # Log full traceback for unexpected errors
    logger.bind(
        correlation_id=correlation_id,
        path=request.url.path,
        traceback=traceback.format_exc(),
    ).error(f"[{correlation_id}] Unhandled exception: {str(exc)}")

    return error_response(request, "An unexpected error occurred", 500, correlation_id)


app.include_router(root_router, prefix="", tags=["root"])
app.include_router(configs_router, prefix="/configs", tags=["configs"])

app.include_router(users_router, prefix="/users", tags=["users"])
app.include_router(matches_router, prefix="/matches", tags=["matches"])
app.include_router(players_router, prefix="/players", tags=["players"])
app.include_router(ratings_router, prefix="/ratings", tags=["ratings"])
