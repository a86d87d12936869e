# filename routers/users.py
from fastapi import APIRouter, Body, Depends, Path, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from authentication import AuthHandler, TokenPayload
from config import settings
from exceptions import AuthenticationException, AuthorizationException, ConflictException
from logging_config import logger
from models.users import (
    AvailabilityUpdate,
    LoginBase,
    RefreshRequest,
    RegisteredUser,
    UserRegister,
    UserUpdate,
    parse_user,
)
from services.availability_service import AvailabilityService
from services.user_service import UserService

router = APIRouter()
auth = AuthHandler()


def _require_self(token_payload: TokenPayload, user_id: str, action: str) -> None:
    if token_payload.sub != user_id:
        raise AuthorizationException(
            message=f"Not authorized to {action} of another user",
            details={"user_id": user_id},
        )


@router.post("/register", response_description="Register a new user", status_code=status.HTTP_201_CREATED)
async def register(request: Request, new_user: UserRegister = Body(...)) -> JSONResponse:
    mongodb = request.app.state.mongodb
    service = UserService(mongodb)

    if await service.get_user_by_email(new_user.email):
        raise ConflictException(
            resource_type="User",
            message="User already exists",
            details={"email": new_user.email},
            status_code=400,
        )

    created = await service.create_user(new_user, auth.get_password_hash(new_user.password))
    response = RegisteredUser(id=created["_id"], name=created["name"], email=created["email"], role=created["role"])
    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content={"user": jsonable_encoder(response)},
    )


# login user
@router.post("/login", response_description="Login a user")
async def login(request: Request, login_user: LoginBase = Body(...)) -> JSONResponse:
    mongodb = request.app.state.mongodb
    service = UserService(mongodb)

    existing_user = await service.get_user_by_email(login_user.email)
    if existing_user is None or not auth.verify_password(login_user.password, existing_user.get("password")):
        raise AuthenticationException(
            message="Incorrect email and/or password", details={"reason": "invalid_credentials"}
        )

    # Auto-upgrade password from bcrypt to argon2 if needed
    if auth.needs_rehash(existing_user["password"]):
        await service.update_password_hash(existing_user["_id"], auth.get_password_hash(login_user.password))
        logger.info(f"Upgraded password hash for user {existing_user['email']} from bcrypt to argon2")

    access_token = auth.encode_token(existing_user)
    refresh_token = auth.encode_refresh_token(existing_user)

    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content={
            "access_token": access_token,
            "refresh_token": refresh_token,
            "token_type": "bearer",
            "expires_in": settings.ACCESS_TOKEN_EXPIRE_MIN * 60,
            "user": jsonable_encoder(parse_user(existing_user)),
        },
    )


# exchange a refresh token for a new access token
@router.post("/refresh", response_description="Refresh access token")
async def refresh(request: Request, body: RefreshRequest = Body(...)) -> JSONResponse:
    mongodb = request.app.state.mongodb
    user_id = auth.decode_refresh_token(body.refresh_token)
    user = await UserService(mongodb).get_user(user_id)

    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content={
            "access_token": auth.encode_token(user.model_dump(by_alias=True)),
            "token_type": "bearer",
            "expires_in": settings.ACCESS_TOKEN_EXPIRE_MIN * 60,
        },
    )


# get current user
@router.get("/me", response_description="Get current user")
async def me(request: Request, token_payload: TokenPayload = Depends(auth.auth_wrapper)) -> JSONResponse:
    mongodb = request.app.state.mongodb
    user = await UserService(mongodb).get_user(token_payload.sub)
    return JSONResponse(status_code=status.HTTP_200_OK, content=jsonable_encoder(user))


@router.get("/{user_id}", response_description="Get a user profile")
async def get_user(request: Request, user_id: str = Path(..., description="The ID of the user")) -> JSONResponse:
    mongodb = request.app.state.mongodb
    user = await UserService(mongodb).get_user(user_id)
    return JSONResponse(status_code=status.HTTP_200_OK, content=jsonable_encoder(user))


# update user details
@router.patch("/{user_id}", response_description="Update a user")
async def update_user(
    request: Request,
    user_id: str = Path(..., description="The ID of the user"),
    changes: UserUpdate = Body(...),
    token_payload: TokenPayload = Depends(auth.auth_wrapper),
) -> JSONResponse:
    _require_self(token_payload, user_id, "update the profile")
    mongodb = request.app.state.mongodb

    user = await UserService(mongodb).update_user(user_id, changes)
    return JSONResponse(status_code=status.HTTP_200_OK, content=jsonable_encoder(user))


@router.get("/{user_id}/availability", response_description="Get a player's availability")
async def get_availability(
    request: Request,
    user_id: str = Path(..., description="The ID of the player"),
    token_payload: TokenPayload = Depends(auth.auth_wrapper),
) -> JSONResponse:
    _require_self(token_payload, user_id, "view the availability")
    mongodb = request.app.state.mongodb

    availability = await AvailabilityService(mongodb).get_availability(user_id)
    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content={"availability": jsonable_encoder(availability)},
    )


@router.put("/{user_id}/availability", response_description="Set a player's availability")
async def set_availability(
    request: Request,
    user_id: str = Path(..., description="The ID of the player"),
    availability: AvailabilityUpdate = Body(...),
    token_payload: TokenPayload = Depends(auth.auth_wrapper),
) -> JSONResponse:
    _require_self(token_payload, user_id, "change the availability")
    mongodb = request.app.state.mongodb

    updated = await AvailabilityService(mongodb).set_availability(user_id, availability)
    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content={"availability": jsonable_encoder(updated)},
    )
