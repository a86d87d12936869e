from datetime import datetime

from fastapi import APIRouter, Body, Depends, Path, Query, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse, Response

from authentication import AuthHandler, TokenPayload
from models.matches import InvitePlayer, JoinMatch, MatchCreate, MatchStatus, MatchStatusUpdate
from models.ratings import RatingCreate, RatingDB, RatingView
from models.responses import StandardResponse
from services.match_service import MatchService
from services.pagination import DEFAULT_LIMIT, MAX_LIMIT, PaginationHelper
from services.rating_service import RatingService

router = APIRouter()
auth_handler = AuthHandler()


@router.post("", response_description="Add new match", status_code=status.HTTP_201_CREATED)
async def create_match(
    request: Request,
    match: MatchCreate = Body(...),
    token_payload: TokenPayload = Depends(auth_handler.auth_wrapper),
) -> JSONResponse:
    mongodb = request.app.state.mongodb
    service = MatchService(mongodb)

    new_match = await service.create_match(match.date, match.location, created_by=token_payload.sub)
    return JSONResponse(status_code=status.HTTP_201_CREATED, content=jsonable_encoder(new_match))


@router.get("", response_description="List matches")
async def list_matches(
    request: Request,
    match_status: MatchStatus | None = Query(None, alias="status", description="Filter by status"),
    city: str | None = Query(None, description="Filter by city"),
    start_date: datetime | None = Query(None, alias="startDate", description="Earliest match date"),
    end_date: datetime | None = Query(None, alias="endDate", description="Latest match date"),
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT, description="Items per page"),
    skip: int = Query(0, ge=0, description="Items to skip"),
) -> JSONResponse:
    mongodb = request.app.state.mongodb
    service = MatchService(mongodb)

    matches, total_count = await service.get_matches(
        status=match_status,
        city=city,
        date_from=start_date,
        date_to=end_date,
        limit=limit,
        skip=skip,
    )
    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content={
            "matches": jsonable_encoder(matches),
            "total": total_count,
            **PaginationHelper.page_info(skip, limit, total_count),
        },
    )


# matches on the map around a point
@router.get("/nearby", response_description="List matches near a location")
async def list_nearby_matches(
    request: Request,
    latitude: float = Query(..., ge=-90, le=90),
    longitude: float = Query(..., ge=-180, le=180),
    distance: float = Query(10, gt=0, description="Search radius in kilometers"),
    match_status: MatchStatus | None = Query(None, alias="status"),
) -> JSONResponse:
    mongodb = request.app.state.mongodb
    service = MatchService(mongodb)

    matches = await service.get_matches_near(latitude, longitude, distance, status=match_status)
    return JSONResponse(status_code=status.HTTP_200_OK, content={"matches": jsonable_encoder(matches)})


@router.get("/{match_id}", response_description="Get one match")
async def get_match(
    request: Request,
    match_id: str = Path(..., description="The ID of the match"),
) -> JSONResponse:
    mongodb = request.app.state.mongodb
    match = await MatchService(mongodb).get_match_by_id(match_id)
    return JSONResponse(status_code=status.HTTP_200_OK, content=jsonable_encoder(match))


@router.patch("/{match_id}", response_description="Update match status and scores")
async def update_match(
    request: Request,
    match_id: str = Path(..., description="The ID of the match"),
    update: MatchStatusUpdate = Body(...),
    token_payload: TokenPayload = Depends(auth_handler.auth_wrapper),
) -> JSONResponse:
    mongodb = request.app.state.mongodb
    service = MatchService(mongodb)

    updated = await service.update_match_status(
        match_id, update.status, scores=update.scores, requested_by=token_payload.sub
    )
    return JSONResponse(status_code=status.HTTP_200_OK, content=jsonable_encoder(updated))


@router.delete("/{match_id}", response_description="Delete match")
async def delete_match(
    request: Request,
    match_id: str = Path(..., description="The ID of the match"),
    token_payload: TokenPayload = Depends(auth_handler.auth_wrapper),
) -> Response:
    mongodb = request.app.state.mongodb
    await MatchService(mongodb).delete_match(match_id, requested_by=token_payload.sub)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# join a team of the match
@router.post("/{match_id}", response_description="Join a match")
async def join_match(
    request: Request,
    match_id: str = Path(..., description="The ID of the match"),
    join: JoinMatch = Body(...),
    token_payload: TokenPayload = Depends(auth_handler.auth_wrapper),
) -> JSONResponse:
    mongodb = request.app.state.mongodb
    match = await MatchService(mongodb).join_match(match_id, token_payload.sub, join.team)
    return JSONResponse(status_code=status.HTTP_200_OK, content=jsonable_encoder(match))


@router.post("/{match_id}/invite", response_description="Invite a player to a match")
async def invite_player(
    request: Request,
    match_id: str = Path(..., description="The ID of the match"),
    invite: InvitePlayer = Body(...),
    token_payload: TokenPayload = Depends(auth_handler.auth_wrapper),
) -> JSONResponse:
    mongodb = request.app.state.mongodb
    match = await MatchService(mongodb).invite_player(match_id, invite.playerId, invited_by=token_payload.sub)
    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content={
            "message": "Player invited successfully",
            "match": jsonable_encoder(match, include={"id", "teams"}),
        },
    )


@router.post(
    "/{match_id}/ratings",
    response_description="Rate a player of the match",
    response_model=StandardResponse[RatingDB],
    status_code=status.HTTP_201_CREATED,
)
async def create_rating(
    request: Request,
    match_id: str = Path(..., description="The ID of the match"),
    rating: RatingCreate = Body(...),
    token_payload: TokenPayload = Depends(auth_handler.auth_wrapper),
) -> StandardResponse[RatingDB]:
    mongodb = request.app.state.mongodb
    service = RatingService(mongodb)

    new_rating = await service.create_rating(
        match_id, rating.playerId, token_payload.sub, rating.skills, comments=rating.comments
    )
    return StandardResponse(success=True, data=new_rating, message="Rating created successfully")


@router.get(
    "/{match_id}/ratings",
    response_description="Get all ratings of a match",
    response_model=StandardResponse[list[RatingView]],
)
async def get_match_ratings(
    request: Request,
    match_id: str = Path(..., description="The ID of the match"),
) -> StandardResponse[list[RatingView]]:
    mongodb = request.app.state.mongodb
    ratings = await RatingService(mongodb).get_match_ratings(match_id)
    return StandardResponse(
        success=True,
        data=ratings,
        message=f"Retrieved {len(ratings)} ratings for match {match_id}",
    )
