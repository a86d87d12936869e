from fastapi import APIRouter, Depends, Path, Query, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from authentication import AuthHandler, TokenPayload
from models.ratings import AverageRatings, RatingSortField, RatingView, SortOrder
from models.responses import PaginatedResponse, PaginationMetadata, StandardResponse
from models.users import Position
from services.availability_service import DEFAULT_RADIUS_KM, AvailabilityService
from services.pagination import DEFAULT_LIMIT, MAX_LIMIT
from services.rating_service import RatingService

router = APIRouter()
auth = AuthHandler()


# players looking for a game around a point
@router.get("/available", response_description="Get available players nearby")
async def get_available_players(
    request: Request,
    latitude: float = Query(..., ge=-90, le=90),
    longitude: float = Query(..., ge=-180, le=180),
    distance: float = Query(DEFAULT_RADIUS_KM, gt=0, description="Search radius in kilometers"),
    position: Position | None = Query(None, description="Preferred position"),
    token_payload: TokenPayload = Depends(auth.auth_wrapper),
) -> JSONResponse:
    mongodb = request.app.state.mongodb
    service = AvailabilityService(mongodb)

    players = await service.find_available_players(
        latitude,
        longitude,
        radius_km=distance,
        position=position,
        exclude_player_id=token_payload.sub,
    )
    return JSONResponse(status_code=status.HTTP_200_OK, content={"players": jsonable_encoder(players)})


@router.get(
    "/{player_id}/ratings",
    response_description="Get ratings of a player",
    response_model=PaginatedResponse[RatingView],
)
async def get_player_ratings(
    request: Request,
    player_id: str = Path(..., description="The ID of the player"),
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
    skip: int = Query(0, ge=0),
    sort_by: RatingSortField = Query("date", alias="sortBy"),
    order: SortOrder = Query("desc"),
) -> PaginatedResponse[RatingView]:
    mongodb = request.app.state.mongodb
    service = RatingService(mongodb)

    ratings, total_count = await service.get_player_ratings(
        player_id, limit=limit, skip=skip, sort_by=sort_by, order=order
    )
    return PaginatedResponse(
        success=True,
        data=ratings,
        pagination=PaginationMetadata.from_query(skip, limit, total_count),
        message=f"Retrieved {len(ratings)} ratings",
    )


@router.get(
    "/{player_id}/ratings/average",
    response_description="Get average ratings of a player",
    response_model=StandardResponse[AverageRatings],
)
async def get_player_average_ratings(
    request: Request,
    player_id: str = Path(..., description="The ID of the player"),
) -> StandardResponse[AverageRatings]:
    mongodb = request.app.state.mongodb
    averages = await RatingService(mongodb).get_player_average_ratings(player_id)
    return StandardResponse(success=True, data=averages)
