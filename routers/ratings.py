# filename: routers/ratings.py
from fastapi import APIRouter, Body, Depends, Path, Request, status
from fastapi.responses import Response

from authentication import AuthHandler, TokenPayload
from models.ratings import RatingDB, RatingUpdate
from models.responses import StandardResponse
from services.rating_service import RatingService

router = APIRouter()
auth = AuthHandler()


# get one rating
@router.get("/{rating_id}", response_description="Get one rating", response_model=StandardResponse[RatingDB])
async def get_one_rating(
    request: Request,
    rating_id: str = Path(..., description="The id of the rating"),
) -> StandardResponse[RatingDB]:
    mongodb = request.app.state.mongodb
    service = RatingService(mongodb)

    rating = await service.get_rating_by_id(rating_id)
    return StandardResponse(success=True, data=rating, message="Rating retrieved successfully")


# update one rating
@router.patch("/{rating_id}", response_description="Patch one rating", response_model=StandardResponse[RatingDB])
async def patch_one_rating(
    request: Request,
    rating_id: str = Path(..., description="The id of the rating"),
    rating: RatingUpdate = Body(...),
    token_payload: TokenPayload = Depends(auth.auth_wrapper),
) -> StandardResponse[RatingDB]:
    mongodb = request.app.state.mongodb
    service = RatingService(mongodb)

    updated = await service.update_rating(
        rating_id, skills=rating.skills, comments=rating.comments, requested_by=token_payload.sub
    )
    return StandardResponse(success=True, data=updated, message="Rating updated successfully")


# delete one rating
@router.delete("/{rating_id}", response_description="Delete one rating")
async def delete_one_rating(
    request: Request,
    rating_id: str = Path(..., description="The id of the rating"),
    token_payload: TokenPayload = Depends(auth.auth_wrapper),
) -> Response:
    mongodb = request.app.state.mongodb
    service = RatingService(mongodb)

    await service.delete_rating(rating_id, requested_by=token_payload.sub)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
