"""
Rating API Endpoints
"""

import uuid
from typing import Any, Dict, List

from fastapi import APIRouter, Depends

from movies.api.v1.deps import require_auth, get_rating_service
from movies.models import BaseResponse, MovieRating, RateMovieRequest
from movies.services import RatingService

router = APIRouter()


@router.put("/movies/{movie_id}/ratings", response_model=BaseResponse)
async def rate_movie(
    movie_id: uuid.UUID,
    request: RateMovieRequest,
    current_user: Dict[str, Any] = Depends(require_auth),
    service: RatingService = Depends(get_rating_service),
):
    """Set the caller's rating for a movie, replacing any earlier one"""

    await service.rate_movie(movie_id, request.rating, current_user["user_id"])
    return BaseResponse(message="Rating saved")


@router.delete("/movies/{movie_id}/ratings", response_model=BaseResponse)
async def delete_rating(
    movie_id: uuid.UUID,
    current_user: Dict[str, Any] = Depends(require_auth),
    service: RatingService = Depends(get_rating_service),
):
    await service.delete_rating(movie_id, current_user["user_id"])
    return BaseResponse(message="Rating deleted")


@router.get("/ratings/me", response_model=List[MovieRating])
async def get_my_ratings(
    current_user: Dict[str, Any] = Depends(require_auth),
    service: RatingService = Depends(get_rating_service),
):
    """Every rating the caller has given"""

    return await service.get_user_ratings(current_user["user_id"])
