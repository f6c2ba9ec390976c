"""
Movie API Endpoints
"""

import uuid
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from movies.api.v1.deps import (
    get_current_user_id, get_movie_service, require_admin, require_trusted_member,
)
from movies.core.exceptions import NotFound
from movies.models import BaseResponse, Movie, MovieCreate, MovieUpdate, MoviesResponse
from movies.services import MovieService, normalize_query_options

router = APIRouter()


def parse_movie_id(id_or_slug: str) -> Optional[uuid.UUID]:
    """UUID when the path segment is one, None when it should be read as a slug"""
    try:
        return uuid.UUID(id_or_slug)
    except ValueError:
        return None


@router.post("", response_model=Movie, status_code=status.HTTP_201_CREATED)
async def create_movie(
    request: MovieCreate,
    response: Response,
    current_user: Dict[str, Any] = Depends(require_trusted_member),
    service: MovieService = Depends(get_movie_service),
):
    """Create a movie; the identifier is generated by the server"""

    movie = await service.create(Movie.new(request))
    response.headers["Location"] = f"/api/v1/movies/{movie.id}"
    return movie


@router.get("/{id_or_slug}", response_model=Movie)
async def get_movie(
    id_or_slug: str,
    user_id: Optional[uuid.UUID] = Depends(get_current_user_id),
    service: MovieService = Depends(get_movie_service),
):
    """Get movie by ID or slug"""

    movie_id = parse_movie_id(id_or_slug)
    if movie_id is not None:
        movie = await service.get_by_id(movie_id, user_id)
    else:
        movie = await service.get_by_slug(id_or_slug, user_id)

    if movie is None:
        raise NotFound("Movie", id_or_slug)

    return movie


@router.get("", response_model=MoviesResponse)
async def get_movies(
    title: Optional[str] = Query(None),
    year: Optional[int] = Query(None),
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    page: Optional[int] = Query(None),
    page_size: Optional[int] = Query(None, alias="pageSize"),
    user_id: Optional[uuid.UUID] = Depends(get_current_user_id),
    service: MovieService = Depends(get_movie_service),
):
    """List movies with title/year filters, sorting and pagination"""

    query = normalize_query_options(
        title=title,
        year=year,
        sort_by=sort_by,
        page=page,
        page_size=page_size,
        user_id=user_id,
    )
    return await service.get_all(query)


@router.put("/{movie_id}", response_model=Movie)
async def update_movie(
    movie_id: uuid.UUID,
    request: MovieUpdate,
    current_user: Dict[str, Any] = Depends(require_trusted_member),
    service: MovieService = Depends(get_movie_service),
):
    """Replace title, year and genres of a movie"""

    movie = Movie(
        id=movie_id,
        title=request.title,
        year_of_release=request.year_of_release,
        genres=list(request.genres),
    )
    return await service.update(movie, user_id=current_user["user_id"])


@router.delete("/{movie_id}", response_model=BaseResponse)
async def delete_movie(
    movie_id: uuid.UUID,
    current_user: Dict[str, Any] = Depends(require_admin),
    service: MovieService = Depends(get_movie_service),
):
    """Delete a movie with its genres and ratings"""

    await service.delete(movie_id)
    return BaseResponse(message="Movie deleted successfully")
