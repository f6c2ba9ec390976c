"""
Movie Service - Business logic for movie operations
"""

import uuid
from typing import Dict, List, Optional

from movies.core.exceptions import Conflict, FieldError, NotFound, ValidationFailure
from movies.core.logging import get_logger
from movies.models.query import MovieQuery
from movies.models.schemas import Movie, MoviesResponse, UserScore
from movies.repositories.base import UnitOfWork, UnitOfWorkFactory
from movies.services.data.deadlines import with_timeout
from movies.services.data.query_options import current_year, validate_query
from movies.services.data.rating_service import summarize_ratings

logger = get_logger(__name__)


def validate_movie(movie: Movie, year_limit: Optional[int] = None) -> None:
    """Raise ValidationFailure listing every rule the movie breaks"""
    errors: List[FieldError] = []
    year_limit = current_year() if year_limit is None else year_limit

    if not movie.title or not movie.title.strip():
        errors.append(FieldError("title", "'Title' must not be empty."))

    if not movie.genres:
        errors.append(FieldError("genres", "'Genres' must not be empty."))
    elif any(not genre or not genre.strip() for genre in movie.genres):
        errors.append(FieldError("genres", "Genre names must not be empty."))

    if movie.year_of_release > year_limit:
        errors.append(FieldError(
            "yearOfRelease",
            f"'Year Of Release' must be less than or equal to '{year_limit}'.",
            movie.year_of_release,
        ))

    if errors:
        logger.warning("Rejected movie", movie_id=str(movie.id), errors=[e.to_dict() for e in errors])
        raise ValidationFailure(errors)


def with_ratings(movie: Movie, scores: List[UserScore], user_id: Optional[uuid.UUID]) -> Movie:
    summary = summarize_ratings(scores, user_id)
    return movie.model_copy(update={"rating": summary.rating, "user_rating": summary.user_rating})


class MovieService:
    """Service for movie business logic"""

    def __init__(self, uow_factory: UnitOfWorkFactory):
        self.uow_factory = uow_factory

    # ==========================================
    # QUERIES
    # ==========================================

    @with_timeout
    async def get_by_id(self, movie_id: uuid.UUID, user_id: Optional[uuid.UUID] = None) -> Optional[Movie]:
        """Get movie by ID with its genres and ratings"""

        async with self.uow_factory() as uow:
            movie = await uow.movies.get_by_id(movie_id)
            if movie is None:
                return None
            return await self._rate_one(uow, movie, user_id)

    @with_timeout
    async def get_by_slug(self, slug: str, user_id: Optional[uuid.UUID] = None) -> Optional[Movie]:
        """Get movie by slug with its genres and ratings"""

        async with self.uow_factory() as uow:
            movie = await uow.movies.get_by_slug(slug)
            if movie is None:
                return None
            return await self._rate_one(uow, movie, user_id)

    @with_timeout
    async def get_all(self, query: MovieQuery) -> MoviesResponse:
        """Filtered, sorted page of movies and the size of the filtered set"""

        errors = validate_query(query)
        if errors:
            raise ValidationFailure(errors)

        async with self.uow_factory() as uow:
            movies = await uow.movies.find(query)
            total = await uow.movies.count(query.filters)
            scores = await uow.ratings.scores_for([movie.id for movie in movies])

        items = [with_ratings(movie, scores[movie.id], query.user_id) for movie in movies]

        logger.debug(
            "Listed movies",
            page=query.page,
            page_size=query.page_size,
            returned=len(items),
            total=total,
        )
        return MoviesResponse(items=items, page=query.page, page_size=query.page_size, total=total)

    # ==========================================
    # WRITES
    # ==========================================

    @with_timeout
    async def create(self, movie: Movie) -> Movie:
        """Insert the movie and its genres in one transaction"""

        validate_movie(movie)

        async with self.uow_factory() as uow:
            await self._ensure_slug_free(uow, movie)

            await uow.movies.add(movie)
            for genre in movie.genres:
                await uow.movies.add_genre(movie.id, genre)

        logger.info(f"Created movie: {movie.title} ({movie.slug})", movie_id=str(movie.id))
        return movie

    @with_timeout
    async def update(self, movie: Movie, user_id: Optional[uuid.UUID] = None) -> Movie:
        """Replace title, year and genres of an existing movie

        Genres are replaced wholesale (delete all, then insert) before the
        movie row is updated, all inside one transaction.
        """

        validate_movie(movie)

        async with self.uow_factory() as uow:
            if not await uow.movies.exists(movie.id):
                logger.warning("Update rejected, movie not found", movie_id=str(movie.id))
                raise NotFound("Movie", movie.id)

            await self._ensure_slug_free(uow, movie)

            await uow.movies.delete_genres(movie.id)
            for genre in movie.genres:
                await uow.movies.add_genre(movie.id, genre)
            await uow.movies.update(movie)

            updated = await self._rate_one(uow, movie, user_id)

        logger.info(f"Updated movie: {movie.title} ({movie.slug})", movie_id=str(movie.id))
        return updated

    @with_timeout
    async def delete(self, movie_id: uuid.UUID) -> None:
        """Delete the movie together with its genres and ratings"""

        async with self.uow_factory() as uow:
            await uow.movies.delete_genres(movie_id)
            await uow.ratings.delete_for_movie(movie_id)
            deleted = await uow.movies.delete(movie_id)
            if not deleted:
                logger.warning("Delete rejected, movie not found", movie_id=str(movie_id))
                raise NotFound("Movie", movie_id)

        logger.info("Deleted movie", movie_id=str(movie_id))

    # ==========================================
    # HELPERS
    # ==========================================

    @staticmethod
    async def _rate_one(uow: UnitOfWork, movie: Movie, user_id: Optional[uuid.UUID]) -> Movie:
        scores: Dict[uuid.UUID, List[UserScore]] = await uow.ratings.scores_for([movie.id])
        return with_ratings(movie, scores[movie.id], user_id)

    @staticmethod
    async def _ensure_slug_free(uow: UnitOfWork, movie: Movie) -> None:
        existing = await uow.movies.get_by_slug(movie.slug)
        if existing is not None and existing.id != movie.id:
            logger.warning("Slug already taken", slug=movie.slug, existing_id=str(existing.id))
            raise Conflict(f"A movie with the slug '{movie.slug}' already exists", field="slug")


__all__ = ["MovieService", "validate_movie", "with_ratings"]
