"""
Rating Service - aggregate ratings and per-user rating writes

The aggregate rating of a movie is the mean of all its scores, rounded to one
decimal place with ROUND_HALF_UP. A movie without ratings has no aggregate
(``None``), which is different from a rating of zero. The viewer rating is the
acting user's own score and never influences the aggregate.
"""

import uuid
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List, Optional, Sequence

from movies.core.exceptions import FieldError, NotFound, ValidationFailure
from movies.core.logging import get_logger
from movies.models.schemas import MovieRating, RatingSummary, UserScore
from movies.repositories.base import UnitOfWorkFactory
from movies.services.data.deadlines import with_timeout

logger = get_logger(__name__)

MIN_RATING = 1
MAX_RATING = 5
ONE_DECIMAL_PLACE = Decimal("0.1")


# ==========================================
# AGGREGATION
# ==========================================

def aggregate_rating(scores: Iterable[int]) -> Optional[Decimal]:
    """Mean of the scores rounded to one decimal, or None when there are none"""
    values = list(scores)
    if not values:
        return None

    mean = Decimal(sum(values)) / Decimal(len(values))
    return mean.quantize(ONE_DECIMAL_PLACE, rounding=ROUND_HALF_UP)


def viewer_rating(scores: Iterable[UserScore], user_id: Optional[uuid.UUID]) -> Optional[int]:
    if user_id is None:
        return None

    for score in scores:
        if score.user_id == user_id:
            return score.rating
    return None


def summarize_ratings(scores: Sequence[UserScore], user_id: Optional[uuid.UUID] = None) -> RatingSummary:
    return RatingSummary(
        rating=aggregate_rating(score.rating for score in scores),
        user_rating=viewer_rating(scores, user_id),
    )


def validate_rating(rating: int) -> None:
    if isinstance(rating, bool) or not isinstance(rating, int) or not MIN_RATING <= rating <= MAX_RATING:
        raise ValidationFailure([FieldError(
            "rating",
            f"Rating must be between {MIN_RATING} and {MAX_RATING}",
            rating,
        )])


# ==========================================
# SERVICE
# ==========================================

class RatingService:
    """Service for rating business logic"""

    def __init__(self, uow_factory: UnitOfWorkFactory):
        self.uow_factory = uow_factory

    @with_timeout
    async def rate_movie(self, movie_id: uuid.UUID, rating: int, user_id: uuid.UUID) -> None:
        """Record the user's score for a movie, replacing any earlier score"""

        validate_rating(rating)

        async with self.uow_factory() as uow:
            if not await uow.movies.exists(movie_id):
                logger.warning("Rating rejected, movie not found", movie_id=str(movie_id))
                raise NotFound("Movie", movie_id)

            await uow.ratings.upsert(movie_id, user_id, rating)

        logger.info("Rated movie", movie_id=str(movie_id), user_id=str(user_id), rating=rating)

    @with_timeout
    async def delete_rating(self, movie_id: uuid.UUID, user_id: uuid.UUID) -> None:
        """Remove the user's score for a movie"""

        async with self.uow_factory() as uow:
            deleted = await uow.ratings.delete(movie_id, user_id)
            if not deleted:
                logger.warning("Rating not found", movie_id=str(movie_id), user_id=str(user_id))
                raise NotFound("Rating", f"of user {user_id} for movie {movie_id}")

        logger.info("Deleted rating", movie_id=str(movie_id), user_id=str(user_id))

    @with_timeout
    async def get_rating(self, movie_id: uuid.UUID, user_id: Optional[uuid.UUID] = None) -> RatingSummary:
        """Aggregate rating of a movie, plus the user's own score when a user is given"""

        async with self.uow_factory() as uow:
            if not await uow.movies.exists(movie_id):
                raise NotFound("Movie", movie_id)
            scores = await uow.ratings.scores_for([movie_id])

        return summarize_ratings(scores[movie_id], user_id)

    @with_timeout
    async def get_user_ratings(self, user_id: uuid.UUID) -> List[MovieRating]:
        """Every rating the user has given, ordered by movie slug"""

        async with self.uow_factory() as uow:
            return await uow.ratings.for_user(user_id)


__all__ = [
    "MIN_RATING",
    "MAX_RATING",
    "aggregate_rating",
    "viewer_rating",
    "summarize_ratings",
    "validate_rating",
    "RatingService",
]
