"""
Rating Pydantic Schemas
"""

import uuid
from decimal import Decimal
from typing import Optional

from pydantic import field_serializer

from .common import CamelModel


class RateMovieRequest(CamelModel):
    rating: int


class UserScore(CamelModel):
    """One user's score for a movie, as read from the ratings relation"""
    user_id: uuid.UUID
    rating: int


class RatingSummary(CamelModel):
    """Aggregate and viewer rating for one movie"""
    rating: Optional[Decimal] = None
    user_rating: Optional[int] = None

    @field_serializer("rating")
    def serialize_rating(self, rating: Optional[Decimal]) -> Optional[float]:
        return float(rating) if rating is not None else None


class MovieRating(CamelModel):
    """A rating given by a user, with the movie's current slug"""
    movie_id: uuid.UUID
    slug: str
    rating: int
