"""
Movie Pydantic Schemas
"""

import uuid
from decimal import Decimal
from typing import Optional, List

from pydantic import Field, computed_field, field_serializer

from movies.core.slugs import generate_slug
from .common import CamelModel


class MovieBase(CamelModel):
    """Base movie fields"""
    title: str
    year_of_release: int
    genres: List[str] = Field(default_factory=list)


class MovieCreate(MovieBase):
    """Create movie schema"""


class MovieUpdate(MovieBase):
    """Update movie schema; replaces title, year and the whole genre set"""


class Movie(MovieBase):
    """Movie with its derived fields

    ``slug`` is recomputed from title and year on every access. ``rating`` and
    ``user_rating`` are filled from the ratings relation at read time and are
    never stored on the movie row.
    """
    id: uuid.UUID
    rating: Optional[Decimal] = None
    user_rating: Optional[int] = None

    @computed_field
    @property
    def slug(self) -> str:
        return generate_slug(self.title, self.year_of_release)

    @field_serializer("rating")
    def serialize_rating(self, rating: Optional[Decimal]) -> Optional[float]:
        return float(rating) if rating is not None else None

    @classmethod
    def new(cls, data: MovieBase) -> "Movie":
        """Build a movie with a server-generated identifier"""
        return cls(
            id=uuid.uuid4(),
            title=data.title,
            year_of_release=data.year_of_release,
            genres=list(data.genres),
        )

    def with_changes(self, data: MovieBase) -> "Movie":
        return self.model_copy(update={
            "title": data.title,
            "year_of_release": data.year_of_release,
            "genres": list(data.genres),
        })


class MoviesResponse(CamelModel):
    """One page of a catalog listing"""
    items: List[Movie]
    page: int
    page_size: int
    total: int

    @computed_field
    @property
    def has_next_page(self) -> bool:
        return self.page * self.page_size < self.total

    @computed_field
    @property
    def total_pages(self) -> int:
        # ceil(total / page_size)
        return -(-self.total // self.page_size)
