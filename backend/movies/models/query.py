"""
Filter, sort and paging types for catalog listings
"""

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class SortOrder(str, Enum):
    UNSORTED = "unsorted"
    ASCENDING = "asc"
    DESCENDING = "desc"


class SortField(str, Enum):
    TITLE = "title"
    YEAR_OF_RELEASE = "yearOfRelease"
    # Anything outside the alias table; rejected before a query is built
    INVALID = "invalid"


@dataclass(frozen=True)
class MovieSort:
    field: Optional[SortField] = None
    order: SortOrder = SortOrder.UNSORTED

    @property
    def is_sorted(self) -> bool:
        return self.order is not SortOrder.UNSORTED

    @property
    def is_valid(self) -> bool:
        return not self.is_sorted or self.field in (SortField.TITLE, SortField.YEAR_OF_RELEASE)


UNSORTED = MovieSort()


@dataclass(frozen=True)
class MovieFilters:
    title: Optional[str] = None
    year_of_release: Optional[int] = None


@dataclass(frozen=True)
class MovieQuery:
    """Normalized filter/sort/page parameters for one catalog listing

    ``user_id`` only selects whose personal rating is reported; it never
    narrows the result set.
    """
    filters: MovieFilters = field(default_factory=MovieFilters)
    sort: MovieSort = UNSORTED
    page: int = 1
    page_size: int = 10
    user_id: Optional[uuid.UUID] = None

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


__all__ = ["SortOrder", "SortField", "MovieSort", "UNSORTED", "MovieFilters", "MovieQuery"]
