"""
Query Options - turns raw listing parameters into a validated MovieQuery
"""

import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional

from movies.core.config import settings
from movies.core.exceptions import FieldError, ValidationFailure
from movies.core.logging import get_logger
from movies.models.query import (
    SortOrder, SortField, MovieSort, UNSORTED, MovieFilters, MovieQuery,
)

logger = get_logger(__name__)


# Accepted sortBy tokens (case-insensitive) and the field each one selects
SORT_FIELD_ALIASES: Dict[str, SortField] = {
    "title": SortField.TITLE,
    "year": SortField.YEAR_OF_RELEASE,
}


def parse_sort(raw_sort_by: Optional[str]) -> MovieSort:
    """Resolve a sortBy token such as ``title``, ``-year`` or ``+title``

    A leading ``-`` selects descending order, anything else ascending. Sign
    characters are stripped before the field name is looked up.
    """
    if raw_sort_by is None or not raw_sort_by.strip():
        return UNSORTED

    token = raw_sort_by.strip()
    order = SortOrder.DESCENDING if token.startswith("-") else SortOrder.ASCENDING
    name = token.strip("+-").lower()

    return MovieSort(field=SORT_FIELD_ALIASES.get(name, SortField.INVALID), order=order)


def current_year() -> int:
    return datetime.now(timezone.utc).year


def validate_query(query: MovieQuery, year_limit: Optional[int] = None) -> List[FieldError]:
    """Collect every rule the query breaks"""
    errors: List[FieldError] = []
    year_limit = current_year() if year_limit is None else year_limit

    year = query.filters.year_of_release
    if year is not None and year > year_limit:
        errors.append(FieldError(
            "year",
            f"'Year' must be less than or equal to '{year_limit}'.",
            year,
        ))

    if query.sort.is_sorted and not query.sort.is_valid:
        allowed = ", ".join(SORT_FIELD_ALIASES)
        errors.append(FieldError(
            "sortBy",
            f"You can only sort by {allowed}",
            query.sort.field,
        ))

    if query.page < 1:
        errors.append(FieldError("page", "'Page' must be greater than or equal to '1'.", query.page))

    if not 1 <= query.page_size <= settings.MAX_PAGE_SIZE:
        errors.append(FieldError(
            "pageSize",
            f"You can get between 1 and {settings.MAX_PAGE_SIZE} movies per page",
            query.page_size,
        ))

    return errors


def normalize_query_options(
    title: Optional[str] = None,
    year: Optional[int] = None,
    sort_by: Optional[str] = None,
    page: Optional[int] = None,
    page_size: Optional[int] = None,
    user_id: Optional[uuid.UUID] = None,
    year_limit: Optional[int] = None,
) -> MovieQuery:
    """Build a MovieQuery from raw request fields

    Missing page values fall back to the configured defaults and values below
    1 are raised to 1. Raises ValidationFailure listing every violated rule.
    """
    # Blank titles mean no filter; other titles are matched as sent
    title = title if title and title.strip() else None

    query = MovieQuery(
        filters=MovieFilters(title=title, year_of_release=year),
        sort=parse_sort(sort_by),
        page=max(settings.DEFAULT_PAGE if page is None else page, 1),
        page_size=max(settings.DEFAULT_PAGE_SIZE if page_size is None else page_size, 1),
        user_id=user_id,
    )

    errors = validate_query(query, year_limit=year_limit)
    if errors:
        logger.warning("Rejected movie query", errors=[e.to_dict() for e in errors])
        raise ValidationFailure(errors)

    return query


__all__ = [
    "SortOrder",
    "SortField",
    "SORT_FIELD_ALIASES",
    "MovieSort",
    "UNSORTED",
    "MovieFilters",
    "MovieQuery",
    "parse_sort",
    "current_year",
    "validate_query",
    "normalize_query_options",
]
