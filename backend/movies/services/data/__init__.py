"""
Data Services - Business logic layer
"""

from .movie_service import MovieService
from .rating_service import RatingService
from .query_options import normalize_query_options, parse_sort

__all__ = ["MovieService", "RatingService", "normalize_query_options", "parse_sort"]
