"""
Services Package - Main imports
"""

from .data import MovieService, RatingService, normalize_query_options, parse_sort

__all__ = [
    "MovieService",
    "RatingService",
    "normalize_query_options",
    "parse_sort",
]
