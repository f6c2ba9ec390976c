"""
Models Package - Main imports
"""

# Database models
from .database import Base, Movie as MovieRecord, Genre as GenreRecord, Rating as RatingRecord

# Pydantic schemas
from .schemas import (
    # Common
    BaseResponse, ErrorDetail, ErrorResponse,

    # Movie schemas
    MovieBase, MovieCreate, MovieUpdate, Movie, MoviesResponse,

    # Rating schemas
    RateMovieRequest, UserScore, RatingSummary, MovieRating,
)

# Listing query types
from .query import SortOrder, SortField, MovieSort, MovieFilters, MovieQuery

__all__ = [
    # Database models
    "Base", "MovieRecord", "GenreRecord", "RatingRecord",

    # Common schemas
    "BaseResponse", "ErrorDetail", "ErrorResponse",

    # Movie schemas
    "MovieBase", "MovieCreate", "MovieUpdate", "Movie", "MoviesResponse",

    # Rating schemas
    "RateMovieRequest", "UserScore", "RatingSummary", "MovieRating",

    # Listing query types
    "SortOrder", "SortField", "MovieSort", "MovieFilters", "MovieQuery",
]
