"""
Pydantic Schemas - Main imports
"""

from .common import CamelModel, BaseResponse, ErrorDetail, ErrorResponse
from .movie import MovieBase, MovieCreate, MovieUpdate, Movie, MoviesResponse
from .rating import RateMovieRequest, UserScore, RatingSummary, MovieRating

__all__ = [
    # Common
    "CamelModel", "BaseResponse", "ErrorDetail", "ErrorResponse",

    # Movie
    "MovieBase", "MovieCreate", "MovieUpdate", "Movie", "MoviesResponse",

    # Rating
    "RateMovieRequest", "UserScore", "RatingSummary", "MovieRating",
]
