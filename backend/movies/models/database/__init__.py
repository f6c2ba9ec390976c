"""
Database Models - Main imports
"""

from .base import Base
from .movie import Movie, Genre
from .rating import Rating

__all__ = ["Base", "Movie", "Genre", "Rating"]
