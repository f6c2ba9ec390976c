"""
Repositories - storage port and its SQLAlchemy adapter
"""

from .base import MovieRepository, RatingRepository, UnitOfWork, UnitOfWorkFactory
from .sql import (
    SqlAlchemyMovieRepository,
    SqlAlchemyRatingRepository,
    SqlAlchemyUnitOfWork,
    sqlalchemy_uow_factory,
)

__all__ = [
    "MovieRepository",
    "RatingRepository",
    "UnitOfWork",
    "UnitOfWorkFactory",
    "SqlAlchemyMovieRepository",
    "SqlAlchemyRatingRepository",
    "SqlAlchemyUnitOfWork",
    "sqlalchemy_uow_factory",
]
