"""
Storage port for the catalog

The services depend only on these abstract classes. A UnitOfWork is one
storage session with one transaction: it is opened per operation, commits
when the ``async with`` block exits cleanly and rolls back on any exception,
including task cancellation.

    async with uow_factory() as uow:
        await uow.movies.add(movie)
        for genre in movie.genres:
            await uow.movies.add_genre(movie.id, genre)
"""

import uuid
from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Optional, Sequence

from movies.models.schemas import Movie, MovieRating, UserScore
from movies.models.query import MovieFilters, MovieQuery


class MovieRepository(ABC):
    """Movie and genre rows"""

    @abstractmethod
    async def add(self, movie: Movie) -> int:
        """Insert the movie row (not its genres); returns rows affected"""

    @abstractmethod
    async def add_genre(self, movie_id: uuid.UUID, name: str) -> None:
        ...

    @abstractmethod
    async def delete_genres(self, movie_id: uuid.UUID) -> int:
        ...

    @abstractmethod
    async def update(self, movie: Movie) -> int:
        """Update title, year and slug of an existing row"""

    @abstractmethod
    async def delete(self, movie_id: uuid.UUID) -> int:
        ...

    @abstractmethod
    async def exists(self, movie_id: uuid.UUID) -> bool:
        ...

    @abstractmethod
    async def get_by_id(self, movie_id: uuid.UUID) -> Optional[Movie]:
        """Movie with genres attached and no rating fields"""

    @abstractmethod
    async def get_by_slug(self, slug: str) -> Optional[Movie]:
        ...

    @abstractmethod
    async def find(self, query: MovieQuery) -> List[Movie]:
        """Filter, sort and slice to the query's page"""

    @abstractmethod
    async def count(self, filters: MovieFilters) -> int:
        """Number of movies matching the filters, before pagination"""


class RatingRepository(ABC):
    """Rows of the (user, movie) -> score relation"""

    @abstractmethod
    async def upsert(self, movie_id: uuid.UUID, user_id: uuid.UUID, rating: int) -> int:
        """Insert or overwrite the score for (user, movie); returns rows affected"""

    @abstractmethod
    async def delete(self, movie_id: uuid.UUID, user_id: uuid.UUID) -> int:
        ...

    @abstractmethod
    async def delete_for_movie(self, movie_id: uuid.UUID) -> int:
        ...

    @abstractmethod
    async def scores_for(self, movie_ids: Sequence[uuid.UUID]) -> Dict[uuid.UUID, List[UserScore]]:
        """All scores of the given movies, keyed by movie id"""

    @abstractmethod
    async def for_user(self, user_id: uuid.UUID) -> List[MovieRating]:
        ...


class UnitOfWork(ABC):
    movies: MovieRepository
    ratings: RatingRepository

    async def __aenter__(self) -> "UnitOfWork":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        try:
            if exc_type is None:
                await self.commit()
            else:
                await self.rollback()
        finally:
            await self.close()

    @abstractmethod
    async def commit(self) -> None:
        ...

    @abstractmethod
    async def rollback(self) -> None:
        ...

    async def close(self) -> None:
        pass


UnitOfWorkFactory = Callable[[], UnitOfWork]


__all__ = ["MovieRepository", "RatingRepository", "UnitOfWork", "UnitOfWorkFactory"]
