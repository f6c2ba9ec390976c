"""
SQLAlchemy storage adapter

Implements the storage port on an AsyncSession. Every statement is an explicit
Core statement; sort columns come from a fixed mapping keyed by SortField, so
no caller-supplied text ever becomes part of the SQL.
"""

import time
import uuid
from contextlib import contextmanager
from typing import Callable, Dict, List, Optional, Sequence

from sqlalchemy import select, insert, update, delete, func
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

from movies.core.exceptions import CatalogError, Conflict, NotFound, StorageFailure
from movies.core.logging import get_logger, log_database_operation
from movies.models import MovieRecord, GenreRecord, RatingRecord
from movies.models.query import MovieFilters, MovieQuery, SortField, SortOrder
from movies.models.schemas import Movie, MovieRating, UserScore
from movies.repositories.base import MovieRepository, RatingRepository, UnitOfWork

logger = get_logger(__name__)

SORT_COLUMNS = {
    SortField.TITLE: MovieRecord.title,
    SortField.YEAR_OF_RELEASE: MovieRecord.year_of_release,
}

UPSERT_DIALECTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class _Call:
    rows: int = 0


@contextmanager
def storage_call(
    operation: str,
    table: str,
    on_integrity_error: Optional[Callable[[], CatalogError]] = None,
):
    """Time one storage round-trip and translate driver errors"""
    call = _Call()
    started = time.perf_counter()
    try:
        yield call
    except IntegrityError as exc:
        if on_integrity_error is None:
            logger.error("Unexpected integrity error", operation=operation, table=table, error=str(exc.orig))
            raise StorageFailure(f"{operation} on {table} violated a constraint") from exc
        raise on_integrity_error() from exc
    except SQLAlchemyError as exc:
        logger.error("Storage operation failed", operation=operation, table=table, error=str(exc))
        raise StorageFailure(f"{operation} on {table} failed") from exc
    log_database_operation(operation, table, time.perf_counter() - started, call.rows)


def escape_like(value: str, escape: str = "\\") -> str:
    return (
        value.replace(escape, escape * 2)
        .replace("%", f"{escape}%")
        .replace("_", f"{escape}_")
    )


def to_movie(record: MovieRecord) -> Movie:
    return Movie(
        id=record.id,
        title=record.title,
        year_of_release=record.year_of_release,
        genres=[genre.name for genre in record.genres],
    )


class SqlAlchemyMovieRepository(MovieRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def add(self, movie: Movie) -> int:
        with storage_call("insert", "movies", lambda: Conflict(
            f"A movie with the slug '{movie.slug}' already exists", field="slug",
        )) as call:
            result = await self.session.execute(
                insert(MovieRecord).values(
                    id=movie.id,
                    slug=movie.slug,
                    title=movie.title,
                    year_of_release=movie.year_of_release,
                )
            )
            call.rows = result.rowcount
        return call.rows

    async def add_genre(self, movie_id: uuid.UUID, name: str) -> None:
        with storage_call("insert", "genres", lambda: NotFound("Movie", movie_id)):
            await self.session.execute(
                insert(GenreRecord).values(movie_id=movie_id, name=name)
            )

    async def delete_genres(self, movie_id: uuid.UUID) -> int:
        with storage_call("delete", "genres") as call:
            result = await self.session.execute(
                delete(GenreRecord).where(GenreRecord.movie_id == movie_id)
            )
            call.rows = result.rowcount
        return call.rows

    async def update(self, movie: Movie) -> int:
        with storage_call("update", "movies", lambda: Conflict(
            f"A movie with the slug '{movie.slug}' already exists", field="slug",
        )) as call:
            result = await self.session.execute(
                update(MovieRecord)
                .where(MovieRecord.id == movie.id)
                .values(
                    slug=movie.slug,
                    title=movie.title,
                    year_of_release=movie.year_of_release,
                )
            )
            call.rows = result.rowcount
        return call.rows

    async def delete(self, movie_id: uuid.UUID) -> int:
        with storage_call("delete", "movies") as call:
            result = await self.session.execute(
                delete(MovieRecord).where(MovieRecord.id == movie_id)
            )
            call.rows = result.rowcount
        return call.rows

    async def exists(self, movie_id: uuid.UUID) -> bool:
        with storage_call("select", "movies") as call:
            result = await self.session.execute(
                select(func.count()).select_from(MovieRecord).where(MovieRecord.id == movie_id)
            )
            call.rows = result.scalar_one()
        return call.rows > 0

    async def get_by_id(self, movie_id: uuid.UUID) -> Optional[Movie]:
        return await self._get_one(MovieRecord.id == movie_id)

    async def get_by_slug(self, slug: str) -> Optional[Movie]:
        return await self._get_one(MovieRecord.slug == slug)

    async def find(self, query: MovieQuery) -> List[Movie]:
        statement = self._filtered(
            select(MovieRecord).options(selectinload(MovieRecord.genres)),
            query.filters,
        )

        if query.sort.order is not SortOrder.UNSORTED:
            column = SORT_COLUMNS.get(query.sort.field)
            if column is None:
                raise ValueError(f"Cannot order movies by {query.sort.field!r}")
            if query.sort.order is SortOrder.DESCENDING:
                statement = statement.order_by(column.desc(), MovieRecord.id)
            else:
                statement = statement.order_by(column.asc(), MovieRecord.id)

        statement = statement.offset(query.offset).limit(query.page_size)

        with storage_call("select", "movies") as call:
            result = await self.session.execute(
                statement.execution_options(populate_existing=True)
            )
            records = result.scalars().all()
            call.rows = len(records)

        return [to_movie(record) for record in records]

    async def count(self, filters: MovieFilters) -> int:
        statement = self._filtered(select(func.count()).select_from(MovieRecord), filters)
        with storage_call("select", "movies") as call:
            result = await self.session.execute(statement)
            total = result.scalar_one()
            call.rows = 1
        return total

    async def _get_one(self, condition) -> Optional[Movie]:
        statement = (
            select(MovieRecord)
            .options(selectinload(MovieRecord.genres))
            .where(condition)
            .execution_options(populate_existing=True)
        )
        with storage_call("select", "movies") as call:
            result = await self.session.execute(statement)
            record = result.scalar_one_or_none()
            call.rows = 0 if record is None else 1

        return to_movie(record) if record is not None else None

    @staticmethod
    def _filtered(statement, filters: MovieFilters):
        # Absent filters add no condition; present ones are ANDed
        if filters.title:
            statement = statement.where(
                MovieRecord.title.ilike(f"%{escape_like(filters.title)}%", escape="\\")
            )
        if filters.year_of_release is not None:
            statement = statement.where(MovieRecord.year_of_release == filters.year_of_release)
        return statement


class SqlAlchemyRatingRepository(RatingRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def upsert(self, movie_id: uuid.UUID, user_id: uuid.UUID, rating: int) -> int:
        dialect = self.session.get_bind().dialect.name
        dialect_insert = UPSERT_DIALECTS.get(dialect)
        if dialect_insert is None:
            raise StorageFailure(f"Rating upsert is not supported on {dialect}")

        statement = dialect_insert(RatingRecord).values(
            user_id=user_id, movie_id=movie_id, rating=rating,
        )
        statement = statement.on_conflict_do_update(
            index_elements=[RatingRecord.user_id, RatingRecord.movie_id],
            set_={"rating": statement.excluded.rating},
        )

        with storage_call("upsert", "ratings", lambda: NotFound("Movie", movie_id)) as call:
            result = await self.session.execute(statement)
            call.rows = result.rowcount
        return call.rows

    async def delete(self, movie_id: uuid.UUID, user_id: uuid.UUID) -> int:
        with storage_call("delete", "ratings") as call:
            result = await self.session.execute(
                delete(RatingRecord).where(
                    RatingRecord.movie_id == movie_id,
                    RatingRecord.user_id == user_id,
                )
            )
            call.rows = result.rowcount
        return call.rows

    async def delete_for_movie(self, movie_id: uuid.UUID) -> int:
        with storage_call("delete", "ratings") as call:
            result = await self.session.execute(
                delete(RatingRecord).where(RatingRecord.movie_id == movie_id)
            )
            call.rows = result.rowcount
        return call.rows

    async def scores_for(self, movie_ids: Sequence[uuid.UUID]) -> Dict[uuid.UUID, List[UserScore]]:
        scores: Dict[uuid.UUID, List[UserScore]] = {movie_id: [] for movie_id in movie_ids}
        if not scores:
            return scores

        with storage_call("select", "ratings") as call:
            result = await self.session.execute(
                select(RatingRecord.movie_id, RatingRecord.user_id, RatingRecord.rating)
                .where(RatingRecord.movie_id.in_(list(scores)))
            )
            rows = result.all()
            call.rows = len(rows)

        for movie_id, user_id, rating in rows:
            scores[movie_id].append(UserScore(user_id=user_id, rating=rating))
        return scores

    async def for_user(self, user_id: uuid.UUID) -> List[MovieRating]:
        with storage_call("select", "ratings") as call:
            result = await self.session.execute(
                select(RatingRecord.movie_id, MovieRecord.slug, RatingRecord.rating)
                .join(MovieRecord, MovieRecord.id == RatingRecord.movie_id)
                .where(RatingRecord.user_id == user_id)
                .order_by(MovieRecord.slug)
            )
            rows = result.all()
            call.rows = len(rows)

        return [
            MovieRating(movie_id=movie_id, slug=slug, rating=rating)
            for movie_id, slug, rating in rows
        ]


class SqlAlchemyUnitOfWork(UnitOfWork):
    """One AsyncSession and one transaction per catalog operation"""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory
        self.session: Optional[AsyncSession] = None

    async def __aenter__(self) -> "SqlAlchemyUnitOfWork":
        self.session = self.session_factory()
        self.movies = SqlAlchemyMovieRepository(self.session)
        self.ratings = SqlAlchemyRatingRepository(self.session)
        return self

    async def commit(self) -> None:
        with storage_call("commit", "-", lambda: Conflict("Write conflicts with existing data")):
            await self.session.commit()

    async def rollback(self) -> None:
        await self.session.rollback()

    async def close(self) -> None:
        await self.session.close()
        self.session = None


def sqlalchemy_uow_factory(session_factory: async_sessionmaker[AsyncSession]) -> Callable[[], SqlAlchemyUnitOfWork]:
    """Bind a session factory so services can open a unit of work per call"""
    return lambda: SqlAlchemyUnitOfWork(session_factory)


__all__ = [
    "SqlAlchemyMovieRepository",
    "SqlAlchemyRatingRepository",
    "SqlAlchemyUnitOfWork",
    "sqlalchemy_uow_factory",
    "storage_call",
    "escape_like",
]
