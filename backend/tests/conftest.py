"""
Shared fixtures: an in-memory SQLite catalog per test
"""

import os
import uuid

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("TESTING", "true")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("SECRET_KEY", "test-secret-key-with-at-least-32-bytes")

import pytest  # noqa: E402

from movies.core.database import create_database_engine, create_session_factory, DatabaseManager  # noqa: E402
from movies.models import Movie, MovieCreate  # noqa: E402
from movies.repositories import sqlalchemy_uow_factory  # noqa: E402
from movies.services import MovieService, RatingService  # noqa: E402


@pytest.fixture
async def engine():
    engine = create_database_engine("sqlite+aiosqlite://")
    await DatabaseManager(engine).create_tables()
    yield engine
    await DatabaseManager(engine).drop_tables()
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def uow_factory(session_factory):
    return sqlalchemy_uow_factory(session_factory)


@pytest.fixture
def movie_service(uow_factory):
    return MovieService(uow_factory)


@pytest.fixture
def rating_service(uow_factory):
    return RatingService(uow_factory)


@pytest.fixture
def user_a():
    return uuid.UUID("11111111-1111-1111-1111-111111111111")


@pytest.fixture
def user_b():
    return uuid.UUID("22222222-2222-2222-2222-222222222222")


@pytest.fixture
def make_movie():
    def _make(title="The Matrix", year=1999, genres=("Action", "Sci-Fi")):
        return Movie.new(MovieCreate(title=title, year_of_release=year, genres=list(genres)))
    return _make


@pytest.fixture
async def matrix(movie_service, make_movie):
    return await movie_service.create(make_movie())
