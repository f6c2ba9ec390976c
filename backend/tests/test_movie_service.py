import asyncio
import uuid
from decimal import Decimal

import pytest
from sqlalchemy import Text

from movies.core.exceptions import Conflict, NotFound, StorageFailure, ValidationFailure
from movies.models import GenreRecord, Movie, MovieCreate, MovieQuery, MovieRecord, MovieSort, SortOrder
from movies.repositories.sql import SqlAlchemyMovieRepository
from movies.services.data.deadlines import with_timeout
from movies.services.data.query_options import normalize_query_options


# ==========================================
# CREATE AND READ
# ==========================================

async def test_create_derives_slug(movie_service, make_movie):
    movie = await movie_service.create(make_movie(genres=["Sci-Fi", "Action"]))

    assert movie.slug == "the-matrix-1999"


async def test_create_then_get_round_trip(movie_service, make_movie):
    created = await movie_service.create(make_movie(genres=["Sci-Fi", "Action"]))

    fetched = await movie_service.get_by_id(created.id)

    assert fetched.title == "The Matrix"
    assert fetched.year_of_release == 1999
    assert fetched.genres == ["Sci-Fi", "Action"]
    assert fetched.slug == "the-matrix-1999"
    assert fetched.rating is None
    assert fetched.user_rating is None


async def test_get_by_slug(movie_service, matrix):
    fetched = await movie_service.get_by_slug("the-matrix-1999")

    assert fetched.id == matrix.id


async def test_missing_movie_reads_as_none(movie_service):
    assert await movie_service.get_by_id(uuid.uuid4()) is None
    assert await movie_service.get_by_slug("nope-2000") is None


async def test_duplicate_slug_is_conflict(movie_service, matrix, make_movie):
    with pytest.raises(Conflict):
        await movie_service.create(make_movie())

    page = await movie_service.get_all(normalize_query_options())
    assert page.total == 1


async def test_long_title_and_genre_are_stored(movie_service, make_movie):
    movie = make_movie(title="A" * 1200, genres=["G" * 300])

    await movie_service.create(movie)
    fetched = await movie_service.get_by_id(movie.id)

    assert fetched.title == "A" * 1200
    assert fetched.genres == ["G" * 300]


def test_text_columns_are_unbounded():
    for column in (MovieRecord.slug, MovieRecord.title, GenreRecord.name):
        assert isinstance(column.type, Text)
        assert column.type.length is None


async def test_invalid_movie_lists_every_error(movie_service):
    movie = Movie.new(MovieCreate(title="  ", year_of_release=3000, genres=[]))

    with pytest.raises(ValidationFailure) as exc_info:
        await movie_service.create(movie)

    assert sorted(exc_info.value.fields) == ["genres", "title", "yearOfRelease"]
    assert await movie_service.get_by_id(movie.id) is None


async def test_get_includes_aggregate_and_viewer_rating(movie_service, rating_service, matrix, user_a, user_b):
    await rating_service.rate_movie(matrix.id, 4, user_a)
    await rating_service.rate_movie(matrix.id, 5, user_b)

    as_a = await movie_service.get_by_id(matrix.id, user_a)
    anonymous = await movie_service.get_by_slug(matrix.slug)

    assert as_a.rating == Decimal("4.5")
    assert as_a.user_rating == 4
    assert anonymous.rating == Decimal("4.5")
    assert anonymous.user_rating is None

# ==========================================
# UPDATE
# ==========================================

async def test_update_year_changes_slug(movie_service, matrix):
    updated = await movie_service.update(matrix.with_changes(
        MovieCreate(title="The Matrix", year_of_release=2000, genres=["Action"])
    ))

    assert updated.slug == "the-matrix-2000"
    assert await movie_service.get_by_slug("the-matrix-1999") is None

    fetched = await movie_service.get_by_slug("the-matrix-2000")
    assert fetched.id == matrix.id
    assert fetched.genres == ["Action"]


async def test_update_missing_movie(movie_service, make_movie):
    with pytest.raises(NotFound):
        await movie_service.update(make_movie())


async def test_update_onto_taken_slug_is_conflict(movie_service, matrix, make_movie):
    other = await movie_service.create(make_movie(title="Heat", year=1995))

    with pytest.raises(Conflict):
        await movie_service.update(other.with_changes(
            MovieCreate(title="The Matrix", year_of_release=1999, genres=["Crime"])
        ))

    assert (await movie_service.get_by_id(other.id)).title == "Heat"


async def test_update_keeping_own_slug_is_allowed(movie_service, matrix):
    updated = await movie_service.update(matrix.with_changes(
        MovieCreate(title="The Matrix", year_of_release=1999, genres=["Drama"])
    ))

    assert updated.genres == ["Drama"]


async def test_failed_update_rolls_back_everything(movie_service, matrix, monkeypatch):
    original_add_genre = SqlAlchemyMovieRepository.add_genre
    calls = []

    async def flaky_add_genre(self, movie_id, name):
        calls.append(name)
        if len(calls) > 1:
            raise StorageFailure("disk full")
        await original_add_genre(self, movie_id, name)

    monkeypatch.setattr(SqlAlchemyMovieRepository, "add_genre", flaky_add_genre)

    with pytest.raises(StorageFailure):
        await movie_service.update(matrix.with_changes(
            MovieCreate(title="Matrix Reloaded", year_of_release=2003, genres=["Action", "Sci-Fi"])
        ))

    monkeypatch.undo()
    fetched = await movie_service.get_by_id(matrix.id)
    assert fetched.title == "The Matrix"
    assert fetched.genres == ["Action", "Sci-Fi"]

# ==========================================
# DELETE
# ==========================================

async def test_delete_removes_movie_genres_and_ratings(movie_service, rating_service, matrix, user_a):
    await rating_service.rate_movie(matrix.id, 3, user_a)

    await movie_service.delete(matrix.id)

    assert await movie_service.get_by_id(matrix.id) is None
    assert await rating_service.get_user_ratings(user_a) == []


async def test_delete_missing_movie(movie_service):
    with pytest.raises(NotFound):
        await movie_service.delete(uuid.uuid4())

# ==========================================
# LISTING
# ==========================================

@pytest.fixture
async def catalog(movie_service, make_movie):
    movies = [
        make_movie("The Matrix", 1999),
        make_movie("Fight Club", 1999),
        make_movie("American Beauty", 1999),
        make_movie("Gladiator", 2000),
        make_movie("Memento", 2000),
    ]
    for movie in movies:
        await movie_service.create(movie)
    return movies


async def test_filter_by_year_sorted_title_descending(movie_service, catalog):
    page = await movie_service.get_all(
        normalize_query_options(year=1999, sort_by="-title", page=1, page_size=10)
    )

    assert [m.title for m in page.items] == ["The Matrix", "Fight Club", "American Beauty"]
    assert page.total == 3
    assert not page.has_next_page


async def test_title_filter_is_case_insensitive_substring(movie_service, catalog):
    page = await movie_service.get_all(normalize_query_options(title="MAT"))

    assert [m.title for m in page.items] == ["The Matrix"]


async def test_title_filter_treats_wildcards_literally(movie_service, catalog):
    page = await movie_service.get_all(normalize_query_options(title="%"))

    assert page.items == []
    assert page.total == 0


async def test_title_filter_keeps_surrounding_spaces(movie_service, catalog):
    leading = await movie_service.get_all(normalize_query_options(title=" Matrix"))
    trailing = await movie_service.get_all(normalize_query_options(title="Matrix "))

    assert [m.title for m in leading.items] == ["The Matrix"]
    assert trailing.items == []


async def test_sort_order_without_field_is_rejected(movie_service, catalog):
    with pytest.raises(ValidationFailure) as exc_info:
        await movie_service.get_all(MovieQuery(sort=MovieSort(order=SortOrder.ASCENDING)))

    assert exc_info.value.fields == ["sortBy"]


async def test_sort_by_year_ascending(movie_service, catalog):
    page = await movie_service.get_all(normalize_query_options(sort_by="year"))

    assert [m.year_of_release for m in page.items] == [1999, 1999, 1999, 2000, 2000]


async def test_pagination(movie_service, catalog):
    first = await movie_service.get_all(normalize_query_options(sort_by="title", page=1, page_size=2))
    last = await movie_service.get_all(normalize_query_options(sort_by="title", page=3, page_size=2))
    beyond = await movie_service.get_all(normalize_query_options(sort_by="title", page=4, page_size=2))

    assert [m.title for m in first.items] == ["American Beauty", "Fight Club"]
    assert first.total_pages == 3
    assert first.has_next_page
    assert [m.title for m in last.items] == ["The Matrix"]
    assert not last.has_next_page
    assert beyond.items == []
    assert beyond.total == 5


async def test_listing_carries_viewer_ratings(movie_service, rating_service, catalog, user_a):
    await rating_service.rate_movie(catalog[0].id, 5, user_a)

    page = await movie_service.get_all(normalize_query_options(title="matrix", user_id=user_a))

    assert page.items[0].rating == Decimal("5.0")
    assert page.items[0].user_rating == 5

# ==========================================
# DEADLINES
# ==========================================

class SlowThing:

    @with_timeout
    async def work(self, seconds):
        await asyncio.sleep(seconds)
        return "done"


async def test_deadline_exceeded_raises_timeout():
    with pytest.raises(asyncio.TimeoutError):
        await SlowThing().work(1, timeout=0.01)


async def test_deadline_not_reached():
    assert await SlowThing().work(0, timeout=1) == "done"
    assert await SlowThing().work(0) == "done"


async def test_timed_out_update_leaves_movie_untouched(movie_service, matrix, monkeypatch):
    original_add_genre = SqlAlchemyMovieRepository.add_genre

    async def slow_add_genre(self, movie_id, name):
        await original_add_genre(self, movie_id, name)
        await asyncio.sleep(1)

    monkeypatch.setattr(SqlAlchemyMovieRepository, "add_genre", slow_add_genre)

    with pytest.raises(asyncio.TimeoutError):
        await movie_service.update(
            matrix.with_changes(
                MovieCreate(title="Matrix Reloaded", year_of_release=2003, genres=["Drama"])
            ),
            timeout=0.1,
        )

    monkeypatch.undo()
    fetched = await movie_service.get_by_id(matrix.id)
    assert fetched.title == "The Matrix"
    assert fetched.genres == ["Action", "Sci-Fi"]
    assert await movie_service.get_by_slug("matrix-reloaded-2003") is None


async def test_timed_out_create_leaves_nothing_behind(movie_service, make_movie, monkeypatch):
    original_add_genre = SqlAlchemyMovieRepository.add_genre

    async def slow_add_genre(self, movie_id, name):
        await original_add_genre(self, movie_id, name)
        await asyncio.sleep(1)

    monkeypatch.setattr(SqlAlchemyMovieRepository, "add_genre", slow_add_genre)
    movie = make_movie()

    with pytest.raises(asyncio.TimeoutError):
        await movie_service.create(movie, timeout=0.1)

    monkeypatch.undo()
    assert await movie_service.get_by_id(movie.id) is None
    assert (await movie_service.get_all(normalize_query_options())).total == 0
