import uuid
from decimal import Decimal

import pytest
from sqlalchemy import func, select

from movies.core.exceptions import NotFound, ValidationFailure
from movies.models import RatingRecord


async def count_ratings(session_factory):
    async with session_factory() as session:
        return (await session.execute(select(func.count()).select_from(RatingRecord))).scalar_one()


async def test_aggregate_of_two_users(rating_service, matrix, user_a, user_b):
    await rating_service.rate_movie(matrix.id, 4, user_a)
    await rating_service.rate_movie(matrix.id, 5, user_b)

    summary = await rating_service.get_rating(matrix.id, user_b)

    assert summary.rating == Decimal("4.5")
    assert summary.user_rating == 5


async def test_unrated_movie_has_no_rating(rating_service, matrix):
    summary = await rating_service.get_rating(matrix.id)

    assert summary.rating is None
    assert summary.user_rating is None


async def test_rating_unknown_movie(rating_service, session_factory, user_a):
    with pytest.raises(NotFound):
        await rating_service.rate_movie(uuid.uuid4(), 3, user_a)

    assert await count_ratings(session_factory) == 0


async def test_rating_out_of_range(rating_service, session_factory, matrix, user_a):
    with pytest.raises(ValidationFailure) as exc_info:
        await rating_service.rate_movie(matrix.id, 7, user_a)

    assert "between 1 and 5" in exc_info.value.errors[0].message
    assert await count_ratings(session_factory) == 0


async def test_rerating_replaces_score(rating_service, session_factory, matrix, user_a):
    await rating_service.rate_movie(matrix.id, 3, user_a)
    await rating_service.rate_movie(matrix.id, 5, user_a)

    assert await count_ratings(session_factory) == 1
    assert (await rating_service.get_rating(matrix.id, user_a)).user_rating == 5


async def test_delete_rating(rating_service, matrix, user_a):
    await rating_service.rate_movie(matrix.id, 2, user_a)

    await rating_service.delete_rating(matrix.id, user_a)

    assert (await rating_service.get_rating(matrix.id)).rating is None


async def test_delete_missing_rating(rating_service, matrix, user_a):
    with pytest.raises(NotFound):
        await rating_service.delete_rating(matrix.id, user_a)


async def test_get_rating_of_unknown_movie(rating_service):
    with pytest.raises(NotFound):
        await rating_service.get_rating(uuid.uuid4())


async def test_user_ratings_ordered_by_slug(rating_service, movie_service, matrix, make_movie, user_a, user_b):
    heat = await movie_service.create(make_movie(title="Heat", year=1995))
    await rating_service.rate_movie(matrix.id, 4, user_a)
    await rating_service.rate_movie(heat.id, 2, user_a)
    await rating_service.rate_movie(heat.id, 5, user_b)

    ratings = await rating_service.get_user_ratings(user_a)

    assert [(r.slug, r.rating) for r in ratings] == [("heat-1995", 2), ("the-matrix-1999", 4)]
