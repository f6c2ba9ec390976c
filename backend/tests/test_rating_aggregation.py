import uuid
from decimal import Decimal

import pytest

from movies.core.exceptions import ValidationFailure
from movies.models import UserScore
from movies.services.data.rating_service import (
    aggregate_rating, summarize_ratings, validate_rating, viewer_rating,
)


def test_no_scores_means_no_rating():
    assert aggregate_rating([]) is None


def test_mean_rounded_to_one_decimal():
    assert aggregate_rating([4, 5, 5]) == Decimal("4.7")


def test_half_rounds_up():
    # 4.25 -> 4.3, 3.75 -> 3.8
    assert aggregate_rating([4, 4, 4, 5]) == Decimal("4.3")
    assert aggregate_rating([3, 4, 4, 4]) == Decimal("3.8")


def test_single_score():
    assert aggregate_rating([3]) == Decimal("3.0")


def test_viewer_rating_picks_own_score():
    me, other = uuid.uuid4(), uuid.uuid4()
    scores = [UserScore(user_id=other, rating=2), UserScore(user_id=me, rating=5)]

    assert viewer_rating(scores, me) == 5
    assert viewer_rating(scores, uuid.uuid4()) is None
    assert viewer_rating(scores, None) is None


def test_summary_keeps_aggregate_independent_of_viewer():
    me, other = uuid.uuid4(), uuid.uuid4()
    scores = [UserScore(user_id=other, rating=2), UserScore(user_id=me, rating=5)]

    summary = summarize_ratings(scores, me)

    assert summary.rating == Decimal("3.5")
    assert summary.user_rating == 5
    assert summarize_ratings(scores).rating == Decimal("3.5")


@pytest.mark.parametrize("rating", [1, 3, 5])
def test_valid_ratings(rating):
    validate_rating(rating)


@pytest.mark.parametrize("rating", [0, 6, -1, True, 2.5])
def test_invalid_ratings(rating):
    with pytest.raises(ValidationFailure) as exc_info:
        validate_rating(rating)
    assert exc_info.value.fields == ["rating"]
