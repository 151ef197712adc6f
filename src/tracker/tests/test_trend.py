import random
from collections import namedtuple
from datetime import datetime, timedelta, timezone

import pytest

from src.tracker.domain.services.trend import compute_statistics, compute_trend
from src.tracker.domain.value_objects import TrendResult

Point = namedtuple("Point", ["measurement", "date"])

BASE = datetime(2024, 1, 1, tzinfo=timezone.utc)


def series(values, step_days: int = 1):
    return [Point(v, BASE + timedelta(days=i * step_days)) for i, v in enumerate(values)]


@pytest.mark.parametrize("values", [[], [42.0]])
def test_short_series_has_no_trend(values):
    assert compute_trend(series(values)) == TrendResult(0.0, 0.0, 0.0)


def test_flat_series_reports_zero_r_squared():
    t = compute_trend(series([5, 5, 5, 5]))
    assert t.slope == 0
    assert t.intercept == pytest.approx(5)
    assert t.r_squared == 0


def test_perfect_line():
    t = compute_trend(series([10, 12, 14, 16]))
    assert t.slope == pytest.approx(2)
    assert t.intercept == pytest.approx(10)
    assert t.r_squared == pytest.approx(1)


def test_weight_loss_is_downward():
    points = [
        Point(70.5, datetime(2024, 1, 1, tzinfo=timezone.utc)),
        Point(69.8, datetime(2024, 1, 8, tzinfo=timezone.utc)),
        Point(69.2, datetime(2024, 1, 15, tzinfo=timezone.utc)),
    ]
    t = compute_trend(points)
    assert t.slope < 0
    assert t.slope == pytest.approx(-0.65)
    assert 0 < t.r_squared <= 1


def test_uses_rank_not_date_distance():
    # uneven gaps between dates do not change x positions
    even = compute_trend(series([1, 3, 2, 5]))
    uneven = compute_trend([
        Point(1, BASE),
        Point(3, BASE + timedelta(days=1)),
        Point(2, BASE + timedelta(days=30)),
        Point(5, BASE + timedelta(days=31)),
    ])
    assert even == uneven


def test_repeated_calls_are_identical():
    points = series([3.3, 1.7, 9.1, 4.4, 2.0])
    assert compute_trend(points) == compute_trend(points)


def test_input_order_does_not_matter():
    points = series([3.3, 1.7, 9.1, 4.4, 2.0, 7.5])
    shuffled = points[:]
    random.Random(7).shuffle(shuffled)
    assert compute_trend(shuffled) == compute_trend(points)


def test_equal_dates_keep_caller_order():
    same_day = [Point(1, BASE), Point(5, BASE), Point(9, BASE)]
    assert compute_trend(same_day).slope == pytest.approx(4)
    assert compute_trend(list(reversed(same_day))).slope == pytest.approx(-4)


def test_statistics_empty():
    assert compute_statistics([]) is None


def test_statistics_summary():
    points = [
        Point(69.2, datetime(2024, 1, 15, tzinfo=timezone.utc)),
        Point(70.5, datetime(2024, 1, 1, tzinfo=timezone.utc)),
        Point(69.8, datetime(2024, 1, 8, tzinfo=timezone.utc)),
    ]
    s = compute_statistics(points)

    assert s.count == 3
    assert s.min == 69.2
    assert s.max == 70.5
    assert s.average == pytest.approx(69.8333333)
    assert s.earliest == datetime(2024, 1, 1, tzinfo=timezone.utc)
    assert s.latest == datetime(2024, 1, 15, tzinfo=timezone.utc)
    assert s.trend == compute_trend(points)


def test_statistics_single_point():
    s = compute_statistics([Point(3.0, BASE)])
    assert (s.count, s.min, s.max, s.average) == (1, 3.0, 3.0, 3.0)
    assert s.earliest == s.latest == BASE
    assert s.trend == TrendResult(0.0, 0.0, 0.0)
