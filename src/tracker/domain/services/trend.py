from typing import Optional, Sequence

from src.tracker.domain.services.date_filter import date_span
from src.tracker.domain.value_objects import ChartStatistics, TrendResult

FLAT = TrendResult(slope=0.0, intercept=0.0, r_squared=0.0)


def sort_by_date(points: Sequence) -> list:
    # sorted() is stable: equal dates keep caller order
    return sorted(points, key=lambda p: p.date)


def compute_trend(points: Sequence) -> TrendResult:
    """
    Least-squares line over chronological order.

    x is the zero-based rank of each point after sorting by date, y is its
    measurement. Fewer than two points, or flat values, report r_squared 0.
    """
    if len(points) < 2:
        return FLAT

    ys = [float(p.measurement) for p in sort_by_date(points)]
    n = len(ys)
    xs = range(n)

    x_mean = sum(xs) / n
    y_mean = sum(ys) / n

    num = 0.0
    den = 0.0
    for x, y in zip(xs, ys):
        num += (x - x_mean) * (y - y_mean)
        den += (x - x_mean) ** 2

    slope = 0.0 if den == 0 else num / den
    intercept = y_mean - slope * x_mean

    ss_tot = 0.0
    ss_res = 0.0
    for x, y in zip(xs, ys):
        ss_tot += (y - y_mean) ** 2
        ss_res += (y - (slope * x + intercept)) ** 2

    r_squared = 0.0 if ss_tot == 0 else 1 - ss_res / ss_tot

    return TrendResult(slope=slope, intercept=intercept, r_squared=r_squared)


def compute_statistics(points: Sequence) -> Optional[ChartStatistics]:
    if not points:
        return None

    earliest, latest = date_span(points)
    values = [float(p.measurement) for p in points]

    return ChartStatistics(
        count=len(values),
        min=min(values),
        max=max(values),
        average=sum(values) / len(values),
        earliest=earliest,
        latest=latest,
        trend=compute_trend(points),
    )
