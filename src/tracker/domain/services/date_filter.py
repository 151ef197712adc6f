from datetime import datetime, time
from typing import Iterable, Optional, TypeVar

from src.tracker.domain.value_objects import DateRange

T = TypeVar("T")


def _start_of_day(dt: datetime) -> datetime:
    return datetime.combine(dt.date(), time.min, tzinfo=dt.tzinfo)


def _end_of_day(dt: datetime) -> datetime:
    return datetime.combine(dt.date(), time.max, tzinfo=dt.tzinfo)


def filter_by_date_range(points: Iterable[T], date_range: DateRange) -> list[T]:
    """Inclusive filter; bounds are widened to whole days."""
    points = list(points)
    if date_range.is_open:
        return points

    start = _start_of_day(date_range.start) if date_range.start else None
    end = _end_of_day(date_range.end) if date_range.end else None

    return [
        p for p in points
        if (start is None or p.date >= start) and (end is None or p.date <= end)
    ]


def date_span(points: Iterable[T]) -> Optional[tuple[datetime, datetime]]:
    dates = sorted(p.date for p in points)
    if not dates:
        return None
    return dates[0], dates[-1]
