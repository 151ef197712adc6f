from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

MAX_RANGE = timedelta(days=10 * 365)


@dataclass(frozen=True)
class DateRange:
    start: Optional[datetime] = None
    end: Optional[datetime] = None

    def __post_init__(self):
        if self.start and self.end:
            if self.start > self.end:
                raise ValueError("Start date must be before end date")
            if self.end - self.start > MAX_RANGE:
                raise ValueError("Date range cannot exceed 10 years")

    @property
    def is_open(self) -> bool:
        return self.start is None and self.end is None


@dataclass(frozen=True)
class TrendResult:
    slope: float
    intercept: float
    r_squared: float


@dataclass(frozen=True)
class ChartStatistics:
    count: int
    min: float
    max: float
    average: float
    earliest: datetime
    latest: datetime
    trend: TrendResult


@dataclass(frozen=True)
class TierCapabilities:
    name: str
    display_name: str
    price: float
    currency: str
    interval: Optional[str]
    chart_limit: Optional[int]
    features: tuple[str, ...]

    @property
    def unlimited(self) -> bool:
        return self.chart_limit is None


@dataclass(frozen=True)
class AuthCredentials:
    user_id: int
    password_hash: str
