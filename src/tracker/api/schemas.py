from datetime import datetime, timezone
from typing import Annotated, Any, Optional

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_validator

from src.tracker.domain.enums import DateFormat

MIN_DATE = datetime(1900, 1, 1, tzinfo=timezone.utc)

ChartName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]
Category = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)]
PointName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]
Measurement = Annotated[float, Field(allow_inf_nan=False)]


def _check_point_date(v: datetime) -> datetime:
    """Naive input is taken as UTC; stored values are always UTC."""
    if v.tzinfo is None:
        v = v.replace(tzinfo=timezone.utc)
    v = v.astimezone(timezone.utc)
    if v > datetime.now(timezone.utc):
        raise ValueError("Date cannot be in the future")
    if v < MIN_DATE:
        raise ValueError("Date must be after 1900")
    return v


# Auth
class AuthRegisterRequest(BaseModel):
    email: str
    password: str


class AuthLoginRequest(BaseModel):
    email: str
    password: str


class AuthTokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class ForgotPasswordRequest(BaseModel):
    email: str


class ResetPasswordRequest(BaseModel):
    token: str
    password: str


class MessageResponse(BaseModel):
    message: str


# Data points
class DataPointCreateRequest(BaseModel):
    measurement: Measurement
    date: datetime
    name: PointName

    @field_validator("date")
    @classmethod
    def _date(cls, v: datetime) -> datetime:
        return _check_point_date(v)


class DataPointUpdateRequest(BaseModel):
    measurement: Optional[Measurement] = None
    date: Optional[datetime] = None
    name: Optional[PointName] = None

    @field_validator("date")
    @classmethod
    def _date(cls, v: Optional[datetime]) -> Optional[datetime]:
        return None if v is None else _check_point_date(v)

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True, exclude_none=True)


class DataPointResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    chart_id: int
    measurement: float
    date: datetime
    name: str
    created_at: datetime


class DataPointListResponse(BaseModel):
    data_points: list[DataPointResponse]
    count: int


class CreatedDataPointResponse(BaseModel):
    data_point: DataPointResponse
    warning: Optional[str] = None


# Charts
class ChartCreateRequest(BaseModel):
    name: ChartName
    category: Category


class ChartUpdateRequest(BaseModel):
    name: Optional[ChartName] = None
    category: Optional[Category] = None

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True, exclude_none=True)


class ChartResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    name: str
    category: str
    created_at: datetime
    updated_at: datetime
    data_points: list[DataPointResponse] = Field(default_factory=list)


class ChartListResponse(BaseModel):
    charts: list[ChartResponse]
    count: int


# Trend / statistics
class TrendResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    slope: float
    intercept: float
    r_squared: float


class StatisticsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    count: int
    min: float
    max: float
    average: float
    earliest: datetime
    latest: datetime
    trend: TrendResponse


# CSV
class CSVImportRequest(BaseModel):
    csv_data: str = Field(..., min_length=1)
    chart_name: ChartName
    skip_first_row: bool = True
    date_format: DateFormat = DateFormat.ISO


class CSVValidateRequest(BaseModel):
    csv_data: str = Field(..., min_length=1)
    skip_first_row: bool = True
    date_format: DateFormat = DateFormat.ISO


class ImportSummary(BaseModel):
    total_rows_processed: int
    valid_rows_found: int
    data_points_created: int
    categories_found: list[str]
    primary_category: str
    skipped_categories: list[str]


class CSVImportResponse(BaseModel):
    message: str
    chart: ChartResponse
    import_summary: ImportSummary
    warnings: list[str] = Field(default_factory=list)


# Subscriptions
class TierResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str
    display_name: str
    price: float
    currency: str
    interval: Optional[str] = None
    chart_limit: Optional[int] = None
    features: list[str]


class UsageResponse(BaseModel):
    chart_count: int
    chart_limit: Optional[int] = None
    can_create_chart: bool


class SubscriptionInfoResponse(BaseModel):
    tier: TierResponse
    status: str
    started_at: datetime
    ends_at: Optional[datetime] = None
    usage: UsageResponse


class DowngradeRequest(BaseModel):
    target_tier: str


class DowngradeResponse(BaseModel):
    message: str
    new_tier: str


class CancelResponse(BaseModel):
    message: str
    ends_at: Optional[datetime] = None
