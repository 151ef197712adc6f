import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from src.tracker.domain.contracts.uow import UoW
from src.tracker.domain.entities.chart import Chart
from src.tracker.domain.entities.data_point import DataPoint
from src.tracker.domain.errors import AccessDenied, ChartLimitReached, NotFound
from src.tracker.domain.services.date_filter import filter_by_date_range
from src.tracker.domain.services.outliers import outlier_warning
from src.tracker.domain.services.tiers import can_create_chart, effective_tier
from src.tracker.domain.services.trend import compute_statistics
from src.tracker.domain.value_objects import ChartStatistics, DateRange

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CreatedDataPoint:
    point: DataPoint
    warning: Optional[str] = None


class ChartService:
    def __init__(self, uow: UoW):
        self.uow = uow

    # helpers
    def require_chart(self, user_id: int, chart_id: int) -> Chart:
        chart = self.uow.charts.get_by_id(chart_id)
        if not chart:
            raise NotFound("Chart not found")
        if chart.user_id != user_id:
            raise AccessDenied("Access denied")
        return chart

    def _owned_point(self, user_id: int, point_id: int) -> DataPoint:
        point = self.uow.data_points.get_by_id(point_id)
        if not point:
            raise NotFound("Data point not found")
        self.require_chart(user_id, point.chart_id)
        return point

    def ensure_chart_quota(self, user_id: int) -> None:
        tier = effective_tier(self.uow.subscriptions.get_by_user(user_id))
        count = self.uow.charts.count_by_user(user_id)
        if not can_create_chart(tier.name, count):
            raise ChartLimitReached(count=count, limit=tier.chart_limit)

    def _commit(self) -> None:
        try:
            self.uow.commit()
        except Exception:
            self.uow.rollback()
            raise

    # charts
    def list_charts(
        self,
        user_id: int,
        category: Optional[str] = None,
        search: Optional[str] = None,
    ) -> list[Chart]:
        return self.uow.charts.list_by_user(user_id, category=category, search=search)

    def get_chart(self, user_id: int, chart_id: int) -> Optional[Chart]:
        try:
            return self.require_chart(user_id, chart_id)
        except NotFound:
            return None

    def create_chart(self, user_id: int, name: str, category: str) -> Chart:
        self.ensure_chart_quota(user_id)
        chart = self.uow.charts.create(user_id, name.strip(), category.strip())
        self._commit()
        logger.info("user %s created chart %s", user_id, chart.id)
        return chart

    def update_chart(self, user_id: int, chart_id: int, fields: dict) -> Chart:
        if not fields:
            raise ValueError("No fields to update")
        self.require_chart(user_id, chart_id)
        chart = self.uow.charts.update(chart_id, fields)
        self._commit()
        return chart

    def delete_chart(self, user_id: int, chart_id: int) -> None:
        self.require_chart(user_id, chart_id)
        self.uow.charts.delete(chart_id)
        self._commit()
        logger.info("user %s deleted chart %s", user_id, chart_id)

    def list_categories(self, user_id: int) -> list[str]:
        return self.uow.charts.categories(user_id)

    # data points
    def list_data_points(
        self,
        user_id: int,
        chart_id: int,
        date_range: Optional[DateRange] = None,
    ) -> list[DataPoint]:
        chart = self.require_chart(user_id, chart_id)
        if date_range is None:
            return chart.data_points
        return filter_by_date_range(chart.data_points, date_range)

    def add_data_point(
        self,
        user_id: int,
        chart_id: int,
        measurement: float,
        date: datetime,
        name: str,
    ) -> CreatedDataPoint:
        chart = self.require_chart(user_id, chart_id)
        warning = outlier_warning(measurement, [p.measurement for p in chart.data_points])

        point = self.uow.data_points.create(chart_id, measurement, date, name.strip())
        self.uow.charts.touch(chart_id)
        self._commit()
        return CreatedDataPoint(point=point, warning=warning)

    def update_data_point(self, user_id: int, point_id: int, fields: dict) -> DataPoint:
        if not fields:
            raise ValueError("No fields to update")
        point = self._owned_point(user_id, point_id)
        updated = self.uow.data_points.update(point_id, fields)
        self.uow.charts.touch(point.chart_id)
        self._commit()
        return updated

    def delete_data_point(self, user_id: int, point_id: int) -> None:
        point = self._owned_point(user_id, point_id)
        self.uow.data_points.delete(point_id)
        self.uow.charts.touch(point.chart_id)
        self._commit()

    # analytics
    def chart_statistics(
        self,
        user_id: int,
        chart_id: int,
        date_range: Optional[DateRange] = None,
    ) -> Optional[ChartStatistics]:
        points = self.list_data_points(user_id, chart_id, date_range)
        return compute_statistics(points)
