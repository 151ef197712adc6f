import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from src.tracker.domain.contracts.uow import UoW
from src.tracker.domain.entities.chart import Chart
from src.tracker.domain.enums import DateFormat
from src.tracker.domain.errors import CSVImportError
from src.tracker.domain.services import csv_codec
from src.tracker.services.chart_service import ChartService

logger = logging.getLogger(__name__)

PREVIEW_ROWS = 5


@dataclass
class ImportOutcome:
    chart: Chart
    total_rows: int
    valid_rows: int
    created: int
    categories: list[str]
    primary_category: str
    skipped_categories: list[str] = field(default_factory=list)

    @property
    def warnings(self) -> list[str]:
        if not self.skipped_categories:
            return []
        return [
            f'Found {len(self.categories)} categories. Only "{self.primary_category}" was imported. '
            f"Other categories: {', '.join(self.skipped_categories)}"
        ]


class CSVService:
    def __init__(self, uow: UoW):
        self.uow = uow
        self.charts = ChartService(uow)

    # export
    def export_chart(self, user_id: int, chart_id: int, fmt: DateFormat = DateFormat.ISO) -> tuple[str, str]:
        chart = self.charts.require_chart(user_id, chart_id)
        return csv_codec.csv_filename([chart]), csv_codec.chart_to_csv(chart, date_format=fmt)

    def export_all(
        self,
        user_id: int,
        fmt: DateFormat = DateFormat.ISO,
        category: Optional[str] = None,
    ) -> tuple[str, str]:
        charts = self.charts.list_charts(user_id, category=category)
        return csv_codec.csv_filename(charts), csv_codec.charts_to_csv(charts, date_format=fmt)

    # import
    def validate(self, text: str, skip_first_row: bool = True, fmt: DateFormat = DateFormat.ISO) -> dict[str, Any]:
        result = csv_codec.parse_and_validate(text, skip_first_row=skip_first_row, fmt=fmt)
        groups = csv_codec.group_by_category(result.valid_rows)
        return {
            "validation": {
                "is_valid": result.is_valid,
                "errors": result.errors,
                "total_rows": result.total_rows,
                "valid_rows": len(result.valid_rows),
            },
            "preview": {
                "categories": list(groups),
                "sample_data": result.valid_rows[:PREVIEW_ROWS],
                "category_breakdown": [
                    {"category": c, "count": len(rows)} for c, rows in groups.items()
                ],
            },
        }

    def import_chart(
        self,
        user_id: int,
        chart_name: str,
        text: str,
        skip_first_row: bool = True,
        fmt: DateFormat = DateFormat.ISO,
    ) -> ImportOutcome:
        """
        Creates one chart from the first category found in the file.
        Any invalid row rejects the whole import.
        """
        self.charts.ensure_chart_quota(user_id)

        result = csv_codec.parse_and_validate(text, skip_first_row=skip_first_row, fmt=fmt)
        if not result.is_valid:
            raise CSVImportError(
                "CSV validation failed",
                errors=result.errors,
                total_rows=result.total_rows,
                valid_rows=len(result.valid_rows),
            )
        if not result.valid_rows:
            raise CSVImportError("No valid data found in CSV", errors=["CSV contains no valid data rows"])

        groups = csv_codec.group_by_category(result.valid_rows)
        categories = list(groups)
        primary = categories[0]

        try:
            chart = self.uow.charts.create(user_id, chart_name.strip(), primary)
            for row in groups[primary]:
                self.uow.data_points.create(chart.id, row.measurement, row.date, row.name)
            self.uow.commit()
        except Exception:
            self.uow.rollback()
            logger.exception("csv import failed for user %s", user_id)
            raise

        chart = self.uow.charts.get_by_id(chart.id)
        logger.info(
            "user %s imported %d rows into chart %s", user_id, len(chart.data_points), chart.id
        )

        return ImportOutcome(
            chart=chart,
            total_rows=result.total_rows,
            valid_rows=len(result.valid_rows),
            created=len(chart.data_points),
            categories=categories,
            primary_category=primary,
            skipped_categories=categories[1:],
        )
