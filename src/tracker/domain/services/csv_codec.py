import csv
import io
import math
import re
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Iterable, Optional, Sequence

from src.tracker.domain.entities.chart import Chart
from src.tracker.domain.enums import DateFormat

CSV_HEADERS = ("measurement", "date", "name", "category")

COLUMN_ALIASES: dict[str, tuple[str, ...]] = {
    "measurement": ("measurement", "value", "amount", "data", "number"),
    "date": ("date", "timestamp", "time", "when"),
    "name": ("name", "label", "description", "title"),
    "category": ("category", "type", "group", "class"),
}

MIN_DATE = datetime(1900, 1, 1, tzinfo=timezone.utc)
MAX_NAME_LEN = 255
MAX_CATEGORY_LEN = 100


@dataclass(frozen=True)
class CSVRow:
    measurement: float
    date: datetime
    name: str
    category: str


@dataclass
class ImportValidationResult:
    is_valid: bool
    errors: list[str] = field(default_factory=list)
    valid_rows: list[CSVRow] = field(default_factory=list)
    total_rows: int = 0


# export
def format_measurement(value: float) -> str:
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def format_date(dt: datetime, fmt: DateFormat = DateFormat.ISO) -> str:
    if fmt == DateFormat.US:
        return f"{dt.month}/{dt.day}/{dt.year}"
    if fmt == DateFormat.EU:
        return dt.strftime("%d/%m/%Y")
    return dt.date().isoformat()


def charts_to_csv(
    charts: Sequence[Chart],
    date_format: DateFormat = DateFormat.ISO,
    include_headers: bool = True,
) -> str:
    """
    All data points of all charts in one table, oldest first.
    Each row carries the category of the chart it belongs to.
    """
    rows = [(p, c.category) for c in charts for p in c.data_points]
    rows.sort(key=lambda r: r[0].date)

    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    if include_headers:
        writer.writerow(CSV_HEADERS)
    for p, category in rows:
        writer.writerow([
            format_measurement(p.measurement),
            format_date(p.date, date_format),
            p.name,
            category,
        ])
    return buf.getvalue().rstrip("\n")


def chart_to_csv(chart: Chart, date_format: DateFormat = DateFormat.ISO, include_headers: bool = True) -> str:
    return charts_to_csv([chart], date_format=date_format, include_headers=include_headers)


def _slug(name: str) -> str:
    safe = re.sub(r"[^a-zA-Z0-9\s-]", "", name)
    return re.sub(r"\s+", "-", safe).lower()


def csv_filename(charts: Sequence[Chart], today: Optional[date] = None) -> str:
    stamp = (today or datetime.now(timezone.utc).date()).isoformat()
    if not charts:
        return f"happystats-export-{stamp}.csv"
    if len(charts) == 1:
        return f"{_slug(charts[0].name)}-{stamp}.csv"
    return f"happystats-{len(charts)}-charts-{stamp}.csv"


# import
def detect_column_mapping(headers: Sequence[str]) -> dict[str, int]:
    mapping: dict[str, int] = {}
    lowered = [h.strip().lower() for h in headers]
    for col, aliases in COLUMN_ALIASES.items():
        for idx, header in enumerate(lowered):
            if any(alias in header for alias in aliases):
                mapping[col] = idx
                break
    return mapping


def parse_csv_date(value: str, fmt: DateFormat = DateFormat.ISO) -> datetime:
    """
    ISO 8601 first; then the day/month order given by `fmt` (US when ISO).
    Naive results are taken as UTC.
    """
    value = value.strip()
    try:
        dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        pattern = "%d/%m/%Y" if fmt == DateFormat.EU else "%m/%d/%Y"
        dt = datetime.strptime(value, pattern)

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _cell(row: Sequence[str], idx: int) -> str:
    return row[idx].strip() if idx < len(row) else ""


def validate_row(
    row: Sequence[str],
    mapping: dict[str, int],
    row_index: int,
    fmt: DateFormat = DateFormat.ISO,
    now: Optional[datetime] = None,
) -> tuple[Optional[CSVRow], list[str]]:
    errors: list[str] = []
    label = f"Row {row_index + 1}"
    now = now or datetime.now(timezone.utc)

    measurement_s = _cell(row, mapping["measurement"])
    date_s = _cell(row, mapping["date"])
    name = _cell(row, mapping["name"])
    category = _cell(row, mapping["category"])

    measurement = None
    if not measurement_s:
        errors.append(f"{label}: Measurement is required")
    else:
        try:
            measurement = float(measurement_s)
        except ValueError:
            measurement = None
        if measurement is None or not math.isfinite(measurement):
            errors.append(f'{label}: Invalid measurement value "{measurement_s}"')

    dt = None
    if not date_s:
        errors.append(f"{label}: Date is required")
    else:
        try:
            dt = parse_csv_date(date_s, fmt)
        except ValueError:
            errors.append(f'{label}: Invalid date format "{date_s}"')
        else:
            if dt > now:
                errors.append(f"{label}: Date cannot be in the future")
            elif dt < MIN_DATE:
                errors.append(f"{label}: Date must be after 1900")

    if not name:
        errors.append(f"{label}: Name is required")
    elif len(name) > MAX_NAME_LEN:
        errors.append(f"{label}: Name too long (max {MAX_NAME_LEN} characters)")

    if not category:
        errors.append(f"{label}: Category is required")
    elif len(category) > MAX_CATEGORY_LEN:
        errors.append(f"{label}: Category too long (max {MAX_CATEGORY_LEN} characters)")

    if errors:
        return None, errors
    return CSVRow(measurement=measurement, date=dt, name=name, category=category), []


def parse_and_validate(
    text: str,
    skip_first_row: bool = True,
    fmt: DateFormat = DateFormat.ISO,
    now: Optional[datetime] = None,
) -> ImportValidationResult:
    if not text or not text.strip():
        return ImportValidationResult(is_valid=False, errors=["CSV file is empty"])

    try:
        rows = list(csv.reader(io.StringIO(text.strip())))
    except csv.Error as e:
        return ImportValidationResult(is_valid=False, errors=[f"Failed to parse CSV: {e}"])

    headers = rows[0]
    mapping = detect_column_mapping(headers)

    missing = [c for c in CSV_HEADERS if c not in mapping]
    if missing:
        return ImportValidationResult(
            is_valid=False,
            errors=[
                f"Missing required columns: {', '.join(missing)}",
                f"Available columns: {', '.join(headers)}",
                f"Expected columns: {', '.join(CSV_HEADERS)}",
            ],
            total_rows=len(rows),
        )

    data_rows = rows[1:] if skip_first_row else rows
    valid: list[CSVRow] = []
    errors: list[str] = []

    for i, row in enumerate(data_rows):
        if all(not cell.strip() for cell in row):
            continue

        parsed, row_errors = validate_row(row, mapping, i, fmt=fmt, now=now)
        if parsed:
            valid.append(parsed)
        else:
            errors.extend(row_errors)

    return ImportValidationResult(
        is_valid=not errors,
        errors=errors,
        valid_rows=valid,
        total_rows=len(data_rows),
    )


def group_by_category(rows: Iterable[CSVRow]) -> "OrderedDict[str, list[CSVRow]]":
    groups: OrderedDict[str, list[CSVRow]] = OrderedDict()
    for r in rows:
        groups.setdefault(r.category, []).append(r)
    return groups
