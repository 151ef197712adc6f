from datetime import date, datetime, timezone

import pytest

from src.tracker.domain.entities.chart import Chart
from src.tracker.domain.entities.data_point import DataPoint
from src.tracker.domain.enums import DateFormat
from src.tracker.domain.services import csv_codec

NOW = datetime(2024, 6, 1, tzinfo=timezone.utc)


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


def make_chart(name="Morning Run", category="Fitness", points=()) -> Chart:
    return Chart(
        id=1,
        user_id=1,
        name=name,
        category=category,
        created_at=NOW,
        updated_at=NOW,
        data_points=[
            DataPoint(id=i, chart_id=1, measurement=m, date=d, name=n, created_at=NOW)
            for i, (m, d, n) in enumerate(points, start=1)
        ],
    )


# export
@pytest.mark.parametrize(
    "value, expected",
    [(5.0, "5"), (70.5, "70.5"), (-3.0, "-3"), (0.1, "0.1")],
)
def test_format_measurement(value, expected):
    assert csv_codec.format_measurement(value) == expected


@pytest.mark.parametrize(
    "fmt, expected",
    [(DateFormat.ISO, "2024-03-07"), (DateFormat.US, "3/7/2024"), (DateFormat.EU, "07/03/2024")],
)
def test_format_date(fmt, expected):
    assert csv_codec.format_date(utc(2024, 3, 7, 15), fmt) == expected


def test_chart_to_csv_sorts_by_date():
    chart = make_chart(points=[
        (5.2, utc(2024, 1, 3), "evening"),
        (4.0, utc(2024, 1, 1), "morning"),
    ])
    assert csv_codec.chart_to_csv(chart) == (
        "measurement,date,name,category\n"
        "4,2024-01-01,morning,Fitness\n"
        "5.2,2024-01-03,evening,Fitness"
    )


def test_chart_to_csv_without_headers():
    chart = make_chart(points=[(1.0, utc(2024, 1, 1), "x")])
    assert csv_codec.chart_to_csv(chart, include_headers=False) == "1,2024-01-01,x,Fitness"


def test_export_quotes_commas():
    chart = make_chart(points=[(1.0, utc(2024, 1, 1), "before, after")])
    assert '"before, after"' in csv_codec.chart_to_csv(chart)


def test_charts_to_csv_merges_charts():
    a = make_chart(category="A", points=[(1.0, utc(2024, 1, 2), "a")])
    b = make_chart(category="B", points=[(2.0, utc(2024, 1, 1), "b")])
    lines = csv_codec.charts_to_csv([a, b]).splitlines()
    assert lines[1:] == ["2,2024-01-01,b,B", "1,2024-01-02,a,A"]


def test_csv_filename():
    today = date(2024, 5, 1)
    assert csv_codec.csv_filename([make_chart(name="My Weight!")], today) == "my-weight-2024-05-01.csv"
    assert csv_codec.csv_filename([make_chart(), make_chart()], today) == "happystats-2-charts-2024-05-01.csv"
    assert csv_codec.csv_filename([], today) == "happystats-export-2024-05-01.csv"


# import
def test_detect_column_mapping_uses_aliases():
    mapping = csv_codec.detect_column_mapping(["Value", "Timestamp", "Label", "Group"])
    assert mapping == {"measurement": 0, "date": 1, "name": 2, "category": 3}


@pytest.mark.parametrize(
    "raw, fmt, expected",
    [
        ("2024-01-15", DateFormat.ISO, utc(2024, 1, 15)),
        ("2024-01-15T10:30:00Z", DateFormat.ISO, utc(2024, 1, 15, 10, 30)),
        ("1/15/2024", DateFormat.US, utc(2024, 1, 15)),
        ("15/01/2024", DateFormat.EU, utc(2024, 1, 15)),
    ],
)
def test_parse_csv_date(raw, fmt, expected):
    assert csv_codec.parse_csv_date(raw, fmt) == expected


def test_parse_csv_date_rejects_garbage():
    with pytest.raises(ValueError):
        csv_codec.parse_csv_date("yesterday")


def test_parse_valid_file():
    text = (
        "measurement,date,name,category\n"
        "70.5,2024-01-01,weigh-in,Health\n"
        "\n"
        "69.8,2024-01-08,weigh-in,Health\n"
    )
    result = csv_codec.parse_and_validate(text, now=NOW)

    assert result.is_valid
    assert result.errors == []
    assert [r.measurement for r in result.valid_rows] == [70.5, 69.8]
    assert result.valid_rows[0].date == utc(2024, 1, 1)


def test_parse_empty_file():
    result = csv_codec.parse_and_validate("   \n", now=NOW)
    assert not result.is_valid
    assert result.errors == ["CSV file is empty"]


def test_parse_missing_columns():
    result = csv_codec.parse_and_validate("value,when\n1,2024-01-01", now=NOW)
    assert not result.is_valid
    assert result.errors[0] == "Missing required columns: name, category"
    assert result.errors[1] == "Available columns: value, when"


def test_parse_collects_row_errors():
    text = (
        "measurement,date,name,category\n"
        "abc,2024-01-01,a,X\n"
        "1,2030-01-01,b,X\n"
        "2,1850-01-01,,X\n"
        "3,2024-01-02,c,X\n"
    )
    result = csv_codec.parse_and_validate(text, now=NOW)

    assert not result.is_valid
    assert result.total_rows == 4
    assert len(result.valid_rows) == 1
    assert result.errors == [
        'Row 1: Invalid measurement value "abc"',
        "Row 2: Date cannot be in the future",
        "Row 3: Date must be after 1900",
        "Row 3: Name is required",
    ]


def test_parse_rejects_non_finite_measurement():
    text = "measurement,date,name,category\nnan,2024-01-01,a,X"
    result = csv_codec.parse_and_validate(text, now=NOW)
    assert result.errors == ['Row 1: Invalid measurement value "nan"']


def test_group_by_category_keeps_first_seen_order():
    text = (
        "measurement,date,name,category\n"
        "1,2024-01-01,a,Run\n"
        "2,2024-01-02,b,Swim\n"
        "3,2024-01-03,c,Run\n"
    )
    rows = csv_codec.parse_and_validate(text, now=NOW).valid_rows
    groups = csv_codec.group_by_category(rows)

    assert list(groups) == ["Run", "Swim"]
    assert [r.measurement for r in groups["Run"]] == [1.0, 3.0]
