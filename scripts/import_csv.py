import argparse
import logging
import os
import sys

from pydantic import TypeAdapter

from src.tracker.api.schemas import ChartName
from src.tracker.core.logging_config import setup_logging
from src.tracker.domain.enums import DateFormat
from src.tracker.domain.errors import CSVImportError
from src.tracker.infra.db import SessionLocal
from src.tracker.infra.uow import SqlAlchemyUoW
from src.tracker.services.csv_service import CSVService

logger = logging.getLogger("import_csv")

_chart_name = TypeAdapter(ChartName)


def read_text(path: str) -> str:
    # utf-8-sig drops the BOM spreadsheet exports often carry
    with open(path, "r", encoding="utf-8-sig", newline="") as f:
        return f.read()


def run_import(
    email: str,
    csv_path: str,
    chart_name: str,
    skip_first_row: bool,
    date_format: DateFormat,
) -> None:
    chart_name = _chart_name.validate_python(chart_name)

    db = SessionLocal()
    uow = SqlAlchemyUoW(db)
    try:
        user = uow.users.get_by_email(email.strip().lower())
        if not user:
            raise ValueError(f"User not found: {email}")

        outcome = CSVService(uow).import_chart(
            user.id,
            chart_name=chart_name,
            text=read_text(csv_path),
            skip_first_row=skip_first_row,
            fmt=date_format,
        )

        print("[DONE]")
        print(f"Chart id:        {outcome.chart.id}")
        print(f"Rows processed:  {outcome.total_rows}")
        print(f"Points created:  {outcome.created}")
        for w in outcome.warnings:
            print(f"[WARN] {w}")

    finally:
        db.close()


# main
def main() -> None:
    ap = argparse.ArgumentParser(description="Import a CSV file into a new chart")

    ap.add_argument("--email", required=True, help="owner of the new chart")
    ap.add_argument("--csv", default=os.getenv("CSV_PATH"), help="CSV_PATH")
    ap.add_argument("--chart-name", default=None, help="defaults to the file name")
    ap.add_argument(
        "--date-format",
        choices=[f.value for f in DateFormat],
        default=DateFormat.ISO.value,
    )

    args = ap.parse_args()

    if not args.csv:
        raise ValueError("CSV path is required: pass --csv or set CSV_PATH")

    chart_name = args.chart_name or os.path.splitext(os.path.basename(args.csv))[0]

    setup_logging()
    try:
        run_import(
            email=args.email,
            csv_path=args.csv,
            chart_name=chart_name,
            skip_first_row=True,
            date_format=DateFormat(args.date_format),
        )
    except CSVImportError as e:
        for err in e.errors:
            print(f"  {err}", file=sys.stderr)
        raise


if __name__ == "__main__":
    try:
        main()
    except Exception as exc:
        print(f"[ERROR] {exc}", file=sys.stderr)
        sys.exit(1)
