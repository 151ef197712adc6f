from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import Response

from src.tracker.api.deps import (
    UserContext,
    get_current_user_ctx,
    get_chart_service,
    get_csv_service,
)
from src.tracker.api.errors import to_http
from src.tracker.api.schemas import (
    ChartCreateRequest,
    ChartUpdateRequest,
    ChartResponse,
    ChartListResponse,
    CSVImportRequest,
    CSVImportResponse,
    CSVValidateRequest,
    ImportSummary,
    MessageResponse,
    StatisticsResponse,
)
from src.tracker.domain.enums import DateFormat
from src.tracker.domain.value_objects import DateRange
from src.tracker.services.chart_service import ChartService
from src.tracker.services.csv_service import CSVService


router = APIRouter(prefix="/api/charts", tags=["charts"])


def _utc(dt: Optional[datetime]) -> Optional[datetime]:
    if dt is None or dt.tzinfo is not None:
        return dt
    return dt.replace(tzinfo=timezone.utc)


def _csv_response(filename: str, content: str) -> Response:
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("", response_model=ChartListResponse)
def list_charts(
    category: Optional[str] = None,
    search: Optional[str] = None,
    ctx: UserContext = Depends(get_current_user_ctx),
    svc: ChartService = Depends(get_chart_service),
):
    charts = svc.list_charts(ctx.user_id, category=category or None, search=search or None)
    return {"charts": charts, "count": len(charts)}


@router.post("", response_model=ChartResponse, status_code=status.HTTP_201_CREATED)
def create_chart(
    req: ChartCreateRequest,
    ctx: UserContext = Depends(get_current_user_ctx),
    svc: ChartService = Depends(get_chart_service),
):
    try:
        return svc.create_chart(ctx.user_id, name=req.name, category=req.category)
    except ValueError as e:
        raise to_http(e)


@router.get("/categories", response_model=list[str])
def list_categories(
    ctx: UserContext = Depends(get_current_user_ctx),
    svc: ChartService = Depends(get_chart_service),
):
    return svc.list_categories(ctx.user_id)


@router.get("/export")
def export_all(
    date_format: DateFormat = DateFormat.ISO,
    category: Optional[str] = None,
    ctx: UserContext = Depends(get_current_user_ctx),
    svc: CSVService = Depends(get_csv_service),
):
    filename, content = svc.export_all(ctx.user_id, fmt=date_format, category=category or None)
    return _csv_response(filename, content)


@router.post("/import", response_model=CSVImportResponse, status_code=status.HTTP_201_CREATED)
def import_csv(
    req: CSVImportRequest,
    ctx: UserContext = Depends(get_current_user_ctx),
    svc: CSVService = Depends(get_csv_service),
):
    try:
        outcome = svc.import_chart(
            ctx.user_id,
            chart_name=req.chart_name,
            text=req.csv_data,
            skip_first_row=req.skip_first_row,
            fmt=req.date_format,
        )
    except ValueError as e:
        raise to_http(e)

    return CSVImportResponse(
        message="CSV imported successfully",
        chart=ChartResponse.model_validate(outcome.chart),
        import_summary=ImportSummary(
            total_rows_processed=outcome.total_rows,
            valid_rows_found=outcome.valid_rows,
            data_points_created=outcome.created,
            categories_found=outcome.categories,
            primary_category=outcome.primary_category,
            skipped_categories=outcome.skipped_categories,
        ),
        warnings=outcome.warnings,
    )


@router.post("/import/validate")
def validate_csv(
    req: CSVValidateRequest,
    ctx: UserContext = Depends(get_current_user_ctx),
    svc: CSVService = Depends(get_csv_service),
):
    return svc.validate(req.csv_data, skip_first_row=req.skip_first_row, fmt=req.date_format)


@router.get("/{chart_id}", response_model=ChartResponse)
def get_chart(
    chart_id: int,
    ctx: UserContext = Depends(get_current_user_ctx),
    svc: ChartService = Depends(get_chart_service),
):
    try:
        chart = svc.get_chart(ctx.user_id, chart_id)
    except ValueError as e:
        raise to_http(e)
    if chart is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Chart not found")
    return chart


@router.put("/{chart_id}", response_model=ChartResponse)
def update_chart(
    chart_id: int,
    req: ChartUpdateRequest,
    ctx: UserContext = Depends(get_current_user_ctx),
    svc: ChartService = Depends(get_chart_service),
):
    try:
        return svc.update_chart(ctx.user_id, chart_id, req.changes())
    except ValueError as e:
        raise to_http(e)


@router.delete("/{chart_id}", response_model=MessageResponse)
def delete_chart(
    chart_id: int,
    ctx: UserContext = Depends(get_current_user_ctx),
    svc: ChartService = Depends(get_chart_service),
):
    try:
        svc.delete_chart(ctx.user_id, chart_id)
    except ValueError as e:
        raise to_http(e)
    return MessageResponse(message="Chart deleted successfully")


@router.get("/{chart_id}/statistics", response_model=Optional[StatisticsResponse])
def chart_statistics(
    chart_id: int,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    ctx: UserContext = Depends(get_current_user_ctx),
    svc: ChartService = Depends(get_chart_service),
):
    """
    Trend line and summary over the chart's points, optionally limited to
    [start, end] (whole days). Returns null when no points match.
    """
    try:
        date_range = DateRange(start=_utc(start), end=_utc(end))
        return svc.chart_statistics(ctx.user_id, chart_id, date_range)
    except ValueError as e:
        raise to_http(e)


@router.get("/{chart_id}/export")
def export_chart(
    chart_id: int,
    date_format: DateFormat = DateFormat.ISO,
    ctx: UserContext = Depends(get_current_user_ctx),
    svc: CSVService = Depends(get_csv_service),
):
    try:
        filename, content = svc.export_chart(ctx.user_id, chart_id, fmt=date_format)
    except ValueError as e:
        raise to_http(e)
    return _csv_response(filename, content)
