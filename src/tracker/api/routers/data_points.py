from fastapi import APIRouter, Depends, status

from src.tracker.api.deps import UserContext, get_current_user_ctx, get_chart_service
from src.tracker.api.errors import to_http
from src.tracker.api.schemas import (
    CreatedDataPointResponse,
    DataPointCreateRequest,
    DataPointListResponse,
    DataPointResponse,
    DataPointUpdateRequest,
    MessageResponse,
)
from src.tracker.services.chart_service import ChartService


router = APIRouter(prefix="/api", tags=["data-points"])


@router.get("/charts/{chart_id}/data-points", response_model=DataPointListResponse)
def list_data_points(
    chart_id: int,
    ctx: UserContext = Depends(get_current_user_ctx),
    svc: ChartService = Depends(get_chart_service),
):
    try:
        points = svc.list_data_points(ctx.user_id, chart_id)
    except ValueError as e:
        raise to_http(e)
    return {"data_points": points, "count": len(points)}


@router.post(
    "/charts/{chart_id}/data-points",
    response_model=CreatedDataPointResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_data_point(
    chart_id: int,
    req: DataPointCreateRequest,
    ctx: UserContext = Depends(get_current_user_ctx),
    svc: ChartService = Depends(get_chart_service),
):
    try:
        created = svc.add_data_point(
            ctx.user_id,
            chart_id,
            measurement=req.measurement,
            date=req.date,
            name=req.name,
        )
    except ValueError as e:
        raise to_http(e)
    return {"data_point": created.point, "warning": created.warning}


@router.put("/data-points/{point_id}", response_model=DataPointResponse)
def update_data_point(
    point_id: int,
    req: DataPointUpdateRequest,
    ctx: UserContext = Depends(get_current_user_ctx),
    svc: ChartService = Depends(get_chart_service),
):
    try:
        return svc.update_data_point(ctx.user_id, point_id, req.changes())
    except ValueError as e:
        raise to_http(e)


@router.delete("/data-points/{point_id}", response_model=MessageResponse)
def delete_data_point(
    point_id: int,
    ctx: UserContext = Depends(get_current_user_ctx),
    svc: ChartService = Depends(get_chart_service),
):
    try:
        svc.delete_data_point(ctx.user_id, point_id)
    except ValueError as e:
        raise to_http(e)
    return MessageResponse(message="Data point deleted successfully")
