from fastapi import APIRouter, Depends

from src.tracker.api.deps import UserContext, get_current_user_ctx, get_subscription_service
from src.tracker.api.errors import to_http
from src.tracker.api.schemas import (
    CancelResponse,
    DowngradeRequest,
    DowngradeResponse,
    SubscriptionInfoResponse,
    TierResponse,
)
from src.tracker.services.subscription_service import SubscriptionService


router = APIRouter(prefix="/api/subscriptions", tags=["subscriptions"])


@router.get("/tiers", response_model=list[TierResponse])
def list_tiers(svc: SubscriptionService = Depends(get_subscription_service)):
    return svc.list_tiers()


@router.get("/info", response_model=SubscriptionInfoResponse)
def subscription_info(
    ctx: UserContext = Depends(get_current_user_ctx),
    svc: SubscriptionService = Depends(get_subscription_service),
):
    try:
        return svc.get_info(ctx.user_id)
    except ValueError as e:
        raise to_http(e)


@router.post("/downgrade", response_model=DowngradeResponse)
def downgrade(
    req: DowngradeRequest,
    ctx: UserContext = Depends(get_current_user_ctx),
    svc: SubscriptionService = Depends(get_subscription_service),
):
    try:
        tier = svc.downgrade(ctx.user_id, req.target_tier)
    except ValueError as e:
        raise to_http(e)
    return DowngradeResponse(message="Successfully downgraded to free tier", new_tier=tier.value)


@router.post("/cancel", response_model=CancelResponse)
def cancel(
    ctx: UserContext = Depends(get_current_user_ctx),
    svc: SubscriptionService = Depends(get_subscription_service),
):
    try:
        ends_at = svc.cancel(ctx.user_id)
    except ValueError as e:
        raise to_http(e)
    return CancelResponse(message="Subscription canceled", ends_at=ends_at)
