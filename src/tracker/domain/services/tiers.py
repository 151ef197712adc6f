from datetime import datetime, timezone
from typing import Optional

from src.tracker.domain.entities.subscription import Subscription
from src.tracker.domain.enums import SubscriptionStatus, SubscriptionTier
from src.tracker.domain.value_objects import TierCapabilities

FREE_CHART_LIMIT = 3

TIERS: dict[SubscriptionTier, TierCapabilities] = {
    SubscriptionTier.FREE: TierCapabilities(
        name="free",
        display_name="Free",
        price=0.0,
        currency="eur",
        interval=None,
        chart_limit=FREE_CHART_LIMIT,
        features=("Up to 3 charts", "Basic support", "Data export"),
    ),
    SubscriptionTier.MONTHLY: TierCapabilities(
        name="monthly",
        display_name="Monthly Pro",
        price=9.99,
        currency="eur",
        interval="month",
        chart_limit=None,
        features=(
            "Unlimited charts",
            "Priority support",
            "Data import/export",
            "Advanced analytics",
            "Custom categories",
            "Data filtering",
        ),
    ),
    SubscriptionTier.LIFETIME: TierCapabilities(
        name="lifetime",
        display_name="Lifetime Pro",
        price=99.99,
        currency="eur",
        interval=None,
        chart_limit=None,
        features=(
            "Unlimited charts",
            "Super support",
            "Data import/export",
            "Advanced analytics",
            "Custom categories",
            "Data filtering",
            "All future features",
            "Priority feature requests",
        ),
    ),
}


def get_tier(name: str) -> TierCapabilities:
    try:
        return TIERS[SubscriptionTier(name)]
    except ValueError:
        return TIERS[SubscriptionTier.FREE]


def can_create_chart(tier_name: str, current_count: int) -> bool:
    tier = get_tier(tier_name)
    if tier.unlimited:
        return True
    return current_count < tier.chart_limit


def effective_tier(sub: Optional[Subscription], now: Optional[datetime] = None) -> TierCapabilities:
    """
    Tier whose limits apply right now. Past-due subscriptions and canceled
    ones whose period has ended fall back to free.
    """
    if sub is None:
        return TIERS[SubscriptionTier.FREE]

    now = now or datetime.now(timezone.utc)
    if sub.status == SubscriptionStatus.PAST_DUE:
        return TIERS[SubscriptionTier.FREE]
    if sub.status == SubscriptionStatus.CANCELED and sub.ends_at is not None and sub.ends_at <= now:
        return TIERS[SubscriptionTier.FREE]
    return get_tier(sub.tier.value)
