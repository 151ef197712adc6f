import logging
from datetime import datetime, timedelta, timezone
from typing import Any

from src.tracker.domain.contracts.uow import UoW
from src.tracker.domain.enums import SubscriptionTier, SubscriptionStatus
from src.tracker.domain.errors import NotFound
from src.tracker.domain.services.tiers import TIERS, can_create_chart, effective_tier, get_tier

logger = logging.getLogger(__name__)

BILLING_PERIOD = timedelta(days=30)


class SubscriptionService:
    def __init__(self, uow: UoW):
        self.uow = uow

    def _get(self, user_id: int):
        sub = self.uow.subscriptions.get_by_user(user_id)
        if not sub:
            raise NotFound("Subscription not found")
        return sub

    def _commit(self) -> None:
        try:
            self.uow.commit()
        except Exception:
            self.uow.rollback()
            raise

    def list_tiers(self):
        return list(TIERS.values())

    def get_info(self, user_id: int) -> dict[str, Any]:
        sub = self._get(user_id)
        tier = effective_tier(sub)
        count = self.uow.charts.count_by_user(user_id)

        return {
            "tier": tier,
            "status": sub.status.value,
            "started_at": sub.started_at,
            "ends_at": sub.ends_at,
            "usage": {
                "chart_count": count,
                "chart_limit": tier.chart_limit,
                "can_create_chart": can_create_chart(tier.name, count),
            },
        }

    def change_tier(self, user_id: int, tier: SubscriptionTier) -> None:
        """Activates a tier once payment was settled outside this service."""
        self._get(user_id)
        self.uow.subscriptions.update(user_id, tier=tier, status=SubscriptionStatus.ACTIVE)
        self._commit()
        logger.info("user %s moved to tier %s", user_id, tier.value)

    def downgrade(self, user_id: int, target_tier: str) -> SubscriptionTier:
        if target_tier != SubscriptionTier.FREE.value:
            raise ValueError("Can only downgrade to free tier")

        self._get(user_id)
        self.uow.subscriptions.update(
            user_id,
            tier=SubscriptionTier.FREE,
            status=SubscriptionStatus.ACTIVE,
        )
        self._commit()
        logger.info("user %s downgraded to free", user_id)
        return SubscriptionTier.FREE

    def cancel(self, user_id: int) -> datetime | None:
        """
        Marks the subscription canceled. The tier stays usable until the end
        of the current period; lifetime and free tiers have no period.
        """
        sub = self._get(user_id)
        if sub.tier == SubscriptionTier.FREE:
            raise ValueError("No paid subscription to cancel")
        if sub.status == SubscriptionStatus.CANCELED:
            raise ValueError("Subscription is already canceled")

        ends_at = None
        if get_tier(sub.tier.value).interval:
            now = datetime.now(timezone.utc)
            ends_at = sub.started_at + BILLING_PERIOD
            while ends_at <= now:
                ends_at += BILLING_PERIOD

        self.uow.subscriptions.update(user_id, status=SubscriptionStatus.CANCELED, ends_at=ends_at)
        self._commit()
        logger.info("user %s canceled %s subscription", user_id, sub.tier.value)
        return ends_at
