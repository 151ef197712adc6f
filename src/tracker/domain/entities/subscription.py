from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from src.tracker.domain.enums import SubscriptionTier, SubscriptionStatus

@dataclass
class Subscription:
    user_id: int
    tier: SubscriptionTier
    status: SubscriptionStatus
    started_at: datetime
    ends_at: Optional[datetime]
