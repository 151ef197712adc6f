from datetime import datetime
from typing import Optional, Protocol

from src.tracker.domain.entities.user import User
from src.tracker.domain.entities.chart import Chart
from src.tracker.domain.entities.data_point import DataPoint
from src.tracker.domain.entities.subscription import Subscription
from src.tracker.domain.enums import SubscriptionTier, SubscriptionStatus
from src.tracker.domain.value_objects import AuthCredentials


class UserRepo(Protocol):
    def get_by_email(self, email: str) -> Optional[User]: ...
    def get_by_id(self, user_id: int) -> Optional[User]: ...
    def get_auth_credentials(self, email: str) -> Optional[AuthCredentials]: ...
    def create(self, email: str, password_hash: str) -> User: ...
    def set_password(self, user_id: int, password_hash: str) -> None: ...


class SubscriptionRepo(Protocol):
    def ensure_default(self, user_id: int, tier: SubscriptionTier, status: SubscriptionStatus) -> None: ...
    def get_by_user(self, user_id: int) -> Optional[Subscription]: ...
    def update(
        self,
        user_id: int,
        tier: Optional[SubscriptionTier] = None,
        status: Optional[SubscriptionStatus] = None,
        ends_at: Optional[datetime] = None,
    ) -> Subscription: ...


class ChartRepo(Protocol):
    def create(self, user_id: int, name: str, category: str) -> Chart: ...
    def get_by_id(self, chart_id: int) -> Optional[Chart]: ...
    def list_by_user(
        self, user_id: int, category: Optional[str] = None, search: Optional[str] = None
    ) -> list[Chart]: ...
    def count_by_user(self, user_id: int) -> int: ...
    def update(self, chart_id: int, fields: dict) -> Optional[Chart]: ...
    def delete(self, chart_id: int) -> bool: ...
    def touch(self, chart_id: int) -> None: ...
    def categories(self, user_id: int) -> list[str]: ...


class DataPointRepo(Protocol):
    def create(self, chart_id: int, measurement: float, date: datetime, name: str) -> DataPoint: ...
    def get_by_id(self, point_id: int) -> Optional[DataPoint]: ...
    def update(self, point_id: int, fields: dict) -> Optional[DataPoint]: ...
    def delete(self, point_id: int) -> bool: ...
