from typing import Protocol
from src.tracker.domain.contracts.repositories import (
    UserRepo, SubscriptionRepo, ChartRepo, DataPointRepo,
)

class UoW(Protocol):
    users: UserRepo
    subscriptions: SubscriptionRepo
    charts: ChartRepo
    data_points: DataPointRepo

    def commit(self) -> None: ...
    def rollback(self) -> None: ...
