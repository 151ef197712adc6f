from sqlalchemy.orm import Session

from src.tracker.infra.repositories import (
    SqlUserRepo, SqlSubscriptionRepo, SqlChartRepo, SqlDataPointRepo,
)

class SqlAlchemyUoW:
    def __init__(self, db: Session):
        self.db = db

        self.users = SqlUserRepo(db)
        self.subscriptions = SqlSubscriptionRepo(db)
        self.charts = SqlChartRepo(db)
        self.data_points = SqlDataPointRepo(db)

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()
