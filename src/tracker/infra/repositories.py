from __future__ import annotations

from collections import defaultdict
from typing import Optional
from datetime import datetime, timezone

from sqlalchemy.orm import Session
from sqlalchemy import func

from src.tracker.infra.models import UserORM, SubscriptionORM, ChartORM, DataPointORM

from src.tracker.domain.enums import SubscriptionTier, SubscriptionStatus
from src.tracker.domain.value_objects import AuthCredentials
from src.tracker.domain.entities.user import User
from src.tracker.domain.entities.chart import Chart
from src.tracker.domain.entities.data_point import DataPoint
from src.tracker.domain.entities.subscription import Subscription


def _aware(dt: Optional[datetime]) -> Optional[datetime]:
    """Some backends (sqlite) hand back naive timestamps; they are stored as UTC."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _like_escape(term: str) -> str:
    # user input is matched literally
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


# mappers ORM -> Domain
def _user_dom(u: UserORM) -> User:
    return User(
        id=int(u.id),
        email=str(u.email),
        is_active=bool(u.is_active),
        created_at=_aware(u.created_at),
    )


def _auth_creds_dom(u: UserORM) -> AuthCredentials:
    return AuthCredentials(
        user_id=int(u.id),
        password_hash=str(u.password_hash),
    )


def _subscription_dom(s: SubscriptionORM) -> Subscription:
    return Subscription(
        user_id=int(s.user_id),
        tier=SubscriptionTier(str(s.tier)),
        status=SubscriptionStatus(str(s.status)),
        started_at=_aware(s.started_at),
        ends_at=_aware(s.ends_at),
    )


def _point_dom(p: DataPointORM) -> DataPoint:
    return DataPoint(
        id=int(p.id),
        chart_id=int(p.chart_id),
        measurement=float(p.measurement),
        date=_aware(p.date),
        name=str(p.name),
        created_at=_aware(p.created_at),
    )


def _chart_dom(c: ChartORM, points: list[DataPoint]) -> Chart:
    return Chart(
        id=int(c.id),
        user_id=int(c.user_id),
        name=str(c.name),
        category=str(c.category),
        created_at=_aware(c.created_at),
        updated_at=_aware(c.updated_at),
        data_points=points,
    )


# repos
class SqlUserRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_by_email(self, email: str) -> Optional[User]:
        u = self.db.query(UserORM).filter(UserORM.email == email).first()
        return _user_dom(u) if u else None

    def get_by_id(self, user_id: int) -> Optional[User]:
        u = self.db.query(UserORM).filter(UserORM.id == user_id).first()
        return _user_dom(u) if u else None

    def get_auth_credentials(self, email: str) -> Optional[AuthCredentials]:
        u = self.db.query(UserORM).filter(UserORM.email == email).first()
        return _auth_creds_dom(u) if u else None

    def create(self, email: str, password_hash: str) -> User:
        u = UserORM(email=email, password_hash=password_hash, is_active=True)
        self.db.add(u)
        self.db.flush()
        self.db.refresh(u)
        return _user_dom(u)

    def set_password(self, user_id: int, password_hash: str) -> None:
        u = self.db.query(UserORM).filter(UserORM.id == user_id).first()
        if not u:
            raise ValueError("User not found")
        u.password_hash = password_hash
        self.db.flush()


class SqlSubscriptionRepo:
    def __init__(self, db: Session):
        self.db = db

    def _row(self, user_id: int) -> Optional[SubscriptionORM]:
        return self.db.query(SubscriptionORM).filter(SubscriptionORM.user_id == user_id).first()

    def ensure_default(self, user_id: int, tier: SubscriptionTier, status: SubscriptionStatus) -> None:
        if self._row(user_id):
            return
        self.db.add(SubscriptionORM(user_id=user_id, tier=tier.value, status=status.value))
        self.db.flush()

    def get_by_user(self, user_id: int) -> Optional[Subscription]:
        s = self._row(user_id)
        if not s:
            return None
        self.db.refresh(s)
        return _subscription_dom(s)

    def update(
        self,
        user_id: int,
        tier: Optional[SubscriptionTier] = None,
        status: Optional[SubscriptionStatus] = None,
        ends_at: Optional[datetime] = None,
    ) -> Subscription:
        s = self._row(user_id)
        if not s:
            raise ValueError("Subscription not found")

        if tier is not None and tier.value != s.tier:
            s.tier = tier.value
            s.started_at = _utc_now()
        if status is not None:
            s.status = status.value
        s.ends_at = ends_at

        self.db.flush()
        return _subscription_dom(s)


class SqlChartRepo:
    def __init__(self, db: Session):
        self.db = db

    def _points_for(self, chart_ids: list[int]) -> dict[int, list[DataPoint]]:
        grouped: dict[int, list[DataPoint]] = defaultdict(list)
        if not chart_ids:
            return grouped
        rows = (
            self.db.query(DataPointORM)
            .filter(DataPointORM.chart_id.in_(chart_ids))
            .order_by(DataPointORM.date.asc(), DataPointORM.id.asc())
            .all()
        )
        for p in rows:
            grouped[int(p.chart_id)].append(_point_dom(p))
        return grouped

    def create(self, user_id: int, name: str, category: str) -> Chart:
        c = ChartORM(user_id=user_id, name=name, category=category)
        self.db.add(c)
        self.db.flush()
        self.db.refresh(c)
        return _chart_dom(c, [])

    def get_by_id(self, chart_id: int) -> Optional[Chart]:
        c = self.db.query(ChartORM).filter(ChartORM.id == chart_id).first()
        if not c:
            return None
        return _chart_dom(c, self._points_for([int(c.id)])[int(c.id)])

    def list_by_user(
        self,
        user_id: int,
        category: Optional[str] = None,
        search: Optional[str] = None,
    ) -> list[Chart]:
        q = self.db.query(ChartORM).filter(ChartORM.user_id == user_id)

        if category:
            q = q.filter(ChartORM.category == category)
        if search:
            q = q.filter(func.lower(ChartORM.name).like(f"%{_like_escape(search.strip().lower())}%", escape="\\"))

        rows = q.order_by(ChartORM.updated_at.desc(), ChartORM.id.desc()).all()
        points = self._points_for([int(c.id) for c in rows])
        return [_chart_dom(c, points[int(c.id)]) for c in rows]

    def count_by_user(self, user_id: int) -> int:
        return int(
            self.db.query(func.count(ChartORM.id)).filter(ChartORM.user_id == user_id).scalar() or 0
        )

    def update(self, chart_id: int, fields: dict) -> Optional[Chart]:
        c = self.db.query(ChartORM).filter(ChartORM.id == chart_id).first()
        if not c:
            return None
        for key in ("name", "category"):
            if key in fields:
                setattr(c, key, fields[key])
        c.updated_at = _utc_now()
        self.db.flush()
        return self.get_by_id(chart_id)

    def delete(self, chart_id: int) -> bool:
        # bulk delete so the database cascade removes the data points
        n = self.db.query(ChartORM).filter(ChartORM.id == chart_id).delete(synchronize_session=False)
        self.db.flush()
        return n > 0

    def touch(self, chart_id: int) -> None:
        self.db.query(ChartORM).filter(ChartORM.id == chart_id).update(
            {ChartORM.updated_at: _utc_now()}, synchronize_session=False
        )
        self.db.flush()

    def categories(self, user_id: int) -> list[str]:
        rows = (
            self.db.query(ChartORM.category)
            .filter(ChartORM.user_id == user_id)
            .distinct()
            .order_by(ChartORM.category)
            .all()
        )
        return [str(r[0]) for r in rows]


class SqlDataPointRepo:
    def __init__(self, db: Session):
        self.db = db

    def create(self, chart_id: int, measurement: float, date: datetime, name: str) -> DataPoint:
        p = DataPointORM(chart_id=chart_id, measurement=measurement, date=date, name=name)
        self.db.add(p)
        self.db.flush()
        self.db.refresh(p)
        return _point_dom(p)

    def get_by_id(self, point_id: int) -> Optional[DataPoint]:
        p = self.db.query(DataPointORM).filter(DataPointORM.id == point_id).first()
        return _point_dom(p) if p else None

    def update(self, point_id: int, fields: dict) -> Optional[DataPoint]:
        p = self.db.query(DataPointORM).filter(DataPointORM.id == point_id).first()
        if not p:
            return None
        for key in ("measurement", "date", "name"):
            if key in fields:
                setattr(p, key, fields[key])
        self.db.flush()
        self.db.refresh(p)
        return _point_dom(p)

    def delete(self, point_id: int) -> bool:
        n = self.db.query(DataPointORM).filter(DataPointORM.id == point_id).delete(synchronize_session=False)
        self.db.flush()
        return n > 0
