from dataclasses import dataclass
from typing import Generator

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from src.tracker.infra.db import SessionLocal
from src.tracker.infra.models import UserORM
from src.tracker.core.security import decode_token

from src.tracker.infra.uow import SqlAlchemyUoW
from src.tracker.domain.contracts.uow import UoW

from src.tracker.services.auth_service import AuthService
from src.tracker.services.chart_service import ChartService
from src.tracker.services.csv_service import CSVService
from src.tracker.services.subscription_service import SubscriptionService


oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")


@dataclass(frozen=True)
class UserContext:
    """Authenticated caller."""
    user_id: int
    email: str


def get_db() -> Generator[Session, None, None]:
    """
    One SQLAlchemy session per request, always closed.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_user_ctx(
    db: Session = Depends(get_db),
    token: str = Depends(oauth2_scheme),
) -> UserContext:
    """
    Decodes the bearer token and checks that the user still exists and is active.
    """
    try:
        payload = decode_token(token)
        user_id = int(payload["sub"])
    except Exception:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token.",
        )

    user = (
        db.query(UserORM)
        .filter(UserORM.id == user_id, UserORM.is_active.is_(True))
        .first()
    )
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found or inactive.",
        )

    return UserContext(user_id=int(user.id), email=str(user.email))


def get_uow(db: Session = Depends(get_db)) -> UoW:
    return SqlAlchemyUoW(db)


# Service factories (composition root)
def get_auth_service(uow: UoW = Depends(get_uow)) -> AuthService:
    return AuthService(uow)

def get_chart_service(uow: UoW = Depends(get_uow)) -> ChartService:
    return ChartService(uow)

def get_csv_service(uow: UoW = Depends(get_uow)) -> CSVService:
    return CSVService(uow)

def get_subscription_service(uow: UoW = Depends(get_uow)) -> SubscriptionService:
    return SubscriptionService(uow)
