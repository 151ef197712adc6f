from datetime import datetime, timedelta, timezone
from typing import Any, Dict

from jose import jwt, JWTError
from passlib.context import CryptContext

from src.tracker.core.settings import settings


pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

PURPOSE_ACCESS = "access"
PURPOSE_RESET = "reset"


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(password, password_hash)


def _encode(subject: str, purpose: str, minutes: int, extra: Dict[str, Any] | None = None) -> str:
    now = datetime.now(timezone.utc)
    exp = now + timedelta(minutes=minutes)

    payload: Dict[str, Any] = {
        "sub": subject,
        "purpose": purpose,
        "iat": int(now.timestamp()),
        "exp": int(exp.timestamp()),
    }
    if extra:
        payload.update(extra)

    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALG)


def create_access_token(subject: str, extra: Dict[str, Any] | None = None) -> str:
    return _encode(subject, PURPOSE_ACCESS, settings.JWT_EXPIRE_MINUTES, extra)


def create_reset_token(subject: str) -> str:
    return _encode(subject, PURPOSE_RESET, settings.RESET_TOKEN_EXPIRE_MINUTES)


def decode_token(token: str, purpose: str = PURPOSE_ACCESS) -> Dict[str, Any]:
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALG])
    except JWTError as e:
        raise ValueError("Invalid token") from e

    # tokens minted for one purpose never authorize another
    if payload.get("purpose", PURPOSE_ACCESS) != purpose:
        raise ValueError("Invalid token")
    return payload
