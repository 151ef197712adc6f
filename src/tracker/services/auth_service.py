import logging

from src.tracker.core.security import (
    PURPOSE_RESET,
    create_access_token,
    create_reset_token,
    decode_token,
    hash_password,
    verify_password,
)
from src.tracker.core.settings import settings
from src.tracker.domain.contracts.uow import UoW
from src.tracker.domain.enums import SubscriptionTier, SubscriptionStatus

logger = logging.getLogger(__name__)

MAX_PASSWORD_BYTES = 72


def _check_password(password: str) -> None:
    if not password:
        raise ValueError("Password is required.")
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValueError("Password must be at most 72 bytes long.")


class AuthService:
    def __init__(self, uow: UoW):
        self.uow = uow

    def register(self, email: str, password: str) -> str:
        email = email.strip().lower()
        try:
            if self.uow.users.get_by_email(email):
                raise ValueError("User already exists.")

            _check_password(password)

            user = self.uow.users.create(
                email=email,
                password_hash=hash_password(password),
            )

            # every new user starts on the default tier
            self.uow.subscriptions.ensure_default(
                user.id,
                SubscriptionTier(settings.DEFAULT_TIER),
                SubscriptionStatus(settings.DEFAULT_SUB_STATUS),
            )

            self.uow.commit()
            logger.info("registered user %s", user.id)

            return create_access_token(subject=str(user.id))

        except Exception:
            self.uow.rollback()
            raise

    def login(self, email: str, password: str) -> str:
        creds = self.uow.users.get_auth_credentials(email.strip().lower())
        if not creds or not verify_password(password, creds.password_hash):
            raise ValueError("Invalid credentials.")

        return create_access_token(subject=str(creds.user_id))

    def request_password_reset(self, email: str) -> str | None:
        """
        Returns a reset token, or None for unknown emails. Callers must not
        reveal which of the two happened.
        """
        user = self.uow.users.get_by_email(email.strip().lower())
        if not user or not user.is_active:
            return None
        return create_reset_token(subject=str(user.id))

    def reset_password(self, token: str, new_password: str) -> None:
        payload = decode_token(token, purpose=PURPOSE_RESET)
        user_id = int(payload["sub"])

        _check_password(new_password)

        try:
            self.uow.users.set_password(user_id, hash_password(new_password))
            self.uow.commit()
        except Exception:
            self.uow.rollback()
            raise
        logger.info("password reset for user %s", user_id)
