from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from app.crud import list_crud, subscription_crud
from app.models.subscription.subscription_model import Subscription
from app.services.email.email_service import new_token, send_verification_email, verification_expiry

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


@dataclass(slots=True)
class SubscriptionError(Exception):
    """Raised when a subscribe, verify or unsubscribe request cannot be honoured."""

    code: str
    status_code: int = 400

    def __str__(self) -> str:  # pragma: no cover - human readable message
        return self.code


class SubscriptionService:
    """Subscription lifecycle: request, email verification, unsubscribe."""

    def __init__(self, db: Session, mailer=None):
        self.db = db
        self.mailer = mailer

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def subscribe(self, list_id: str | None, email: str | None) -> Subscription:
        """Create a pending subscription (or reuse the pending one) and send
        the verification email."""
        list_id = (list_id or "").strip()
        email = (email or "").strip()
        if not list_id or not email:
            raise SubscriptionError("missing_list_id_or_email")
        if not EMAIL_PATTERN.match(email):
            raise SubscriptionError("invalid_email")

        wishlist = list_crud.get_list(self.db, list_id)
        if not wishlist:
            raise SubscriptionError("list_not_found", status_code=404)

        verified = subscription_crud.get_verified(self.db, list_id, email)
        if verified:
            logger.info("Subscription %s already verified; nothing to send", verified.id)
            return verified

        subscription = subscription_crud.get_unverified(self.db, list_id, email)
        if subscription and subscription.verification_token:
            logger.info("Resending verification email for subscription %s", subscription.id)
        else:
            subscription = subscription_crud.create_subscription(
                self.db,
                list_id=list_id,
                email=email,
                verification_token=new_token(),
                unsubscribe_token=new_token(),
                verification_expires_at=verification_expiry(self._utcnow()),
            )

        send_verification_email(self.mailer, subscription, wishlist.name)
        return subscription

    def verify(self, token: str | None) -> Subscription:
        if not token:
            raise SubscriptionError("missing_verification_token")

        subscription = subscription_crud.get_pending_by_verification_token(self.db, token)
        if not subscription:
            raise SubscriptionError("invalid_or_expired_link", status_code=404)

        now = self._utcnow()
        expires_at = self._normalize_datetime(subscription.verification_expires_at)
        if expires_at is not None and expires_at < now:
            raise SubscriptionError("verification_link_expired", status_code=410)

        return subscription_crud.mark_verified(self.db, subscription, now)

    def unsubscribe(self, token: str | None) -> bool:
        if not token:
            raise SubscriptionError("missing_unsubscribe_token")
        deleted = subscription_crud.delete_by_unsubscribe_token(self.db, token)
        if not deleted:
            logger.info("Unsubscribe token matched no subscription")
        return bool(deleted)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _utcnow() -> datetime:
        return datetime.now(timezone.utc)

    @staticmethod
    def _normalize_datetime(value: datetime | None) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
