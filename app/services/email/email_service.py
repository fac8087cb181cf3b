import secrets
import string
from datetime import datetime, timedelta, timezone

from app.core.config import settings
from app.models.subscription.subscription_model import Subscription

from .templates import render_verification

TOKEN_ALPHABET = string.ascii_lowercase + string.digits

# Verification link lifetime
VERIFY_TTL = timedelta(hours=settings.SUBSCRIPTION_VERIFY_TTL_H)


def new_token(length: int = 26) -> str:
    """Random alphanumeric token for verification and unsubscribe links."""
    return "".join(secrets.choice(TOKEN_ALPHABET) for _ in range(length))


def verification_expiry(now: datetime | None = None) -> datetime:
    return (now or datetime.now(timezone.utc)) + VERIFY_TTL


def verify_url(token: str) -> str:
    return f"{settings.app_base_url}/verify-subscription?token={token}"


def send_verification_email(mailer, subscription: Subscription, list_name: str):
    subject, html = render_verification(
        list_name,
        verify_url(subscription.verification_token),
        ttl_hours=settings.SUBSCRIPTION_VERIFY_TTL_H,
    )
    return mailer.send(subscription.email, subject, html)
