from datetime import datetime
from typing import List

from sqlalchemy.orm import Session

from app.models.subscription.subscription_model import Subscription


def create_subscription(
    db: Session,
    list_id: str,
    email: str,
    verification_token: str,
    unsubscribe_token: str,
    verification_expires_at: datetime,
) -> Subscription:
    db_subscription = Subscription(
        list_id=list_id,
        email=email,
        verification_token=verification_token,
        unsubscribe_token=unsubscribe_token,
        verification_expires_at=verification_expires_at,
    )
    db.add(db_subscription)
    db.commit()
    db.refresh(db_subscription)
    return db_subscription


def get_unverified(db: Session, list_id: str, email: str) -> Subscription | None:
    """Most recent pending subscription for the (list, email) pair."""
    return (
        db.query(Subscription)
        .filter(
            Subscription.list_id == list_id,
            Subscription.email == email,
            Subscription.verified_at.is_(None),
        )
        .order_by(Subscription.created_at.desc())
        .first()
    )


def get_verified(db: Session, list_id: str, email: str) -> Subscription | None:
    return (
        db.query(Subscription)
        .filter(
            Subscription.list_id == list_id,
            Subscription.email == email,
            Subscription.verified_at.is_not(None),
        )
        .first()
    )


def get_pending_by_verification_token(db: Session, token: str) -> Subscription | None:
    return (
        db.query(Subscription)
        .filter(Subscription.verification_token == token, Subscription.verified_at.is_(None))
        .first()
    )


def mark_verified(db: Session, subscription: Subscription, verified_at: datetime) -> Subscription:
    subscription.verified_at = verified_at
    subscription.verification_token = None
    db.commit()
    db.refresh(subscription)
    return subscription


def delete_by_unsubscribe_token(db: Session, token: str) -> int:
    """Hard delete; returns how many rows went away (0 or 1)."""
    deleted = (
        db.query(Subscription)
        .filter(Subscription.unsubscribe_token == token)
        .delete(synchronize_session=False)
    )
    db.commit()
    return deleted


def get_verified_subscriptions(db: Session) -> List[Subscription]:
    return (
        db.query(Subscription)
        .filter(Subscription.verified_at.is_not(None))
        .order_by(Subscription.created_at.asc())
        .all()
    )
