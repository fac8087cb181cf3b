"""Utility helpers for test factories."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from app.crud import list_crud
from app.models.subscription.subscription_model import (
    Subscription,
    SubscriptionEvent,
    SubscriptionEventType,
)
from app.models.wishlist.list_model import Item, WishList
from app.services.email.email_service import new_token
from app.services.email.resend_client import MailDeliveryError


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def create_wishlist(db, name: str = "Birthday ideas", **kwargs) -> WishList:
    return list_crud.create_list(db, name=name, **kwargs)


def create_raw_item(db, wishlist: WishList, name: str = "Teapot", **kwargs) -> Item:
    """Insert an item without going through ``item_crud`` (no event recorded)."""
    item = Item(list_id=wishlist.id, name=name, **kwargs)
    db.add(item)
    db.commit()
    db.refresh(item)
    return item


def create_subscription(
    db,
    wishlist: WishList,
    email: str = "friend@example.com",
    *,
    verified: bool = True,
    expires_in: timedelta = timedelta(hours=24),
) -> Subscription:
    now = utcnow()
    subscription = Subscription(
        list_id=wishlist.id,
        email=email,
        verification_token=None if verified else new_token(),
        unsubscribe_token=new_token(),
        verified_at=now if verified else None,
        verification_expires_at=now + expires_in,
    )
    db.add(subscription)
    db.commit()
    db.refresh(subscription)
    return subscription


def create_event(
    db,
    wishlist: WishList,
    event_type: SubscriptionEventType = SubscriptionEventType.item_added,
    item_name: str = "Teapot",
    *,
    created_at: datetime | None = None,
    metadata: dict | None = None,
    item_id: str = "item-1",
) -> SubscriptionEvent:
    event = SubscriptionEvent(
        list_id=wishlist.id,
        event_type=event_type,
        item_id=item_id,
        item_name=item_name,
        metadata_=metadata,
        created_at=created_at or utcnow(),
    )
    db.add(event)
    db.commit()
    db.refresh(event)
    return event


class FakeMailer:
    """Stands in for ``ResendMailer``; keeps every message instead of sending it."""

    def __init__(self):
        self.sent: list[dict] = []

    def send(self, to: str, subject: str, html: str) -> dict:
        self.sent.append({"to": to, "subject": subject, "html": html})
        return {"id": f"fake-{len(self.sent)}"}


class FailingMailer:
    def __init__(self):
        self.attempts = 0

    def send(self, to: str, subject: str, html: str) -> dict:
        self.attempts += 1
        raise MailDeliveryError(f"provider rejected message to {to}")
