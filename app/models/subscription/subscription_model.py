from __future__ import annotations

import enum
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy import JSON, DateTime, Enum, ForeignKey, Index, String, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base_class import Base


def _uuid() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SubscriptionEventType(str, enum.Enum):
    item_added = "item_added"
    item_removed = "item_removed"
    item_claimed = "item_claimed"
    item_unclaimed = "item_unclaimed"


class Subscription(Base):
    """An email address watching a list. ``verified_at`` stays null until the
    verification link is followed; unsubscribing deletes the row."""

    __tablename__ = "list_subscriptions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    list_id: Mapped[str] = mapped_column(String(36), ForeignKey("lists.id", ondelete="CASCADE"), index=True)
    email: Mapped[str] = mapped_column(String(320), nullable=False)
    verification_token: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, unique=True, index=True)
    unsubscribe_token: Mapped[str] = mapped_column(String(64), nullable=False, unique=True, index=True)
    verified_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    verification_expires_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    @property
    def is_verified(self) -> bool:
        return self.verified_at is not None

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<Subscription(id={self.id}, list_id={self.list_id}, email='{self.email}')>"


class SubscriptionEvent(Base):
    """Append-only record of an item change. ``item_name`` is captured when the
    event happens so later renames or deletions do not rewrite history."""

    __tablename__ = "list_subscription_events"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    list_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    event_type: Mapped[SubscriptionEventType] = mapped_column(
        Enum(SubscriptionEventType, native_enum=False, length=32), nullable=False
    )
    item_id: Mapped[str] = mapped_column(String(36), nullable=False)
    item_name: Mapped[str] = mapped_column(String(300), nullable=False)
    # ``metadata`` is reserved on declarative classes.
    metadata_: Mapped[Optional[Dict[str, Any]]] = mapped_column(
        "metadata", JSON().with_variant(JSONB(), "postgresql"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<SubscriptionEvent(id={self.id}, type={self.event_type}, item='{self.item_name}')>"


class SubscriptionBatch(Base):
    """Watermark written after a digest send. Never updated; a newer row
    supersedes the previous one."""

    __tablename__ = "list_subscription_batches"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    list_subscription_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("list_subscriptions.id", ondelete="CASCADE"), nullable=False
    )
    sent_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    last_event_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return (
            "<SubscriptionBatch(subscription={0}, sent_at={1}, last_event_at={2})>".format(
                self.list_subscription_id,
                self.sent_at,
                self.last_event_at,
            )
        )


Index("ix_list_subscription_events_list_created", SubscriptionEvent.list_id, SubscriptionEvent.created_at)
Index(
    "ix_list_subscription_batches_sub_created",
    SubscriptionBatch.list_subscription_id,
    SubscriptionBatch.created_at,
)
Index("ix_list_subscriptions_list_email", Subscription.list_id, Subscription.email)
