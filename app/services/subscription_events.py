"""Append-only event log feeding the subscription digests.

Every code path that mutates list items calls one of the ``track_item_*``
helpers after its own commit. Tracking must never undo or block that
mutation, so failures come back as a :class:`TrackResult` instead of an
exception; callers are free to ignore it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.subscription.subscription_model import SubscriptionEvent, SubscriptionEventType

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class TrackResult:
    event: Optional[SubscriptionEvent] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def track_subscription_event(
    db: Session,
    list_id: str,
    event_type: SubscriptionEventType,
    item_id: str,
    item_name: str,
    metadata: Optional[Dict[str, Any]] = None,
) -> TrackResult:
    """Insert one event row stamped with the current UTC time."""
    event = SubscriptionEvent(
        list_id=list_id,
        event_type=SubscriptionEventType(event_type),
        item_id=item_id,
        item_name=item_name,
        metadata_=metadata or None,
        created_at=datetime.now(timezone.utc),
    )
    try:
        db.add(event)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Error tracking subscription event %s for list %s: %s", event_type, list_id, exc)
        return TrackResult(error=exc)
    return TrackResult(event=event)


def track_item_added(db: Session, list_id: str, item_id: str, item_name: str) -> TrackResult:
    return track_subscription_event(db, list_id, SubscriptionEventType.item_added, item_id, item_name)


def track_item_removed(db: Session, list_id: str, item_id: str, item_name: str) -> TrackResult:
    return track_subscription_event(db, list_id, SubscriptionEventType.item_removed, item_id, item_name)


def track_item_claimed(
    db: Session, list_id: str, item_id: str, item_name: str, claimed_by: str
) -> TrackResult:
    return track_subscription_event(
        db,
        list_id,
        SubscriptionEventType.item_claimed,
        item_id,
        item_name,
        {"claimed_by": claimed_by},
    )


def track_item_unclaimed(db: Session, list_id: str, item_id: str, item_name: str) -> TrackResult:
    return track_subscription_event(db, list_id, SubscriptionEventType.item_unclaimed, item_id, item_name)
