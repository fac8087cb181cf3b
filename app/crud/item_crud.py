"""Item mutations.

Each mutation commits the item change first, then records the matching
subscription event. The tracker reports failures as a value, and the item
change stands either way.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session

from app.models.wishlist.list_model import Item
from app.services import subscription_events
from app.services.url_processor import process_url

ANONYMOUS_CLAIMER = "Anonymous"


def get_item(db: Session, item_id: str) -> Item | None:
    return db.get(Item, item_id)


def create_item(
    db: Session,
    list_id: str,
    name: str,
    description: Optional[str] = None,
    url: Optional[str] = None,
) -> Item:
    position = db.query(Item).filter(Item.list_id == list_id).count()
    db_item = Item(
        list_id=list_id,
        name=name,
        description=description,
        url=url,
        formatted_url=process_url(url) if url else None,
        position=position,
    )
    db.add(db_item)
    db.commit()
    db.refresh(db_item)
    subscription_events.track_item_added(db, db_item.list_id, db_item.id, db_item.name)
    return db_item


def update_item(db: Session, item_id: str, **updates) -> Item | None:
    """Update name, description or url; a new url is normalized again."""
    db_item = db.get(Item, item_id)
    if not db_item:
        return None
    for field in ("name", "description", "url"):
        if field in updates:
            setattr(db_item, field, updates[field])
    if "url" in updates:
        db_item.formatted_url = process_url(updates["url"]) if updates["url"] else None
    db.commit()
    db.refresh(db_item)
    return db_item


def claim_item(db: Session, item_id: str, claimed_by: Optional[str] = None) -> Item | None:
    """Claim an unclaimed item. Returns ``None`` when the item is missing or
    already claimed."""
    claimer = (claimed_by or "").strip() or ANONYMOUS_CLAIMER
    updated = (
        db.query(Item)
        .filter(Item.id == item_id, Item.claimed_at.is_(None))
        .update(
            {"claimed_at": datetime.now(timezone.utc), "claimed_by": claimer},
            synchronize_session=False,
        )
    )
    db.commit()
    if not updated:
        return None
    db_item = db.get(Item, item_id)
    db.refresh(db_item)
    subscription_events.track_item_claimed(db, db_item.list_id, db_item.id, db_item.name, claimer)
    return db_item


def unclaim_item(db: Session, item_id: str) -> Item | None:
    db_item = db.get(Item, item_id)
    if not db_item:
        return None
    db_item.claimed_at = None
    db_item.claimed_by = None
    db.commit()
    db.refresh(db_item)
    subscription_events.track_item_unclaimed(db, db_item.list_id, db_item.id, db_item.name)
    return db_item


def delete_item(db: Session, item_id: str) -> bool:
    db_item = db.get(Item, item_id)
    if not db_item:
        return False
    list_id, name = db_item.list_id, db_item.name
    db.delete(db_item)
    db.commit()
    subscription_events.track_item_removed(db, list_id, item_id, name)
    return True


def increment_click_count(db: Session, item_id: str) -> Item | None:
    db_item = db.get(Item, item_id)
    if not db_item:
        return None
    db_item.click_count = (db_item.click_count or 0) + 1
    db.commit()
    db.refresh(db_item)
    return db_item
