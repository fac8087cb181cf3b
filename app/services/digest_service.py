from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from app.models.subscription.subscription_model import SubscriptionEvent, SubscriptionEventType


@dataclass(slots=True)
class DigestEntry:
    item_name: str
    claimed_by: Optional[str] = None


@dataclass(slots=True)
class DigestSummary:
    item_added: List[DigestEntry] = field(default_factory=list)
    item_removed: List[DigestEntry] = field(default_factory=list)
    item_claimed: List[DigestEntry] = field(default_factory=list)
    item_unclaimed: List[DigestEntry] = field(default_factory=list)

    @property
    def total_changes(self) -> int:
        return (
            len(self.item_added)
            + len(self.item_removed)
            + len(self.item_claimed)
            + len(self.item_unclaimed)
        )


def group_events_by_type(events: Iterable[SubscriptionEvent]) -> DigestSummary:
    """Partition *events* by type, keeping their original order in each group.

    Claimers come straight from the event metadata; a missing name stays
    ``None`` (the "Anonymous" default is applied when the claim is made).
    """
    summary = DigestSummary()
    for event in events:
        event_type = event.event_type
        if event_type == SubscriptionEventType.item_added:
            summary.item_added.append(DigestEntry(event.item_name))
        elif event_type == SubscriptionEventType.item_removed:
            summary.item_removed.append(DigestEntry(event.item_name))
        elif event_type == SubscriptionEventType.item_claimed:
            metadata = event.metadata_ or {}
            summary.item_claimed.append(DigestEntry(event.item_name, metadata.get("claimed_by")))
        elif event_type == SubscriptionEventType.item_unclaimed:
            summary.item_unclaimed.append(DigestEntry(event.item_name))
    return summary
