from app.models.subscription.subscription_model import SubscriptionEvent, SubscriptionEventType
from app.services.digest_service import DigestEntry, group_events_by_type


def _event(event_type, name, metadata=None):
    return SubscriptionEvent(
        list_id="list-1",
        event_type=event_type,
        item_id=f"id-{name}",
        item_name=name,
        metadata_=metadata,
    )


def test_events_are_partitioned_in_order():
    events = [
        _event(SubscriptionEventType.item_added, "Mug"),
        _event(SubscriptionEventType.item_claimed, "Lamp", {"claimed_by": "Ana"}),
        _event(SubscriptionEventType.item_added, "Socks"),
        _event(SubscriptionEventType.item_removed, "Vase"),
        _event(SubscriptionEventType.item_unclaimed, "Lamp"),
        _event(SubscriptionEventType.item_claimed, "Book"),
    ]

    summary = group_events_by_type(events)

    assert summary.item_added == [DigestEntry("Mug"), DigestEntry("Socks")]
    assert summary.item_claimed == [DigestEntry("Lamp", "Ana"), DigestEntry("Book", None)]
    assert summary.item_unclaimed == [DigestEntry("Lamp")]
    assert summary.item_removed == [DigestEntry("Vase")]
    assert summary.total_changes == len(events)


def test_empty_input_gives_empty_summary():
    summary = group_events_by_type([])
    assert summary.total_changes == 0
    assert summary.item_added == []


def test_claimed_by_is_only_read_for_claims():
    summary = group_events_by_type(
        [_event(SubscriptionEventType.item_added, "Mug", {"claimed_by": "Nobody"})]
    )
    assert summary.item_added == [DigestEntry("Mug")]
