"""Email subscriptions to list changes and the digest bookkeeping."""

from .subscription_model import (
    Subscription,
    SubscriptionBatch,
    SubscriptionEvent,
    SubscriptionEventType,
)

__all__ = [
    "Subscription",
    "SubscriptionBatch",
    "SubscriptionEvent",
    "SubscriptionEventType",
]
