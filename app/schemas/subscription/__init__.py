"""Pydantic schemas for list subscriptions."""

from .subscription_schema import (
    SubscribeIn,
    SubscriptionOut,
    UnsubscribeIn,
    VerifyIn,
)

__all__ = [
    "SubscribeIn",
    "SubscriptionOut",
    "UnsubscribeIn",
    "VerifyIn",
]
