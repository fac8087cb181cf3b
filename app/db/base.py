"""Imports every SQLAlchemy model so ``Base.metadata`` knows the full schema."""

from app.db.base_class import Base

# Lists and items
from app.models.wishlist.list_model import Item, WishList

# Subscriptions and digests
from app.models.subscription.subscription_model import (
    Subscription,
    SubscriptionBatch,
    SubscriptionEvent,
)
