from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class SubscribeIn(BaseModel):
    # Left as plain strings so the service reports missing or malformed
    # values with its own error codes instead of a 422.
    list_id: Optional[str] = None
    email: Optional[str] = None


class VerifyIn(BaseModel):
    token: Optional[str] = None


class UnsubscribeIn(BaseModel):
    token: Optional[str] = None


class SubscriptionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    list_id: str
    email: str
    verified_at: Optional[datetime] = None
    verification_expires_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
