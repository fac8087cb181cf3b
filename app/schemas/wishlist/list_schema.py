from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: Optional[str] = None
    url: Optional[str] = None
    formatted_url: Optional[str] = None
    position: int = 0
    click_count: int = 0
    claimed_at: Optional[datetime] = None
    claimed_by: Optional[str] = None
    is_claimed: bool = False


class WishListOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    token: str
    view_count: int = 0
    items: List[ItemOut] = Field(default_factory=list)


class ClaimIn(BaseModel):
    claimed_by: Optional[str] = Field(default=None, max_length=255)


class MetadataOut(BaseModel):
    url: str
    title: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None
