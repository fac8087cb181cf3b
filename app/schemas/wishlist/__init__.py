"""Pydantic schemas for public wishlists."""

from .list_schema import ClaimIn, ItemOut, MetadataOut, WishListOut

__all__ = ["ClaimIn", "ItemOut", "MetadataOut", "WishListOut"]
