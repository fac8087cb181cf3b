"""Wishlists and their items."""

from .list_model import Item, WishList

__all__ = [
    "Item",
    "WishList",
]
