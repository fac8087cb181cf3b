from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.api.v2.dependencies import get_db
from app.crud import item_crud, list_crud
from app.models.wishlist.list_model import Item, WishList
from app.schemas.wishlist import ClaimIn, ItemOut, WishListOut

router = APIRouter()


def _get_list_item(db: Session, token: str, item_id: str) -> tuple[WishList, Item]:
    wishlist = list_crud.get_list_by_token(db, token, count_view=False)
    if not wishlist:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="list_not_found")
    item = item_crud.get_item(db, item_id)
    if not item or item.list_id != wishlist.id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="item_not_found")
    return wishlist, item


@router.get("/{token}", response_model=WishListOut)
def read_public_list(token: str, db: Session = Depends(get_db)):
    wishlist = list_crud.get_list_by_token(db, token)
    if not wishlist:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="list_not_found")
    return wishlist


@router.post("/{token}/items/{item_id}/claim", response_model=ItemOut)
def claim_item(
    token: str,
    item_id: str,
    payload: ClaimIn | None = None,
    db: Session = Depends(get_db),
):
    _get_list_item(db, token, item_id)
    claimed = item_crud.claim_item(db, item_id, payload.claimed_by if payload else None)
    if not claimed:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="item_already_claimed")
    return claimed


@router.post("/{token}/items/{item_id}/unclaim", response_model=ItemOut)
def unclaim_item(token: str, item_id: str, db: Session = Depends(get_db)):
    _, item = _get_list_item(db, token, item_id)
    if not item.is_claimed:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="item_not_claimed")
    return item_crud.unclaim_item(db, item_id)


@router.post("/{token}/items/{item_id}/click", response_model=ItemOut)
def record_item_click(token: str, item_id: str, db: Session = Depends(get_db)):
    _get_list_item(db, token, item_id)
    return item_crud.increment_click_count(db, item_id)
