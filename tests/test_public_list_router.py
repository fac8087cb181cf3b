import pytest
from fastapi import HTTPException

from app.api.v2.endpoints.public_list_router import (
    claim_item,
    read_public_list,
    record_item_click,
    unclaim_item,
)
from app.crud import item_crud
from app.schemas.wishlist import ClaimIn, WishListOut
from tests.utils import create_wishlist


@pytest.fixture()
def wishlist(db_session):
    wishlist = create_wishlist(db_session, name="Housewarming")
    item_crud.create_item(db_session, wishlist.id, "Plant")
    item_crud.create_item(db_session, wishlist.id, "Rug")
    db_session.refresh(wishlist)
    return wishlist


def test_read_public_list(db_session, wishlist):
    result = WishListOut.model_validate(read_public_list(wishlist.token, db=db_session))

    assert result.name == "Housewarming"
    assert [item.name for item in result.items] == ["Plant", "Rug"]
    assert result.view_count == 1


def test_unknown_token_is_404(db_session):
    with pytest.raises(HTTPException) as exc:
        read_public_list("does-not-exist", db=db_session)
    assert exc.value.status_code == 404


def test_claim_then_conflict_then_unclaim(db_session, wishlist):
    item = wishlist.items[0]

    claimed = claim_item(wishlist.token, item.id, ClaimIn(claimed_by="Mia"), db=db_session)
    assert claimed.claimed_by == "Mia"

    with pytest.raises(HTTPException) as exc:
        claim_item(wishlist.token, item.id, ClaimIn(claimed_by="Leo"), db=db_session)
    assert exc.value.status_code == 409

    released = unclaim_item(wishlist.token, item.id, db=db_session)
    assert released.claimed_by is None

    with pytest.raises(HTTPException) as exc:
        unclaim_item(wishlist.token, item.id, db=db_session)
    assert exc.value.status_code == 409


def test_claim_without_body_is_anonymous(db_session, wishlist):
    claimed = claim_item(wishlist.token, wishlist.items[1].id, None, db=db_session)
    assert claimed.claimed_by == "Anonymous"


def test_item_from_another_list_is_404(db_session, wishlist):
    other = create_wishlist(db_session, name="Other")
    foreign = item_crud.create_item(db_session, other.id, "Not yours")

    with pytest.raises(HTTPException) as exc:
        record_item_click(wishlist.token, foreign.id, db=db_session)
    assert exc.value.status_code == 404


def test_click_counter(db_session, wishlist):
    item = wishlist.items[0]
    assert record_item_click(wishlist.token, item.id, db=db_session).click_count == 1
