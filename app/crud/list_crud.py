from sqlalchemy.orm import Session
from app.models.wishlist.list_model import WishList
from app.services.url_processor import generate_list_token

def create_list(db: Session, name: str, user_id: str | None = None) -> WishList:
    """Create a list with a fresh 64-character public token."""
    db_list = WishList(name=name, user_id=user_id, token=generate_list_token())
    db.add(db_list)
    db.commit()
    db.refresh(db_list)
    return db_list

def get_list(db: Session, list_id: str) -> WishList | None:
    return db.get(WishList, list_id)

def get_list_by_token(db: Session, token: str, count_view: bool = True) -> WishList | None:
    """Return the public list behind *token*, counting the visit."""
    db_list = db.query(WishList).filter(WishList.token == token).first()
    if db_list and count_view:
        db_list.view_count = (db_list.view_count or 0) + 1
        db.commit()
        db.refresh(db_list)
    return db_list
