from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import RedirectResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.api.v2.dependencies import get_db, get_mailer
from app.core.config import settings
from app.schemas.subscription import SubscribeIn, UnsubscribeIn, VerifyIn
from app.services.email.resend_client import MailDeliveryError, ResendMailer
from app.services.subscription_service import SubscriptionError, SubscriptionService

logger = logging.getLogger(__name__)

router = APIRouter()

SUBSCRIBE_MESSAGE = "Verification email sent. Check your inbox!"
VERIFIED_MESSAGE = "Email verified! You'll start receiving updates."
UNSUBSCRIBED_MESSAGE = "You've been unsubscribed. You won't receive any more updates."


def _verify(db: Session, token: str | None) -> None:
    service = SubscriptionService(db=db)
    try:
        service.verify(token)
    except SubscriptionError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.code) from exc


def _unsubscribe(db: Session, token: str | None) -> dict:
    service = SubscriptionService(db=db)
    try:
        service.unsubscribe(token)
    except SubscriptionError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.code) from exc
    return {"success": True, "message": UNSUBSCRIBED_MESSAGE}


@router.post("")
def subscribe(
    payload: SubscribeIn,
    db: Session = Depends(get_db),
    mailer: ResendMailer = Depends(get_mailer),
):
    service = SubscriptionService(db=db, mailer=mailer)
    try:
        service.subscribe(payload.list_id, payload.email)
    except SubscriptionError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.code) from exc
    except MailDeliveryError as exc:
        logger.error("Verification email could not be sent: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="verification_email_failed",
        ) from exc
    return {"success": True, "message": SUBSCRIBE_MESSAGE}


@router.put("/verify")
def verify_subscription(payload: VerifyIn, db: Session = Depends(get_db)):
    _verify(db, payload.token)
    return {"success": True, "message": VERIFIED_MESSAGE}


@router.get("/verify")
def verify_subscription_link(
    token: str | None = Query(default=None),
    db: Session = Depends(get_db),
):
    """Link target from the verification email; lands the user on a page.

    Token problems answer with the same errors as the PUT route; a database
    failure sends the user to the error page instead.
    """
    try:
        _verify(db, token)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Verification failed")
        return RedirectResponse(
            f"{settings.app_base_url}/verify-subscription-error",
            status_code=status.HTTP_303_SEE_OTHER,
        )
    return RedirectResponse(
        f"{settings.app_base_url}/verify-subscription-success",
        status_code=status.HTTP_303_SEE_OTHER,
    )


@router.delete("/unsubscribe")
def unsubscribe(payload: UnsubscribeIn, db: Session = Depends(get_db)):
    return _unsubscribe(db, payload.token)


@router.get("/unsubscribe")
def unsubscribe_link(
    token: str | None = Query(default=None),
    db: Session = Depends(get_db),
):
    return _unsubscribe(db, token)
