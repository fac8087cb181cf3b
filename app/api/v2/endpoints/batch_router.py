"""Scheduled job entry points, called by an external cron with a shared secret."""

from __future__ import annotations

import hmac
import logging

from fastapi import APIRouter, Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from app.api.v2.dependencies import get_db, get_mailer
from app.core.config import settings
from app.services.email.resend_client import ResendMailer
from app.services.notification_batch_service import NotificationBatchRunner

logger = logging.getLogger(__name__)

router = APIRouter()


def _check_job_secret(authorization: str | None) -> None:
    secret = settings.BATCH_JOB_SECRET
    if not secret:
        logger.error("BATCH_JOB_SECRET is not configured; refusing batch job call")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server misconfiguration",
        )

    expected = f"Bearer {secret}"
    if not authorization or not hmac.compare_digest(authorization.encode(), expected.encode()):
        logger.warning("Unauthorized batch job call")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")


@router.api_route("/batch-send-notifications", methods=["POST", "GET"])
def batch_send_notifications(
    authorization: str | None = Header(default=None),
    db: Session = Depends(get_db),
    mailer: ResendMailer = Depends(get_mailer),
):
    _check_job_secret(authorization)

    try:
        runner = NotificationBatchRunner(
            db=db,
            mailer=mailer,
            app_base_url=settings.app_base_url,
            window_minutes=settings.DIGEST_WINDOW_MINUTES,
        )
        result = runner.run_detailed()
    except Exception as exc:
        logger.exception("Batch notification job failed")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
        ) from exc

    if not result.subscriptions:
        return {"message": "No subscriptions to process", "sent": 0}
    return {"message": f"Sent {result.sent} notification emails", "sent": result.sent}
