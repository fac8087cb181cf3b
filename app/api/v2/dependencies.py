import logging
from typing import Generator

from fastapi import Request
from sqlalchemy.orm import Session

from app.core.config import settings
from app.db import session as db_session
from app.services.email.resend_client import ResendMailer

log = logging.getLogger(__name__)


def get_db() -> Generator[Session, None, None]:
    # Looked up at call time: ``configure_database`` may swap the factory
    # (SQLite fallback) after this module was imported.
    db = db_session.SessionLocal()
    try:
        yield db
    finally:
        db.close()


def build_mailer() -> ResendMailer:
    return ResendMailer(api_key=settings.RESEND_API_KEY, sender=settings.EMAIL_FROM)


def get_mailer(request: Request) -> ResendMailer:
    """The mailer created at startup; built lazily when startup never ran
    (serverless cold paths, direct ASGI mounts)."""

    mailer = getattr(request.app.state, "mailer", None)
    if mailer is None:
        log.info("No mailer on app.state, creating one")
        mailer = build_mailer()
        request.app.state.mailer = mailer
    return mailer
