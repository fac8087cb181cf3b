"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///test.db")
os.environ.setdefault("RESEND_API_KEY", "test-resend")
os.environ.setdefault("FRONTEND_BASE_URL", "http://localhost:3000")
os.environ.setdefault("BACKEND_BASE_URL", "http://localhost:8000")
os.environ.setdefault("EMAIL_FROM", "Wishlist <noreply@example.com>")
os.environ.setdefault("BATCH_JOB_SECRET", "job-secret")

# Ensure the app package is importable when tests run from the repo root.
BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.append(str(BACKEND_ROOT))

from app.db.base_class import Base
from app.models.subscription.subscription_model import (
    Subscription,
    SubscriptionBatch,
    SubscriptionEvent,
)
from app.models.wishlist.list_model import Item, WishList
from tests.utils import FakeMailer


TABLES = [
    WishList.__table__,
    Item.__table__,
    Subscription.__table__,
    SubscriptionEvent.__table__,
    SubscriptionBatch.__table__,
]


@pytest.fixture()
def engine():
    engine = create_engine("sqlite:///:memory:", future=True)
    Base.metadata.create_all(bind=engine, tables=TABLES)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine, tables=TABLES)
        engine.dispose()


@pytest.fixture()
def db_session(engine) -> Session:
    SessionLocal = sessionmaker(bind=engine, future=True)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def mailer() -> FakeMailer:
    return FakeMailer()
