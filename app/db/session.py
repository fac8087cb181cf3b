"""Engines and the session factory.

The async engine is only used at startup to create tables; request handling
and the digest job go through the synchronous ``SessionLocal``. Both are
(re)built by :func:`configure_database`, which runs once at import.
"""

from __future__ import annotations

import logging
import os
import ssl
import time
from time import perf_counter
from typing import Any

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.engine.url import make_url
from sqlalchemy.exc import ArgumentError, OperationalError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.orm import sessionmaker

from app.core.config import settings

logger = logging.getLogger(__name__)

SQLITE_FALLBACK_URL = "sqlite+aiosqlite:///./wishlist_local.db"
SSL_QUERY_KEYS = ("sslmode", "sslrootcert", "sslcert", "sslkey")

async_engine: AsyncEngine
sync_engine: Engine
SessionLocal: sessionmaker


def _ssl_context(sslmode: str, rootcert: str | None, cert: str | None, key: str | None) -> ssl.SSLContext:
    context = ssl.create_default_context(cafile=rootcert)
    if cert:
        context.load_cert_chain(certfile=cert, keyfile=key)
    if sslmode != "verify-full":
        context.check_hostname = False
    if sslmode not in {"verify-ca", "verify-full"}:
        # libpq only encrypts for require/prefer/allow.
        context.verify_mode = ssl.CERT_NONE
    return context


def _split_asyncpg_ssl(url: str) -> tuple[str, dict[str, Any]]:
    """asyncpg rejects libpq ``ssl*`` query params; turn them into connect args."""

    try:
        parsed = make_url(url)
    except ArgumentError:
        return url, {}
    if parsed.drivername != "postgresql+asyncpg":
        return url, {}

    query = dict(parsed.query)
    sslmode, rootcert, cert, key = (query.pop(name, None) for name in SSL_QUERY_KEYS)
    stripped = parsed.set(query=query).render_as_string(hide_password=False)

    if sslmode is None and not (rootcert or cert):
        return stripped, {}
    sslmode = (sslmode or "require").lower()
    if sslmode == "disable":
        return stripped, {"ssl": False}
    return stripped, {"ssl": _ssl_context(sslmode, rootcert, cert, key)}


def _sync_url_for(async_url: str) -> tuple[str, dict[str, Any]]:
    """Map the async driver onto its blocking counterpart (psycopg2, pysqlite)."""

    parsed = make_url(async_url)
    backend = parsed.get_backend_name()
    if backend == "sqlite":
        return parsed.set(drivername="sqlite").render_as_string(hide_password=False), {
            "check_same_thread": False
        }
    if backend == "postgresql":
        return parsed.set(drivername="postgresql").render_as_string(hide_password=False), {}
    return async_url, {}


def _fallback_allowed() -> bool:
    if os.getenv("DISABLE_SQLITE_FALLBACK") == "1":
        return False
    return (settings.ENVIRONMENT or "").lower() in {"development", "local"}


def _log_slow_queries(engine: Engine) -> None:
    threshold_ms = settings.SQLALCHEMY_SLOW_QUERY_THRESHOLD_MS or 0
    if threshold_ms <= 0:
        return

    @event.listens_for(engine, "before_cursor_execute")
    def _start(conn, cursor, statement, parameters, context, executemany):
        context._wishlist_started = perf_counter()

    @event.listens_for(engine, "after_cursor_execute")
    def _stop(conn, cursor, statement, parameters, context, executemany):
        started = getattr(context, "_wishlist_started", None)
        if started is None:
            return
        elapsed_ms = (perf_counter() - started) * 1000.0
        if elapsed_ms >= threshold_ms:
            logger.warning("Slow query (%.1f ms): %.200s", elapsed_ms, " ".join(str(statement).split()))


def _ping(engine: Engine) -> None:
    """``SELECT 1`` with exponential backoff; SQLite gets a single try."""

    attempts = 1 if engine.dialect.name == "sqlite" else max(settings.DATABASE_CONNECTION_MAX_RETRIES, 1)
    delay = max(settings.DATABASE_CONNECTION_RETRY_BACKOFF_SECONDS, 0.1)

    for attempt in range(1, attempts + 1):
        try:
            with engine.connect() as connection:
                connection.execute(text("SELECT 1"))
            return
        except (OperationalError, OSError) as exc:
            if attempt == attempts:
                raise
            logger.warning(
                "Database ping failed (%s/%s): %s. Retrying in %.1f s.", attempt, attempts, exc, delay
            )
            time.sleep(delay)
            delay = min(delay * 2, 30.0)


def configure_database(database_url: str | None = None, *, allow_fallback: bool = True) -> None:
    """Build the engines for *database_url* (default ``settings.DATABASE_URL``).

    In development an unreachable server switches the app to
    :data:`SQLITE_FALLBACK_URL` instead of failing the import.
    """

    global async_engine, sync_engine, SessionLocal

    async_url, async_args = _split_asyncpg_ssl(str(database_url or settings.DATABASE_URL))
    safe_url = make_url(async_url).render_as_string(hide_password=True)
    logger.info("Configuring database %s", safe_url)

    new_async_engine = create_async_engine(async_url, connect_args=async_args)
    sync_url, sync_args = _sync_url_for(async_url)
    new_sync_engine = create_engine(sync_url, pool_pre_ping=True, connect_args=sync_args)

    try:
        _ping(new_sync_engine)
    except (OperationalError, OSError) as exc:
        new_sync_engine.dispose()
        new_async_engine.sync_engine.dispose()
        if not (allow_fallback and _fallback_allowed()):
            logger.error("Database %s unreachable: %s", safe_url, exc)
            raise
        logger.warning("Database %s unreachable (%s); using SQLite fallback.", safe_url, exc)
        configure_database(SQLITE_FALLBACK_URL, allow_fallback=False)
        return

    _log_slow_queries(new_sync_engine)
    async_engine = new_async_engine
    sync_engine = new_sync_engine
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=sync_engine)


configure_database()
