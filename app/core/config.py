import sys
from typing import List, Optional

from pydantic import AnyHttpUrl, ValidationError, field_validator
from pydantic_settings import BaseSettings

POSTGRES_SCHEMES = {"postgres", "postgresql", "postgresql+psycopg2", "postgresql+psycopg"}


class Settings(BaseSettings):
    DATABASE_URL: str
    BACKEND_CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:8000",
        "http://127.0.0.1:3000",
    ]
    RESEND_API_KEY: str
    EMAIL_FROM: str

    FRONTEND_BASE_URL: AnyHttpUrl
    BACKEND_BASE_URL: AnyHttpUrl

    # --- Subscriptions & digests ---
    SUBSCRIPTION_VERIFY_TTL_H: int = 24
    DIGEST_WINDOW_MINUTES: int = 30
    # Shared secret the scheduler sends as a bearer token. Unset means the
    # batch endpoint refuses every call.
    BATCH_JOB_SECRET: Optional[str] = None

    # --- Affiliate identifiers (all optional) ---
    AMAZON_AFFILIATE_TAG: Optional[str] = None
    TARGET_AFFILIATE_ID: Optional[str] = None
    WALMART_AFFILIATE_ID: Optional[str] = None
    ETSY_AFFILIATE_ID: Optional[str] = None

    # Item metadata fetcher
    METADATA_FETCH_TIMEOUT_S: float = 10.0

    # Database connection
    DATABASE_CONNECTION_MAX_RETRIES: int = 1
    DATABASE_CONNECTION_RETRY_BACKOFF_SECONDS: float = 1.0

    # Performance instrumentation
    SQLALCHEMY_SLOW_QUERY_THRESHOLD_MS: int = 300

    ENVIRONMENT: str = "development"

    class Config:
        env_file = ".env"

    @field_validator("DATABASE_URL", mode="before")
    @classmethod
    def _normalize_database_url(cls, value: str) -> str:
        """Point every Postgres URL at the asyncpg driver.

        Hosting dashboards hand out ``postgres://`` (an alias SQLAlchemy
        dropped) or plain ``postgresql://`` URLs; both, and the psycopg
        variants, are rewritten. Other backends pass through.
        """

        if not isinstance(value, str):
            return value
        scheme, sep, rest = value.partition("://")
        if sep and scheme in POSTGRES_SCHEMES:
            return f"postgresql+asyncpg://{rest}"
        return value

    @field_validator("BATCH_JOB_SECRET", mode="before")
    @classmethod
    def _blank_secret_is_unset(cls, value: Optional[str]) -> Optional[str]:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def app_base_url(self) -> str:
        """Frontend origin used in email links, without a trailing slash."""
        return str(self.FRONTEND_BASE_URL).rstrip("/")


def _log_settings_validation_error(exc: ValidationError) -> None:
    """Print one line per bad or missing variable to stderr.

    Import-time failures are otherwise buried in a long traceback in the
    serverless logs.
    """

    print("Configuration error while loading environment variables:", file=sys.stderr)
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ())) or "<settings>"
        print(
            f"  - {location}: {error.get('msg', 'invalid value')} (type={error.get('type', 'unknown')})",
            file=sys.stderr,
        )


try:
    settings = Settings()
except ValidationError as exc:  # pragma: no cover - exercised at runtime
    _log_settings_validation_error(exc)
    raise
