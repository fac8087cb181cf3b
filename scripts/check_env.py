"""Report whether the environment holds a usable configuration.

Usage::

    python -m scripts.check_env

Imports :mod:`app.core.config`, prints every setting with secrets masked and
flags optional features that are switched off. Exits with status 1 when the
settings fail validation.
"""

from __future__ import annotations

import sys

from pydantic import ValidationError

SENSITIVE_MARKERS = ("key", "secret", "password")
AFFILIATE_FIELDS = (
    "AMAZON_AFFILIATE_TAG",
    "TARGET_AFFILIATE_ID",
    "WALMART_AFFILIATE_ID",
    "ETSY_AFFILIATE_ID",
)


def _display(name: str, value) -> str:
    if value is None:
        return "<unset>"
    if any(marker in name.lower() for marker in SENSITIVE_MARKERS):
        return "<hidden>"
    if name == "DATABASE_URL" and "@" in str(value):
        scheme, _, rest = str(value).partition("://")
        return f"{scheme}://<hidden>@{rest.split('@', 1)[1]}"
    return str(value)


def main() -> int:
    try:
        from app.core.config import settings
    except ValidationError:
        # ``app.core.config`` has already printed the details.
        print("Environment validation failed, see details above.", file=sys.stderr)
        return 1

    print("Environment variables OK.")
    for name, value in settings.model_dump().items():
        print(f"- {name}: {_display(name, value)}")

    if not settings.BATCH_JOB_SECRET:
        print("Warning: BATCH_JOB_SECRET is unset; the digest job endpoint will refuse every call.")
    missing = [name for name in AFFILIATE_FIELDS if not getattr(settings, name)]
    if missing:
        print(f"Affiliate tagging disabled for: {', '.join(missing)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
