"""Vercel serverless entrypoint; the cron job hits /api/v2/jobs/batch-send-notifications."""

from __future__ import annotations

import sys
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.append(str(ROOT_DIR))

from app.main import app  # noqa: E402,F401
