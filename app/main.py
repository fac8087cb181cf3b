import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import settings
from app.db.base import Base
from app.api.v2.api import api_router
from app.api.v2.dependencies import build_mailer
from app.db import session as db_session

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Wishlist API V2",
    openapi_url="/api/v2/openapi.json"
)

# Vercel preview deployments get a fresh subdomain each time.
VERCEL_PREVIEW_REGEX = r"^https://.*\.vercel\.app$"


def _normalize_origin(origin: str | None) -> str | None:
    value = (origin or "").strip().rstrip("/")
    if not value:
        return None
    return value if value.startswith("http") else f"https://{value}"


def cors_origins() -> list[str]:
    """Configured origins plus the frontend/backend URLs and Vercel host."""

    candidates = list(settings.BACKEND_CORS_ORIGINS)
    candidates += [str(settings.FRONTEND_BASE_URL), str(settings.BACKEND_BASE_URL), os.getenv("VERCEL_URL")]
    candidates += (os.getenv("ADDITIONAL_CORS_ORIGINS") or "").split(",")
    return sorted({origin for origin in map(_normalize_origin, candidates) if origin})


allow_origins = cors_origins()
logger.info("CORS origins: %s", allow_origins)

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_origin_regex=VERCEL_PREVIEW_REGEX if any("vercel.app" in o for o in allow_origins) else None,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["Authorization", "Content-Type"],
)
app.include_router(api_router, prefix="/api/v2")


@app.on_event("startup")
async def startup():
    logger.info("Creating database tables if needed...")
    async with db_session.async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables are ready.")

    app.state.mailer = build_mailer()


@app.get("/")
def read_root():
    return {"message": "Welcome to the Wishlist API V2!"}
