from __future__ import annotations

import logging

import requests
from fastapi import APIRouter, HTTPException, Query, status

from app.core.config import settings
from app.schemas.wishlist import MetadataOut
from app.services.metadata_service import MetadataFetchError, fetch_metadata, is_valid_url

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/fetch-metadata", response_model=MetadataOut, response_model_exclude_none=True)
def fetch_item_metadata(url: str | None = Query(default=None)):
    """Prefill an item form from the product page behind *url*."""
    if not url:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="URL parameter is required")
    if not is_valid_url(url):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid URL format")

    try:
        metadata = fetch_metadata(url, timeout=settings.METADATA_FETCH_TIMEOUT_S)
    except MetadataFetchError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except (requests.RequestException, ValueError) as exc:
        logger.error("Metadata fetch error for %s: %s", url, exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to fetch metadata: {exc}",
        ) from exc
    return metadata.to_dict()
