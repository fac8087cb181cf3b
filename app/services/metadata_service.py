"""Fetch a product page and pull a title, description and image out of it.

Open Graph tags win; plain ``<meta>`` tags and ``<title>`` are the fallback.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Optional
from urllib.parse import urlsplit

import requests
from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

BROWSER_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
    "DNT": "1",
    "Upgrade-Insecure-Requests": "1",
}


class MetadataFetchError(Exception):
    """The remote page could not be retrieved (bad status)."""


@dataclass(slots=True)
class ItemMetadata:
    url: str
    title: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None

    def to_dict(self) -> dict:
        return {key: value for key, value in asdict(self).items() if value is not None}


def is_valid_url(url: str) -> bool:
    try:
        parts = urlsplit(url)
    except ValueError:
        return False
    return parts.scheme in {"http", "https"} and bool(parts.netloc)


def _meta_content(soup: BeautifulSoup, **attrs) -> Optional[str]:
    tag = soup.find("meta", attrs=attrs)
    if tag is None:
        return None
    content = (tag.get("content") or "").strip()
    return content or None


def parse_metadata(url: str, html: str) -> ItemMetadata:
    soup = BeautifulSoup(html, "html.parser")
    metadata = ItemMetadata(
        url=url,
        title=_meta_content(soup, property="og:title"),
        description=_meta_content(soup, property="og:description"),
        image=_meta_content(soup, property="og:image"),
    )

    if not metadata.title:
        page_title = _meta_content(soup, name="title")
        if not page_title and soup.title and soup.title.string:
            page_title = soup.title.string.strip() or None
        metadata.title = page_title

    if not metadata.description:
        metadata.description = _meta_content(soup, name="description")

    return metadata


def fetch_metadata(url: str, timeout: float = 10.0, session: requests.Session | None = None) -> ItemMetadata:
    """Download *url* and return its metadata.

    Raises :class:`MetadataFetchError` on a non-2xx response; network errors
    propagate as :class:`requests.RequestException`.
    """
    http = session or requests
    response = http.get(url, headers=BROWSER_HEADERS, timeout=timeout)
    if not response.ok:
        raise MetadataFetchError(f"Failed to fetch URL: {response.status_code} {response.reason}")
    return parse_metadata(url, response.text)
