"""Product link clean-up: tracking parameters out, affiliate ids in."""

from __future__ import annotations

import logging
import secrets
import string
from dataclasses import dataclass
from typing import List, Optional, Tuple
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from app.core.config import Settings, settings

logger = logging.getLogger(__name__)

TRACKING_PARAMS = frozenset(
    {
        "utm_source",
        "utm_medium",
        "utm_campaign",
        "utm_content",
        "utm_term",
        "fbclid",
        "gclid",
        "msclkid",
        "_ga",
        "mc_cid",
        "mc_eid",
    }
)

AMAZON_AFFILIATE_PARAMS = ("tag", "linkCode", "linkId")

LIST_TOKEN_ALPHABET = string.ascii_letters + string.digits


@dataclass(frozen=True)
class AffiliateConfig:
    amazon: Optional[str] = None
    target: Optional[str] = None
    walmart: Optional[str] = None
    etsy: Optional[str] = None

    @classmethod
    def from_settings(cls, config: Settings) -> "AffiliateConfig":
        return cls(
            amazon=config.AMAZON_AFFILIATE_TAG or None,
            target=config.TARGET_AFFILIATE_ID or None,
            walmart=config.WALMART_AFFILIATE_ID or None,
            etsy=config.ETSY_AFFILIATE_ID or None,
        )


Params = List[Tuple[str, str]]


def _delete_param(params: Params, name: str) -> Params:
    return [(key, value) for key, value in params if key != name]


def _set_param(params: Params, name: str, value: str) -> Params:
    """Replace every ``name`` pair with one ``(name, value)`` at the first
    occurrence, or append it when absent."""

    result: Params = []
    placed = False
    for key, current in params:
        if key != name:
            result.append((key, current))
        elif not placed:
            result.append((name, value))
            placed = True
    if not placed:
        result.append((name, value))
    return result


def _apply_affiliate(hostname: str, params: Params, affiliate: AffiliateConfig) -> Params:
    # Checked in priority order; the first matching merchant wins.
    if "amazon." in hostname:
        for name in AMAZON_AFFILIATE_PARAMS:
            params = _delete_param(params, name)
        if affiliate.amazon:
            params = _set_param(params, "tag", affiliate.amazon)
    elif "target.com" in hostname:
        if affiliate.target:
            params = _set_param(params, "afid", affiliate.target)
    elif "walmart.com" in hostname:
        if affiliate.walmart:
            params = _set_param(params, "wmlspartner", affiliate.walmart)
    elif "etsy.com" in hostname:
        if affiliate.etsy:
            params = _set_param(params, "ref", affiliate.etsy)
    return params


def process_url(original_url: str, affiliate: AffiliateConfig | None = None) -> str:
    """Strip tracking parameters from *original_url* and add merchant affiliate ids.

    Anything that does not parse as an absolute URL is returned untouched.
    """
    if not original_url:
        return original_url

    affiliate = affiliate if affiliate is not None else AffiliateConfig.from_settings(settings)

    try:
        parts = urlsplit(original_url.strip())
        if not parts.scheme or not parts.netloc:
            raise ValueError("URL is not absolute")
        parts.port  # raises ValueError on an invalid port
        hostname = parts.hostname or ""

        params: Params = [
            (key, value)
            for key, value in parse_qsl(parts.query, keep_blank_values=True)
            if key not in TRACKING_PARAMS
        ]
        params = _apply_affiliate(hostname, params, affiliate)

        path = parts.path or "/"
        return urlunsplit((parts.scheme, parts.netloc, path, urlencode(params), parts.fragment))
    except ValueError as exc:
        logger.warning("Could not process URL %r: %s", original_url, exc)
        return original_url


def generate_list_token(length: int = 64) -> str:
    """Random alphanumeric token used in public list links."""
    return "".join(secrets.choice(LIST_TOKEN_ALPHABET) for _ in range(length))
