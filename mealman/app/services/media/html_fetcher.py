"""Lightweight HTML fetching with an explicit outcome for the browser fallback."""

import logging
import re
from enum import Enum
from typing import Optional

import httpx
from pydantic import BaseModel

from mealman.app.core.config import Settings

logger = logging.getLogger(__name__)

# Status codes that usually mean "bots without a browser are turned away".
BROWSER_RETRY_STATUSES = {401, 403, 429, 503}


class FetchOutcome(str, Enum):
    OK = "ok"
    NEEDS_BROWSER = "needs_browser"
    FAILED = "failed"


class LightweightFetch(BaseModel):
    """Result of a plain HTTP GET of a page."""

    outcome: FetchOutcome
    html: Optional[str] = None
    status_code: Optional[int] = None
    reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.outcome == FetchOutcome.OK


def _decode(response: httpx.Response) -> Optional[str]:
    """Decode the body, returning None when it does not look like HTML text."""
    content_type = response.headers.get("content-type", "")
    encoding = None
    if "charset=" in content_type.lower():
        try:
            encoding = content_type.split("charset=")[1].split(";")[0].strip().strip("\"'")
        except (IndexError, AttributeError):
            pass
    try:
        text = response.content.decode(encoding or "utf-8")
    except (UnicodeDecodeError, LookupError):
        text = response.content.decode("utf-8", errors="replace")
        encoding_match = re.search(r'<meta[^>]+charset=["\']?([^"\'>\s]+)', text, re.I)
        if encoding_match:
            try:
                text = response.content.decode(encoding_match.group(1).lower())
            except (UnicodeDecodeError, LookupError):
                pass

    sample = text[:2000]
    if not sample:
        return text
    if not re.search(r"<[a-z]+[^>]*>", sample, re.I):
        return None
    control_chars = sum(1 for c in sample if ord(c) < 32 and c not in "\n\r\t")
    if control_chars / len(sample) > 0.1:
        logger.warning("HTML validation failed for %s: control_ratio too high", response.url)
        return None
    return text


async def fetch_html(
    url: str,
    settings: Settings,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> LightweightFetch:
    """GET a page without executing scripts.

    Network failures that a browser would hit too (DNS, refused connections,
    404s) are FAILED; blocks, timeouts and undecodable payloads are
    NEEDS_BROWSER.
    """
    headers = {
        "User-Agent": settings.scraper_user_agent,
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.9",
    }
    timeout = httpx.Timeout(settings.fetch_timeout_seconds, connect=10.0)
    try:
        async with httpx.AsyncClient(
            timeout=timeout, follow_redirects=True, headers=headers, transport=transport
        ) as client:
            response = await client.get(url)
    except httpx.TimeoutException as exc:
        logger.info("Lightweight fetch timed out for %s: %s", url, exc)
        return LightweightFetch(outcome=FetchOutcome.NEEDS_BROWSER, reason="timeout")
    except httpx.HTTPError as exc:
        return LightweightFetch(outcome=FetchOutcome.FAILED, reason=f"Network error: {exc}")
    except httpx.InvalidURL as exc:
        return LightweightFetch(outcome=FetchOutcome.FAILED, reason=f"Invalid URL: {exc}")

    if response.status_code in BROWSER_RETRY_STATUSES:
        return LightweightFetch(
            outcome=FetchOutcome.NEEDS_BROWSER,
            status_code=response.status_code,
            reason=f"Site returned status {response.status_code}",
        )
    if response.status_code >= 400:
        return LightweightFetch(
            outcome=FetchOutcome.FAILED,
            status_code=response.status_code,
            reason=f"Site returned status {response.status_code}",
        )

    content_type = response.headers.get("content-type", "")
    if content_type and "html" not in content_type and "text/plain" not in content_type:
        return LightweightFetch(
            outcome=FetchOutcome.FAILED,
            status_code=response.status_code,
            reason=f"Unsupported content type: {content_type}",
        )

    html = _decode(response)
    if html is None:
        return LightweightFetch(
            outcome=FetchOutcome.NEEDS_BROWSER,
            status_code=response.status_code,
            reason="HTML content appears corrupted or has encoding issues",
        )
    return LightweightFetch(outcome=FetchOutcome.OK, html=html, status_code=response.status_code)
