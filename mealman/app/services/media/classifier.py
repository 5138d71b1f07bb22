"""URL classification into media types."""

import logging
import re
from typing import List, Optional, Pattern, Tuple
from urllib.parse import urlparse

from mealman.app.services.media.models import MediaType

logger = logging.getLogger(__name__)

# Matches the exact host or any of its subdomains, checked in order.
HOST_PATTERNS: List[Tuple[str, MediaType]] = [
    ("youtube.com", MediaType.YOUTUBE),
    ("youtu.be", MediaType.YOUTUBE),
    ("instagram.com", MediaType.INSTAGRAM),
    ("twitter.com", MediaType.TWITTER),
    ("x.com", MediaType.TWITTER),
]

YOUTUBE_ID_PATTERNS: List[Pattern[str]] = [
    re.compile(
        r"(?:youtube\.com/watch\?v=|youtu\.be/|youtube\.com/embed/|youtube\.com/v/"
        r"|youtube\.com/shorts/|youtube\.com/watch\?.*&v=)([^&?/#]+)"
    ),
    re.compile(r"youtube\.com/watch\?.*v=([^&#]+)"),
    re.compile(r"youtu\.be/([^?&#]+)"),
]


def parse_host(url: str) -> Optional[str]:
    """Return the lower-cased hostname of an absolute http(s) URL, else None."""
    if not isinstance(url, str):
        return None
    try:
        parsed = urlparse(url.strip())
        hostname = parsed.hostname
    except ValueError:
        return None
    if parsed.scheme not in {"http", "https"} or not hostname:
        return None
    return hostname.lower()


def classify_url(url: str) -> MediaType:
    """Classify a URL by its host. Unparsable URLs are UNKNOWN."""
    hostname = parse_host(url)
    if hostname is None:
        logger.warning("Could not determine media type for %r", url)
        return MediaType.UNKNOWN
    for host, media_type in HOST_PATTERNS:
        if hostname == host or hostname.endswith("." + host):
            return media_type
    return MediaType.WEBPAGE


def extract_youtube_id(url: str) -> Optional[str]:
    """Pull the video id out of any of the common YouTube URL shapes."""
    for pattern in YOUTUBE_ID_PATTERNS:
        match = pattern.search(url)
        if match and match.group(1):
            return match.group(1)
    return None
