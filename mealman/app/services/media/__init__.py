"""Media content fetching package.

Classifies a URL into a media type and retrieves normalized content for it:
static or headless-rendered webpages, YouTube metadata and transcripts, and
Instagram/Twitter posts.
"""

from mealman.app.services.media.browser import HeadlessBrowser
from mealman.app.services.media.classifier import classify_url, extract_youtube_id
from mealman.app.services.media.fetcher import ContentFetcher
from mealman.app.services.media.html_fetcher import FetchOutcome, LightweightFetch, fetch_html
from mealman.app.services.media.models import (
    FetchedContent,
    InstagramContent,
    MediaType,
    NormalizedContent,
    TwitterContent,
    WebpageContent,
    YoutubeContent,
)
from mealman.app.services.media.webpage import parse_webpage_html

__all__ = [
    # Models
    "FetchedContent",
    "InstagramContent",
    "MediaType",
    "NormalizedContent",
    "TwitterContent",
    "WebpageContent",
    "YoutubeContent",
    # Classification
    "classify_url",
    "extract_youtube_id",
    # Fetching
    "ContentFetcher",
    "FetchOutcome",
    "HeadlessBrowser",
    "LightweightFetch",
    "fetch_html",
    "parse_webpage_html",
]
