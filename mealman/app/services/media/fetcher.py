"""Fetch and normalize content for any supported URL."""

import logging
from typing import Optional

import httpx

from mealman.app.core.config import Settings
from mealman.app.core.errors import FetchError, InvalidInputError, UnsupportedMediaError
from mealman.app.services.media.browser import HeadlessBrowser
from mealman.app.services.media.classifier import classify_url
from mealman.app.services.media.html_fetcher import FetchOutcome, fetch_html
from mealman.app.services.media.models import (
    FetchedContent,
    InstagramContent,
    MediaType,
    TwitterContent,
    WebpageContent,
)
from mealman.app.services.media.rendered import (
    evaluate_instagram,
    evaluate_twitter,
    evaluate_webpage,
)
from mealman.app.services.media.webpage import (
    build_webpage_content,
    clean_text,
    looks_script_rendered,
    parse_webpage_html,
)
from mealman.app.services.media.youtube import (
    TranscriptFetcher,
    fetch_transcript_fragments,
    fetch_youtube_content,
)

logger = logging.getLogger(__name__)


class ContentFetcher:
    """Classifies URLs and retrieves normalized content for each media type."""

    def __init__(
        self,
        settings: Settings,
        browser: Optional[HeadlessBrowser] = None,
        transcript_fetcher: Optional[TranscriptFetcher] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings
        self.browser = browser or HeadlessBrowser(settings)
        self.transcript_fetcher = transcript_fetcher or fetch_transcript_fragments
        self.transport = transport

    async def fetch_content(self, url: str) -> FetchedContent:
        if not url or not url.strip():
            raise InvalidInputError("URL is required")
        url = url.strip()

        media_type = classify_url(url)
        logger.info("Fetching %s content from %s", media_type.value, url)
        if media_type == MediaType.WEBPAGE:
            content = await self.fetch_webpage(url)
        elif media_type == MediaType.YOUTUBE:
            content = await fetch_youtube_content(
                url, self.settings, self.transcript_fetcher, transport=self.transport
            )
        elif media_type == MediaType.INSTAGRAM:
            content = await self.fetch_instagram(url)
        elif media_type == MediaType.TWITTER:
            content = await self.fetch_twitter(url)
        else:
            raise UnsupportedMediaError(media_type)
        return FetchedContent(media_type=media_type, content=content)

    async def fetch_webpage(self, url: str) -> WebpageContent:
        result = await fetch_html(url, self.settings, transport=self.transport)
        if result.outcome == FetchOutcome.FAILED:
            raise FetchError(url, result.reason or "request failed", MediaType.WEBPAGE.value)

        if result.outcome == FetchOutcome.OK:
            content = parse_webpage_html(result.html or "", url, self.settings.body_text_max_chars)
            if not looks_script_rendered(content):
                return content
            logger.warning("Page at %s looks script-rendered; falling back to headless browser", url)
        else:
            logger.warning("Falling back to headless browser for %s: %s", url, result.reason)

        return await self.fetch_webpage_rendered(url)

    async def fetch_webpage_rendered(self, url: str) -> WebpageContent:
        data = await self.browser.render(url, evaluate_webpage, MediaType.WEBPAGE.value)
        return build_webpage_content(
            url=url,
            title=data.get("title") or "",
            meta_description=data.get("metaDescription") or "",
            json_ld_texts=data.get("jsonLd") or [],
            main_content_html=data.get("mainContent") or "",
            body_text=data.get("body") or "",
            body_text_max_chars=self.settings.body_text_max_chars,
        )

    async def fetch_instagram(self, url: str) -> InstagramContent:
        data = await self.browser.render(url, evaluate_instagram, MediaType.INSTAGRAM.value)
        return InstagramContent(
            url=url,
            username=clean_text(data.get("username") or ""),
            caption=(data.get("caption") or "").strip(),
            image_url=data.get("image") or None,
        )

    async def fetch_twitter(self, url: str) -> TwitterContent:
        data = await self.browser.render(url, evaluate_twitter, MediaType.TWITTER.value)
        return TwitterContent(
            url=url,
            username=clean_text(data.get("username") or ""),
            text=(data.get("text") or "").strip(),
            images=data.get("images") or [],
        )
