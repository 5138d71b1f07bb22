"""YouTube metadata and transcript retrieval."""

import asyncio
import logging
from typing import Callable, List, Optional, Sequence

import httpx
from youtube_transcript_api import YouTubeTranscriptApi

from mealman.app.core.config import Settings
from mealman.app.core.errors import FetchError
from mealman.app.services.media.classifier import extract_youtube_id
from mealman.app.services.media.models import MediaType, YoutubeContent

logger = logging.getLogger(__name__)

YOUTUBE_VIDEOS_API = "https://www.googleapis.com/youtube/v3/videos"

TranscriptFetcher = Callable[[str, Sequence[str]], List[str]]


def fetch_transcript_fragments(video_id: str, languages: Sequence[str]) -> List[str]:
    """Blocking call returning the caption fragments of a video, in order."""
    transcript = YouTubeTranscriptApi().fetch(video_id, languages=list(languages))
    return [item.get("text", "") for item in transcript.to_raw_data()]


async def fetch_video_metadata(
    video_id: str,
    url: str,
    settings: Settings,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> dict:
    if not settings.youtube_api_key:
        raise FetchError(url, "YOUTUBE_API_KEY is not configured", MediaType.YOUTUBE.value)

    params = {"part": "snippet", "id": video_id, "key": settings.youtube_api_key}
    timeout = httpx.Timeout(settings.fetch_timeout_seconds, connect=10.0)
    try:
        async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
            response = await client.get(YOUTUBE_VIDEOS_API, params=params)
        response.raise_for_status()
        data = response.json()
    except httpx.HTTPError as exc:
        raise FetchError(url, f"YouTube API request failed: {exc}", MediaType.YOUTUBE.value) from exc
    except ValueError as exc:
        raise FetchError(url, "YouTube API returned invalid JSON", MediaType.YOUTUBE.value) from exc

    items = data.get("items") or []
    if not items:
        raise FetchError(url, "YouTube video not found", MediaType.YOUTUBE.value)
    return items[0].get("snippet") or {}


async def fetch_transcript(
    video_id: str,
    languages: Sequence[str],
    transcript_fetcher: TranscriptFetcher = fetch_transcript_fragments,
) -> Optional[str]:
    """Join the transcript into one blob, or None when it cannot be fetched."""
    try:
        fragments = await asyncio.to_thread(transcript_fetcher, video_id, languages)
    except Exception as exc:
        logger.warning("Could not fetch YouTube transcript for %s: %s", video_id, exc)
        return None
    text = " ".join(f.strip() for f in fragments if f and f.strip())
    return text or None


async def fetch_youtube_content(
    url: str,
    settings: Settings,
    transcript_fetcher: TranscriptFetcher = fetch_transcript_fragments,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> YoutubeContent:
    video_id = extract_youtube_id(url)
    if not video_id:
        raise FetchError(url, "Could not extract YouTube video ID", MediaType.YOUTUBE.value)

    snippet = await fetch_video_metadata(video_id, url, settings, transport=transport)
    transcript = await fetch_transcript(video_id, settings.transcript_languages, transcript_fetcher)

    return YoutubeContent(
        url=url,
        video_id=video_id,
        title=snippet.get("title") or "",
        description=snippet.get("description") or "",
        transcript=transcript,
    )
