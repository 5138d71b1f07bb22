"""Prompt construction for recipe detection and extraction.

Detection only needs a coarse yes/no judgment, so free text is cut down to an
excerpt. Extraction gets every field in full because anything dropped here is
missing from the recipe.
"""

import json
from enum import Enum
from typing import List, Optional

from mealman.app.core.errors import UnsupportedMediaError
from mealman.app.services.media.models import (
    InstagramContent,
    MediaType,
    NormalizedContent,
    TwitterContent,
    WebpageContent,
    YoutubeContent,
)

DEFAULT_DETECTION_EXCERPT_CHARS = 3000


class PromptTask(str, Enum):
    DETECT = "detect"
    EXTRACT = "extract"


def _excerpt(text: str, task: PromptTask, limit: int) -> str:
    if task == PromptTask.DETECT and len(text) > limit:
        return f"{text[:limit]}..."
    return text


def _header(task: PromptTask, subject: str) -> str:
    if task == PromptTask.DETECT:
        return f"Analyze the following {subject} and determine if it contains a recipe:\n\n"
    return f"Extract the recipe from the following {subject}:\n\n"


def _webpage_prompt(content: WebpageContent, task: PromptTask, limit: int) -> str:
    parts: List[str] = [_header(task, "webpage content")]
    if content.schema_markup:
        parts.append(f"JSON-LD Schema Data:\n{json.dumps(content.schema_markup)}\n\n")
    parts.append(f"Title: {content.title}\n")
    parts.append(f"Description: {content.meta_description}\n\n")
    if content.main_content_html:
        parts.append(f"Main Content:\n{_excerpt(content.main_content_html, task, limit)}\n\n")
    elif content.body_text:
        parts.append(f"Page Content:\n{_excerpt(content.body_text, task, limit)}\n\n")
    return "".join(parts)


def _youtube_prompt(content: YoutubeContent, task: PromptTask, limit: int) -> str:
    parts: List[str] = [_header(task, "YouTube video information")]
    parts.append(f"Title: {content.title}\n")
    parts.append(f"Description:\n{content.description}\n\n")
    if content.transcript:
        label = "Transcript (partial)" if task == PromptTask.DETECT else "Transcript"
        parts.append(f"{label}:\n{_excerpt(content.transcript, task, limit)}\n\n")
    return "".join(parts)


def _instagram_prompt(content: InstagramContent, task: PromptTask, limit: int) -> str:
    parts: List[str] = [_header(task, "instagram post")]
    parts.append(f"Username: {content.username}\n")
    parts.append(f"Caption:\n{_excerpt(content.caption, task, limit)}\n\n")
    if task == PromptTask.DETECT and content.image_url:
        parts.append("(Note: Post includes an image, but it cannot be analyzed directly)\n")
    return "".join(parts)


def _twitter_prompt(content: TwitterContent, task: PromptTask, limit: int) -> str:
    parts: List[str] = [_header(task, "twitter post")]
    parts.append(f"Username: {content.username}\n")
    parts.append(f"Tweet Text:\n{_excerpt(content.text, task, limit)}\n\n")
    if task == PromptTask.DETECT and content.images:
        parts.append(
            f"(Note: Tweet includes {len(content.images)} image(s), "
            "but they cannot be analyzed directly)\n"
        )
    return "".join(parts)


def build_prompt(
    content: NormalizedContent,
    media_type: MediaType,
    task: PromptTask,
    detection_excerpt_chars: Optional[int] = None,
) -> str:
    """Build the user prompt for ``task`` from normalized content."""
    limit = detection_excerpt_chars or DEFAULT_DETECTION_EXCERPT_CHARS
    task = PromptTask(task)
    try:
        media_type = MediaType(media_type)
    except ValueError as exc:
        raise UnsupportedMediaError(media_type) from exc

    if media_type == MediaType.WEBPAGE and isinstance(content, WebpageContent):
        return _webpage_prompt(content, task, limit)
    if media_type == MediaType.YOUTUBE and isinstance(content, YoutubeContent):
        return _youtube_prompt(content, task, limit)
    if media_type == MediaType.INSTAGRAM and isinstance(content, InstagramContent):
        return _instagram_prompt(content, task, limit)
    if media_type == MediaType.TWITTER and isinstance(content, TwitterContent):
        return _twitter_prompt(content, task, limit)
    raise UnsupportedMediaError(media_type)
