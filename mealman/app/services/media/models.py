"""Pydantic models for fetched media content."""

from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field


class MediaType(str, Enum):
    WEBPAGE = "webpage"
    YOUTUBE = "youtube"
    INSTAGRAM = "instagram"
    TWITTER = "twitter"
    UNKNOWN = "unknown"


class WebpageContent(BaseModel):
    """A recipe candidate page, fetched over HTTP or rendered headless."""

    media_type: Literal[MediaType.WEBPAGE] = MediaType.WEBPAGE
    url: str
    title: str = ""
    meta_description: str = ""
    schema_markup: Optional[List[Dict[str, Any]]] = None
    main_content_html: str = ""
    body_text: str = ""


class YoutubeContent(BaseModel):
    media_type: Literal[MediaType.YOUTUBE] = MediaType.YOUTUBE
    url: str
    video_id: str
    title: str = ""
    description: str = ""
    transcript: Optional[str] = None


class InstagramContent(BaseModel):
    media_type: Literal[MediaType.INSTAGRAM] = MediaType.INSTAGRAM
    url: str
    username: str = ""
    caption: str = ""
    image_url: Optional[str] = None


class TwitterContent(BaseModel):
    media_type: Literal[MediaType.TWITTER] = MediaType.TWITTER
    url: str
    username: str = ""
    text: str = ""
    images: List[str] = Field(default_factory=list)


NormalizedContent = Annotated[
    Union[WebpageContent, YoutubeContent, InstagramContent, TwitterContent],
    Field(discriminator="media_type"),
]


class FetchedContent(BaseModel):
    """Result of fetching a URL: its media type and the normalized payload."""

    media_type: MediaType
    content: NormalizedContent
