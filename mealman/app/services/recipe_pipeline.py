"""The three produced operations: detect, extract and convert."""

import logging
from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel

from mealman.app.core.config import Settings
from mealman.app.core.errors import InvalidInputError, NoRecipeDetectedError
from mealman.app.schemas.recipe import DetectionResult, Document, Recipe
from mealman.app.services.llm_client import RecipeInferenceClient
from mealman.app.services.markdown_renderer import render_markdown
from mealman.app.services.media.fetcher import ContentFetcher
from mealman.app.services.media.models import MediaType

logger = logging.getLogger(__name__)


class DetectOutcome(BaseModel):
    url: str
    media_type: MediaType
    detection: DetectionResult


class ExtractOutcome(BaseModel):
    url: str
    media_type: MediaType
    recipe: Recipe


class RecipePipeline:
    """Fetch → infer → render, one independent unit of work per call."""

    def __init__(
        self,
        settings: Settings,
        fetcher: Optional[ContentFetcher] = None,
        inference: Optional[RecipeInferenceClient] = None,
    ):
        self.settings = settings
        self.fetcher = fetcher or ContentFetcher(settings)
        self.inference = inference or RecipeInferenceClient(settings)

    async def detect(self, url: str) -> DetectOutcome:
        logger.info("Detecting recipe at URL: %s", url)
        fetched = await self.fetcher.fetch_content(url)
        detection = await self.inference.detect(fetched.content, fetched.media_type)
        return DetectOutcome(url=url, media_type=fetched.media_type, detection=detection)

    async def extract(self, url: str) -> ExtractOutcome:
        logger.info("Extracting recipe from URL: %s", url)
        fetched = await self.fetcher.fetch_content(url)

        if self.settings.extract_requires_detection:
            detection = await self.inference.detect(fetched.content, fetched.media_type)
            if not detection.has_recipe:
                raise NoRecipeDetectedError(url)

        recipe = await self.inference.extract(fetched.content, fetched.media_type, url)
        return ExtractOutcome(url=url, media_type=fetched.media_type, recipe=recipe)

    def convert(self, recipe: Union[Recipe, Mapping[str, Any], None]) -> Document:
        if not recipe:
            raise InvalidInputError("Recipe data is required")
        logger.info("Converting recipe to markdown")
        return render_markdown(recipe)
