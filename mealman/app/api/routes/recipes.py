import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from mealman.app.api.deps import get_pipeline
from mealman.app.core.errors import InvalidInputError
from mealman.app.services.recipe_pipeline import RecipePipeline

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["recipes"])


class UrlRequest(BaseModel):
    url: Optional[str] = None


class ConvertRequest(BaseModel):
    recipe: Optional[Dict[str, Any]] = None


def _require_url(payload: UrlRequest) -> str:
    if not payload.url or not payload.url.strip():
        raise InvalidInputError("URL is required")
    return payload.url.strip()


@router.post("/detect")
async def detect_recipe(payload: UrlRequest, pipeline: RecipePipeline = Depends(get_pipeline)):
    outcome = await pipeline.detect(_require_url(payload))
    detection = outcome.detection
    return {
        "url": outcome.url,
        "mediaType": outcome.media_type.value,
        "hasRecipe": detection.has_recipe,
        "confidence": detection.confidence,
        "recipeType": detection.recipe_type,
    }


@router.post("/extract")
async def extract_recipe(payload: UrlRequest, pipeline: RecipePipeline = Depends(get_pipeline)):
    outcome = await pipeline.extract(_require_url(payload))
    return {
        "url": outcome.url,
        "mediaType": outcome.media_type.value,
        "recipe": outcome.recipe.to_wire(),
    }


@router.post("/convert")
def convert_recipe(payload: ConvertRequest, pipeline: RecipePipeline = Depends(get_pipeline)):
    document = pipeline.convert(payload.recipe)
    return {"markdown": document.markdown, "fileName": document.filename}
