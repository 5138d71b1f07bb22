import json
import logging
import re
from typing import Any, Dict, Optional

import httpx
from pydantic import ValidationError

from mealman.app.core.config import Settings
from mealman.app.core.errors import InferenceError, UnsupportedMediaError
from mealman.app.schemas.recipe import DetectionResult, Recipe
from mealman.app.services.media.models import MediaType, NormalizedContent
from mealman.app.services.prompt_builder import PromptTask, build_prompt

logger = logging.getLogger(__name__)

DETECTION_SYSTEM_PROMPT = (
    "You are an AI specialized in identifying recipes in content from various sources.\n"
    "Your task is to determine whether the provided content contains a recipe or cooking "
    "instructions. A recipe typically includes ingredients and instructions for preparing a dish.\n"
    "Respond in JSON format with the following fields:\n"
    "- hasRecipe: boolean indicating if a recipe is present\n"
    "- confidence: number between 0 and 1 indicating confidence level\n"
    '- recipeType: string describing the type of recipe (e.g., "baking", "main dish") '
    "or null if no recipe"
)

EXTRACTION_SYSTEM_PROMPT = (
    "You are an AI specialized in extracting recipe information from various sources.\n"
    "Your task is to extract structured recipe data from the provided content.\n"
    "Be comprehensive and accurate. Extract all available information including:\n"
    "- title: The recipe title\n"
    "- description: A brief description of the dish\n"
    "- ingredients: An array of ingredient items with quantities, either strings or objects "
    '{"quantity": string|null, "unit": string|null, "name": string, "notes": string|null}\n'
    "- instructions: An array of step-by-step cooking instructions, either strings or "
    'objects {"text": string}\n'
    "- prepTime: Preparation time (if available)\n"
    "- cookTime: Cooking time (if available)\n"
    "- totalTime: Total time (if available)\n"
    "- servings: Number of servings (if available)\n"
    "- cuisine: Cuisine type (if available)\n"
    "- author: Recipe author (if available)\n"
    "- notes: Additional notes or tips (if available), a string or an array of strings\n"
    "- source: Source URL\n"
    "- mediaType: Type of media source\n\n"
    "Respond in JSON format. For missing information, use null values."
)

TRANSIENT_STATUSES = {408, 429, 500, 502, 503, 504}


def _strip_invalid_control_chars(s: str) -> str:
    """Remove ASCII control chars that frequently break json.loads (except \n, \r, \t)."""
    return re.sub(r"[\x00-\x08\x0B\x0C\x0E-\x1F]", "", s)


def _parse_llm_json_content(raw: str) -> Dict[str, Any]:
    """Parse LLM content into a JSON object, tolerating code fences and chatter."""
    cleaned = _strip_invalid_control_chars(raw).strip()
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError:
        if cleaned.startswith("```"):
            cleaned = re.sub(r"^```[a-zA-Z0-9_-]*", "", cleaned).strip()
            if cleaned.endswith("```"):
                cleaned = cleaned[:-3].strip()
        start = cleaned.find("{")
        end = cleaned.rfind("}")
        if start == -1 or end <= start:
            raise ValueError("LLM response was not valid JSON")
        try:
            data = json.loads(cleaned[start : end + 1])
        except json.JSONDecodeError as exc:
            raise ValueError("LLM response was not valid JSON") from exc
    if not isinstance(data, dict):
        raise ValueError("LLM response is not a JSON object")
    return data


def _supported_media_type(media_type: Any) -> MediaType:
    try:
        resolved = MediaType(media_type)
    except ValueError as exc:
        raise UnsupportedMediaError(media_type) from exc
    if resolved == MediaType.UNKNOWN:
        raise UnsupportedMediaError(resolved)
    return resolved


class RecipeInferenceClient:
    """Recipe detection and extraction against an OpenAI-compatible chat endpoint."""

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        self.transport = transport

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.settings.llm_api_key:
            headers["Authorization"] = f"Bearer {self.settings.llm_api_key}"
        return headers

    async def _complete(
        self, system_prompt: str, user_prompt: str, operation: str, media_type: str
    ) -> Dict[str, Any]:
        payload = {
            "model": self.settings.llm_model_name,
            "temperature": 0.0,
            "response_format": {"type": "json_object"},
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "stream": False,
        }
        url = f"{self.settings.llm_base_url.rstrip('/')}/chat/completions"
        timeout = httpx.Timeout(self.settings.llm_timeout_seconds, connect=10.0)

        try:
            async with httpx.AsyncClient(timeout=timeout, transport=self.transport) as client:
                response = await client.post(url, json=payload, headers=self._headers())
        except httpx.HTTPError as exc:
            raise InferenceError(
                operation, f"request failed: {exc}", media_type, transient=True
            ) from exc

        if response.status_code >= 400:
            raise InferenceError(
                operation,
                f"inference service returned status {response.status_code}",
                media_type,
                transient=response.status_code in TRANSIENT_STATUSES,
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise InferenceError(operation, "inference service returned invalid JSON", media_type) from exc

        if isinstance(data, dict) and data.get("error"):
            error_info = data["error"]
            if isinstance(error_info, dict):
                error_type = error_info.get("type", "unknown_error")
                error_message = str(error_info.get("message", "Unknown error"))
            else:
                error_type, error_message = "unknown_error", str(error_info)
            logger.error(
                "Inference service returned error during %s: type=%s, message=%s",
                operation,
                error_type,
                error_message[:500],
            )
            raise InferenceError(operation, f"{error_type}: {error_message}", media_type)

        content = None
        if isinstance(data, dict) and data.get("choices"):
            choice = data["choices"][0]
            if isinstance(choice, dict):
                content = (choice.get("message") or {}).get("content")
        if not content or not isinstance(content, str):
            raise InferenceError(operation, "response missing assistant content", media_type)

        try:
            return _parse_llm_json_content(content)
        except ValueError as exc:
            logger.warning("Unparseable %s response (first 200 chars: %s)", operation, content[:200])
            raise InferenceError(operation, str(exc), media_type) from exc

    def _prompt(self, content: NormalizedContent, media_type: MediaType, task: PromptTask) -> str:
        return build_prompt(
            content, media_type, task, detection_excerpt_chars=self.settings.detection_excerpt_chars
        )

    async def detect(self, content: NormalizedContent, media_type: MediaType) -> DetectionResult:
        media_type = _supported_media_type(media_type)
        prompt = self._prompt(content, media_type, PromptTask.DETECT)
        logger.info("Detecting recipe in %s content", media_type.value)
        data = await self._complete(DETECTION_SYSTEM_PROMPT, prompt, "detection", media_type.value)

        missing = [field for field in ("hasRecipe", "confidence") if data.get(field) is None]
        if missing:
            raise InferenceError(
                "detection", f"response missing {', '.join(missing)}", media_type.value
            )
        try:
            result = DetectionResult.model_validate(
                {
                    "hasRecipe": data["hasRecipe"],
                    "confidence": data["confidence"],
                    "recipeType": data.get("recipeType"),
                }
            )
        except (ValidationError, TypeError, ValueError) as exc:
            raise InferenceError("detection", f"invalid detection response: {exc}", media_type.value) from exc
        logger.info(
            "Recipe detection result: has_recipe=%s confidence=%.2f type=%s",
            result.has_recipe,
            result.confidence,
            result.recipe_type,
        )
        return result

    async def extract(
        self, content: NormalizedContent, media_type: MediaType, source_url: str
    ) -> Recipe:
        media_type = _supported_media_type(media_type)
        prompt = self._prompt(content, media_type, PromptTask.EXTRACT)
        logger.info("Extracting recipe from %s content", media_type.value)
        data = await self._complete(EXTRACTION_SYSTEM_PROMPT, prompt, "extraction", media_type.value)

        if isinstance(data.get("recipe"), dict):
            data = data["recipe"]
        try:
            recipe = Recipe.model_validate(data)
        except ValidationError as exc:
            raise InferenceError("extraction", f"invalid recipe: {exc}", media_type.value) from exc

        recipe = recipe.with_origin(source_url, media_type.value)
        logger.info("Successfully extracted recipe: %s", recipe.title)
        return recipe
