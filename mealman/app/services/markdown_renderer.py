"""Markdown rendering for extracted recipes.

Rendering is the last step before a user downloads their recipe, so it never
raises: anything that goes wrong produces a degraded document carrying the
raw recipe data instead.
"""

import json
import logging
import re
from typing import Any, List, Mapping, Optional, Union
from urllib.parse import urlparse

from mealman.app.schemas.recipe import (
    Document,
    PlainIngredient,
    PlainInstruction,
    Recipe,
    StructuredIngredient,
)

logger = logging.getLogger(__name__)

_FILENAME_UNSAFE_RE = re.compile(r"[^a-z0-9]", re.IGNORECASE | re.ASCII)

DEFAULT_TITLE = "Recipe"


def derive_filename(title: Optional[str]) -> str:
    """Every character outside [A-Za-z0-9] becomes a hyphen, then lower-case."""
    if not isinstance(title, str) or not title:
        return "recipe.md"
    return f"{_FILENAME_UNSAFE_RE.sub('-', title).lower()}.md"


def _source_line(source: Optional[str]) -> Optional[str]:
    if not source:
        return None
    try:
        hostname = urlparse(source).hostname
    except ValueError:
        return None
    if not hostname:
        return None
    return f"> Recipe from: [{hostname}]({source})"


def _metadata_line(recipe: Recipe) -> Optional[str]:
    fields = [
        ("Prep Time", recipe.prep_time),
        ("Cook Time", recipe.cook_time),
        ("Total Time", recipe.total_time),
        ("Servings", recipe.servings),
        ("Cuisine", recipe.cuisine),
        ("Author", recipe.author),
    ]
    items = [f"**{label}:** {value}" for label, value in fields if value]
    return " | ".join(items) if items else None


def format_ingredient(item: Union[PlainIngredient, StructuredIngredient]) -> str:
    if isinstance(item, PlainIngredient):
        return item.text
    text = " ".join(part for part in (item.quantity, item.unit, item.name) if part)
    if item.notes:
        text = f"{text} ({item.notes})" if text else f"({item.notes})"
    return text


def _build_markdown(recipe: Recipe) -> str:
    lines: List[str] = [f"# {recipe.title}", ""]

    source_line = _source_line(recipe.source)
    if source_line:
        lines += [source_line, ""]

    if recipe.description:
        lines += [recipe.description, ""]

    metadata = _metadata_line(recipe)
    if metadata:
        lines += ["## 📑 Details", "", metadata, ""]

    ingredients = [text for text in (format_ingredient(item) for item in recipe.ingredients or []) if text.strip()]
    if ingredients:
        lines += ["## 🧾 Ingredients", ""]
        lines += [f"- {text}" for text in ingredients]
        lines.append("")

    steps = [
        item.text
        for item in recipe.instructions or []
        if isinstance(item, PlainInstruction) or item.text
    ]
    if steps:
        lines += ["## 👨‍🍳 Instructions", ""]
        for index, step in enumerate(steps, start=1):
            lines += [f"{index}. {step}", ""]

    if recipe.notes:
        lines += ["## 📝 Notes", ""]
        if isinstance(recipe.notes, list):
            lines += [f"- {note}" for note in recipe.notes]
        else:
            lines.append(recipe.notes)
        lines.append("")

    lines += [
        "---",
        f"*This recipe was automatically extracted from {recipe.media_type or 'web'} "
        "content by Mealman.*",
    ]
    return "\n".join(lines) + "\n"


def _raw_title(data: Any) -> Optional[str]:
    title = data.get("title") if isinstance(data, Mapping) else getattr(data, "title", None)
    return title if isinstance(title, str) and title.strip() else None


def _raw_dump(data: Any) -> str:
    if isinstance(data, Recipe):
        data = data.to_wire()
    try:
        return json.dumps(data, indent=2, default=str, ensure_ascii=False)
    except (TypeError, ValueError):
        return repr(data)


def _degraded_document(data: Any, exc: Exception) -> Document:
    title = _raw_title(data)
    markdown = (
        f"# {title or DEFAULT_TITLE}\n\n"
        f"Error formatting recipe: {exc}\n\n"
        f"Original data:\n```json\n{_raw_dump(data)}\n```\n"
    )
    return Document(markdown=markdown, filename=derive_filename(title))


def render_markdown(recipe: Union[Recipe, Mapping[str, Any]]) -> Document:
    """Render a recipe (or a raw recipe-shaped mapping) into a markdown Document."""
    try:
        if not isinstance(recipe, Recipe):
            recipe = Recipe.model_validate(recipe)
        logger.info("Formatting recipe to markdown: %s", recipe.title)
        return Document(markdown=_build_markdown(recipe), filename=derive_filename(recipe.title))
    except Exception as exc:
        logger.error("Error formatting recipe to markdown: %s", exc)
        try:
            return _degraded_document(recipe, exc)
        except Exception as fallback_exc:
            logger.error("Degraded recipe rendering failed: %s", fallback_exc)
            return Document(
                markdown=f"# {DEFAULT_TITLE}\n\nError formatting recipe: {exc}\n",
                filename="recipe.md",
            )
