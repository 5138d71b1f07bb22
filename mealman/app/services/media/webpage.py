"""Webpage content normalization from raw HTML."""

import json
import logging
import re
from typing import Any, Dict, List, Optional

from bs4 import BeautifulSoup

from mealman.app.services.media.models import WebpageContent

logger = logging.getLogger(__name__)

# Priority order for the "main content" block.
MAIN_CONTENT_SELECTORS = ["main", "article", ".content", ".recipe", ".post", "#content"]

# Below this much visible text a page without recipe markup is treated as a
# client-rendered shell.
MIN_STATIC_BODY_CHARS = 200

_JS_REQUIRED_RE = re.compile(r"enable javascript|requires javascript|javascript is disabled", re.I)


def clean_text(text: str) -> str:
    """Normalize whitespace in text."""
    return re.sub(r"\s+", " ", text or "").strip()


def _has_recipe_type(obj: Any) -> bool:
    if not isinstance(obj, dict):
        return False
    obj_type = obj.get("@type")
    types = [obj_type] if isinstance(obj_type, str) else obj_type or []
    if not isinstance(types, list):
        return False
    return any(str(t).lower() == "recipe" for t in types)


def is_recipe_schema(data: Any) -> bool:
    """True when a parsed JSON-LD block is, or wraps, a schema.org Recipe."""
    if isinstance(data, list):
        return any(is_recipe_schema(item) for item in data)
    if not isinstance(data, dict):
        return False
    if _has_recipe_type(data):
        return True
    graph = data.get("@graph")
    return isinstance(graph, list) and any(_has_recipe_type(g) for g in graph)


def select_recipe_schemas(blocks: List[Any]) -> Optional[List[Dict[str, Any]]]:
    """Keep the Recipe-typed JSON-LD blocks verbatim; None when there are none."""
    found: List[Dict[str, Any]] = []
    for data in blocks:
        if isinstance(data, list):
            found.extend(item for item in data if is_recipe_schema(item))
        elif is_recipe_schema(data):
            found.append(data)
    return found or None


def extract_json_ld_blocks(soup: BeautifulSoup) -> List[Any]:
    blocks: List[Any] = []
    scripts = soup.find_all("script", attrs={"type": "application/ld+json"})
    for idx, script in enumerate(scripts):
        raw_json = script.string or script.get_text()
        if not raw_json or not raw_json.strip():
            continue
        try:
            blocks.append(json.loads(raw_json))
        except json.JSONDecodeError as exc:
            logger.warning(
                "JSON-LD block %d failed to parse: %s (first 200 chars: %s)",
                idx,
                exc,
                raw_json[:200],
            )
    return blocks


def find_main_content(soup: BeautifulSoup) -> str:
    for selector in MAIN_CONTENT_SELECTORS:
        node = soup.select_one(selector)
        if node is not None:
            return str(node)
    return ""


def parse_webpage_html(html: str, url: str, body_text_max_chars: int) -> WebpageContent:
    """Normalize a static HTML document into WebpageContent."""
    soup = BeautifulSoup(html, "lxml")
    schema_markup = select_recipe_schemas(extract_json_ld_blocks(soup))

    title = clean_text(soup.title.get_text()) if soup.title else ""
    meta = soup.find("meta", attrs={"name": "description"})
    meta_description = clean_text(meta.get("content", "")) if meta else ""
    main_content_html = find_main_content(soup)

    for tag in soup.find_all(["script", "style", "noscript", "template"]):
        tag.decompose()
    body = soup.body or soup
    body_text = clean_text(body.get_text(" "))

    return WebpageContent(
        url=url,
        title=title,
        meta_description=meta_description,
        schema_markup=schema_markup,
        main_content_html=main_content_html,
        body_text=body_text[:body_text_max_chars],
    )


def build_webpage_content(
    url: str,
    title: str,
    meta_description: str,
    json_ld_texts: List[str],
    main_content_html: str,
    body_text: str,
    body_text_max_chars: int,
) -> WebpageContent:
    """Assemble WebpageContent from fields evaluated inside a rendered page."""
    blocks: List[Any] = []
    for raw_json in json_ld_texts:
        try:
            blocks.append(json.loads(raw_json))
        except (json.JSONDecodeError, TypeError):
            logger.debug("Skipping unparseable JSON-LD block from rendered page %s", url)
    return WebpageContent(
        url=url,
        title=clean_text(title),
        meta_description=clean_text(meta_description),
        schema_markup=select_recipe_schemas(blocks),
        main_content_html=main_content_html or "",
        body_text=clean_text(body_text)[:body_text_max_chars],
    )


def looks_script_rendered(content: WebpageContent) -> bool:
    """Heuristic for pages whose content only appears after scripts run."""
    if content.schema_markup:
        return False
    if len(content.body_text) < MIN_STATIC_BODY_CHARS:
        return True
    return bool(_JS_REQUIRED_RE.search(content.body_text)) and not content.main_content_html
