#!/usr/bin/env python
"""
Extract a recipe from a URL and write it as markdown.

Run manually:
    python scripts/extract_url.py https://example.com/some-recipe --out recipes/
"""
import argparse
import asyncio
import logging
import sys
from pathlib import Path

from mealman.app.core.config import get_settings
from mealman.app.core.errors import RecipeServiceError
from mealman.app.services.recipe_pipeline import RecipePipeline

logger = logging.getLogger("extract_url")


async def run(url: str, out_dir: Path, detect_only: bool) -> int:
    pipeline = RecipePipeline(get_settings())
    if detect_only:
        outcome = await pipeline.detect(url)
        detection = outcome.detection
        print(
            f"{outcome.media_type.value}: has_recipe={detection.has_recipe} "
            f"confidence={detection.confidence:.2f} type={detection.recipe_type}"
        )
        return 0 if detection.has_recipe else 1

    outcome = await pipeline.extract(url)
    document = pipeline.convert(outcome.recipe)
    out_dir.mkdir(parents=True, exist_ok=True)
    target = out_dir / document.filename
    target.write_text(document.markdown, encoding="utf-8")
    logger.info("Wrote %s", target)
    print(target)
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description="Extract a recipe from a URL")
    parser.add_argument("url")
    parser.add_argument("--out", type=Path, default=Path("."))
    parser.add_argument("--detect-only", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(level=get_settings().log_level)
    try:
        code = asyncio.run(run(args.url, args.out, args.detect_only))
    except RecipeServiceError as exc:
        logger.error("%s: %s", exc.error, exc.message)
        code = 2
    sys.exit(code)


if __name__ == "__main__":
    main()
