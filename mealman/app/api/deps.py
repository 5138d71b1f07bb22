from mealman.app.core.config import get_settings
from mealman.app.services.recipe_pipeline import RecipePipeline


def get_pipeline() -> RecipePipeline:
    return RecipePipeline(get_settings())
