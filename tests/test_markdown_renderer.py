import pytest

from mealman.app.schemas.recipe import Recipe
from mealman.app.services.markdown_renderer import derive_filename, render_markdown

FULL_RECIPE = {
    "title": "Pancakes",
    "source": "https://www.example.com/pancakes",
    "description": "Fluffy.",
    "prepTime": "10 min",
    "servings": 4,
    "ingredients": ["1 egg", {"quantity": "2", "unit": "cups", "name": "flour", "notes": "sifted"}],
    "instructions": ["Mix", {"text": "Fry"}],
    "notes": ["Serve warm"],
    "mediaType": "webpage",
}


def test_full_recipe_renders_sections_in_order():
    document = render_markdown(FULL_RECIPE)

    assert document.filename == "pancakes.md"
    assert document.markdown == (
        "# Pancakes\n"
        "\n"
        "> Recipe from: [www.example.com](https://www.example.com/pancakes)\n"
        "\n"
        "Fluffy.\n"
        "\n"
        "## 📑 Details\n"
        "\n"
        "**Prep Time:** 10 min | **Servings:** 4\n"
        "\n"
        "## 🧾 Ingredients\n"
        "\n"
        "- 1 egg\n"
        "- 2 cups flour (sifted)\n"
        "\n"
        "## 👨‍🍳 Instructions\n"
        "\n"
        "1. Mix\n"
        "\n"
        "2. Fry\n"
        "\n"
        "## 📝 Notes\n"
        "\n"
        "- Serve warm\n"
        "\n"
        "---\n"
        "*This recipe was automatically extracted from webpage content by Mealman.*\n"
    )


def test_title_only_recipe_is_heading_and_footer():
    document = render_markdown({"title": "Toast"})
    assert document.markdown == (
        "# Toast\n\n---\n*This recipe was automatically extracted from web content by Mealman.*\n"
    )


@pytest.mark.parametrize(
    "title,filename",
    [
        ("Grandma's Bread & Butter!", "grandma-s-bread---butter-.md"),
        ("Crème Brûlée", "cr-me-br-l-e.md"),
        ("BLT 2.0", "blt-2-0.md"),
        (None, "recipe.md"),
    ],
)
def test_derive_filename(title, filename):
    assert derive_filename(title) == filename


def test_structured_ingredient_skips_empty_fields():
    document = render_markdown(
        {"title": "Salad", "ingredients": [{"name": "salt", "notes": "to taste"}, {"quantity": 3, "name": "tomatoes"}]}
    )
    assert "- salt (to taste)\n" in document.markdown
    assert "- 3 tomatoes\n" in document.markdown


def test_notes_string_renders_as_paragraph():
    document = render_markdown({"title": "Stew", "notes": "Better the next day."})
    assert "## 📝 Notes\n\nBetter the next day.\n" in document.markdown


def test_unparseable_source_is_skipped():
    for source in ("not a url", "http://[broken"):
        document = render_markdown({"title": "Stew", "source": source})
        assert "Recipe from" not in document.markdown
        assert document.markdown.startswith("# Stew\n")


def test_rendering_is_deterministic():
    recipe = Recipe.model_validate(FULL_RECIPE)
    assert render_markdown(recipe) == render_markdown(recipe)


@pytest.mark.parametrize(
    "malformed",
    [
        {},
        {"ingredients": ["flour"]},
        {"title": "", "instructions": "stir"},
        {"title": "Broken", "ingredients": 5},
        {"title": {"unexpected": True}},
        None,
        42,
        "just a string",
    ],
)
def test_renderer_never_raises(malformed):
    document = render_markdown(malformed)
    assert document.markdown.strip()
    assert document.filename.endswith(".md")


def test_missing_title_produces_degraded_document():
    document = render_markdown({"ingredients": ["flour"]})

    assert document.filename == "recipe.md"
    assert document.markdown.startswith("# Recipe\n\nError formatting recipe: ")
    assert '"ingredients": [\n    "flour"\n  ]' in document.markdown


def test_degraded_document_keeps_available_title():
    document = render_markdown({"title": "Broken", "ingredients": 5})

    assert document.filename == "broken.md"
    assert document.markdown.startswith("# Broken\n\nError formatting recipe: ")
    assert "Original data:\n```json\n" in document.markdown
    assert document.markdown.endswith("```\n")


def test_empty_ingredients_are_dropped():
    document = render_markdown({"title": "T", "ingredients": [{"foo": "bar"}, "", "1 egg"]})
    assert "## 🧾 Ingredients\n\n- 1 egg\n\n" in document.markdown
    assert "- \n" not in document.markdown


def test_ingredients_section_omitted_when_all_empty():
    document = render_markdown({"title": "T", "ingredients": [{"foo": "bar"}, ""]})
    assert "Ingredients" not in document.markdown
