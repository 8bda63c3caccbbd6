"""
Pytest configuration and fixtures for cookbook tests.
"""

import json
import os

import httpx
import pytest

# Set test environment before importing cookbook modules
os.environ["COOKBOOK_ENV"] = "development"

from cookbook.ingestion.fetch import HtmlFetcher  # noqa: E402
from cookbook.models import Ingredient, Instruction, RecipeData  # noqa: E402
from cookbook.repository import InMemoryRecipeRepository  # noqa: E402

USER_ID = "user-1"
OTHER_USER_ID = "user-2"

COOKIE_RECIPE_LD = {
    "@context": "https://schema.org",
    "@type": "Recipe",
    "name": "Chocolate Chip Cookies",
    "description": "Classic chewy cookies.",
    "recipeIngredient": ["2 cups flour", "1 cup sugar", "1 cup chocolate chips"],
    "recipeInstructions": [
        {"@type": "HowToStep", "text": "Mix the dry ingredients."},
        {"@type": "HowToStep", "text": "Bake for 10 minutes."},
    ],
    "recipeYield": "24 cookies",
    "prepTime": "PT15M",
    "cookTime": "PT10M",
    "recipeCategory": "Dessert",
    "keywords": "cookies, baking",
    "author": {"@type": "Person", "name": "Jane Baker"},
    "image": {"@type": "ImageObject", "url": "https://example.com/cookies.jpg"},
}


def html_page(*json_ld: object, head: str = "", body: str = "", title: str = "Recipe") -> str:
    """Minimal HTML page with the given JSON-LD blocks (strings are inserted as-is)."""
    scripts = []
    for block in json_ld:
        raw = block if isinstance(block, str) else json.dumps(block)
        scripts.append(f'<script type="application/ld+json">{raw}</script>')
    return (
        f"<html><head><title>{title}</title>{head}{''.join(scripts)}</head>"
        f"<body>{body}</body></html>"
    )


def html_response(html: str, status: int = 200) -> httpx.Response:
    return httpx.Response(status, text=html, headers={"content-type": "text/html; charset=utf-8"})


def make_fetcher(handler) -> HtmlFetcher:
    return HtmlFetcher(transport=httpx.MockTransport(handler))


def make_recipe_data(title: str = "Pancakes", **overrides) -> RecipeData:
    fields = {
        "title": title,
        "description": "Fluffy breakfast pancakes",
        "ingredients": [
            Ingredient(name="flour", quantity=2, unit="cup"),
            Ingredient(name="milk", quantity=1.5, unit="cup"),
            Ingredient(name="salt"),
        ],
        "instructions": [
            Instruction(step_number=1, description="Whisk everything together"),
            Instruction(step_number=2, description="Cook on a hot griddle", duration=5),
        ],
        "servings": 4,
        "prep_time": 10,
        "cooking_time": 15,
        "difficulty": "easy",
        "categories": ["breakfast"],
        "tags": ["quick"],
        "source_url": f"https://example.com/{title.lower().replace(' ', '-')}",
        "source_type": "web",
    }
    fields.update(overrides)
    return RecipeData(**fields)


@pytest.fixture
def repository():
    """Empty in-memory repository."""
    return InMemoryRecipeRepository()


@pytest.fixture
def populated_repository(repository):
    """Repository holding three recipes for USER_ID and one for OTHER_USER_ID."""
    repository.create(USER_ID, make_recipe_data("Pancakes"), personal_notes="Use buttermilk")
    repository.create(USER_ID, make_recipe_data("Tomato Soup", categories=["soups"]))
    repository.create(USER_ID, make_recipe_data("Banana Bread", servings=8))
    repository.create(OTHER_USER_ID, make_recipe_data("Secret Stew"))
    return repository


@pytest.fixture
def cookie_page():
    """Recipe page carrying a schema.org Recipe in JSON-LD."""
    return html_page(COOKIE_RECIPE_LD, title="Chocolate Chip Cookies | Example")
