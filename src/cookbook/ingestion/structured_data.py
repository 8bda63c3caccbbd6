"""Schema.org Recipe extraction from JSON-LD and microdata."""

import json
import logging
import re
from typing import Any

import extruct
from bs4 import BeautifulSoup

from .models import NormalizedContent, RecipeMetadata
from .parsing import parse_servings, parse_time

logger = logging.getLogger(__name__)

# Nesting depth searched for a Recipe node inside a JSON-LD document
MAX_SEARCH_DEPTH = 6


def _is_recipe_type(value: Any) -> bool:
    if isinstance(value, str):
        return value == "Recipe" or value.endswith("/Recipe")
    if isinstance(value, list):
        return any(_is_recipe_type(v) for v in value)
    return False


def load_json_ld_blocks(soup: BeautifulSoup) -> list[Any]:
    """
    Parse every ld+json script block on the page.

    Malformed blocks are skipped so one broken block never hides a valid
    recipe further down the page.
    """
    blocks = []
    for script in soup.find_all("script", type="application/ld+json"):
        raw = script.string or script.get_text()
        if not raw or not raw.strip():
            continue
        try:
            blocks.append(json.loads(raw))
        except json.JSONDecodeError as e:
            logger.debug(f"Skipping malformed JSON-LD block: {e}")
    return blocks


def find_recipe_node(data: Any, depth: int = 0) -> dict | None:
    """
    Find the first Recipe-typed object in parsed JSON-LD.

    Handles top-level arrays, `@graph` containers and recipes nested
    inside other objects (e.g. a WebPage's `mainEntity`).
    """
    if depth > MAX_SEARCH_DEPTH:
        return None

    if isinstance(data, list):
        for item in data:
            found = find_recipe_node(item, depth + 1)
            if found:
                return found
        return None

    if not isinstance(data, dict):
        return None

    if _is_recipe_type(data.get("@type")):
        return data

    graph = data.get("@graph")
    if graph:
        found = find_recipe_node(graph, depth + 1)
        if found:
            return found

    for key, value in data.items():
        if key == "@graph" or not isinstance(value, (dict, list)):
            continue
        found = find_recipe_node(value, depth + 1)
        if found:
            return found

    return None


def find_microdata_recipe(html: str, url: str) -> dict | None:
    """Find a schema.org Recipe in microdata markup."""
    data = extruct.extract(html, base_url=url, syntaxes=["microdata"], errors="log")
    for item in data.get("microdata", []):
        if isinstance(item, dict) and _is_recipe_type(item.get("type")):
            return item.get("properties", {})
    return None


def find_structured_recipe(soup: BeautifulSoup, html: str, url: str) -> dict | None:
    """JSON-LD first, then microdata."""
    for block in load_json_ld_blocks(soup):
        recipe = find_recipe_node(block)
        if recipe:
            return recipe
    return find_microdata_recipe(html, url)


def _text_of(item: Any) -> str:
    """Text of a schema value that may be a string or a nested object."""
    if isinstance(item, str):
        return item.strip()
    if isinstance(item, dict):
        if "properties" in item:
            return _text_of(item["properties"])
        for key in ("text", "name", "@value"):
            value = item.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
    return ""


def extract_ingredients(value: Any) -> list[str]:
    if isinstance(value, str):
        return [line.strip() for line in value.splitlines() if line.strip()]
    if isinstance(value, list):
        return [text for text in (_text_of(item) for item in value) if text]
    return []


def extract_instructions(value: Any) -> list[str]:
    """
    Instruction text from the shapes sites publish.

    Handles:
        - A single string (split on numbered steps or lines)
        - A list of strings
        - HowToStep objects with 'text' or 'name'
        - HowToSection objects with 'itemListElement'
    """
    if not value:
        return []

    if isinstance(value, str):
        steps = re.split(r"\n\s*\d+[.)]\s*|\n+", value)
        return [re.sub(r"^\s*\d+[.)]\s*", "", s).strip() for s in steps if s.strip()]

    if isinstance(value, dict):
        if "itemListElement" in value:
            return extract_instructions(value["itemListElement"])
        text = _text_of(value)
        return [text] if text else []

    steps: list[str] = []
    if isinstance(value, list):
        for item in value:
            if isinstance(item, dict) and "itemListElement" in item:
                steps.extend(extract_instructions(item["itemListElement"]))
            else:
                text = _text_of(item)
                if text:
                    steps.append(text)
    return steps


def _string_list(value: Any) -> list[str]:
    if isinstance(value, str):
        return [value.strip()] if value.strip() else []
    if isinstance(value, list):
        return [text for text in (_text_of(v) for v in value) if text]
    return []


def _keywords(value: Any) -> list[str]:
    if isinstance(value, str):
        return [k.strip() for k in re.split(r"[,;]", value) if k.strip()]
    return _string_list(value)


def _author(value: Any) -> str | None:
    if isinstance(value, list):
        value = value[0] if value else None
    text = _text_of(value) if value else ""
    return text or None


def extract_image_url(image: Any) -> str | None:
    """
    Extract image URL from various formats.

    Handles:
        - Plain string URL
        - Dict with 'url' or 'contentUrl'
        - List of images (returns first)
    """
    if not image:
        return None
    if isinstance(image, str):
        return image
    if isinstance(image, dict):
        return image.get("url") or image.get("contentUrl")
    if isinstance(image, list):
        return extract_image_url(image[0])
    return None


def content_from_schema(recipe: dict) -> NormalizedContent:
    """Map a schema.org Recipe object onto NormalizedContent."""
    title = _text_of(recipe.get("name")) or "Untitled Recipe"
    description = _text_of(recipe.get("description")) or None

    return NormalizedContent(
        title=title,
        description=description,
        ingredients=extract_ingredients(
            recipe.get("recipeIngredient") or recipe.get("ingredients")
        ),
        instructions=extract_instructions(recipe.get("recipeInstructions")),
        metadata=RecipeMetadata(
            cooking_time=parse_time(_first(recipe.get("cookTime"))),
            prep_time=parse_time(_first(recipe.get("prepTime"))),
            servings=parse_servings(recipe.get("recipeYield")),
            categories=_string_list(recipe.get("recipeCategory")),
            tags=_keywords(recipe.get("keywords")),
            author=_author(recipe.get("author")),
            published_date=_text_of(recipe.get("datePublished")) or None,
            image_url=extract_image_url(recipe.get("image")),
        ),
    )


def _first(value: Any) -> Any:
    if isinstance(value, list):
        return value[0] if value else None
    return value
