"""AllRecipes adapter: structured data first, then site markup patterns."""

import re

from ..fetch import ContentError
from ..markup import make_soup, strip_tags
from ..models import NormalizedContent, RecipeMetadata
from ..parsing import parse_servings, parse_time
from ..structured_data import content_from_schema, find_structured_recipe
from .base import SourceAdapter, hostname

_FLAGS = re.IGNORECASE | re.DOTALL

# Tried in order; the first pattern that yields anything wins.
INGREDIENT_PATTERNS = [
    re.compile(r'<span[^>]*class="[^"]*ingredients-item-name[^"]*"[^>]*>([^<]+)</span>', _FLAGS),
    re.compile(
        r'<li[^>]*class="[^"]*mntl-structured-ingredients[^"]*"[^>]*>.*?<p[^>]*>(.*?)</p>',
        _FLAGS,
    ),
    re.compile(r'<div[^>]*class="[^"]*recipe-ingredient[^"]*"[^>]*>([^<]+)</div>', _FLAGS),
]

INSTRUCTION_PATTERNS = [
    re.compile(
        r'<div[^>]*class="[^"]*instructions-section-item[^"]*"[^>]*>.*?<p[^>]*>(.*?)</p>',
        _FLAGS,
    ),
    re.compile(
        r'<li[^>]*class="[^"]*mntl-sc-block-group--LI[^"]*"[^>]*>.*?<p[^>]*>(.*?)</p>', _FLAGS
    ),
    re.compile(r'<div[^>]*class="[^"]*recipe-instruction[^"]*"[^>]*>([^<]+)</div>', _FLAGS),
]

SERVINGS_PATTERNS = [
    re.compile(r'<div[^>]*class="[^"]*recipe-adjust-servings[^"]*"[^>]*>(.*?)</div>', _FLAGS),
    re.compile(r'<span[^>]*class="[^"]*servings[^"]*"[^>]*>(.*?)</span>', _FLAGS),
]

PREP_TIME_PATTERNS = [
    re.compile(r'<[^>]*class="[^"]*(?:recipe-)?prep-time[^"]*"[^>]*>(.*?)</', _FLAGS),
]

COOK_TIME_PATTERNS = [
    re.compile(r'<[^>]*class="[^"]*(?:recipe-)?cook-time[^"]*"[^>]*>(.*?)</', _FLAGS),
]

TITLE_PATTERNS = [
    re.compile(r'<h1[^>]*class="[^"]*headline[^"]*"[^>]*>(.*?)</h1>', _FLAGS),
    re.compile(r"<title[^>]*>(.*?)</title>", _FLAGS),
]

DEFAULT_CATEGORIES = ["main-course"]


def first_matching(patterns: list[re.Pattern], html: str) -> list[str]:
    """
    Matches of the first pattern that finds anything, de-duplicated.

    Later patterns are never tried once one succeeds.
    """
    for pattern in patterns:
        items = []
        for match in pattern.findall(html):
            text = strip_tags(match)
            if text and text not in items:
                items.append(text)
        if items:
            return items
    return []


def _first_text(patterns: list[re.Pattern], html: str) -> str | None:
    items = first_matching(patterns, html)
    return items[0] if items else None


class AllRecipesAdapter(SourceAdapter):
    name = "allrecipes"

    def can_handle(self, url: str) -> bool:
        host = hostname(url)
        return host == "allrecipes.com" or host.endswith(".allrecipes.com")

    def get_supported_domains(self) -> list[str]:
        return ["allrecipes.com", "www.allrecipes.com"]

    def extract_content(self, html: str, url: str) -> NormalizedContent:
        recipe = find_structured_recipe(make_soup(html), html, url)
        if recipe:
            content = content_from_schema(recipe)
            if content.ingredients or content.instructions:
                if not content.metadata.categories:
                    content.metadata.categories = list(DEFAULT_CATEGORIES)
                return content

        ingredients = first_matching(INGREDIENT_PATTERNS, html)
        instructions = first_matching(INSTRUCTION_PATTERNS, html)
        if not ingredients and not instructions:
            raise ContentError("No recipe data found on this AllRecipes page", {"url": url})

        title = _first_text(TITLE_PATTERNS, html) or ""
        title = re.sub(r"\s*\|\s*Allrecipes\s*$", "", title, flags=re.IGNORECASE)

        return NormalizedContent(
            title=title or "Untitled Recipe",
            ingredients=ingredients,
            instructions=instructions,
            metadata=RecipeMetadata(
                servings=parse_servings(_first_text(SERVINGS_PATTERNS, html)),
                prep_time=parse_time(_first_text(PREP_TIME_PATTERNS, html)),
                cooking_time=parse_time(_first_text(COOK_TIME_PATTERNS, html)),
                categories=list(DEFAULT_CATEGORIES),
            ),
        )
