"""Universal fallback adapter: schema.org data, then HTML list scraping."""

import logging

from bs4 import BeautifulSoup

from ..fetch import ContentError
from ..markup import make_soup, page_title
from ..models import NormalizedContent
from ..structured_data import content_from_schema, find_structured_recipe
from .base import SourceAdapter, is_http_url

logger = logging.getLogger(__name__)

INGREDIENT_CLASS_HINTS = ["ingredient", "recipe-ingredient"]
INSTRUCTION_CLASS_HINTS = ["instruction", "recipe-instruction", "method", "direction"]


def _list_items_by_class(soup: BeautifulSoup, hints: list[str]) -> list[str]:
    """
    Text of <li> items in the first ul/ol whose class contains a hint.

    Hints are tried in order; the first one that yields items wins.
    """
    for hint in hints:
        for container in soup.find_all(["ul", "ol"]):
            classes = " ".join(container.get("class") or []).lower()
            if hint not in classes:
                continue
            items = [li.get_text(" ", strip=True) for li in container.find_all("li")]
            items = [item for item in items if item]
            if items:
                return items
    return []


def scrape_html_lists(soup: BeautifulSoup) -> NormalizedContent | None:
    """Best-effort extraction from pages with no structured data."""
    ingredients = _list_items_by_class(soup, INGREDIENT_CLASS_HINTS)
    instructions = _list_items_by_class(soup, INSTRUCTION_CLASS_HINTS)
    if not ingredients and not instructions:
        return None

    return NormalizedContent(
        title=page_title(soup) or "Untitled Recipe",
        ingredients=ingredients,
        instructions=instructions,
    )


class StructuredDataAdapter(SourceAdapter):
    """Accepts any http(s) URL, so it must be registered last."""

    name = "structured-data"

    def can_handle(self, url: str) -> bool:
        return is_http_url(url)

    def get_supported_domains(self) -> list[str]:
        return ["*"]

    def extract_content(self, html: str, url: str) -> NormalizedContent:
        soup = make_soup(html)

        recipe = find_structured_recipe(soup, html, url)
        if recipe:
            logger.debug(f"Found structured recipe data at {url}")
            return content_from_schema(recipe)

        content = scrape_html_lists(soup)
        if content:
            logger.debug(f"Using HTML list scraping for {url}")
            return content

        raise ContentError("No recipe data found on this page", {"url": url})
