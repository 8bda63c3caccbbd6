"""
Shared flow for video and social-platform adapters.

These pages rarely carry structured recipe data, so the adapters read the
page's meta tags and hand the caption to the metadata heuristics. When
the caption holds no recipe, they still succeed with a placeholder the
user can fill in, and flag the result so callers can tell the difference.
"""

import logging
import re
from abc import abstractmethod

from bs4 import BeautifulSoup

from cookbook.models import SourceType

from ..markup import make_soup
from ..metadata import extract_recipe_from_metadata
from ..models import NormalizedContent, RecipeMetadata, VideoMetadata
from .base import SourceAdapter

logger = logging.getLogger(__name__)


class PlatformAdapter(SourceAdapter):
    source_type = SourceType.VIDEO.value

    url_pattern: re.Pattern
    domains: list[str] = []

    placeholder_title = "Recipe Video"
    placeholder_ingredient = "See video for ingredients"
    placeholder_instruction = "Follow along with the video for cooking instructions"
    placeholder_categories: list[str] = ["video-recipe"]
    placeholder_tags: list[str] = ["video"]

    def can_handle(self, url: str) -> bool:
        return bool(url and self.url_pattern.match(url.strip()))

    def get_supported_domains(self) -> list[str]:
        return list(self.domains)

    @abstractmethod
    def read_metadata(self, soup: BeautifulSoup, url: str) -> VideoMetadata:
        """Pull title, caption, author and friends out of the page."""

    def placeholder(self, metadata: VideoMetadata) -> NormalizedContent:
        return NormalizedContent(
            title=metadata.title or self.placeholder_title,
            description=metadata.description or None,
            ingredients=[self.placeholder_ingredient],
            instructions=[self.placeholder_instruction],
            metadata=RecipeMetadata(
                categories=list(self.placeholder_categories),
                tags=list(self.placeholder_tags),
                author=metadata.author,
                published_date=metadata.published_date,
                image_url=metadata.thumbnail_url,
            ),
            confidence=0.0,
            placeholder=True,
        )

    def extract_content(self, html: str, url: str) -> NormalizedContent:
        metadata = self.read_metadata(make_soup(html), url)

        content = extract_recipe_from_metadata(metadata)
        if content is None:
            logger.info(f"No recipe in {self.name} metadata for {url}, using placeholder")
            return self.placeholder(metadata)

        content.title = content.title or self.placeholder_title
        for tag in self.placeholder_tags:
            if tag not in content.metadata.tags:
                content.metadata.tags.append(tag)
        return content
