"""Instagram posts, reels and IGTV."""

import re

from bs4 import BeautifulSoup

from ..markup import meta_content, page_title
from ..models import VideoMetadata
from .video import PlatformAdapter

INSTAGRAM_URL = re.compile(
    r"^https?://(?:www\.)?(instagram\.com/(?:p|reel|tv)/[\w-]+)", re.IGNORECASE
)
_TITLE_USERNAME = re.compile(r"@([\w.]+)")


def title_from_caption(caption: str) -> str:
    """
    First sentence of the caption when short, else its first 50 characters.

    Examples:
        "Easy pasta. Boil water first." -> "Easy pasta"
    """
    first = re.split(r"[.!?\n]", caption.strip(), maxsplit=1)[0].strip()
    if first and len(first) < 100:
        return first
    return caption.strip()[:50].rstrip() + "..."


class InstagramAdapter(PlatformAdapter):
    name = "instagram"
    url_pattern = INSTAGRAM_URL
    domains = ["instagram.com", "www.instagram.com"]

    placeholder_title = "Instagram Recipe Post"
    placeholder_ingredient = "See post caption or images for ingredients"
    placeholder_instruction = "Follow the post content for cooking instructions"
    placeholder_categories = ["social-media-recipe"]
    placeholder_tags = ["instagram", "social-media"]

    def read_metadata(self, soup: BeautifulSoup, url: str) -> VideoMetadata:
        description = meta_content(soup, "og:description", "description") or ""
        title = meta_content(soup, "og:title") or ""
        if not title and description:
            title = title_from_caption(description)

        author = meta_content(soup, "author")
        if not author:
            match = _TITLE_USERNAME.search(page_title(soup) or "")
            author = match.group(1) if match else None

        return VideoMetadata(
            title=title,
            description=description,
            author=author,
            published_date=meta_content(soup, "article:published_time"),
            thumbnail_url=meta_content(soup, "og:image"),
        )
