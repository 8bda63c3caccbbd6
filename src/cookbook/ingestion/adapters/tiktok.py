"""TikTok video pages and vm.tiktok.com short links."""

import re

from bs4 import BeautifulSoup

from ..markup import meta_content, page_title
from ..models import VideoMetadata
from .base import hostname
from .video import PlatformAdapter

TIKTOK_URL = re.compile(
    r"^https?://(?:www\.)?(tiktok\.com/@[\w.-]+/video/\d+|vm\.tiktok\.com/[\w]+)",
    re.IGNORECASE,
)
_USERNAME = re.compile(r"tiktok\.com/@([\w.-]+)/", re.IGNORECASE)


class TikTokAdapter(PlatformAdapter):
    name = "tiktok"
    url_pattern = TIKTOK_URL
    domains = ["tiktok.com", "vm.tiktok.com", "www.tiktok.com"]

    placeholder_title = "TikTok Recipe Video"
    placeholder_ingredient = "See video caption or watch video for ingredients"
    placeholder_tags = ["tiktok", "video", "short-form"]

    def prepare_url(self, url: str) -> str:
        if hostname(url) == "vm.tiktok.com":
            return self.fetcher.resolve_redirect(url)
        return url

    def read_metadata(self, soup: BeautifulSoup, url: str) -> VideoMetadata:
        match = _USERNAME.search(url)
        author = match.group(1) if match else meta_content(soup, "author")

        return VideoMetadata(
            title=meta_content(soup, "og:title", "twitter:title") or page_title(soup) or "",
            description=meta_content(soup, "og:description", "twitter:description") or "",
            author=author,
            published_date=meta_content(soup, "article:published_time"),
            thumbnail_url=meta_content(soup, "og:image"),
        )
