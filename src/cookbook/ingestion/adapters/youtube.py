"""YouTube watch pages, short links and embeds."""

import re
from urllib.parse import parse_qs, urlparse

from bs4 import BeautifulSoup

from ..markup import meta_content, page_title
from ..models import VideoMetadata
from ..parsing import parse_duration_seconds
from .video import PlatformAdapter

YOUTUBE_URL = re.compile(
    r"^https?://(?:www\.|m\.)?(youtube\.com/watch\?v=|youtu\.be/|youtube\.com/embed/|youtube\.com/v/)",
    re.IGNORECASE,
)


def video_id(url: str) -> str | None:
    """
    Pull the video id out of any supported YouTube URL form.

    Examples:
        https://www.youtube.com/watch?v=abc123&t=10 -> abc123
        https://youtu.be/abc123 -> abc123
        https://www.youtube.com/embed/abc123 -> abc123
    """
    parsed = urlparse(url)
    host = (parsed.hostname or "").lower()

    if host == "youtu.be":
        return parsed.path.lstrip("/").split("/")[0] or None

    if parsed.path == "/watch":
        ids = parse_qs(parsed.query).get("v")
        return ids[0] if ids else None

    match = re.match(r"^/(?:embed|v)/([\w-]+)", parsed.path)
    return match.group(1) if match else None


class YouTubeAdapter(PlatformAdapter):
    name = "youtube"
    url_pattern = YOUTUBE_URL
    domains = ["youtube.com", "youtu.be", "m.youtube.com"]

    placeholder_title = "YouTube Recipe Video"
    placeholder_ingredient = "See video description or watch video for ingredients"
    placeholder_tags = ["youtube", "video"]

    def prepare_url(self, url: str) -> str:
        vid = video_id(url)
        return f"https://www.youtube.com/watch?v={vid}" if vid else url

    def read_metadata(self, soup: BeautifulSoup, url: str) -> VideoMetadata:
        title = meta_content(soup, "og:title")
        if not title:
            title = re.sub(r"\s*-\s*YouTube\s*$", "", page_title(soup) or "")

        author = meta_content(soup, "author")
        if not author:
            link = soup.find("link", attrs={"itemprop": "name"})
            author = link.get("content") if link else None

        return VideoMetadata(
            title=title or "",
            description=meta_content(soup, "og:description", "description") or "",
            author=author,
            published_date=meta_content(soup, "datePublished", "uploadDate"),
            duration=parse_duration_seconds(meta_content(soup, "duration")),
            thumbnail_url=meta_content(soup, "og:image"),
        )
