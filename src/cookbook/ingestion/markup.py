"""Small BeautifulSoup helpers shared by the adapters."""

import html
import re

from bs4 import BeautifulSoup


def make_soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def meta_content(soup: BeautifulSoup, *keys: str) -> str | None:
    """
    Content of the first matching meta tag.

    Each key is tried as `property`, then `name`, then `itemprop`, so
    "og:title", "twitter:title", "author" and "datePublished" all work.
    """
    for key in keys:
        for attr in ("property", "name", "itemprop"):
            tag = soup.find("meta", attrs={attr: key})
            if tag and tag.get("content"):
                content = tag["content"].strip()
                if content:
                    return content
    return None


def page_title(soup: BeautifulSoup) -> str | None:
    if soup.title and soup.title.string:
        title = soup.title.string.strip()
        return title or None
    return None


def strip_tags(fragment: str) -> str:
    """Drop markup from an HTML fragment and collapse whitespace."""
    text = re.sub(r"<[^>]+>", " ", fragment)
    text = html.unescape(text)
    return re.sub(r"\s+", " ", text).strip()
