"""Source adapter contract and the shared extract flow."""

import logging
from abc import ABC, abstractmethod
from urllib.parse import urlparse

from cookbook.models import SourceType

from ..fetch import ContentError, HtmlFetcher, NetworkError
from ..models import ErrorType, IngestionResult, NormalizedContent
from ..normalizer import normalize

logger = logging.getLogger(__name__)


def is_http_url(url: str | None) -> bool:
    if not url:
        return False
    try:
        parsed = urlparse(url.strip())
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def hostname(url: str) -> str:
    try:
        return (urlparse(url).hostname or "").lower()
    except ValueError:
        return ""


class SourceAdapter(ABC):
    """
    Turns one kind of recipe URL into an ExtractedRecipe.

    Subclasses decide which URLs they own and how to read the fetched
    page; fetching, normalization and the final completeness check are
    shared.
    """

    name = "base"
    source_type = SourceType.WEB.value

    def __init__(self, fetcher: HtmlFetcher | None = None):
        self.fetcher = fetcher or HtmlFetcher()

    @abstractmethod
    def can_handle(self, url: str) -> bool:
        """True when this adapter owns the URL."""

    @abstractmethod
    def get_supported_domains(self) -> list[str]:
        """Domains this adapter is built for; ["*"] means any."""

    @abstractmethod
    def extract_content(self, html: str, url: str) -> NormalizedContent:
        """
        Read recipe content out of a fetched page.

        Raise ContentError when the page holds nothing usable.
        """

    def prepare_url(self, url: str) -> str:
        """Rewrite the URL before fetching (canonical form, short links)."""
        return url

    def check_content(self, content: NormalizedContent) -> list[str]:
        """Names of required fields missing from the extracted content."""
        missing = []
        if not content.title or not content.title.strip():
            missing.append("title")
        if not content.ingredients:
            missing.append("ingredients")
        if not content.instructions:
            missing.append("instructions")
        return missing

    def extract(self, url: str) -> IngestionResult:
        if not self.can_handle(url):
            return IngestionResult.fail(
                ErrorType.UNSUPPORTED,
                f"{self.name} adapter cannot handle this URL",
                {"url": url},
                adapter=self.name,
            )

        url = self.prepare_url(url)

        try:
            html = self.fetcher.fetch_html(url)
        except NetworkError as e:
            logger.info(f"Network failure fetching {url}: {e.message}")
            return IngestionResult.fail(ErrorType.NETWORK, e.message, e.details, adapter=self.name)
        except ContentError as e:
            return IngestionResult.fail(ErrorType.PARSING, e.message, e.details, adapter=self.name)

        try:
            content = self.extract_content(html, url)
        except ContentError as e:
            logger.info(f"No recipe content at {url}: {e.message}")
            return IngestionResult.fail(ErrorType.PARSING, e.message, e.details, adapter=self.name)

        missing = self.check_content(content)
        if missing:
            return IngestionResult.fail(
                ErrorType.VALIDATION,
                "Extracted recipe is missing required fields",
                {"missing": missing, "url": url},
                adapter=self.name,
            )

        recipe = normalize(content, url, self.source_type)
        return IngestionResult.ok(recipe, adapter=self.name, placeholder=content.placeholder)
