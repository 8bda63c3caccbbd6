"""URL extraction orchestration: adapter dispatch plus retry."""

import logging
import time
from collections.abc import Callable

from cookbook.config import settings

from .adapters import (
    AllRecipesAdapter,
    InstagramAdapter,
    SourceAdapter,
    StructuredDataAdapter,
    TikTokAdapter,
    YouTubeAdapter,
    is_http_url,
)
from .fetch import HtmlFetcher
from .models import ErrorType, IngestionResult
from .retry import RetryPolicy, run_with_retry

logger = logging.getLogger(__name__)


def default_adapters(fetcher: HtmlFetcher) -> list[SourceAdapter]:
    """
    Adapters in dispatch order: platforms, then named sites, then the
    universal fallback. The first adapter whose can_handle is true owns
    the URL, and the fallback accepts every http(s) URL, so it must stay
    last.
    """
    return [
        YouTubeAdapter(fetcher),
        TikTokAdapter(fetcher),
        InstagramAdapter(fetcher),
        AllRecipesAdapter(fetcher),
        StructuredDataAdapter(fetcher),
    ]


class WebScrapingService:
    """Validates a URL, picks its adapter and extracts with retry."""

    def __init__(
        self,
        fetcher: HtmlFetcher | None = None,
        adapters: list[SourceAdapter] | None = None,
        max_retries: int | None = None,
        retry_delay: float | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.fetcher = fetcher or HtmlFetcher()
        self.adapters = adapters if adapters is not None else default_adapters(self.fetcher)
        self.policy = RetryPolicy(
            max_retries=max_retries if max_retries is not None else settings.max_retries,
            retry_delay=retry_delay if retry_delay is not None else settings.retry_delay_seconds,
        )
        self.sleep = sleep

    def register_adapter(self, adapter: SourceAdapter) -> None:
        """Add an adapter ahead of the universal fallback."""
        position = len(self.adapters)
        for index, existing in enumerate(self.adapters):
            if isinstance(existing, StructuredDataAdapter):
                position = index
                break
        self.adapters.insert(position, adapter)

    def get_adapter(self, url: str) -> SourceAdapter | None:
        for adapter in self.adapters:
            if adapter.can_handle(url):
                return adapter
        return None

    def can_handle(self, url: str) -> bool:
        return is_http_url(url) and self.get_adapter(url) is not None

    def get_supported_domains(self) -> list[str]:
        domains: list[str] = []
        for adapter in self.adapters:
            for domain in adapter.get_supported_domains():
                if domain not in domains:
                    domains.append(domain)
        return domains

    def get_adapter_info(self) -> list[dict]:
        return [
            {"name": adapter.name, "domains": adapter.get_supported_domains()}
            for adapter in self.adapters
        ]

    def extract_recipe(self, url: str) -> IngestionResult:
        """
        Extract a recipe from a URL.

        The scheme is checked before any network call. Only network
        failures and unexpected exceptions are retried.
        """
        if not is_http_url(url):
            return IngestionResult.fail(
                ErrorType.VALIDATION,
                "Invalid URL provided",
                {"url": url},
            )

        url = url.strip()
        adapter = self.get_adapter(url)
        if adapter is None:
            return IngestionResult.fail(
                ErrorType.UNSUPPORTED,
                "No adapter found for this URL",
                {"url": url, "supportedDomains": self.get_supported_domains()},
            )

        logger.info(f"Extracting {url} with {adapter.name} adapter")
        result = run_with_retry(lambda: adapter.extract(url), self.policy, self.sleep)

        if result.success:
            logger.info(f"Extracted '{result.recipe.title}' from {url}")
        else:
            logger.info(f"Extraction failed for {url}: {result.error.message}")
        return result
