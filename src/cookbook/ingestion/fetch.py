"""
HTTP fetching for recipe pages.

Failures are raised as NetworkError (worth retrying) or ContentError
(the page came back but is not something we can parse). Adapters turn
these into typed IngestionResult errors.
"""

import logging

import httpx

from cookbook.config import settings

logger = logging.getLogger(__name__)


class FetchError(Exception):
    """Base class for fetch failures."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class NetworkError(FetchError):
    """Timeouts, connection failures and non-2xx responses."""


class ContentError(FetchError):
    """The response is not an HTML page."""


class HtmlFetcher:
    """
    Fetches HTML with a timeout, redirect following and a descriptive
    user agent.

    Pass `transport` to route requests somewhere other than the network
    (tests use httpx.MockTransport).
    """

    def __init__(
        self,
        timeout: float | None = None,
        user_agent: str | None = None,
        max_redirects: int | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        self.timeout = timeout if timeout is not None else settings.fetch_timeout_seconds
        self.user_agent = user_agent or settings.user_agent
        self.max_redirects = max_redirects if max_redirects is not None else settings.max_redirects
        self.transport = transport

    @property
    def headers(self) -> dict[str, str]:
        return {
            "User-Agent": self.user_agent,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.5",
        }

    def _client(self, follow_redirects: bool = True) -> httpx.Client:
        return httpx.Client(
            follow_redirects=follow_redirects,
            max_redirects=self.max_redirects,
            timeout=self.timeout,
            headers=self.headers,
            transport=self.transport,
        )

    def fetch_html(self, url: str) -> str:
        """GET a page and return its HTML body."""
        try:
            with self._client() as client:
                response = client.get(url)
                response.raise_for_status()
        except httpx.TimeoutException as e:
            raise NetworkError(f"Request timed out after {self.timeout}s", {"url": url}) from e
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            raise NetworkError(
                f"HTTP {status}: {e.response.reason_phrase}", {"url": url, "status": status}
            ) from e
        except httpx.RequestError as e:
            raise NetworkError(f"Failed to fetch page: {e}", {"url": url}) from e

        content_type = response.headers.get("content-type", "")
        if "text/html" not in content_type.lower():
            raise ContentError(
                "Response is not HTML content",
                {"url": url, "contentType": content_type},
            )

        return response.text

    def resolve_redirect(self, url: str) -> str:
        """
        Return the Location a short link points at, or the URL itself.

        Only one hop is followed; failures are logged and the original URL
        is kept.
        """
        try:
            with self._client(follow_redirects=False) as client:
                response = client.head(url)
        except httpx.HTTPError as e:
            logger.warning(f"Could not resolve short URL {url}: {e}")
            return url

        location = response.headers.get("location")
        if response.is_redirect and location:
            return str(response.url.join(location))
        return url
