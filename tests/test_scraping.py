"""Tests for adapter dispatch and the retry state machine."""

import httpx

from cookbook.ingestion.adapters import SourceAdapter, StructuredDataAdapter
from cookbook.ingestion.models import ErrorType, IngestionResult, NormalizedContent
from cookbook.ingestion.retry import (
    Attempting,
    FailedRetryable,
    FailedTerminal,
    RetryPolicy,
    Succeeded,
    next_state,
    run_with_retry,
)
from cookbook.ingestion.scraping import WebScrapingService

from conftest import html_response, make_fetcher


def network_failure() -> IngestionResult:
    return IngestionResult.fail(ErrorType.NETWORK, "HTTP 503: Service Unavailable")


class RecordingSleep:
    def __init__(self):
        self.calls: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


class BlogAdapter(SourceAdapter):
    name = "blog"

    def can_handle(self, url: str) -> bool:
        return url.startswith("https://blog.example.com/")

    def get_supported_domains(self) -> list[str]:
        return ["blog.example.com"]

    def extract_content(self, html: str, url: str) -> NormalizedContent:
        return NormalizedContent(title="Blog", ingredients=["1 egg"], instructions=["Fry it"])


class TestNextState:
    """Tests for the pure transition function."""

    policy = RetryPolicy(max_retries=3, retry_delay=2.0)

    def test_success(self):
        result = IngestionResult(success=True)
        state, delay = next_state(Attempting(1), self.policy, result=result)
        assert state == Succeeded(result)
        assert delay == 0.0

    def test_non_network_failure_is_terminal(self):
        result = IngestionResult.fail(ErrorType.PARSING, "no recipe")
        state, delay = next_state(Attempting(1), self.policy, result=result)
        assert isinstance(state, FailedTerminal)
        assert state.result is result
        assert delay == 0.0

    def test_network_failure_retries_with_linear_backoff(self):
        state, delay = next_state(Attempting(2), self.policy, result=network_failure())
        assert isinstance(state, FailedRetryable)
        assert state.attempt == 2
        assert delay == 4.0

    def test_exception_is_retryable(self):
        state, _ = next_state(Attempting(1), self.policy, exception=RuntimeError("boom"))
        assert isinstance(state, FailedRetryable)

    def test_last_attempt_is_terminal_network_error(self):
        state, delay = next_state(Attempting(3), self.policy, result=network_failure())
        assert isinstance(state, FailedTerminal)
        assert state.result.error.type == ErrorType.NETWORK
        assert state.result.error.message == "Failed to extract recipe after 3 attempts"
        assert state.result.error.details == {
            "lastError": "HTTP 503: Service Unavailable",
            "attempts": 3,
        }
        assert delay == 0.0


class TestRunWithRetry:
    def test_attempts_equal_max_retries(self):
        calls = []
        sleep = RecordingSleep()

        def operation():
            calls.append(1)
            return network_failure()

        result = run_with_retry(operation, RetryPolicy(max_retries=3, retry_delay=1.0), sleep)

        assert len(calls) == 3
        assert sleep.calls == [1.0, 2.0]
        assert not result.success
        assert result.error.details["attempts"] == 3

    def test_recovers_after_failure(self):
        outcomes = [network_failure(), IngestionResult(success=True)]
        sleep = RecordingSleep()

        result = run_with_retry(lambda: outcomes.pop(0), RetryPolicy(3, 0.5), sleep)

        assert result.success
        assert sleep.calls == [0.5]

    def test_exceptions_are_retried_then_summarized(self):
        def operation():
            raise ValueError("parser exploded")

        result = run_with_retry(operation, RetryPolicy(2, 0.0), RecordingSleep())

        assert result.error.type == ErrorType.NETWORK
        assert result.error.details["lastError"] == "parser exploded"

    def test_parsing_errors_are_not_retried(self):
        calls = []

        def operation():
            calls.append(1)
            return IngestionResult.fail(ErrorType.PARSING, "no recipe")

        result = run_with_retry(operation, RetryPolicy(5, 1.0), RecordingSleep())

        assert len(calls) == 1
        assert result.error.type == ErrorType.PARSING


class TestWebScrapingService:
    """Tests for URL validation and adapter dispatch."""

    def test_dispatch_order(self):
        service = WebScrapingService(fetcher=make_fetcher(lambda r: httpx.Response(404)))

        assert service.get_adapter("https://youtu.be/abc").name == "youtube"
        assert service.get_adapter("https://www.tiktok.com/@a/video/1").name == "tiktok"
        assert service.get_adapter("https://www.instagram.com/p/abc/").name == "instagram"
        assert service.get_adapter("https://www.allrecipes.com/recipe/1/").name == "allrecipes"
        assert service.get_adapter("https://example.com/recipe").name == "structured-data"
        assert isinstance(service.adapters[-1], StructuredDataAdapter)

    def test_register_adapter_before_fallback(self):
        service = WebScrapingService(fetcher=make_fetcher(lambda r: httpx.Response(404)))
        service.register_adapter(BlogAdapter(service.fetcher))

        assert service.get_adapter("https://blog.example.com/eggs").name == "blog"
        assert isinstance(service.adapters[-1], StructuredDataAdapter)

    def test_supported_domains(self):
        service = WebScrapingService(fetcher=make_fetcher(lambda r: httpx.Response(404)))
        domains = service.get_supported_domains()

        assert "youtube.com" in domains
        assert "allrecipes.com" in domains
        assert "*" in domains
        assert len(domains) == len(set(domains))

    def test_invalid_url_checked_before_network(self):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(404)

        service = WebScrapingService(fetcher=make_fetcher(handler))
        result = service.extract_recipe("not a url")

        assert result.error.type == ErrorType.VALIDATION
        assert result.error.message == "Invalid URL provided"
        assert requests == []

    def test_no_adapter(self):
        service = WebScrapingService(
            fetcher=make_fetcher(lambda r: httpx.Response(404)),
            adapters=[],
        )
        result = service.extract_recipe("https://example.com/recipe")

        assert result.error.type == ErrorType.UNSUPPORTED
        assert result.error.details["supportedDomains"] == []

    def test_network_failures_are_retried(self):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(503)

        sleep = RecordingSleep()
        service = WebScrapingService(
            fetcher=make_fetcher(handler), max_retries=2, retry_delay=1.0, sleep=sleep
        )
        result = service.extract_recipe("https://example.com/recipe")

        assert len(requests) == 2
        assert sleep.calls == [1.0]
        assert result.error.type == ErrorType.NETWORK
        assert result.error.message == "Failed to extract recipe after 2 attempts"

    def test_extracts_recipe(self, cookie_page):
        service = WebScrapingService(
            fetcher=make_fetcher(lambda r: html_response(cookie_page)), sleep=RecordingSleep()
        )
        result = service.extract_recipe("  https://example.com/cookies  ")

        assert result.success
        assert result.recipe.source_url == "https://example.com/cookies"
