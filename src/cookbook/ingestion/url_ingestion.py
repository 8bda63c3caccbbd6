"""
URL ingestion: extract, sanitize, validate and save.

Also runs batches of URLs with bounded concurrency: each chunk of
`max_concurrent` URLs finishes before the next one starts.
"""

import logging
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any

from cookbook.config import settings
from cookbook.models import ExtractedRecipe, Recipe
from cookbook.recipes import RecipeService

from .adapters import is_http_url
from .models import ErrorType, IngestionError, ValidationReport
from .scraping import WebScrapingService
from .validator import sanitize, validate

logger = logging.getLogger(__name__)


@dataclass
class UrlIngestionResult:
    success: bool
    url: str
    recipe: Recipe | None = None
    preview: ExtractedRecipe | None = None
    validation: ValidationReport | None = None
    error: IngestionError | None = None
    placeholder: bool = False


@dataclass
class BatchProgress:
    """Snapshot handed to the batch progress callback after each URL."""

    total: int
    processed: int
    succeeded: int
    failed: int
    current_url: str | None = None


@dataclass
class BatchIngestionResult:
    success: bool
    results: list[UrlIngestionResult] = field(default_factory=list)
    error: IngestionError | None = None

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if not r.success)


class UrlIngestionService:
    def __init__(
        self,
        scraper: WebScrapingService,
        recipe_service: RecipeService,
    ):
        self.scraper = scraper
        self.recipe_service = recipe_service

    def preview_from_url(self, url: str) -> UrlIngestionResult:
        """Extract and check a recipe without saving it."""
        extracted = self.scraper.extract_recipe(url)
        if not extracted.success:
            return UrlIngestionResult(success=False, url=url, error=extracted.error)

        recipe = sanitize(extracted.recipe)
        return UrlIngestionResult(
            success=True,
            url=url,
            preview=recipe,
            validation=validate(recipe),
            placeholder=extracted.placeholder,
        )

    def ingest_from_url(
        self, url: str, user_id: str, skip_validation: bool = False
    ) -> UrlIngestionResult:
        """Extract a recipe and save it for the user."""
        extracted = self.scraper.extract_recipe(url)
        if not extracted.success:
            return UrlIngestionResult(success=False, url=url, error=extracted.error)

        recipe = sanitize(extracted.recipe)
        report = validate(recipe)
        if not skip_validation and not report.is_valid:
            return UrlIngestionResult(
                success=False,
                url=url,
                preview=recipe,
                validation=report,
                error=IngestionError(
                    ErrorType.VALIDATION,
                    "Extracted recipe failed validation",
                    {"errors": report.errors, "warnings": report.warnings},
                ),
            )

        notes = f"Original author: {recipe.author}" if recipe.author else None
        saved = self.recipe_service.create_recipe(user_id, recipe, personal_notes=notes)
        if not saved.success:
            return UrlIngestionResult(
                success=False,
                url=url,
                preview=recipe,
                validation=report,
                error=IngestionError(
                    ErrorType.PROCESSING, saved.error.message, saved.error.details
                ),
            )

        logger.info(f"Saved '{saved.value.title}' from {url} for user {user_id}")
        return UrlIngestionResult(
            success=True,
            url=url,
            recipe=saved.value,
            validation=report,
            placeholder=extracted.placeholder,
        )

    def check_batch(self, urls: list[str], max_urls: int | None = None) -> IngestionError | None:
        """Reject a batch up front when it is empty, too large or has bad URLs."""
        max_urls = max_urls or settings.max_batch_urls
        if not urls:
            return IngestionError(ErrorType.VALIDATION, "At least one URL is required")
        if len(urls) > max_urls:
            return IngestionError(
                ErrorType.VALIDATION,
                f"Maximum {max_urls} URLs allowed per batch",
                {"count": len(urls), "max": max_urls},
            )

        invalid = [u for u in urls if not is_http_url(u)]
        if invalid:
            return IngestionError(ErrorType.VALIDATION, "Invalid URLs provided", {"invalidUrls": invalid})

        unsupported = [u for u in urls if not self.scraper.can_handle(u)]
        if unsupported:
            return IngestionError(
                ErrorType.UNSUPPORTED,
                "Some URLs are not supported",
                {
                    "unsupportedUrls": unsupported,
                    "supportedDomains": self.scraper.get_supported_domains(),
                },
            )
        return None

    def ingest_batch(
        self,
        urls: list[str],
        user_id: str,
        max_concurrent: int | None = None,
        skip_validation: bool = False,
        progress_callback: Callable[[BatchProgress], Any] | None = None,
    ) -> BatchIngestionResult:
        """
        Ingest many URLs, `max_concurrent` at a time.

        One URL failing never stops the batch. The batch only fails as a
        whole when it is rejected up front or no URL succeeds.
        """
        error = self.check_batch(urls)
        if error:
            return BatchIngestionResult(success=False, error=error)

        max_concurrent = max(1, max_concurrent or settings.batch_max_concurrent)
        results: list[UrlIngestionResult] = []

        def ingest_one(url: str) -> UrlIngestionResult:
            try:
                return self.ingest_from_url(url, user_id, skip_validation=skip_validation)
            except Exception as e:
                logger.exception(f"Unexpected failure ingesting {url}")
                return UrlIngestionResult(
                    success=False, url=url, error=IngestionError(ErrorType.PROCESSING, str(e))
                )

        with ThreadPoolExecutor(max_workers=max_concurrent) as pool:
            for start in range(0, len(urls), max_concurrent):
                chunk = urls[start:start + max_concurrent]
                for result in pool.map(ingest_one, chunk):
                    results.append(result)
                    if progress_callback:
                        progress_callback(
                            BatchProgress(
                                total=len(urls),
                                processed=len(results),
                                succeeded=sum(1 for r in results if r.success),
                                failed=sum(1 for r in results if not r.success),
                                current_url=result.url,
                            )
                        )

        batch = BatchIngestionResult(success=any(r.success for r in results), results=results)
        if not batch.success:
            batch.error = IngestionError(
                ErrorType.PROCESSING,
                "No recipes could be ingested from this batch",
                {"failedUrls": [r.url for r in results]},
            )
        logger.info(f"Batch ingestion finished: {batch.succeeded} succeeded, {batch.failed} failed")
        return batch
