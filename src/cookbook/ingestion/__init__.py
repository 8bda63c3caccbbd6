"""Recipe ingestion from web pages, video platforms and documents."""

from .documents import DocumentIngestionService, PlainTextExtractor, TextExtractor
from .models import (
    DocumentIngestionResult,
    ErrorType,
    IngestionError,
    IngestionResult,
    NormalizedContent,
    ValidationReport,
)
from .normalizer import normalize
from .scraping import WebScrapingService
from .validator import sanitize, validate

__all__ = [
    "DocumentIngestionResult",
    "DocumentIngestionService",
    "ErrorType",
    "IngestionError",
    "IngestionResult",
    "NormalizedContent",
    "PlainTextExtractor",
    "TextExtractor",
    "ValidationReport",
    "WebScrapingService",
    "normalize",
    "sanitize",
    "validate",
]
