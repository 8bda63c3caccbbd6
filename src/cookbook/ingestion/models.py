"""Data models for recipe ingestion."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from cookbook.models import ExtractedRecipe


class ErrorType(str, Enum):
    """Failure kinds surfaced by ingestion, import and document processing."""

    NETWORK = "network"
    PARSING = "parsing"
    VALIDATION = "validation"
    UNSUPPORTED = "unsupported"
    FILE_SIZE = "file_size"
    FILE_TYPE = "file_type"
    PROCESSING = "processing"


RETRYABLE_ERRORS = {ErrorType.NETWORK}


@dataclass
class IngestionError:
    """Machine-readable kind plus a message a caller can show as-is."""

    type: ErrorType
    message: str
    details: dict[str, Any] | None = None

    @property
    def retryable(self) -> bool:
        return self.type in RETRYABLE_ERRORS


@dataclass
class IngestionResult:
    """
    Result of extracting a recipe from a URL.

    Exactly one of `recipe` and `error` is set. `placeholder` marks a
    successful result whose recipe is the generic "watch the video" stand-in
    rather than extracted content.
    """

    success: bool
    recipe: ExtractedRecipe | None = None
    error: IngestionError | None = None
    adapter: str | None = None
    placeholder: bool = False

    @classmethod
    def ok(
        cls, recipe: ExtractedRecipe, adapter: str | None = None, placeholder: bool = False
    ) -> "IngestionResult":
        return cls(success=True, recipe=recipe, adapter=adapter, placeholder=placeholder)

    @classmethod
    def fail(
        cls,
        error_type: ErrorType,
        message: str,
        details: dict[str, Any] | None = None,
        adapter: str | None = None,
    ) -> "IngestionResult":
        return cls(
            success=False,
            error=IngestionError(type=error_type, message=message, details=details),
            adapter=adapter,
        )


@dataclass
class RecipeMetadata:
    """Loose metadata bag produced by adapters before normalization."""

    cooking_time: float | None = None
    prep_time: float | None = None
    servings: float | None = None
    difficulty: str | None = None
    categories: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    author: str | None = None
    published_date: str | None = None
    image_url: str | None = None


@dataclass
class NormalizedContent:
    """Raw adapter output: strings only, not yet parsed into the canonical shape."""

    title: str
    description: str | None = None
    ingredients: list[str] = field(default_factory=list)
    instructions: list[str] = field(default_factory=list)
    metadata: RecipeMetadata = field(default_factory=RecipeMetadata)
    confidence: float | None = None
    placeholder: bool = False


@dataclass
class VideoMetadata:
    """Page metadata scraped from a video or social platform."""

    title: str = ""
    description: str = ""
    author: str | None = None
    published_date: str | None = None
    duration: int | None = None  # seconds
    thumbnail_url: str | None = None


@dataclass
class ValidationReport:
    is_valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


@dataclass
class RecipeSection:
    """A recipe-shaped slice of a document."""

    title: str
    content: str
    start_index: int
    end_index: int
    confidence: float


@dataclass
class ExtractedText:
    """Plain-text output of a document reader."""

    text: str
    page_count: int | None = None


@dataclass
class DocumentIngestionOptions:
    max_file_size: int | None = None
    allowed_types: list[str] | None = None


@dataclass
class DocumentMetadata:
    file_name: str
    file_size: int
    file_type: str
    page_count: int | None = None
    extracted_text: str | None = None


@dataclass
class DocumentIngestionResult:
    """Result of processing an uploaded document; may hold several recipes."""

    success: bool
    recipes: list[ExtractedRecipe] = field(default_factory=list)
    error: IngestionError | None = None
    metadata: DocumentMetadata | None = None
    sections: list[RecipeSection] = field(default_factory=list)
    skipped_sections: int = 0
