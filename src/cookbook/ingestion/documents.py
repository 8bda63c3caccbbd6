"""
Document ingestion.

Uploaded files are gated on size and type, turned into text by a reader
for their type, split into recipe sections and assembled into recipes.
Binary readers (PDF, Word) are supplied by the caller; plain text and
markdown are handled here.
"""

import logging
from pathlib import PurePath
from typing import Protocol, runtime_checkable

from cookbook.config import settings
from cookbook.models import ExtractedRecipe, Ingredient, Instruction, SourceType

from .content_parser import identify_recipe_sections, split_section
from .models import (
    DocumentIngestionOptions,
    DocumentIngestionResult,
    DocumentMetadata,
    ErrorType,
    ExtractedText,
    IngestionError,
    RecipeSection,
)
from .validator import sanitize, validate

logger = logging.getLogger(__name__)


@runtime_checkable
class TextExtractor(Protocol):
    """Reads a binary document and returns its plain text."""

    def extract(self, data: bytes, filename: str) -> ExtractedText:
        """Raise on unreadable input."""
        ...


class PlainTextExtractor:
    """Reader for .txt and .md files."""

    def __init__(self, encoding: str = "utf-8"):
        self.encoding = encoding

    def extract(self, data: bytes, filename: str) -> ExtractedText:
        return ExtractedText(text=data.decode(self.encoding, errors="replace"))


def file_type(filename: str) -> str:
    """Lower-cased extension without the dot, or "" when there is none."""
    return PurePath(filename).suffix.lower().lstrip(".")


def section_to_recipe(section: RecipeSection, filename: str) -> ExtractedRecipe:
    """
    Build a recipe from a section.

    Ingredients and instructions are kept as flat, unparsed lines.
    """
    ingredient_lines, instruction_lines = split_section(section.content)
    return ExtractedRecipe(
        title=section.title or "Untitled Recipe",
        ingredients=[Ingredient(name=line) for line in ingredient_lines],
        instructions=[
            Instruction(step_number=index, description=line)
            for index, line in enumerate(instruction_lines, start=1)
        ],
        source_url=f"file://{filename}",
        source_type=SourceType.DOCUMENT.value,
    )


class DocumentIngestionService:
    def __init__(self, extractors: dict[str, TextExtractor] | None = None):
        self.extractors: dict[str, TextExtractor] = {
            "txt": PlainTextExtractor(),
            "md": PlainTextExtractor(),
        }
        if extractors:
            self.extractors.update(extractors)

    def register_extractor(self, file_type: str, extractor: TextExtractor) -> None:
        self.extractors[file_type.lower().lstrip(".")] = extractor

    def process_document(
        self,
        data: bytes,
        filename: str,
        options: DocumentIngestionOptions | None = None,
    ) -> DocumentIngestionResult:
        options = options or DocumentIngestionOptions()
        max_size = options.max_file_size or settings.max_document_bytes
        allowed = [t.lower() for t in (options.allowed_types or settings.allowed_document_types)]
        kind = file_type(filename)

        if len(data) > max_size:
            return DocumentIngestionResult(
                success=False,
                error=IngestionError(
                    ErrorType.FILE_SIZE,
                    f"File size exceeds maximum allowed size of {max_size} bytes",
                    {"actualSize": len(data), "maxSize": max_size},
                ),
            )

        if kind not in allowed:
            return DocumentIngestionResult(
                success=False,
                error=IngestionError(
                    ErrorType.FILE_TYPE,
                    f"File type '{kind or 'unknown'}' is not supported",
                    {"supportedTypes": allowed},
                ),
            )

        try:
            return self._process(data, filename, kind)
        except Exception as e:
            logger.exception(f"Failed to process document {filename}")
            return DocumentIngestionResult(
                success=False,
                error=IngestionError(
                    ErrorType.PROCESSING, f"Failed to process document: {e}", {"fileName": filename}
                ),
            )

    def _process(self, data: bytes, filename: str, kind: str) -> DocumentIngestionResult:
        extractor = self.extractors.get(kind)
        if extractor is None:
            return DocumentIngestionResult(
                success=False,
                error=IngestionError(
                    ErrorType.UNSUPPORTED,
                    f"No text reader available for '{kind}' files",
                    {"availableReaders": sorted(self.extractors)},
                ),
            )

        extracted = extractor.extract(data, filename)
        metadata = DocumentMetadata(
            file_name=filename,
            file_size=len(data),
            file_type=kind,
            page_count=extracted.page_count,
            extracted_text=extracted.text,
        )

        if not extracted.text or not extracted.text.strip():
            return DocumentIngestionResult(
                success=False,
                metadata=metadata,
                error=IngestionError(
                    ErrorType.PARSING, "No text content could be extracted from the document"
                ),
            )

        sections = identify_recipe_sections(extracted.text)
        if not sections:
            return DocumentIngestionResult(
                success=False,
                metadata=metadata,
                error=IngestionError(ErrorType.PARSING, "No recipe sections found in the document"),
            )

        recipes = []
        skipped = 0
        for section in sections:
            recipe = sanitize(section_to_recipe(section, filename))
            report = validate(recipe)
            if not report.is_valid:
                skipped += 1
                logger.warning(
                    f"Skipping section '{section.title}' in {filename}: {'; '.join(report.errors)}"
                )
                continue
            recipes.append(recipe)

        if not recipes:
            return DocumentIngestionResult(
                success=False,
                metadata=metadata,
                sections=sections,
                skipped_sections=skipped,
                error=IngestionError(
                    ErrorType.VALIDATION,
                    "No valid recipes could be extracted from the document",
                    {"sectionCount": len(sections)},
                ),
            )

        logger.info(f"Extracted {len(recipes)} recipes from {filename} ({skipped} skipped)")
        return DocumentIngestionResult(
            success=True,
            recipes=recipes,
            metadata=metadata,
            sections=sections,
            skipped_sections=skipped,
        )
