"""
Recipe import.

All entry points reduce their payload to a list of dicts and run the
same item loop: normalize, check required fields, check for duplicates
against the user's existing recipes, then save or skip.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from cookbook.config import settings
from cookbook.ingestion.validator import sanitize, validate
from cookbook.models import RecipeData
from cookbook.repository import RecipeRepository

from .formats import (
    FormatError,
    ImportFormat,
    convert_external,
    detect_format,
    extract_items,
    load_json,
    normalize_external_recipe,
    parse_csv,
)
from .progress import (
    ConflictType,
    DuplicateConflict,
    ImportProgress,
    ImportResult,
    ProgressCallback,
)

logger = logging.getLogger(__name__)

Converter = Callable[[dict], tuple[RecipeData, str | None]]


@dataclass
class ImportOptions:
    """
    Import behaviour.

    Duplicates are always skipped and recorded as conflicts;
    `overwrite_existing` is accepted but not implemented, so it also skips.
    `dedupe_within_batch` additionally treats recipes saved earlier in the
    same call as existing.
    """

    overwrite_existing: bool = False
    validate_strict: bool = False
    batch_size: int | None = None
    dedupe_within_batch: bool = False
    progress_callback: ProgressCallback | None = None


def _title_key(title: str | None) -> str:
    return (title or "").strip().lower()


def _item_label(item: Any, index: int) -> str:
    if isinstance(item, dict):
        label = item.get("title") or item.get("name") or item.get("recipeName")
        if isinstance(label, str) and label.strip():
            return label.strip()
    return f"Item {index + 1}"


def missing_fields(data: RecipeData) -> list[str]:
    missing = []
    if not data.title or not data.title.strip():
        missing.append("title")
    if not data.ingredients:
        missing.append("ingredients")
    if not data.instructions:
        missing.append("instructions")
    return missing


class DuplicateIndex:
    """Existing titles and source URLs for one user, snapshotted at import start."""

    def __init__(self, recipes: list):
        self.by_title: dict[str, Any] = {}
        self.by_url: dict[str, Any] = {}
        for recipe in recipes:
            self.add(recipe)

    def add(self, recipe) -> None:
        self.by_title.setdefault(_title_key(recipe.title), recipe)
        if recipe.source_url:
            self.by_url.setdefault(recipe.source_url, recipe)

    def find(self, data: RecipeData) -> DuplicateConflict | None:
        existing = self.by_title.get(_title_key(data.title))
        if existing is not None:
            return DuplicateConflict(
                incoming_title=data.title,
                existing_recipe_id=existing.id,
                existing_title=existing.title,
                conflict_type=ConflictType.TITLE_MATCH,
                incoming_url=data.source_url,
            )

        if data.source_url:
            existing = self.by_url.get(data.source_url)
            if existing is not None:
                return DuplicateConflict(
                    incoming_title=data.title,
                    existing_recipe_id=existing.id,
                    existing_title=existing.title,
                    conflict_type=ConflictType.URL_MATCH,
                    incoming_url=data.source_url,
                )
        return None


class ImportService:
    def __init__(self, repository: RecipeRepository):
        self.repository = repository

    def import_from_json(
        self, user_id: str, payload: str | bytes | dict | list, options: ImportOptions | None = None
    ) -> ImportResult:
        try:
            items = extract_items(load_json(payload))
        except FormatError as e:
            return self._failed(str(e))
        return self.import_items(user_id, items, options)

    def import_from_csv(
        self, user_id: str, payload: str | bytes, options: ImportOptions | None = None
    ) -> ImportResult:
        try:
            items = parse_csv(payload)
        except FormatError as e:
            return self._failed(str(e))
        return self.import_items(user_id, items, options)

    def import_from_external_format(
        self,
        user_id: str,
        payload: str | bytes | dict | list,
        fmt: ImportFormat | str,
        options: ImportOptions | None = None,
    ) -> ImportResult:
        try:
            fmt = ImportFormat(fmt)
            items = convert_external(load_json(payload), fmt)
        except (ValueError, FormatError) as e:
            return self._failed(str(e))
        return self.import_items(user_id, items, options)

    def import_auto(
        self,
        user_id: str,
        payload: str | bytes,
        filename: str | None = None,
        options: ImportOptions | None = None,
    ) -> ImportResult:
        """Detect the payload's format and import it."""
        try:
            fmt = detect_format(payload, filename)
        except FormatError as e:
            return self._failed(str(e))

        logger.info(f"Detected import format: {fmt.value}")
        if fmt == ImportFormat.CSV:
            return self.import_from_csv(user_id, payload, options)
        if fmt in (ImportFormat.JSON, ImportFormat.BACKUP):
            return self.import_from_json(user_id, payload, options)
        return self.import_from_external_format(user_id, payload, fmt, options)

    def _failed(self, message: str) -> ImportResult:
        logger.warning(f"Import rejected: {message}")
        return ImportResult(success=False, progress=ImportProgress(), error=message)

    def import_items(
        self,
        user_id: str,
        items: list[dict],
        options: ImportOptions | None = None,
        converter: Converter = normalize_external_recipe,
    ) -> ImportResult:
        """
        Import already-parsed items in batches.

        The batch carries on past bad items. The result only fails when
        there was nothing to import or every item errored.
        """
        options = options or ImportOptions()
        progress = ImportProgress(total_items=len(items))
        result = ImportResult(success=False, progress=progress)

        if not items:
            result.error = "No recipes found in import data"
            return result

        if options.overwrite_existing:
            logger.warning("Overwriting existing recipes is not supported; duplicates will be skipped")

        duplicates = DuplicateIndex(self.repository.find_by_user_id(user_id))
        batch_size = max(1, options.batch_size or settings.import_batch_size)

        for start in range(0, len(items), batch_size):
            for index in range(start, min(start + batch_size, len(items))):
                item = items[index]
                label = _item_label(item, index)
                progress.current_item = label
                self._import_one(user_id, index, item, label, converter, options, duplicates, result)
                if options.progress_callback:
                    options.progress_callback(progress.snapshot())
            logger.debug(f"Import batch done: {progress.processed_items}/{progress.total_items}")

        progress.current_item = None
        result.success = progress.error_count < progress.total_items
        if not result.success:
            result.error = "No recipes could be imported"

        logger.info(
            f"Import finished for user {user_id}: {progress.imported_count} imported, "
            f"{progress.skipped_count} skipped, {progress.error_count} errors"
        )
        return result

    def _import_one(
        self,
        user_id: str,
        index: int,
        item: dict,
        label: str,
        converter: Converter,
        options: ImportOptions,
        duplicates: DuplicateIndex,
        result: ImportResult,
    ) -> None:
        progress = result.progress
        try:
            data, notes = converter(item)
        except Exception as e:
            logger.warning(f"Could not read import item {index}: {e}")
            progress.record_error(index, label, f"Could not read recipe: {e}")
            return

        missing = missing_fields(data)
        if missing:
            progress.record_skipped(index, label, f"Missing required fields: {', '.join(missing)}")
            return

        clean = sanitize(data)
        conflict = duplicates.find(clean)
        if conflict is not None:
            result.conflicts.append(conflict)
            progress.record_skipped(
                index, label, f"Duplicate of existing recipe '{conflict.existing_title}'"
            )
            return

        if options.validate_strict:
            report = validate(clean)
            if not report.is_valid:
                progress.record_error(index, label, "; ".join(report.errors))
                return

        try:
            saved = self.repository.create(user_id, clean, notes)
        except Exception as e:
            logger.exception(f"Failed to save imported recipe '{label}'")
            progress.record_error(index, label, f"Failed to save recipe: {e}")
            return

        result.imported_recipes.append(saved)
        progress.record_imported()
        if options.dedupe_within_batch:
            duplicates.add(saved)
