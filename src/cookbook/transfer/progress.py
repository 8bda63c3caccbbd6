"""Import progress counters and result types."""

import copy
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from cookbook.models import Recipe


class Severity(str, Enum):
    WARNING = "warning"
    ERROR = "error"


class ConflictType(str, Enum):
    TITLE_MATCH = "title_match"
    URL_MATCH = "url_match"


@dataclass
class ItemError:
    index: int
    item: str
    error: str
    severity: Severity


@dataclass
class DuplicateConflict:
    incoming_title: str
    existing_recipe_id: str
    existing_title: str
    conflict_type: ConflictType
    resolution: str = "skip"
    incoming_url: str | None = None


@dataclass
class ImportProgress:
    """
    Running counters for one import call.

    Owned by the call that creates it; callbacks receive snapshots, never
    the live object. At completion
    processed_items == imported_count + skipped_count + error_count.
    """

    total_items: int = 0
    processed_items: int = 0
    imported_count: int = 0
    skipped_count: int = 0
    error_count: int = 0
    current_item: str | None = None
    errors: list[ItemError] = field(default_factory=list)

    def record_imported(self) -> None:
        self.imported_count += 1
        self.processed_items += 1

    def record_skipped(self, index: int, item: str, reason: str) -> None:
        self.skipped_count += 1
        self.processed_items += 1
        self.errors.append(ItemError(index, item, reason, Severity.WARNING))

    def record_error(self, index: int, item: str, reason: str) -> None:
        self.error_count += 1
        self.processed_items += 1
        self.errors.append(ItemError(index, item, reason, Severity.ERROR))

    @property
    def is_consistent(self) -> bool:
        return self.processed_items == self.imported_count + self.skipped_count + self.error_count

    def snapshot(self) -> "ImportProgress":
        return copy.deepcopy(self)


ProgressCallback = Callable[[ImportProgress], Any]


@dataclass
class ImportResult:
    success: bool
    progress: ImportProgress
    conflicts: list[DuplicateConflict] = field(default_factory=list)
    imported_recipes: list[Recipe] = field(default_factory=list)
    error: str | None = None

    @property
    def imported_count(self) -> int:
        return self.progress.imported_count

    @property
    def skipped_count(self) -> int:
        return self.progress.skipped_count

    @property
    def error_count(self) -> int:
        return self.progress.error_count
