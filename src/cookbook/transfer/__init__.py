"""Bulk import, export, backup and restore of a user's recipes."""

from .exporter import ExportFormat, ExportOptions, ExportResult, ExportService
from .formats import FormatError, ImportFormat, detect_format
from .importer import ImportOptions, ImportService
from .progress import (
    ConflictType,
    DuplicateConflict,
    ImportProgress,
    ImportResult,
    ItemError,
    Severity,
)

__all__ = [
    "ConflictType",
    "DuplicateConflict",
    "ExportFormat",
    "ExportOptions",
    "ExportResult",
    "ExportService",
    "FormatError",
    "ImportFormat",
    "ImportOptions",
    "ImportProgress",
    "ImportResult",
    "ImportService",
    "ItemError",
    "Severity",
    "detect_format",
]
