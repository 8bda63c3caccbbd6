"""
Recipe export, backup and restore.

Exports are JSON documents (camelCase keys, the same shape the importer
reads back), a plain-text rendering, or a PDF. A backup is a JSON export
of everything the user owns; restoring one goes through the importer so
duplicates are detected the same way as for any other import.
"""

import json
import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any

from fpdf import FPDF
from fpdf.enums import XPos, YPos

from cookbook.config import settings
from cookbook.models import Recipe
from cookbook.repository import RecipeRepository

from .formats import FormatError, load_json
from .importer import ImportOptions, ImportService
from .progress import ImportProgress, ImportResult

logger = logging.getLogger(__name__)

RULE = "=" * 80
MIME_TYPES = {
    "json": "application/json",
    "text": "text/plain",
    "pdf": "application/pdf",
}
EXTENSIONS = {"json": "json", "text": "txt", "pdf": "pdf"}


class ExportFormat(str, Enum):
    JSON = "json"
    TEXT = "text"
    PDF = "pdf"


@dataclass
class ExportOptions:
    format: ExportFormat = ExportFormat.JSON
    include_personal_notes: bool = True
    include_metadata: bool = True


@dataclass
class ExportResult:
    success: bool
    data: str | bytes | None = None
    filename: str | None = None
    mime_type: str | None = None
    recipe_count: int = 0
    error: str | None = None


def slugify(title: str) -> str:
    """
    Filename-safe form of a title.

    Examples:
        "Mom's Apple Pie!" -> "mom-s-apple-pie"
    """
    slug = re.sub(r"[^a-z0-9]+", "-", title.lower()).strip("-")
    return slug or "recipe"


def major_version(version: str) -> str:
    return str(version).strip().lstrip("v").split(".")[0]


def recipe_to_dict(recipe: Recipe, options: ExportOptions) -> dict[str, Any]:
    """Serialized recipe with the redaction options applied."""
    data = recipe.model_dump(mode="json", by_alias=True)
    if not options.include_personal_notes:
        data.pop("personalNotes", None)
    if not options.include_metadata:
        data.pop("createdAt", None)
        data.pop("updatedAt", None)
    return data


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def _quantity(value: float | None) -> str:
    if value is None:
        return ""
    return str(int(value)) if float(value).is_integer() else f"{value:g}"


def ingredient_line(ingredient) -> str:
    parts = [_quantity(ingredient.quantity), ingredient.unit or "", ingredient.name]
    line = " ".join(part for part in parts if part)
    if ingredient.notes:
        line += f" ({ingredient.notes})"
    return line


def _details(recipe: Recipe) -> list[str]:
    details = []
    if recipe.prep_time:
        details.append(f"Prep time: {recipe.prep_time} minutes")
    if recipe.cooking_time:
        details.append(f"Cooking time: {recipe.cooking_time} minutes")
    if recipe.servings:
        details.append(f"Servings: {recipe.servings}")
    if recipe.difficulty:
        details.append(f"Difficulty: {recipe.difficulty}")
    if recipe.categories:
        details.append(f"Categories: {', '.join(recipe.categories)}")
    return details


def render_text(recipes: list[Recipe], options: ExportOptions, exported: str) -> str:
    lines = ["RECIPE COLLECTION", f"Exported: {exported}", f"Recipes: {len(recipes)}", RULE, ""]

    for recipe in recipes:
        lines.append(recipe.title.upper())
        lines.append("-" * len(recipe.title))
        if recipe.description:
            lines.extend([recipe.description, ""])
        lines.extend(_details(recipe))
        lines.extend(["", "INGREDIENTS:"])
        lines.extend(f"  - {ingredient_line(i)}" for i in recipe.ingredients)
        lines.extend(["", "INSTRUCTIONS:"])
        lines.extend(f"  {step.step_number}. {step.description}" for step in recipe.instructions)
        if options.include_personal_notes and recipe.personal_notes:
            lines.extend(["", "NOTES:", recipe.personal_notes])
        if recipe.source_url:
            lines.extend(["", f"Source: {recipe.source_url}"])
        lines.extend(["", RULE, ""])

    return "\n".join(lines)


def _pdf_text(text: str) -> str:
    """Core PDF fonts only cover latin-1."""
    return text.encode("latin-1", "replace").decode("latin-1")


def render_pdf(recipes: list[Recipe], options: ExportOptions, exported: str) -> bytes:
    pdf = FPDF()
    pdf.set_auto_page_break(auto=True, margin=15)
    pdf.set_title("Recipe Collection")

    def paragraph(text: str, size: int = 11, style: str = "", height: float = 6) -> None:
        pdf.set_font("Helvetica", style=style, size=size)
        pdf.multi_cell(0, height, _pdf_text(text), new_x=XPos.LMARGIN, new_y=YPos.NEXT)

    for recipe in recipes:
        pdf.add_page()
        paragraph(recipe.title, size=18, style="B", height=10)
        if recipe.description:
            paragraph(recipe.description, style="I")
        for detail in _details(recipe):
            paragraph(detail, size=10)

        pdf.ln(4)
        paragraph("Ingredients", size=14, style="B", height=8)
        for ingredient in recipe.ingredients:
            paragraph(f"- {ingredient_line(ingredient)}")

        pdf.ln(4)
        paragraph("Instructions", size=14, style="B", height=8)
        for step in recipe.instructions:
            paragraph(f"{step.step_number}. {step.description}")

        if options.include_personal_notes and recipe.personal_notes:
            pdf.ln(4)
            paragraph("Notes", size=14, style="B", height=8)
            paragraph(recipe.personal_notes)

        if recipe.source_url:
            pdf.ln(4)
            paragraph(f"Source: {recipe.source_url}", size=9)

    pdf.set_font("Helvetica", size=8)
    pdf.cell(0, 6, _pdf_text(f"Exported {exported}"))
    return bytes(pdf.output())


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class ExportService:
    def __init__(
        self,
        repository: RecipeRepository,
        importer: ImportService | None = None,
        version: str | None = None,
        today: Callable[[], date] | None = None,
    ):
        self.repository = repository
        self.importer = importer or ImportService(repository)
        self.version = version or settings.backup_version
        self.today = today or (lambda: datetime.now(timezone.utc).date())

    def _document(self, recipes: list[Recipe], options: ExportOptions) -> dict[str, Any]:
        return {
            "version": self.version,
            "exportDate": datetime.now(timezone.utc).isoformat(),
            "recipeCount": len(recipes),
            "recipes": [recipe_to_dict(r, options) for r in recipes],
        }

    def export_recipes(
        self,
        user_id: str,
        options: ExportOptions | None = None,
        recipe_ids: list[str] | None = None,
    ) -> ExportResult:
        options = options or ExportOptions()
        fmt = ExportFormat(options.format)
        recipes = self.repository.find_by_user_id(user_id)
        if recipe_ids is not None:
            wanted = set(recipe_ids)
            recipes = [r for r in recipes if r.id in wanted]

        if not recipes:
            return ExportResult(success=False, error="No recipes found to export")

        stamp = self.today().isoformat()
        if fmt == ExportFormat.JSON:
            data: str | bytes = json.dumps(self._document(recipes, options), indent=2)
        elif fmt == ExportFormat.TEXT:
            data = render_text(recipes, options, stamp)
        else:
            data = render_pdf(recipes, options, stamp)

        logger.info(f"Exported {len(recipes)} recipes for user {user_id} as {fmt.value}")
        return ExportResult(
            success=True,
            data=data,
            filename=f"recipes-export-{stamp}.{EXTENSIONS[fmt.value]}",
            mime_type=MIME_TYPES[fmt.value],
            recipe_count=len(recipes),
        )

    def export_single_recipe(
        self, recipe_id: str, user_id: str, options: ExportOptions | None = None
    ) -> ExportResult:
        options = options or ExportOptions()
        recipe = self.repository.find_by_id(recipe_id)
        if recipe is None:
            return ExportResult(success=False, error="Recipe not found")
        if recipe.user_id != user_id:
            return ExportResult(success=False, error="Unauthorized access to recipe")

        return ExportResult(
            success=True,
            data=json.dumps(recipe_to_dict(recipe, options), indent=2),
            filename=f"recipe-{slugify(recipe.title)}-{self.today().isoformat()}.json",
            mime_type=MIME_TYPES["json"],
            recipe_count=1,
        )

    def create_backup(self, user_id: str) -> ExportResult:
        """Everything the user owns, notes and timestamps included."""
        recipes = self.repository.find_by_user_id(user_id)
        document = self._document(recipes, ExportOptions())
        logger.info(f"Created backup of {len(recipes)} recipes for user {user_id}")
        return ExportResult(
            success=True,
            data=json.dumps(document, indent=2),
            filename=f"cookbook-backup-{self.today().isoformat()}.json",
            mime_type=MIME_TYPES["json"],
            recipe_count=len(recipes),
        )

    def restore_from_backup(
        self,
        user_id: str,
        payload: str | bytes | dict,
        options: ImportOptions | None = None,
    ) -> ImportResult:
        """
        Import a backup document.

        The backup's major version must match ours. Recipes already in the
        collection are skipped as duplicates.
        """
        try:
            document = load_json(payload)
        except FormatError as e:
            return ImportResult(success=False, progress=ImportProgress(), error=str(e))

        if (
            not isinstance(document, dict)
            or "version" not in document
            or not isinstance(document.get("recipes"), list)
        ):
            return ImportResult(success=False, progress=ImportProgress(), error="Invalid backup format")

        version = str(document["version"])
        if major_version(version) != major_version(self.version):
            logger.warning(f"Refusing backup version {version} (current {self.version})")
            return ImportResult(
                success=False,
                progress=ImportProgress(),
                error=f"Incompatible backup version: {version}. Current version: {self.version}",
            )

        items = [item for item in document["recipes"] if isinstance(item, dict)]
        logger.info(f"Restoring {len(items)} recipes from backup version {version}")
        return self.importer.import_items(user_id, items, options)
