"""
Validation and sanitization of canonical recipes.

Callers sanitize first, then validate. Errors block persistence;
warnings are surfaced but never block.
"""

import math
import re
from urllib.parse import urlparse

from cookbook.models import DIFFICULTIES, SOURCE_TYPES, RecipeData, SourceType

from .models import ValidationReport

MAX_TITLE_LENGTH = 200
MAX_DESCRIPTION_LENGTH = 1000
MAX_INGREDIENTS = 50
MAX_INSTRUCTIONS = 30
MAX_FIELD_LENGTH = 1000

SUSPICIOUS_PATTERNS = [
    re.compile(r"javascript:", re.IGNORECASE),
    re.compile(r"<script", re.IGNORECASE),
    re.compile(r"on(?:click|error|load)\s*=", re.IGNORECASE),
]

SYNTHETIC_SCHEMES = ("file", "document")
_SYNTHETIC_SOURCES = {SourceType.DOCUMENT.value, SourceType.MANUAL.value}

_DISALLOWED_CHARS = re.compile(r"[^\w\s\-.,!?()\[\]{}:;'\"/\\]")


def is_valid_source_url(url: str | None, source_type: str | None = None) -> bool:
    """
    http(s) URLs are always valid. file:// and document:// are accepted
    for document and manual recipes, which have no web origin.
    """
    if not url:
        return False

    try:
        parsed = urlparse(url)
    except ValueError:
        return False

    if parsed.scheme in ("http", "https"):
        return bool(parsed.netloc)

    if parsed.scheme in SYNTHETIC_SCHEMES and source_type in _SYNTHETIC_SOURCES:
        return bool(parsed.netloc or parsed.path)

    return False


def _bad_number(value: float | None) -> bool:
    return value is not None and (not math.isfinite(value) or value < 0)


def validate(recipe: RecipeData) -> ValidationReport:
    """Check a recipe for blocking errors and quality warnings."""
    errors: list[str] = []
    warnings: list[str] = []

    if not recipe.title or not recipe.title.strip():
        errors.append("Recipe title is required")
    elif len(recipe.title) > MAX_TITLE_LENGTH:
        warnings.append(f"Recipe title is very long (over {MAX_TITLE_LENGTH} characters)")

    if not recipe.ingredients:
        errors.append("Recipe must have at least one ingredient")
    elif len(recipe.ingredients) > MAX_INGREDIENTS:
        warnings.append(f"Recipe has many ingredients ({len(recipe.ingredients)})")

    if not recipe.instructions:
        errors.append("Recipe must have at least one instruction")
    elif len(recipe.instructions) > MAX_INSTRUCTIONS:
        warnings.append(f"Recipe has many instructions ({len(recipe.instructions)})")

    manual_without_source = recipe.source_type == SourceType.MANUAL.value and not recipe.source_url
    if not manual_without_source and not is_valid_source_url(recipe.source_url, recipe.source_type):
        errors.append("Valid source URL is required")

    if recipe.source_type not in SOURCE_TYPES:
        errors.append("Source type must be web, video, document, or manual")

    for index, ingredient in enumerate(recipe.ingredients, start=1):
        if not ingredient.name or not ingredient.name.strip():
            errors.append(f"Ingredient {index} must have a name")
        if _bad_number(ingredient.quantity):
            errors.append(f"Ingredient {index} has an invalid quantity")

    for index, instruction in enumerate(recipe.instructions, start=1):
        if not instruction.description or not instruction.description.strip():
            errors.append(f"Instruction {index} must have a description")
        if instruction.step_number != index:
            warnings.append(
                f"Instruction {index} has incorrect step number {instruction.step_number}"
            )
        if _bad_number(instruction.duration):
            warnings.append(f"Instruction {index} has an invalid duration")

    if _bad_number(recipe.cooking_time):
        warnings.append("Cooking time should be a positive number")
    if _bad_number(recipe.prep_time):
        warnings.append("Prep time should be a positive number")
    if recipe.servings is not None and recipe.servings <= 0:
        warnings.append("Servings should be a positive number")

    if recipe.difficulty and recipe.difficulty not in DIFFICULTIES:
        warnings.append("Difficulty should be easy, medium, or hard")

    if recipe.description and len(recipe.description) > MAX_DESCRIPTION_LENGTH:
        warnings.append(
            f"Recipe description is very long (over {MAX_DESCRIPTION_LENGTH} characters)"
        )

    if recipe.title and any(p.search(recipe.title) for p in SUSPICIOUS_PATTERNS):
        warnings.append("Recipe title contains potentially unsafe content")

    return ValidationReport(is_valid=not errors, errors=errors, warnings=warnings)


def sanitize_text(text: str | None) -> str | None:
    """Collapse whitespace, strip disallowed characters, cap the length."""
    if text is None:
        return None
    cleaned = _DISALLOWED_CHARS.sub("", text)
    cleaned = re.sub(r"\s+", " ", cleaned).strip()
    return cleaned[:MAX_FIELD_LENGTH]


def _sanitize_labels(values: list[str]) -> list[str]:
    seen = set()
    result = []
    for value in values:
        label = (sanitize_text(value) or "").lower()
        if label and label not in seen:
            seen.add(label)
            result.append(label)
    return result


def sanitize(recipe: RecipeData) -> RecipeData:
    """
    Return a cleaned copy of the recipe.

    Free text is trimmed and filtered, steps are renumbered to match their
    position and categories/tags are lower-cased and de-duplicated.
    """
    ingredients = [
        ingredient.model_copy(
            update={
                "name": sanitize_text(ingredient.name) or "",
                "unit": sanitize_text(ingredient.unit) or None,
                "notes": sanitize_text(ingredient.notes) or None,
            }
        )
        for ingredient in recipe.ingredients
    ]
    instructions = [
        instruction.model_copy(
            update={
                "step_number": index,
                "description": sanitize_text(instruction.description) or "",
            }
        )
        for index, instruction in enumerate(recipe.instructions, start=1)
    ]
    return recipe.model_copy(
        update={
            "title": sanitize_text(recipe.title) or "",
            "description": sanitize_text(recipe.description) or None,
            "ingredients": ingredients,
            "instructions": instructions,
            "categories": _sanitize_labels(recipe.categories),
            "tags": _sanitize_labels(recipe.tags),
            "author": sanitize_text(recipe.author) or None,
        }
    )
