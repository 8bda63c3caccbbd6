"""
Import formats.

Everything coming in (our own exports, CSV sheets and other recipe apps'
exports) is reduced to plain dicts and then normalized into RecipeData.
"""

import csv
import io
import json
import logging
import re
from enum import Enum
from typing import Any

from cookbook.ingestion.adapters import is_http_url
from cookbook.ingestion.normalizer import (
    clean_text,
    normalize_difficulty,
    parse_ingredient,
    positive_int,
)
from cookbook.ingestion.parsing import duration_in_text, parse_quantity, parse_servings, parse_time
from cookbook.ingestion.structured_data import (
    extract_image_url,
    extract_instructions,
    find_recipe_node,
)
from cookbook.models import SOURCE_TYPES, Ingredient, Instruction, RecipeData, SourceType

logger = logging.getLogger(__name__)


class ImportFormat(str, Enum):
    JSON = "json"
    CSV = "csv"
    BACKUP = "backup"
    RECIPE_KEEPER = "recipe-keeper"
    PAPRIKA = "paprika"
    YUMMLY = "yummly"
    ALLRECIPES = "allrecipes"
    GENERIC_JSON = "generic-json"


EXTERNAL_FORMATS = [
    ImportFormat.RECIPE_KEEPER,
    ImportFormat.PAPRIKA,
    ImportFormat.YUMMLY,
    ImportFormat.ALLRECIPES,
    ImportFormat.GENERIC_JSON,
]

_MISSING = object()

WRAPPER_KEYS = ["recipes", "data", "items", "results"]

DIFFICULTY_LEVELS = {"1": "easy", "2": "medium", "3": "hard"}

# CSV header (lower-cased) -> canonical import key
CSV_HEADERS = {
    "title": "title",
    "name": "title",
    "recipe name": "title",
    "description": "description",
    "summary": "description",
    "ingredients": "ingredients",
    "instructions": "instructions",
    "directions": "instructions",
    "method": "instructions",
    "cook time": "cookTime",
    "cooking time": "cookTime",
    "prep time": "prepTime",
    "preparation time": "prepTime",
    "servings": "servings",
    "yield": "servings",
    "difficulty": "difficulty",
    "category": "categories",
    "categories": "categories",
    "tags": "tags",
    "keywords": "tags",
    "url": "url",
    "source": "url",
    "notes": "notes",
}


class FormatError(ValueError):
    """The payload cannot be read in the requested format."""


def load_json(payload: str | bytes | dict | list) -> Any:
    if isinstance(payload, (dict, list)):
        return payload
    if isinstance(payload, bytes):
        payload = payload.decode("utf-8-sig")
    try:
        return json.loads(payload)
    except json.JSONDecodeError as e:
        raise FormatError(f"Invalid JSON: {e.msg} (line {e.lineno})") from e


def extract_items(data: Any) -> list[dict]:
    """
    Recipe dicts from a payload.

    Accepts a list, a single recipe object, or a wrapper object holding
    the list under recipes/data/items/results.
    """
    if isinstance(data, list):
        return [item for item in data if isinstance(item, dict)]

    if not isinstance(data, dict):
        return []

    for key in WRAPPER_KEYS:
        value = data.get(key)
        if isinstance(value, list):
            return [item for item in value if isinstance(item, dict)]

    if data.get("title") or data.get("name"):
        return [data]

    return []


def _first(item: dict, *keys: str) -> Any:
    for key in keys:
        value = item.get(key)
        if value not in (None, "", []):
            return value
    return None


def _split_lines(value: str) -> list[str]:
    return [line.strip() for line in re.split(r"\r?\n", value) if line.strip()]


def _text_list(value: Any, separator: str = ",") -> list[str]:
    if isinstance(value, str):
        return [part.strip() for part in value.split(separator) if part.strip()]
    if isinstance(value, list):
        return [clean_text(str(v)) for v in value if v not in (None, "")]
    return []


def normalize_ingredient(value: Any) -> Ingredient | None:
    if isinstance(value, str):
        return parse_ingredient(value) if value.strip() else None

    if isinstance(value, dict):
        name = _first(value, "name", "ingredient", "text", "item")
        if not name:
            return None
        quantity = _first(value, "quantity", "amount", "qty")
        unit = _first(value, "unit", "measurement")
        notes = _first(value, "notes", "note", "comment")

        if not any(key in value for key in ("quantity", "amount", "qty", "unit", "measurement")):
            parsed = parse_ingredient(str(name))
            if notes:
                parsed.notes = clean_text(str(notes))
            return parsed

        return Ingredient(
            name=clean_text(str(name)),
            quantity=parse_quantity(quantity) if isinstance(quantity, (str, int, float)) else None,
            unit=clean_text(str(unit)).lower() if unit else None,
            notes=clean_text(str(notes)) if notes else None,
        )

    return None


def normalize_ingredients(value: Any) -> list[Ingredient]:
    if isinstance(value, str):
        value = _split_lines(value)
    if not isinstance(value, list):
        return []
    return [i for i in (normalize_ingredient(v) for v in value) if i is not None]


def normalize_instructions(value: Any) -> list[Instruction]:
    if isinstance(value, str):
        lines = [re.sub(r"^\s*\d+[.)]\s*", "", line) for line in _split_lines(value)]
        entries: list[Any] = [line for line in lines if line]
    elif isinstance(value, list):
        entries = value
    else:
        return []

    steps = []
    for entry in entries:
        duration: Any = _MISSING
        if isinstance(entry, dict):
            text = _first(entry, "description", "text", "instruction", "step", "name")
            if isinstance(text, (int, float)):
                text = None
            duration = entry.get("duration", _MISSING)
            if isinstance(entry.get("itemListElement"), list):
                for nested in extract_instructions(entry["itemListElement"]):
                    steps.append(_instruction(len(steps) + 1, nested))
                continue
        else:
            text = str(entry) if entry is not None else None

        if text and str(text).strip():
            steps.append(_instruction(len(steps) + 1, str(text), duration))
    return steps


def _instruction(step: int, text: str, duration: Any = _MISSING) -> Instruction:
    """An explicit duration (even null) wins over one found in the text."""
    text = clean_text(text)
    minutes = duration_in_text(text) if duration is _MISSING else parse_time(duration)
    return Instruction(step_number=step, description=text, duration=minutes)


def normalize_difficulty_value(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip().lower()
    return DIFFICULTY_LEVELS.get(text) or normalize_difficulty(text)


def normalize_external_recipe(item: dict) -> tuple[RecipeData, str | None]:
    """
    Map an imported dict onto RecipeData.

    Understands our own camelCase export keys as well as the field names
    other apps and schema.org use. Returns the recipe and its personal
    notes. Required fields may come back empty; the importer decides what
    to do with incomplete items.
    """
    url = _first(item, "sourceUrl", "source_url", "url", "source")
    url = url if isinstance(url, str) and is_http_url(url) else None

    source_type = item.get("sourceType") or item.get("source_type")
    if source_type not in SOURCE_TYPES:
        source_type = SourceType.WEB.value if url else SourceType.MANUAL.value

    synthetic = _first(item, "sourceUrl", "source_url")
    if not url and source_type == SourceType.DOCUMENT.value and isinstance(synthetic, str):
        url = synthetic

    categories = _text_list(_first(item, "categories", "category", "recipeCategory", "cuisine"))
    tags = _text_list(_first(item, "tags", "keywords"))

    data = RecipeData(
        title=clean_text(str(_first(item, "title", "name") or "")),
        description=clean_text(str(_first(item, "description", "summary") or "")) or None,
        ingredients=normalize_ingredients(
            _first(item, "ingredients", "recipeIngredient", "ingredient_list", "ingredient-list")
        ),
        instructions=normalize_instructions(
            _first(item, "instructions", "recipeInstructions", "directions", "method", "steps")
        ),
        cooking_time=positive_int(
            parse_time(_first(item, "cookingTime", "cookTime", "cook_time", "cooking_time", "cook-time"))
        ),
        prep_time=positive_int(
            parse_time(_first(item, "prepTime", "prep_time", "preparationTime", "prep-time"))
        ),
        servings=positive_int(parse_servings(_first(item, "servings", "yield", "recipeYield", "serves"))),
        difficulty=normalize_difficulty_value(item.get("difficulty")),
        categories=categories,
        tags=tags,
        source_url=url,
        source_type=source_type,
        image_url=extract_image_url(_first(item, "imageUrl", "image_url", "image")),
        author=_author(item.get("author")),
        published_date=_optional_str(_first(item, "publishedDate", "datePublished")),
    )
    notes = _first(item, "personalNotes", "personal_notes", "notes")
    return data, (str(notes) if notes else None)


def _optional_str(value: Any) -> str | None:
    return str(value) if value not in (None, "") else None


def _author(value: Any) -> str | None:
    if isinstance(value, list):
        value = value[0] if value else None
    if isinstance(value, dict):
        value = value.get("name")
    return clean_text(value) if isinstance(value, str) and value.strip() else None


# ---------------------------------------------------------------------------
# CSV
# ---------------------------------------------------------------------------


def parse_csv(text: str | bytes) -> list[dict]:
    """
    Rows of a recipe spreadsheet as import dicts.

    Ingredients and instructions cells hold one entry per line; category
    and tag cells are comma separated. Unknown columns are ignored.
    """
    if isinstance(text, bytes):
        text = text.decode("utf-8-sig")

    reader = csv.DictReader(io.StringIO(text))
    if not reader.fieldnames:
        raise FormatError("CSV file has no header row")

    items = []
    for row in reader:
        item: dict[str, Any] = {}
        for header, value in row.items():
            if header is None or value is None:
                continue
            key = CSV_HEADERS.get(header.strip().lower())
            if key and value.strip() and key not in item:
                item[key] = value.strip()
        if item:
            items.append(item)
    return items


# ---------------------------------------------------------------------------
# Other apps
# ---------------------------------------------------------------------------


def from_recipe_keeper(data: Any) -> list[dict]:
    """Recipe Keeper: recipes[] with ingredient/quantity/unit rows and a directions list."""
    items = []
    for recipe in extract_items(data):
        items.append(
            {
                "title": recipe.get("name") or recipe.get("title"),
                "description": recipe.get("description"),
                "ingredients": [
                    {
                        "name": row.get("ingredient") or row.get("name"),
                        "quantity": row.get("quantity"),
                        "unit": row.get("unit"),
                        "notes": row.get("notes"),
                    }
                    if isinstance(row, dict)
                    else row
                    for row in recipe.get("ingredients") or []
                ],
                "instructions": recipe.get("directions") or recipe.get("instructions"),
                "cookTime": recipe.get("cookTime") or recipe.get("cook_time"),
                "prepTime": recipe.get("prepTime") or recipe.get("prep_time"),
                "servings": recipe.get("servings") or recipe.get("yield"),
                "categories": recipe.get("categories") or recipe.get("category"),
                "tags": recipe.get("tags"),
                "url": recipe.get("source") or recipe.get("url"),
                "notes": recipe.get("notes"),
            }
        )
    return items


def from_paprika(data: Any) -> list[dict]:
    """Paprika: newline-separated ingredients and directions, comma-separated categories."""
    items = []
    for recipe in extract_items(data):
        items.append(
            {
                "title": recipe.get("name"),
                "description": recipe.get("description"),
                "ingredients": recipe.get("ingredients"),
                "instructions": recipe.get("directions"),
                "cookTime": recipe.get("cook_time"),
                "prepTime": recipe.get("prep_time"),
                "servings": recipe.get("servings"),
                "difficulty": recipe.get("difficulty"),
                "categories": recipe.get("categories"),
                "tags": recipe.get("tags"),
                "url": recipe.get("source_url"),
                "image": recipe.get("image_url"),
                "notes": recipe.get("notes"),
            }
        )
    return items


def from_yummly(data: Any) -> list[dict]:
    """Yummly: matches/recipes with ingredientLines and totalTimeInSeconds."""
    recipes = (data.get("matches") or data.get("recipes")) if isinstance(data, dict) else data
    items = []
    for recipe in extract_items(recipes or []):
        seconds = recipe.get("totalTimeInSeconds")
        attributes = recipe.get("attributes") or {}
        flavors = recipe.get("flavors") or []
        attribution = recipe.get("attribution") or {}
        items.append(
            {
                "title": recipe.get("recipeName") or recipe.get("name"),
                "ingredients": recipe.get("ingredientLines") or recipe.get("ingredients"),
                "instructions": recipe.get("instructions") or recipe.get("directions"),
                "cookTime": round(seconds / 60) if isinstance(seconds, (int, float)) else None,
                "servings": recipe.get("numberOfServings"),
                "categories": attributes.get("course") or recipe.get("course"),
                "tags": [f.get("displayName") for f in flavors if isinstance(f, dict)]
                if isinstance(flavors, list)
                else None,
                "url": attribution.get("url") if isinstance(attribution, dict) else None,
            }
        )
    return items


def from_allrecipes(data: Any) -> list[dict]:
    """AllRecipes exports are schema.org Recipe objects, possibly inside @graph."""
    nodes = data if isinstance(data, list) else [data]
    items = []
    for node in nodes:
        recipe = find_recipe_node(node)
        if recipe:
            items.append(recipe)
    return items or extract_items(data)


CONVERTERS = {
    ImportFormat.RECIPE_KEEPER: from_recipe_keeper,
    ImportFormat.PAPRIKA: from_paprika,
    ImportFormat.YUMMLY: from_yummly,
    ImportFormat.ALLRECIPES: from_allrecipes,
    ImportFormat.GENERIC_JSON: extract_items,
}


def convert_external(data: Any, fmt: ImportFormat) -> list[dict]:
    converter = CONVERTERS.get(fmt)
    if converter is None:
        raise FormatError(f"Unsupported import format: {fmt}")
    return converter(data)


# ---------------------------------------------------------------------------
# Detection
# ---------------------------------------------------------------------------


def detect_json_format(data: Any) -> ImportFormat:
    """Guess which app produced a parsed JSON payload."""
    if isinstance(data, dict):
        if "version" in data and isinstance(data.get("recipes"), list) and "exportDate" in data:
            return ImportFormat.BACKUP
        if "matches" in data:
            return ImportFormat.YUMMLY

    if find_recipe_node(data) is not None:
        return ImportFormat.ALLRECIPES

    items = extract_items(data)
    sample = items[0] if items else {}

    if "recipeName" in sample or "ingredientLines" in sample:
        return ImportFormat.YUMMLY
    if isinstance(sample.get("directions"), str) and "name" in sample and (
        "source_url" in sample or "cook_time" in sample or isinstance(sample.get("ingredients"), str)
    ):
        return ImportFormat.PAPRIKA
    ingredients = sample.get("ingredients")
    if isinstance(ingredients, list) and any(
        isinstance(row, dict) and "ingredient" in row for row in ingredients
    ):
        return ImportFormat.RECIPE_KEEPER
    if isinstance(sample.get("directions"), list) and "name" in sample:
        return ImportFormat.RECIPE_KEEPER

    return ImportFormat.JSON


def detect_format(payload: str | bytes, filename: str | None = None) -> ImportFormat:
    if filename and filename.lower().endswith(".csv"):
        return ImportFormat.CSV

    text = payload.decode("utf-8-sig") if isinstance(payload, bytes) else payload
    stripped = text.lstrip()
    if not stripped.startswith(("{", "[")):
        return ImportFormat.CSV

    return detect_json_format(load_json(stripped))
