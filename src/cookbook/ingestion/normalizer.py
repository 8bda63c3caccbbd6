"""
Content normalization.

Turns the raw strings an adapter scraped into the canonical recipe shape.
Everything here is a pure function of its input.
"""

import re

from cookbook.models import ExtractedRecipe, Ingredient, Instruction, SourceType

from .models import NormalizedContent
from .parsing import QUANTITY_PATTERN, duration_in_text, is_unit, parse_quantity

_INGREDIENT_LINE = re.compile(rf"^({QUANTITY_PATTERN})\s*([A-Za-z]+\.?)?\s+(.+)$")

DIFFICULTY_KEYWORDS = {
    "easy": ["easy", "simple", "beginner"],
    "hard": ["hard", "difficult", "advanced", "expert"],
    "medium": ["medium", "intermediate", "moderate"],
}

CATEGORY_SYNONYMS = {
    "main dish": "main-course",
    "main course": "main-course",
    "main": "main-course",
    "entree": "main-course",
    "entrée": "main-course",
    "appetizer": "appetizers",
    "starter": "appetizers",
    "dessert": "desserts",
    "sweet": "desserts",
    "side dish": "sides",
    "side": "sides",
    "soup": "soups",
    "salad": "salads",
    "breakfast": "breakfast",
    "lunch": "lunch",
    "dinner": "dinner",
    "snack": "snacks",
    "beverage": "beverages",
    "drink": "beverages",
}


def clean_text(text: str | None) -> str:
    """Trim and collapse internal whitespace."""
    if not text:
        return ""
    return re.sub(r"\s+", " ", text).strip()


def parse_ingredient(line: str) -> Ingredient:
    """
    Split an ingredient line into quantity, unit, name and notes.

    The unit is only taken when the word after the quantity is a known
    measurement; otherwise it stays part of the name.

    Examples:
        "2 cups flour" -> 2.0 cup(s) flour
        "1 1/2 tsp salt" -> 1.5 tsp salt
        "3 eggs" -> 3.0, no unit, eggs
        "1 onion, finely diced" -> 1.0 onion, notes "finely diced"
        "salt to taste" -> name only
    """
    text = clean_text(line)
    quantity = None
    unit = None
    name = text

    match = _INGREDIENT_LINE.match(text)
    if match:
        quantity = parse_quantity(match.group(1))
        word = match.group(2)
        rest = match.group(3)
        if word and is_unit(word):
            unit = word.lower().rstrip(".")
            name = rest
        elif word:
            name = f"{word} {rest}"
        else:
            name = rest

    name, notes = _split_notes(name)
    return Ingredient(name=name, quantity=quantity, unit=unit, notes=notes)


def _split_notes(name: str) -> tuple[str, str | None]:
    """Pull a trailing ", note" or "(note)" off an ingredient name."""
    match = re.match(r"^(.+?)\s*\(([^)]+)\)\s*$", name)
    if match:
        return match.group(1).strip(), match.group(2).strip()

    if "," in name:
        head, _, tail = name.partition(",")
        if head.strip() and tail.strip():
            return head.strip(), tail.strip()

    return name, None


def normalize_ingredients(lines: list[str]) -> list[Ingredient]:
    return [parse_ingredient(line) for line in lines if line and line.strip()]


def normalize_instructions(lines: list[str]) -> list[Instruction]:
    """Number non-empty lines by position and pick up embedded durations."""
    steps = []
    for line in lines:
        text = clean_text(line)
        if not text:
            continue
        steps.append(
            Instruction(
                step_number=len(steps) + 1,
                description=text,
                duration=duration_in_text(text),
            )
        )
    return steps


def positive_int(value: float | None) -> int | None:
    """Round to an integer, dropping missing and non-positive values."""
    if value is None:
        return None
    try:
        rounded = round(value)
    except (TypeError, ValueError, OverflowError):
        return None
    return rounded if rounded > 0 else None


def normalize_difficulty(value: str | None) -> str | None:
    """
    Map free-text difficulty onto easy/medium/hard.

    Examples:
        "Simple" -> "easy"
        "for experts" -> "hard"
        "Intermediate" -> "medium"
        "unknown" -> None
    """
    if not value:
        return None

    lowered = value.lower()
    for level, keywords in DIFFICULTY_KEYWORDS.items():
        if any(keyword in lowered for keyword in keywords):
            return level
    return None


def dedupe(values: list[str]) -> list[str]:
    """Drop blanks and duplicates, keeping first-occurrence order."""
    seen = set()
    result = []
    for value in values:
        if value and value not in seen:
            seen.add(value)
            result.append(value)
    return result


def normalize_categories(categories: list[str]) -> list[str]:
    mapped = []
    for category in categories:
        key = clean_text(category).lower()
        mapped.append(CATEGORY_SYNONYMS.get(key, key))
    return dedupe(mapped)


def normalize_tags(tags: list[str]) -> list[str]:
    return dedupe([clean_text(tag).lower() for tag in tags])


def normalize(
    content: NormalizedContent,
    source_url: str,
    source_type: str = SourceType.WEB.value,
) -> ExtractedRecipe:
    """Convert adapter output into an ExtractedRecipe."""
    metadata = content.metadata
    return ExtractedRecipe(
        title=clean_text(content.title),
        description=clean_text(content.description) or None,
        ingredients=normalize_ingredients(content.ingredients),
        instructions=normalize_instructions(content.instructions),
        cooking_time=positive_int(metadata.cooking_time),
        prep_time=positive_int(metadata.prep_time),
        servings=positive_int(metadata.servings),
        difficulty=normalize_difficulty(metadata.difficulty),
        categories=normalize_categories(metadata.categories),
        tags=normalize_tags(metadata.tags),
        source_url=source_url,
        source_type=source_type,
        image_url=metadata.image_url,
        author=clean_text(metadata.author) or None,
        published_date=metadata.published_date,
    )
