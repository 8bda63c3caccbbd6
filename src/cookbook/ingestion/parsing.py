"""
Time, quantity and servings parsing shared by adapters, the normalizer
and the importer.
"""

import math
import re

# Measurement words mapped to their short form. Only words in this table
# are treated as units when splitting an ingredient line.
UNIT_ALIASES = {
    "cup": "cup",
    "cups": "cup",
    "c": "cup",
    "tablespoon": "tbsp",
    "tablespoons": "tbsp",
    "tbsp": "tbsp",
    "tbs": "tbsp",
    "tbsps": "tbsp",
    "teaspoon": "tsp",
    "teaspoons": "tsp",
    "tsp": "tsp",
    "tsps": "tsp",
    "pound": "lb",
    "pounds": "lb",
    "lb": "lb",
    "lbs": "lb",
    "ounce": "oz",
    "ounces": "oz",
    "oz": "oz",
    "gram": "g",
    "grams": "g",
    "g": "g",
    "kilogram": "kg",
    "kilograms": "kg",
    "kg": "kg",
    "liter": "l",
    "liters": "l",
    "litre": "l",
    "litres": "l",
    "l": "l",
    "milliliter": "ml",
    "milliliters": "ml",
    "millilitre": "ml",
    "millilitres": "ml",
    "ml": "ml",
    "pint": "pint",
    "pints": "pint",
    "quart": "quart",
    "quarts": "quart",
    "gallon": "gallon",
    "gallons": "gallon",
    "pinch": "pinch",
    "pinches": "pinch",
    "dash": "dash",
    "dashes": "dash",
    "clove": "clove",
    "cloves": "clove",
    "can": "can",
    "cans": "can",
    "package": "package",
    "packages": "package",
    "stick": "stick",
    "sticks": "stick",
    "slice": "slice",
    "slices": "slice",
    "piece": "piece",
    "pieces": "piece",
    "bunch": "bunch",
    "bunches": "bunch",
    "head": "head",
    "heads": "head",
    "sprig": "sprig",
    "sprigs": "sprig",
}

UNICODE_FRACTIONS = {
    "½": 0.5,
    "⅓": 1 / 3,
    "⅔": 2 / 3,
    "¼": 0.25,
    "¾": 0.75,
    "⅕": 0.2,
    "⅖": 0.4,
    "⅗": 0.6,
    "⅘": 0.8,
    "⅙": 1 / 6,
    "⅚": 5 / 6,
    "⅛": 0.125,
    "⅜": 0.375,
    "⅝": 0.625,
    "⅞": 0.875,
}

_FRACTION_CHARS = "".join(UNICODE_FRACTIONS)

# Leading quantity of an ingredient line: mixed numbers, fractions, decimals,
# integers and unicode vulgar fractions (optionally after a whole number).
QUANTITY_PATTERN = (
    rf"(?:\d+\s+\d+/\d+|\d+/\d+|\d*\.\d+|\d+\s*[{_FRACTION_CHARS}]|[{_FRACTION_CHARS}]|\d+)"
)

_ISO_DURATION = re.compile(
    r"^P(?:(\d+)D)?(?:T(?:(\d+(?:\.\d+)?)H)?(?:(\d+(?:\.\d+)?)M)?(?:(\d+(?:\.\d+)?)S)?)?$",
    re.IGNORECASE,
)
_TIME_PHRASE = re.compile(
    r"(\d+(?:\.\d+)?)\s*(hours?|hrs?|h|minutes?|mins?|m)\b", re.IGNORECASE
)


def is_unit(word: str | None) -> bool:
    """True when the word is a known measurement unit."""
    if not word:
        return False
    return word.lower().rstrip(".") in UNIT_ALIASES


def canonical_unit(unit: str) -> str:
    """
    Map a unit to its short form.

    Examples:
        "Cups" -> "cup"
        "tablespoons" -> "tbsp"
        "bowl" -> "bowl"
    """
    cleaned = unit.lower().strip().rstrip(".")
    return UNIT_ALIASES.get(cleaned, cleaned)


def parse_quantity(text: str | int | float | None) -> float | None:
    """
    Parse an ingredient quantity to a decimal amount.

    Examples:
        "2" -> 2.0
        "1/2" -> 0.5
        "1 1/2" -> 1.5
        ".25" -> 0.25
        "1½" -> 1.5
        "a pinch" -> None
    """
    if text is None or isinstance(text, bool):
        return None

    if isinstance(text, (int, float)):
        return float(text) if math.isfinite(text) else None

    text = text.strip()
    if not text:
        return None

    # Mixed number "1 1/2"
    match = re.fullmatch(r"(\d+)\s+(\d+)/(\d+)", text)
    if match:
        denominator = int(match.group(3))
        if denominator == 0:
            return None
        return int(match.group(1)) + int(match.group(2)) / denominator

    match = re.fullmatch(r"(\d+)/(\d+)", text)
    if match:
        denominator = int(match.group(2))
        if denominator == 0:
            return None
        return int(match.group(1)) / denominator

    # Whole number followed by a vulgar fraction, or the fraction alone
    match = re.fullmatch(rf"(\d*)\s*([{_FRACTION_CHARS}])", text)
    if match:
        whole = int(match.group(1)) if match.group(1) else 0
        return whole + UNICODE_FRACTIONS[match.group(2)]

    try:
        value = float(text)
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def parse_duration(duration: str | int | None) -> int | None:
    """
    Parse an ISO 8601 duration to minutes.

    Seconds are rounded to the nearest minute.

    Examples:
        PT30M -> 30
        PT1H -> 60
        PT1H30M -> 90
        P1DT2H -> 1560
        "45" -> 45
    """
    if duration is None or duration == "":
        return None

    if isinstance(duration, bool):
        return None

    if isinstance(duration, (int, float)):
        return round(duration)

    text = str(duration).strip()
    match = _ISO_DURATION.match(text)
    if not match or text.upper() in ("P", "PT"):
        try:
            return int(text)
        except ValueError:
            return None

    days = int(match.group(1) or 0)
    hours = float(match.group(2) or 0)
    minutes = float(match.group(3) or 0)
    seconds = float(match.group(4) or 0)
    total = days * 24 * 60 + hours * 60 + minutes + seconds / 60
    return round(total) if total else None


def parse_duration_seconds(duration: str | None) -> int | None:
    """Parse an ISO 8601 duration such as PT4M13S to whole seconds."""
    if not duration:
        return None

    match = _ISO_DURATION.match(duration.strip())
    if not match:
        return None

    days = int(match.group(1) or 0)
    hours = float(match.group(2) or 0)
    minutes = float(match.group(3) or 0)
    seconds = float(match.group(4) or 0)
    total = round(days * 86400 + hours * 3600 + minutes * 60 + seconds)
    return total or None


def parse_time_phrase(text: str | None) -> int | None:
    """
    Parse free-text time to minutes, summing every hour/minute mention.

    Examples:
        "25 minutes" -> 25
        "1 hour 15 mins" -> 75
        "2 hrs" -> 120
        "overnight" -> None
    """
    if not text:
        return None

    total = 0.0
    found = False
    for match in _TIME_PHRASE.finditer(text):
        amount = float(match.group(1))
        unit = match.group(2).lower()
        found = True
        if unit.startswith("h"):
            total += amount * 60
        else:
            total += amount

    return round(total) if found else None


def parse_time(value: str | int | float | None) -> int | None:
    """
    Parse any supported time representation to minutes.

    Tries numbers, ISO 8601 durations, free-text phrases, then a leading
    integer.

    Examples:
        20 -> 20
        "PT1H" -> 60
        "about 40 minutes" -> 40
        "35" -> 35
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        return round(value) if math.isfinite(value) else None

    text = str(value).strip()
    if not text:
        return None

    if text[0] in "Pp":
        minutes = parse_duration(text)
        if minutes is not None:
            return minutes

    minutes = parse_time_phrase(text)
    if minutes is not None:
        return minutes

    match = re.match(r"^(\d+)", text)
    if match:
        return int(match.group(1))

    return None


def parse_servings(yield_value: str | int | float | list | None) -> int | None:
    """
    Parse a recipe yield/servings value to an integer.

    Examples:
        "4 servings" -> 4
        "Serves 6" -> 6
        ["24", "24 cookies"] -> 24
        "Makes 12 cookies" -> 12
    """
    if yield_value is None or isinstance(yield_value, bool):
        return None

    if isinstance(yield_value, list):
        for item in yield_value:
            servings = parse_servings(item)
            if servings is not None:
                return servings
        return None

    if isinstance(yield_value, (int, float)):
        return round(yield_value) if math.isfinite(yield_value) else None

    match = re.search(r"(\d+)", str(yield_value))
    if match:
        return int(match.group(1))

    return None


def duration_in_text(text: str) -> int | None:
    """
    Find the first "<n> minutes/hours" mention in an instruction.

    Examples:
        "Bake for 10 minutes" -> 10
        "Simmer 2 hrs" -> 120
        "Stir well" -> None
    """
    match = re.search(r"(\d+)\s*(minutes?|mins?|hours?|hrs?)\b", text, re.IGNORECASE)
    if not match:
        return None

    amount = int(match.group(1))
    if match.group(2).lower().startswith("h"):
        return amount * 60
    return amount
