"""
Recipe extraction from video and social-post metadata.

Captions are free text written for people, so every step here is a small
heuristic: each is a plain function over strings and can be tested alone.
"""

import logging
import re

from .models import NormalizedContent, RecipeMetadata, VideoMetadata

logger = logging.getLogger(__name__)

RECIPE_KEYWORDS = [
    "recipe",
    "cooking",
    "baking",
    "how to make",
    "ingredients",
    "cook",
    "bake",
    "prepare",
    "dish",
    "food",
    "kitchen",
]

KNOWN_INGREDIENTS = [
    "flour",
    "sugar",
    "butter",
    "eggs",
    "milk",
    "salt",
    "pepper",
    "oil",
    "onion",
    "garlic",
    "tomato",
    "cheese",
    "chicken",
    "beef",
    "rice",
    "pasta",
    "bread",
    "water",
    "vanilla",
    "baking powder",
]

COOKING_ACTIONS = [
    "mix",
    "bake",
    "cook",
    "boil",
    "fry",
    "sauté",
    "saute",
    "roast",
    "grill",
    "add",
    "combine",
    "stir",
    "heat",
    "preheat",
]

CATEGORY_KEYWORDS = {
    "baking": ["bake", "baking", "cake", "cookies", "bread", "pastry", "dessert"],
    "cooking": ["cook", "cooking", "fry", "sauté", "roast", "grill", "stir-fry"],
    "breakfast": ["breakfast", "morning", "pancake", "waffle", "cereal", "toast"],
    "lunch": ["lunch", "sandwich", "salad", "soup"],
    "dinner": ["dinner", "main course", "entree", "supper"],
    "dessert": ["dessert", "sweet", "cake", "ice cream", "chocolate"],
    "appetizer": ["appetizer", "starter", "snack", "finger food"],
}

DESCRIPTOR_TAGS = [
    "quick",
    "easy",
    "healthy",
    "vegetarian",
    "vegan",
    "gluten-free",
    "dairy-free",
    "low-carb",
    "keto",
    "paleo",
    "spicy",
    "mild",
    "comfort food",
    "homemade",
    "traditional",
    "fusion",
]

INGREDIENTS_PLACEHOLDER = "See video for ingredients"
INSTRUCTIONS_PLACEHOLDER = "Follow along with the video"

_INGREDIENT_LABEL = r"(?:ingredients?|what you need|shopping list|you'?ll need)"
_INSTRUCTION_LABEL = r"(?:instructions?|directions?|method|steps?|how to)"

_INGREDIENT_SECTION = re.compile(
    rf"\b{_INGREDIENT_LABEL}\s*(?::|\n)\s*(.*?)(?=\n\s*\n|\b{_INSTRUCTION_LABEL}\s*:|$)",
    re.IGNORECASE | re.DOTALL,
)
_INSTRUCTION_SECTION = re.compile(
    rf"\b{_INSTRUCTION_LABEL}\s*(?::|\n)\s*(.*?)(?=\n\s*\n|\b{_INGREDIENT_LABEL}\s*:|$)",
    re.IGNORECASE | re.DOTALL,
)
_LINE_PREFIX = re.compile(r"^(?:[-•*]|\d+[.)])\s*")
_NUMBERED_STEP = re.compile(r"(?:^|\n)\s*(\d+)[.)]\s*([^\n]+)")
_HASHTAG = re.compile(r"#(\w+)")


def combined_text(metadata: VideoMetadata) -> str:
    return f"{metadata.title}\n{metadata.description}"


def is_recipe_content(text: str) -> bool:
    """True when the text mentions any recipe keyword."""
    lowered = text.lower()
    return any(keyword in lowered for keyword in RECIPE_KEYWORDS)


def _clean_lines(block: str) -> list[str]:
    return [_LINE_PREFIX.sub("", line.strip()).strip() for line in block.splitlines()]


def extract_ingredients(text: str) -> list[str]:
    """
    Find ingredient lines in a caption.

    Uses a labeled section when there is one, otherwise looks for
    "<number> ... <known ingredient>" phrases.

    Examples:
        "Ingredients:\\n- 2 cups flour\\n- 1 egg" -> ["2 cups flour", "1 egg"]
        "Mix 2 cups flour with 1 cup sugar" -> ["2 cups flour", "1 cup sugar"]
    """
    match = _INGREDIENT_SECTION.search(text)
    if match:
        lines = [line for line in _clean_lines(match.group(1)) if 0 < len(line) < 200]
        if lines:
            return lines

    found = []
    lowered = text.lower()
    for ingredient in KNOWN_INGREDIENTS:
        pattern = re.compile(rf"\b\d+[^\n\d]*?{re.escape(ingredient)}s?\b")
        for phrase in pattern.findall(lowered):
            phrase = phrase.strip()
            if phrase not in found:
                found.append(phrase)
    return found


def extract_instructions(text: str) -> list[str]:
    """
    Find instruction steps in a caption.

    Tries a labeled section, then numbered lines, then sentences that
    contain a cooking action.
    """
    match = _INSTRUCTION_SECTION.search(text)
    if match:
        lines = [line for line in _clean_lines(match.group(1)) if len(line) > 10]
        if lines:
            return lines

    numbered = [step.strip() for _, step in _NUMBERED_STEP.findall(text) if len(step.strip()) > 10]
    if numbered:
        return numbered

    steps = []
    for sentence in split_sentences(text):
        if len(sentence) <= 10:
            continue
        lowered = sentence.lower()
        if any(re.search(rf"\b{re.escape(action)}", lowered) for action in COOKING_ACTIONS):
            steps.append(sentence)
    return steps


def split_sentences(text: str) -> list[str]:
    return [s.strip() for s in re.split(r"[.!?]+", text) if s.strip()]


def extract_categories(text: str) -> list[str]:
    """Categories whose keywords appear in the text, in table order."""
    lowered = text.lower()
    return [
        category
        for category, keywords in CATEGORY_KEYWORDS.items()
        if any(keyword in lowered for keyword in keywords)
    ]


def extract_tags(text: str) -> list[str]:
    """
    Hashtags plus any cooking descriptors, lower-cased and de-duplicated.

    Examples:
        "Quick vegan curry #dinner #Vegan" -> ["dinner", "vegan", "quick"]
    """
    tags: list[str] = []
    for tag in _HASHTAG.findall(text):
        tag = tag.lower()
        if tag not in tags:
            tags.append(tag)

    lowered = text.lower()
    for descriptor in DESCRIPTOR_TAGS:
        tag = descriptor.replace(" ", "-")
        if descriptor in lowered and tag not in tags:
            tags.append(tag)
    return tags


def metadata_confidence(text: str, ingredients: list[str], instructions: list[str]) -> float:
    """
    Rough quality score for what was pulled out of a caption.

    Recipe vocabulary 0.2, ingredients up to 0.4, instructions up to 0.4.
    """
    score = 0.2 if is_recipe_content(text) else 0.0
    score += min(len(ingredients) * 0.1, 0.4)
    score += min(len(instructions) * 0.1, 0.4)
    return round(min(score, 1.0), 4)


def extract_recipe_from_metadata(metadata: VideoMetadata) -> NormalizedContent | None:
    """
    Build recipe content from page metadata.

    Returns None when the text does not look like a recipe at all. When
    it does, ingredients and instructions are never empty: a single
    placeholder line stands in for anything that could not be found.
    """
    text = combined_text(metadata)
    if not is_recipe_content(text):
        return None

    description = metadata.description or ""
    ingredients = extract_ingredients(description)
    instructions = extract_instructions(description)

    if not ingredients and not instructions:
        instructions = [s for s in split_sentences(description) if len(s) > 10]
        if not instructions:
            logger.debug(f"No recipe content found in metadata for '{metadata.title}'")
            return None

    confidence = metadata_confidence(text, ingredients, instructions)

    return NormalizedContent(
        title=metadata.title,
        description=description or None,
        ingredients=ingredients or [INGREDIENTS_PLACEHOLDER],
        instructions=instructions or [INSTRUCTIONS_PLACEHOLDER],
        metadata=RecipeMetadata(
            categories=extract_categories(text),
            tags=extract_tags(text),
            author=metadata.author,
            published_date=metadata.published_date,
            image_url=metadata.thumbnail_url,
        ),
        confidence=confidence,
    )
