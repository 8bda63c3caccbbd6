"""
Document section splitting.

Finds recipe-shaped sections in plain text pulled out of an uploaded
document. The heuristics are pure functions so each one can be tested on
its own.
"""

import re

from .models import RecipeSection

RECIPE_INDICATORS = [
    "recipe",
    "ingredients",
    "instructions",
    "directions",
    "method",
    "preparation",
    "cooking",
    "baking",
    "serves",
    "servings",
    "yield",
]

INGREDIENT_LABELS = ["ingredients", "you will need", "shopping list", "what you need"]

INSTRUCTION_LABELS = [
    "instructions",
    "directions",
    "method",
    "steps",
    "preparation",
    "how to make",
    "cooking method",
    "procedure",
]

TITLE_PATTERNS = [
    re.compile(r"^(.+?)\s*recipe$", re.IGNORECASE),
    re.compile(r"^recipe\s*:\s*(.+)$", re.IGNORECASE),
    re.compile(r"^(.+?)\s*-\s*recipe$", re.IGNORECASE),
    re.compile(r"^(.+?)\s*\(recipe\)$", re.IGNORECASE),
]

FOOD_WORDS = ["chicken", "beef", "pasta", "cake", "bread", "soup", "salad", "pie", "cookies"]
COOKING_PARTICIPLES = ["baked", "grilled", "roasted", "fried", "steamed", "sauteed"]
COOKING_VERBS = ["cook", "bake", "fry", "boil", "mix", "stir", "heat", "serve"]

LIST_PATTERN = re.compile(r"^\s*[\d\-*•]+[.)]?\s+", re.MULTILINE)
_BULLET_PREFIX = re.compile(r"^\s*(?:[-•*]|\d+[.)])\s*")


def _contains_any(text: str, words: list[str]) -> bool:
    lowered = text.lower()
    return any(word in lowered for word in words)


def has_ingredient_label(text: str) -> bool:
    return _contains_any(text, INGREDIENT_LABELS)


def has_instruction_label(text: str) -> bool:
    return _contains_any(text, INSTRUCTION_LABELS)


def has_list(text: str) -> bool:
    return bool(LIST_PATTERN.search(text))


def has_recipe_indicators(text: str) -> bool:
    return _contains_any(text, RECIPE_INDICATORS)


def has_recipe_structure(text: str) -> bool:
    """
    Both labels present, or a numbered/bulleted list next to either label.
    """
    ingredients = has_ingredient_label(text)
    instructions = has_instruction_label(text)
    if ingredients and instructions:
        return True
    return has_list(text) and (ingredients or instructions)


def is_recipe_title(line: str) -> bool:
    """
    Decide whether a single line looks like a recipe title.

    Examples:
        "Banana Bread Recipe" -> True
        "Recipe: Tomato Soup" -> True
        "Grilled Salmon" -> True
        "Preheat the oven and grease the pan" -> False
    """
    text = line.strip()
    if not text or "\n" in text:
        return False

    if any(pattern.match(text) for pattern in TITLE_PATTERNS):
        return True

    if not 5 < len(text) < 100 or len(text.split()) > 8:
        return False

    # Sentences, labels and list items are body text
    if text[-1] in ".:!?" or _BULLET_PREFIX.match(text) or text[0].isdigit():
        return False

    return _contains_any(text, FOOD_WORDS) or _contains_any(text, COOKING_PARTICIPLES)


def clean_title(title: str) -> str:
    """
    Strip recipe markers from a title and capitalise it.

    Examples:
        "Recipe: tomato soup" -> "Tomato soup"
        "Banana Bread Recipe" -> "Banana Bread"
        "Apple Pie (Recipe)" -> "Apple Pie"
    """
    text = title.strip()
    text = re.sub(r"^recipe\s*:\s*", "", text, flags=re.IGNORECASE)
    text = re.sub(r"\s*\(recipe\)$", "", text, flags=re.IGNORECASE)
    text = re.sub(r"\s*-?\s*recipe$", "", text, flags=re.IGNORECASE)
    text = text.strip()
    return text[:1].upper() + text[1:] if text else text


def confidence_score(text: str) -> float:
    """
    Weighted recipe-likeness score in [0, 1].

    Ingredients label 0.3, instructions label 0.3, list structure 0.2 and
    0.05 per cooking verb up to 0.2.
    """
    score = 0.0
    if has_ingredient_label(text):
        score += 0.3
    if has_instruction_label(text):
        score += 0.3
    if has_list(text):
        score += 0.2

    lowered = text.lower()
    verbs = sum(1 for verb in COOKING_VERBS if verb in lowered)
    score += min(verbs * 0.05, 0.2)
    return round(min(score, 1.0), 4)


def extract_title(text: str) -> str:
    """First title-like line in the first few lines, else the first short line."""
    lines = [line.strip() for line in text.splitlines() if line.strip()]
    for line in lines[:5]:
        if is_recipe_title(line):
            return clean_title(line)
    for line in lines[:3]:
        if len(line) < 100 and not has_ingredient_label(line) and not has_instruction_label(line):
            return clean_title(line)
    return "Untitled Recipe"


def split_paragraphs(text: str) -> list[tuple[str, int, int]]:
    """Split on blank lines, keeping each paragraph's character span."""
    paragraphs = []
    for match in re.finditer(r"(?:(?!\n\s*\n).)+", text, re.DOTALL):
        chunk = match.group(0)
        if chunk.strip():
            paragraphs.append((chunk.strip(), match.start(), match.end()))
    return paragraphs


def identify_recipe_sections(text: str) -> list[RecipeSection]:
    """
    Split document text into recipe sections.

    A title-like paragraph opens a section and the paragraphs after it
    accumulate until the next title. A paragraph with general recipe
    vocabulary opens an untitled section when none is open. Sections
    without recipe structure are dropped. When nothing qualifies, the whole
    document becomes one section if it has recipe structure itself.
    """
    if not text or not text.strip():
        return []

    sections: list[RecipeSection] = []
    current: dict | None = None

    def close() -> None:
        if current and has_recipe_structure(current["content"]):
            content = current["content"].strip()
            sections.append(
                RecipeSection(
                    title=current["title"],
                    content=content,
                    start_index=current["start"],
                    end_index=current["end"],
                    confidence=confidence_score(content),
                )
            )

    for paragraph, start, end in split_paragraphs(text):
        first_line = paragraph.splitlines()[0]
        if is_recipe_title(first_line) and not has_ingredient_label(first_line):
            close()
            rest = paragraph[len(first_line):].strip()
            current = {
                "title": clean_title(first_line),
                "content": rest,
                "start": start,
                "end": end,
            }
        elif current is None:
            if has_recipe_indicators(paragraph):
                current = {
                    "title": "Untitled Recipe",
                    "content": paragraph,
                    "start": start,
                    "end": end,
                }
        else:
            current["content"] = f"{current['content']}\n\n{paragraph}".strip()
            current["end"] = end

    close()

    if not sections and has_recipe_structure(text):
        stripped = text.strip()
        sections.append(
            RecipeSection(
                title=extract_title(stripped),
                content=stripped,
                start_index=0,
                end_index=len(text),
                confidence=confidence_score(stripped),
            )
        )

    return sections


def is_label(line: str, labels: list[str]) -> bool:
    """
    A heading line such as "Ingredients:" or "For the sauce, you will need:".

    Ordinary sentences that merely mention a label word do not count.
    """
    text = line.strip().lstrip("#").strip().lower()
    bare = text.rstrip(":").strip()
    if bare in labels:
        return True
    return text.endswith(":") and len(bare.split()) <= 6 and _contains_any(bare, labels)


def strip_bullet(line: str) -> str:
    return _BULLET_PREFIX.sub("", line).strip()


def split_section(content: str) -> tuple[list[str], list[str]]:
    """
    Split section text into ingredient lines and instruction lines.

    Lines after an ingredients label are ingredients, lines after an
    instructions label are instructions. Label lines themselves are
    dropped and list prefixes are stripped. Text before any label is
    treated as description and ignored.
    """
    ingredients: list[str] = []
    instructions: list[str] = []
    target: list[str] | None = None

    for raw in content.splitlines():
        line = raw.strip()
        if not line:
            continue

        if is_label(line, INGREDIENT_LABELS):
            target = ingredients
            continue
        if is_label(line, INSTRUCTION_LABELS):
            target = instructions
            continue

        if target is not None:
            item = strip_bullet(line)
            if item:
                target.append(item)

    return ingredients, instructions
