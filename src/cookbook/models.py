"""
Canonical recipe models.

Every ingestion path (web, video, document, import) ends in these shapes.
Fields are snake_case in Python and camelCase on the wire, so exported
JSON reads `stepNumber`, `cookingTime`, `sourceUrl` and so on.

Numeric fields carry no Field constraints; the ingestion validator
reports out-of-range values as warnings.
"""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class SourceType(str, Enum):
    """Where a recipe came from."""

    WEB = "web"
    VIDEO = "video"
    DOCUMENT = "document"
    MANUAL = "manual"


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


SOURCE_TYPES = {s.value for s in SourceType}
DIFFICULTIES = {d.value for d in Difficulty}


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CamelModel(BaseModel):
    """Base model serialising to camelCase and accepting either spelling."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Ingredient(CamelModel):
    name: str
    quantity: float | None = None
    unit: str | None = None
    notes: str | None = None


class Instruction(CamelModel):
    step_number: int
    description: str
    duration: int | None = None  # minutes


class RecipeData(CamelModel):
    """Fields shared by every recipe shape."""

    title: str
    description: str | None = None
    ingredients: list[Ingredient] = Field(default_factory=list)
    instructions: list[Instruction] = Field(default_factory=list)
    cooking_time: int | None = None
    prep_time: int | None = None
    servings: int | None = None
    difficulty: str | None = None
    categories: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    source_url: str | None = None
    source_type: str = SourceType.MANUAL.value
    image_url: str | None = None
    author: str | None = None
    published_date: str | None = None


class ExtractedRecipe(RecipeData):
    """Canonical ingestion output. Always carries a source URL."""

    source_url: str
    source_type: str = SourceType.WEB.value


class Recipe(RecipeData):
    """A persisted recipe owned by a user."""

    id: str
    user_id: str
    personal_notes: str | None = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class ScaledRecipe(Recipe):
    """A recipe with quantities scaled to a new serving count."""

    original_servings: int
    scale_factor: float


class RecipeUpdate(CamelModel):
    """
    Partial update for a recipe.

    Only fields explicitly set on the instance are applied, so omitting
    `source_url` or `source_type` leaves the stored values alone.
    """

    title: str | None = None
    description: str | None = None
    ingredients: list[Ingredient] | None = None
    instructions: list[Instruction] | None = None
    cooking_time: int | None = None
    prep_time: int | None = None
    servings: int | None = None
    difficulty: str | None = None
    categories: list[str] | None = None
    tags: list[str] | None = None
    source_url: str | None = None
    source_type: str | None = None
    image_url: str | None = None
    author: str | None = None
    personal_notes: str | None = None
