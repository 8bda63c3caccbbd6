"""
Recipe persistence protocol.

The storage engine is not part of this package: anything implementing
RecipeRepository can back the services. An in-memory store and a JSON
file store (used by the CLI) are provided.
"""

import json
import logging
import threading
import uuid
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from cookbook.models import Recipe, RecipeData, utcnow

logger = logging.getLogger(__name__)


@runtime_checkable
class RecipeRepository(Protocol):
    """Persistence for canonical recipes, keyed by opaque recipe and user ids."""

    def create(self, user_id: str, data: RecipeData, personal_notes: str | None = None) -> Recipe:
        """Store a new recipe for the user and return it with id and timestamps."""
        ...

    def find_by_user_id(self, user_id: str) -> list[Recipe]:
        """All recipes owned by the user, oldest first."""
        ...

    def find_by_id(self, recipe_id: str) -> Recipe | None:
        ...

    def update(self, recipe_id: str, changes: dict[str, Any]) -> Recipe | None:
        """
        Apply field changes (snake_case keys) and bump updated_at.

        Returns None when the recipe does not exist.
        """
        ...

    def delete(self, recipe_id: str) -> bool:
        ...


class InMemoryRecipeRepository:
    """Dict-backed repository. Writes are serialized so one instance can be shared across threads."""

    def __init__(self, recipes: list[Recipe] | None = None):
        self._recipes: dict[str, Recipe] = {r.id: r for r in recipes or []}
        self._lock = threading.Lock()

    def create(self, user_id: str, data: RecipeData, personal_notes: str | None = None) -> Recipe:
        now = utcnow()
        recipe = Recipe(
            **data.model_dump(include=set(RecipeData.model_fields)),
            id=str(uuid.uuid4()),
            user_id=user_id,
            personal_notes=personal_notes,
            created_at=now,
            updated_at=now,
        )
        with self._lock:
            self._recipes[recipe.id] = recipe
            self._saved()
        return recipe

    def find_by_user_id(self, user_id: str) -> list[Recipe]:
        with self._lock:
            recipes = list(self._recipes.values())
        return [r for r in recipes if r.user_id == user_id]

    def find_by_id(self, recipe_id: str) -> Recipe | None:
        return self._recipes.get(recipe_id)

    def update(self, recipe_id: str, changes: dict[str, Any]) -> Recipe | None:
        with self._lock:
            existing = self._recipes.get(recipe_id)
            if existing is None:
                return None
            merged = existing.model_dump()
            merged.update(changes)
            merged["updated_at"] = utcnow()
            updated = Recipe.model_validate(merged)
            self._recipes[recipe_id] = updated
            self._saved()
        return updated

    def delete(self, recipe_id: str) -> bool:
        with self._lock:
            removed = self._recipes.pop(recipe_id, None) is not None
            if removed:
                self._saved()
        return removed

    def _saved(self) -> None:
        """Hook for subclasses that persist after each write. Called with the lock held."""


class JsonFileRecipeRepository(InMemoryRecipeRepository):
    """Repository persisted to a single JSON file after every write."""

    def __init__(self, path: str | Path):
        self.path = Path(path)
        recipes = []
        if self.path.exists():
            raw = json.loads(self.path.read_text(encoding="utf-8") or "[]")
            recipes = [Recipe.model_validate(item) for item in raw]
            logger.debug(f"Loaded {len(recipes)} recipes from {self.path}")
        super().__init__(recipes)

    def _saved(self) -> None:
        payload = [r.model_dump(mode="json", by_alias=True) for r in list(self._recipes.values())]
        self.path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
