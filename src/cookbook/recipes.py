"""Recipe service: ownership-checked CRUD and scaling over a repository."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import ValidationError

from cookbook.ingestion.validator import sanitize, validate
from cookbook.models import Recipe, RecipeData, RecipeUpdate, ScaledRecipe
from cookbook.repository import RecipeRepository
from cookbook.scaling import ScalingError, scale

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ServiceErrorType(str, Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    UNAUTHORIZED = "unauthorized"
    DATABASE = "database"


@dataclass
class ServiceError:
    type: ServiceErrorType
    message: str
    details: dict[str, Any] | None = None


@dataclass
class ServiceResult(Generic[T]):
    success: bool
    value: T | None = None
    error: ServiceError | None = None

    @classmethod
    def ok(cls, value: T) -> "ServiceResult[T]":
        return cls(success=True, value=value)

    @classmethod
    def fail(
        cls, error_type: ServiceErrorType, message: str, details: dict[str, Any] | None = None
    ) -> "ServiceResult[T]":
        return cls(success=False, error=ServiceError(error_type, message, details))


class RecipeService:
    def __init__(self, repository: RecipeRepository):
        self.repository = repository

    def create_recipe(
        self, user_id: str, data: RecipeData, personal_notes: str | None = None
    ) -> ServiceResult[Recipe]:
        clean = sanitize(data)
        report = validate(clean)
        if not report.is_valid:
            return ServiceResult.fail(
                ServiceErrorType.VALIDATION,
                "Recipe validation failed",
                {"errors": report.errors, "warnings": report.warnings},
            )
        return ServiceResult.ok(self.repository.create(user_id, clean, personal_notes))

    def _owned(self, recipe_id: str, user_id: str) -> ServiceResult[Recipe]:
        recipe = self.repository.find_by_id(recipe_id)
        if recipe is None:
            return ServiceResult.fail(ServiceErrorType.NOT_FOUND, "Recipe not found")
        if recipe.user_id != user_id:
            return ServiceResult.fail(ServiceErrorType.UNAUTHORIZED, "Unauthorized access to recipe")
        return ServiceResult.ok(recipe)

    def get_recipe(self, recipe_id: str, user_id: str) -> ServiceResult[Recipe]:
        return self._owned(recipe_id, user_id)

    def list_recipes(self, user_id: str) -> list[Recipe]:
        return self.repository.find_by_user_id(user_id)

    def search_recipes(self, user_id: str, query: str) -> list[Recipe]:
        """Case-insensitive match on title, description, ingredient names, categories and tags."""
        needle = query.strip().lower()
        if not needle:
            return self.list_recipes(user_id)

        def matches(recipe: Recipe) -> bool:
            haystack = [recipe.title, recipe.description or ""]
            haystack += [i.name for i in recipe.ingredients]
            haystack += recipe.categories + recipe.tags
            return any(needle in text.lower() for text in haystack)

        return [r for r in self.list_recipes(user_id) if matches(r)]

    def update_recipe(
        self, recipe_id: str, user_id: str, update: RecipeUpdate
    ) -> ServiceResult[Recipe]:
        """
        Apply the fields set on `update`.

        Fields not set on the update, including source_url and source_type,
        keep their stored values.
        """
        found = self._owned(recipe_id, user_id)
        if not found.success:
            return found

        changes = update.model_dump(exclude_unset=True)
        personal_notes = changes.pop("personal_notes", None)
        has_notes = "personal_notes" in update.model_fields_set

        try:
            candidate = Recipe.model_validate({**found.value.model_dump(), **changes})
        except ValidationError as e:
            errors = [f"{'.'.join(map(str, err['loc']))}: {err['msg']}" for err in e.errors()]
            return ServiceResult.fail(
                ServiceErrorType.VALIDATION, "Recipe validation failed", {"errors": errors}
            )

        clean = sanitize(candidate)
        report = validate(clean)
        if not report.is_valid:
            return ServiceResult.fail(
                ServiceErrorType.VALIDATION,
                "Recipe validation failed",
                {"errors": report.errors, "warnings": report.warnings},
            )

        applied = {key: getattr(clean, key) for key in changes}
        applied = {
            key: [item.model_dump() for item in value]
            if key in ("ingredients", "instructions")
            else value
            for key, value in applied.items()
        }
        if has_notes:
            applied["personal_notes"] = personal_notes

        updated = self.repository.update(recipe_id, applied)
        if updated is None:
            return ServiceResult.fail(ServiceErrorType.DATABASE, "Failed to update recipe")
        return ServiceResult.ok(updated)

    def delete_recipe(self, recipe_id: str, user_id: str) -> ServiceResult[bool]:
        found = self._owned(recipe_id, user_id)
        if not found.success:
            return ServiceResult(success=False, error=found.error)
        if not self.repository.delete(recipe_id):
            return ServiceResult.fail(ServiceErrorType.DATABASE, "Failed to delete recipe")
        return ServiceResult.ok(True)

    def scale_recipe(
        self, recipe_id: str, new_servings: int, user_id: str
    ) -> ServiceResult[ScaledRecipe]:
        found = self._owned(recipe_id, user_id)
        if not found.success:
            return ServiceResult(success=False, error=found.error)

        try:
            scaled = scale(found.value, new_servings)
        except ScalingError as e:
            return ServiceResult.fail(ServiceErrorType.VALIDATION, str(e))

        logger.info(f"Scaled recipe {recipe_id} by {scaled.scale_factor:.3f}")
        return ServiceResult.ok(scaled)
