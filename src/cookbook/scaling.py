"""Recipe scaling."""

from cookbook.models import Recipe, ScaledRecipe


class ScalingError(ValueError):
    """The recipe cannot be scaled to the requested servings."""


def scale_factor(original_servings: int | None, new_servings: int | float) -> float:
    if isinstance(new_servings, bool) or not new_servings or new_servings <= 0:
        raise ScalingError("New servings must be a positive number")
    if isinstance(new_servings, float) and not new_servings.is_integer():
        raise ScalingError("New servings must be a whole number")
    if not original_servings or original_servings <= 0:
        raise ScalingError("Recipe has no original servings to scale from")
    return new_servings / original_servings


def scale(recipe: Recipe, new_servings: int) -> ScaledRecipe:
    """
    Scale every ingredient quantity by new_servings / servings.

    Ingredients without a quantity stay unset and every other field passes
    through unchanged. Scaling to the recipe's own servings returns the
    quantities untouched. The input recipe is never modified.
    """
    factor = scale_factor(recipe.servings, new_servings)

    if new_servings == recipe.servings:
        ingredients = [ingredient.model_copy() for ingredient in recipe.ingredients]
    else:
        ingredients = [
            ingredient.model_copy(
                update={
                    "quantity": ingredient.quantity * factor
                    if ingredient.quantity is not None
                    else None
                }
            )
            for ingredient in recipe.ingredients
        ]

    data = recipe.model_dump()
    data.update(
        ingredients=ingredients,
        servings=new_servings,
        original_servings=recipe.servings,
        scale_factor=factor,
    )
    return ScaledRecipe.model_validate(data)
