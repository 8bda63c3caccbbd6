"""Tests for recipe scaling."""

import pytest

from cookbook.scaling import ScalingError, scale, scale_factor

from conftest import USER_ID, make_recipe_data


@pytest.fixture
def pancakes(repository):
    return repository.create(USER_ID, make_recipe_data("Pancakes"), personal_notes="Use buttermilk")


class TestScaleFactor:
    def test_ratio(self):
        assert scale_factor(4, 8) == 2.0
        assert scale_factor(4, 2) == 0.5

    def test_invalid_new_servings(self):
        for bad in (0, -2, None, True):
            with pytest.raises(ScalingError, match="New servings must be a positive number"):
                scale_factor(4, bad)

    def test_fractional_new_servings(self):
        with pytest.raises(ScalingError, match="whole number"):
            scale_factor(4, 2.5)
        assert scale_factor(4, 8.0) == 2.0

    def test_missing_original_servings(self):
        with pytest.raises(ScalingError, match="no original servings"):
            scale_factor(None, 4)


class TestScale:
    """Tests for scaling a stored recipe."""

    def test_doubles_quantities(self, pancakes):
        scaled = scale(pancakes, 8)

        assert scaled.servings == 8
        assert scaled.original_servings == 4
        assert scaled.scale_factor == 2.0
        assert [i.quantity for i in scaled.ingredients] == [4.0, 3.0, None]
        assert [i.unit for i in scaled.ingredients] == ["cup", "cup", None]

    def test_other_fields_pass_through(self, pancakes):
        scaled = scale(pancakes, 2)

        assert scaled.id == pancakes.id
        assert scaled.title == pancakes.title
        assert scaled.instructions == pancakes.instructions
        assert scaled.personal_notes == "Use buttermilk"
        assert scaled.source_url == pancakes.source_url

    def test_same_servings_keeps_quantities(self, pancakes):
        scaled = scale(pancakes, 4)

        assert scaled.scale_factor == 1.0
        assert [i.quantity for i in scaled.ingredients] == [2.0, 1.5, None]

    def test_input_not_modified(self, pancakes):
        before = pancakes.model_dump()
        scale(pancakes, 12)
        assert pancakes.model_dump() == before

    def test_recipe_without_servings(self, repository):
        recipe = repository.create(USER_ID, make_recipe_data("Stock", servings=None))

        with pytest.raises(ScalingError):
            scale(recipe, 4)
