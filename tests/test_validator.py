"""Tests for recipe validation and sanitization."""

from cookbook.ingestion.validator import (
    MAX_FIELD_LENGTH,
    is_valid_source_url,
    sanitize,
    sanitize_text,
    validate,
)
from cookbook.models import Ingredient, Instruction

from conftest import make_recipe_data


class TestSourceUrl:
    def test_http_urls(self):
        assert is_valid_source_url("https://example.com/recipe")
        assert is_valid_source_url("http://example.com")
        assert not is_valid_source_url("https://")
        assert not is_valid_source_url("ftp://example.com/x")
        assert not is_valid_source_url(None)

    def test_synthetic_urls_only_for_documents_and_manual(self):
        assert is_valid_source_url("file://recipes.txt", "document")
        assert is_valid_source_url("document://upload-1", "manual")
        assert not is_valid_source_url("file://recipes.txt", "web")


class TestValidate:
    """Tests for blocking errors and warnings."""

    def test_valid_recipe(self):
        report = validate(make_recipe_data())
        assert report.is_valid
        assert report.errors == []

    def test_required_fields(self):
        report = validate(make_recipe_data(title=" ", ingredients=[], instructions=[]))
        assert not report.is_valid
        assert "Recipe title is required" in report.errors
        assert "Recipe must have at least one ingredient" in report.errors
        assert "Recipe must have at least one instruction" in report.errors

    def test_web_recipe_needs_source_url(self):
        report = validate(make_recipe_data(source_url=None))
        assert "Valid source URL is required" in report.errors

    def test_manual_recipe_without_url_is_valid(self):
        report = validate(make_recipe_data(source_url=None, source_type="manual"))
        assert report.is_valid

    def test_document_recipe_with_file_url(self):
        report = validate(make_recipe_data(source_url="file://book.txt", source_type="document"))
        assert report.is_valid

    def test_unknown_source_type(self):
        report = validate(make_recipe_data(source_type="fax"))
        assert "Source type must be web, video, document, or manual" in report.errors

    def test_ingredient_errors(self):
        recipe = make_recipe_data(
            ingredients=[Ingredient(name=""), Ingredient(name="sugar", quantity=-1)]
        )
        report = validate(recipe)
        assert "Ingredient 1 must have a name" in report.errors
        assert "Ingredient 2 has an invalid quantity" in report.errors

    def test_empty_instruction_description(self):
        recipe = make_recipe_data(instructions=[Instruction(step_number=1, description="")])
        assert "Instruction 1 must have a description" in validate(recipe).errors

    def test_warnings_do_not_block(self):
        recipe = make_recipe_data(
            difficulty="extreme",
            servings=0,
            cooking_time=-10,
            instructions=[
                Instruction(step_number=3, description="Whisk everything together"),
            ],
        )
        report = validate(recipe)
        assert report.is_valid
        assert "Difficulty should be easy, medium, or hard" in report.warnings
        assert "Servings should be a positive number" in report.warnings
        assert "Cooking time should be a positive number" in report.warnings
        assert "Instruction 1 has incorrect step number 3" in report.warnings

    def test_suspicious_title_warning(self):
        report = validate(make_recipe_data(title="Cake javascript:alert(1)"))
        assert "Recipe title contains potentially unsafe content" in report.warnings

    def test_too_many_ingredients_warning(self):
        recipe = make_recipe_data(ingredients=[Ingredient(name=f"item {i}") for i in range(51)])
        report = validate(recipe)
        assert report.is_valid
        assert "Recipe has many ingredients (51)" in report.warnings


class TestSanitize:
    """Tests for text cleanup."""

    def test_sanitize_text(self):
        assert sanitize_text("  Hello   <b>world</b>  ") == "Hello bworld/b"
        assert sanitize_text(None) is None
        assert len(sanitize_text("a" * 1500)) == MAX_FIELD_LENGTH

    def test_sanitize_recipe(self):
        recipe = make_recipe_data(
            title="  Best   Pancakes ",
            categories=["Breakfast", "breakfast", " "],
            tags=["Quick", "QUICK"],
            instructions=[
                Instruction(step_number=4, description="  Whisk  "),
                Instruction(step_number=9, description="Cook"),
            ],
        )
        clean = sanitize(recipe)

        assert clean.title == "Best Pancakes"
        assert clean.categories == ["breakfast"]
        assert clean.tags == ["quick"]
        assert [s.step_number for s in clean.instructions] == [1, 2]
        assert clean.instructions[0].description == "Whisk"
        assert clean.source_url == recipe.source_url

    def test_sanitize_does_not_modify_input(self):
        recipe = make_recipe_data(title="  Spaced  ")
        sanitize(recipe)
        assert recipe.title == "  Spaced  "
