"""Tests for recipe import: JSON, CSV, other apps' exports and duplicate handling."""

import json

from cookbook.models import RecipeData
from cookbook.transfer import (
    ConflictType,
    ImportFormat,
    ImportOptions,
    ImportService,
    Severity,
    detect_format,
)

from conftest import USER_ID

LEMON_BARS = {
    "title": "Lemon Bars",
    "ingredients": ["1 cup sugar", "2 lemons"],
    "instructions": ["Mix the filling", "Bake for 20 minutes"],
    "url": "https://example.com/lemon-bars",
}

GARLIC_BREAD_CSV = (
    "Name,Ingredients,Directions,Servings,Source\n"
    '"Garlic Bread","1 baguette\n2 tbsp butter","1. Slice the bread\n2. Bake for 8 minutes",'
    "4,https://example.com/garlic-bread\n"
)

RECIPE_KEEPER_EXPORT = {
    "recipes": [
        {
            "name": "Shakshuka",
            "ingredients": [
                {"ingredient": "eggs", "quantity": "4"},
                {"ingredient": "chopped tomatoes", "quantity": "1", "unit": "can"},
            ],
            "directions": ["Simmer the tomatoes", "Crack in the eggs"],
            "servings": "2",
        }
    ]
}

PAPRIKA_EXPORT = [
    {
        "name": "Miso Soup",
        "ingredients": "4 cups dashi\n3 tbsp miso",
        "directions": "Heat the dashi.\nWhisk in the miso.",
        "source_url": "https://example.com/miso",
        "cook_time": "10 mins",
        "servings": "2",
        "categories": ["Soup"],
    }
]

YUMMLY_EXPORT = {
    "matches": [
        {
            "recipeName": "Berry Smoothie",
            "ingredientLines": ["1 cup berries", "1 banana"],
            "instructions": ["Blend until smooth"],
            "totalTimeInSeconds": 300,
            "numberOfServings": 1,
            "attributes": {"course": ["Beverages"]},
            "flavors": [{"displayName": "Sweet"}],
        }
    ]
}

ALLRECIPES_EXPORT = {
    "@context": "https://schema.org",
    "@graph": [
        {"@type": "WebPage", "name": "Roast Chicken | Allrecipes"},
        {
            "@type": "Recipe",
            "name": "Roast Chicken",
            "recipeIngredient": ["1 whole chicken", "2 tbsp butter"],
            "recipeInstructions": [
                {"@type": "HowToStep", "text": "Rub the chicken with butter."},
                {"@type": "HowToStep", "text": "Roast for 90 minutes."},
            ],
            "recipeYield": ["4", "4 servings"],
            "url": "https://www.allrecipes.com/recipe/1/roast-chicken/",
        },
    ],
}


def item(title: str, **overrides) -> dict:
    data = dict(LEMON_BARS, title=title, url=f"https://example.com/{title.lower().replace(' ', '-')}")
    data.update(overrides)
    return data


class FailingRepository:
    def find_by_user_id(self, user_id):
        return []

    def create(self, user_id, data, personal_notes=None):
        raise OSError("disk full")


class TestImportFromJson:
    """Tests for importing our own JSON shape."""

    def test_list_of_recipes(self, repository):
        items = [item("Lemon Bars"), item("Lime Bars"), item("Orange Bars")]
        result = ImportService(repository).import_from_json(USER_ID, json.dumps(items))

        assert result.success
        assert result.imported_count == 3
        assert result.progress.total_items == 3
        assert result.progress.is_consistent
        assert len(repository.find_by_user_id(USER_ID)) == 3

    def test_wrapper_object(self, repository):
        payload = {"recipes": [item("Lemon Bars")], "exportedBy": "someone"}
        result = ImportService(repository).import_from_json(USER_ID, payload)

        assert result.imported_count == 1
        recipe = result.imported_recipes[0]
        assert recipe.user_id == USER_ID
        assert recipe.source_url == "https://example.com/lemon-bars"
        assert recipe.source_type == "web"
        assert [i.name for i in recipe.ingredients] == ["sugar", "lemons"]
        assert recipe.instructions[1].duration == 20

    def test_personal_notes_kept(self, repository):
        result = ImportService(repository).import_from_json(
            USER_ID, [item("Lemon Bars", notes="Family favourite")]
        )
        assert result.imported_recipes[0].personal_notes == "Family favourite"

    def test_exported_keys_are_read_back(self, repository):
        exported = RecipeData(
            title="Plain",
            ingredients=[{"name": "water", "quantity": 1, "unit": "cup"}],
            instructions=[{"stepNumber": 1, "description": "Boil", "duration": None}],
        ).model_dump(mode="json", by_alias=True)

        result = ImportService(repository).import_from_json(USER_ID, [exported])

        recipe = result.imported_recipes[0]
        assert recipe.ingredients[0].unit == "cup"
        assert recipe.instructions[0].duration is None

    def test_invalid_json(self, repository):
        result = ImportService(repository).import_from_json(USER_ID, "{not json")

        assert not result.success
        assert result.error.startswith("Invalid JSON")
        assert result.progress.total_items == 0

    def test_no_items(self, repository):
        result = ImportService(repository).import_from_json(USER_ID, "[]")

        assert not result.success
        assert result.error == "No recipes found in import data"


class TestDuplicates:
    def test_title_and_url_conflicts(self, populated_repository):
        items = [
            item("pancakes"),
            item("Different Name", url="https://example.com/tomato-soup"),
            item("Brand New"),
        ]
        result = ImportService(populated_repository).import_from_json(USER_ID, items)

        assert result.success
        assert result.imported_count == 1
        assert result.skipped_count == 2
        assert [c.conflict_type for c in result.conflicts] == [
            ConflictType.TITLE_MATCH,
            ConflictType.URL_MATCH,
        ]
        assert [c.existing_title for c in result.conflicts] == ["Pancakes", "Tomato Soup"]
        assert all(c.resolution == "skip" for c in result.conflicts)
        assert result.progress.errors[0].error == "Duplicate of existing recipe 'Pancakes'"
        assert all(e.severity == Severity.WARNING for e in result.progress.errors)

    def test_other_users_recipes_do_not_conflict(self, populated_repository):
        result = ImportService(populated_repository).import_from_json(USER_ID, [item("Secret Stew")])

        assert result.imported_count == 1
        assert result.conflicts == []

    def test_same_batch_duplicates_by_default(self, repository):
        items = [item("Lemon Bars"), item("Lemon Bars")]
        result = ImportService(repository).import_from_json(USER_ID, items)

        assert result.imported_count == 2

    def test_dedupe_within_batch(self, repository):
        items = [item("Lemon Bars"), item("LEMON BARS")]
        options = ImportOptions(dedupe_within_batch=True)
        result = ImportService(repository).import_from_json(USER_ID, items, options)

        assert result.imported_count == 1
        assert result.conflicts[0].conflict_type == ConflictType.TITLE_MATCH

    def test_overwrite_existing_still_skips(self, populated_repository):
        options = ImportOptions(overwrite_existing=True)
        result = ImportService(populated_repository).import_from_json(
            USER_ID, [item("Pancakes")], options
        )

        assert result.skipped_count == 1
        assert len(populated_repository.find_by_user_id(USER_ID)) == 3

    def test_reimport_of_title_with_stripped_characters(self, repository):
        service = ImportService(repository)
        first = item("Mac & Cheese", url="https://example.com/mac-cheese")
        assert service.import_from_json(USER_ID, first).imported_count == 1

        again = item("Mac & Cheese", url="https://example.com/mac-cheese-again")
        result = service.import_from_json(USER_ID, again)

        assert result.imported_count == 0
        assert result.skipped_count == 1
        assert result.conflicts[0].conflict_type == ConflictType.TITLE_MATCH
        assert len(repository.find_by_user_id(USER_ID)) == 1


class TestItemOutcomes:
    """Tests for per-item skips and errors."""

    def test_missing_fields_are_skipped_with_warning(self, repository):
        items = [
            {"title": "No Steps", "ingredients": ["1 egg"]},
            {"ingredients": ["1 egg"], "instructions": ["Fry"]},
            item("Lemon Bars"),
        ]
        result = ImportService(repository).import_from_json(USER_ID, items)

        assert result.success
        assert result.imported_count == 1
        assert result.skipped_count == 2
        assert result.error_count == 0
        first, second = result.progress.errors
        assert first.item == "No Steps"
        assert first.error == "Missing required fields: instructions"
        assert first.severity == Severity.WARNING
        assert second.item == "Item 2"
        assert second.error == "Missing required fields: title"

    def test_strict_validation_errors(self, repository):
        toast = {
            "title": "Toast",
            "ingredients": ["1 slice bread"],
            "instructions": ["Toast it"],
            "sourceType": "web",
        }
        service = ImportService(repository)

        strict = service.import_from_json(USER_ID, [toast], ImportOptions(validate_strict=True))
        assert not strict.success
        assert strict.error == "No recipes could be imported"
        assert strict.progress.errors[0].error == "Valid source URL is required"
        assert strict.progress.errors[0].severity == Severity.ERROR

        lenient = service.import_from_json(USER_ID, [toast])
        assert lenient.imported_count == 1

    def test_converter_failure_is_an_error(self, repository):
        def broken(data):
            raise KeyError("title")

        result = ImportService(repository).import_items(
            USER_ID, [item("Lemon Bars"), item("Lime Bars")], converter=broken
        )

        assert not result.success
        assert result.error_count == 2
        assert result.progress.errors[0].error.startswith("Could not read recipe:")

    def test_save_failure_is_an_error(self):
        result = ImportService(FailingRepository()).import_from_json(USER_ID, [item("Lemon Bars")])

        assert not result.success
        assert result.progress.errors[0].error == "Failed to save recipe: disk full"

    def test_sanitized_before_save(self, repository):
        messy = item("  Lemon   Bars  ", categories=["Dessert", "dessert", "Baking"])
        result = ImportService(repository).import_from_json(USER_ID, [messy])

        recipe = result.imported_recipes[0]
        assert recipe.title == "Lemon Bars"
        assert recipe.categories == ["dessert", "baking"]


class TestProgress:
    def test_callback_receives_snapshots(self, populated_repository):
        snapshots = []
        options = ImportOptions(batch_size=2, progress_callback=snapshots.append)
        items = [item("Lemon Bars"), item("Pancakes"), {"title": "Broken"}]

        result = ImportService(populated_repository).import_from_json(USER_ID, items, options)

        assert [s.processed_items for s in snapshots] == [1, 2, 3]
        assert [s.current_item for s in snapshots] == ["Lemon Bars", "Pancakes", "Broken"]
        assert all(s.is_consistent for s in snapshots)
        assert snapshots[0].skipped_count == 0
        assert snapshots[-1].skipped_count == 2
        assert result.progress.current_item is None
        assert result.progress.processed_items == 3


class TestCsvImport:
    def test_rows_become_recipes(self, repository):
        result = ImportService(repository).import_auto(USER_ID, GARLIC_BREAD_CSV, "recipes.csv")

        assert result.success
        recipe = result.imported_recipes[0]
        assert recipe.title == "Garlic Bread"
        assert recipe.servings == 4
        assert recipe.source_url == "https://example.com/garlic-bread"
        assert recipe.ingredients[0].name == "baguette"
        assert recipe.ingredients[1].unit == "tbsp"
        assert [s.description for s in recipe.instructions] == [
            "Slice the bread",
            "Bake for 8 minutes",
        ]

    def test_csv_bytes(self, repository):
        result = ImportService(repository).import_from_csv(USER_ID, GARLIC_BREAD_CSV.encode())
        assert result.imported_count == 1

    def test_empty_csv(self, repository):
        result = ImportService(repository).import_from_csv(USER_ID, "")

        assert not result.success
        assert result.error == "CSV file has no header row"


class TestExternalFormats:
    """Tests for other recipe apps' exports."""

    def test_recipe_keeper(self, repository):
        result = ImportService(repository).import_from_external_format(
            USER_ID, RECIPE_KEEPER_EXPORT, ImportFormat.RECIPE_KEEPER
        )

        recipe = result.imported_recipes[0]
        assert recipe.title == "Shakshuka"
        assert recipe.ingredients[0].name == "eggs"
        assert recipe.ingredients[0].quantity == 4.0
        assert recipe.ingredients[1].unit == "can"
        assert len(recipe.instructions) == 2
        assert recipe.servings == 2
        assert recipe.source_type == "manual"

    def test_paprika(self, repository):
        result = ImportService(repository).import_from_external_format(
            USER_ID, json.dumps(PAPRIKA_EXPORT), "paprika"
        )

        recipe = result.imported_recipes[0]
        assert recipe.title == "Miso Soup"
        assert [i.unit for i in recipe.ingredients] == ["cups", "tbsp"]
        assert [s.description for s in recipe.instructions] == [
            "Heat the dashi.",
            "Whisk in the miso.",
        ]
        assert recipe.cooking_time == 10
        assert recipe.categories == ["soup"]
        assert recipe.source_url == "https://example.com/miso"

    def test_yummly(self, repository):
        result = ImportService(repository).import_from_external_format(
            USER_ID, YUMMLY_EXPORT, ImportFormat.YUMMLY
        )

        recipe = result.imported_recipes[0]
        assert recipe.title == "Berry Smoothie"
        assert recipe.cooking_time == 5
        assert recipe.servings == 1
        assert recipe.categories == ["beverages"]
        assert recipe.tags == ["sweet"]

    def test_allrecipes(self, repository):
        result = ImportService(repository).import_from_external_format(
            USER_ID, ALLRECIPES_EXPORT, ImportFormat.ALLRECIPES
        )

        recipe = result.imported_recipes[0]
        assert recipe.title == "Roast Chicken"
        assert recipe.servings == 4
        assert recipe.instructions[1].duration == 90
        assert recipe.source_type == "web"

    def test_unknown_format(self, repository):
        result = ImportService(repository).import_from_external_format(USER_ID, [], "bogus")
        assert not result.success

    def test_auto_detects_each_app(self, repository):
        service = ImportService(repository)

        for payload in (RECIPE_KEEPER_EXPORT, PAPRIKA_EXPORT, YUMMLY_EXPORT, ALLRECIPES_EXPORT):
            result = service.import_auto(USER_ID, json.dumps(payload), "export.json")
            assert result.imported_count == 1

        assert len(repository.find_by_user_id(USER_ID)) == 4


class TestDetectFormat:
    def test_csv(self):
        assert detect_format("anything", "Recipes.CSV") == ImportFormat.CSV
        assert detect_format("title,ingredients\nSoup,water") == ImportFormat.CSV

    def test_backup(self):
        payload = json.dumps({"version": "1.0.0", "exportDate": "2024-01-15", "recipes": []})
        assert detect_format(payload) == ImportFormat.BACKUP

    def test_apps(self):
        assert detect_format(json.dumps(RECIPE_KEEPER_EXPORT)) == ImportFormat.RECIPE_KEEPER
        assert detect_format(json.dumps(PAPRIKA_EXPORT)) == ImportFormat.PAPRIKA
        assert detect_format(json.dumps(YUMMLY_EXPORT)) == ImportFormat.YUMMLY
        assert detect_format(json.dumps(ALLRECIPES_EXPORT)) == ImportFormat.ALLRECIPES

    def test_plain_json(self):
        assert detect_format(json.dumps([LEMON_BARS]).encode()) == ImportFormat.JSON

