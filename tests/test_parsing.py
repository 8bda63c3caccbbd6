"""Tests for time, quantity and servings parsing."""

import pytest

from cookbook.ingestion.parsing import (
    canonical_unit,
    duration_in_text,
    is_unit,
    parse_duration,
    parse_duration_seconds,
    parse_quantity,
    parse_servings,
    parse_time,
    parse_time_phrase,
)


class TestParseDuration:
    """Tests for ISO 8601 duration parsing."""

    def test_parse_minutes_only(self):
        assert parse_duration("PT30M") == 30
        assert parse_duration("PT5M") == 5

    def test_parse_hours_only(self):
        assert parse_duration("PT1H") == 60
        assert parse_duration("PT2H") == 120

    def test_parse_hours_and_minutes(self):
        assert parse_duration("PT1H30M") == 90
        assert parse_duration("PT2H15M") == 135

    def test_parse_days(self):
        assert parse_duration("P1DT2H") == 1560

    def test_seconds_round_to_minutes(self):
        assert parse_duration("PT90S") == 2

    def test_parse_plain_number(self):
        assert parse_duration("30") == 30
        assert parse_duration(45) == 45

    def test_parse_none_or_empty(self):
        assert parse_duration(None) is None
        assert parse_duration("") is None

    def test_parse_invalid_format(self):
        assert parse_duration("invalid") is None
        assert parse_duration("30 minutes") is None
        assert parse_duration("PT") is None


class TestParseDurationSeconds:
    def test_minutes_and_seconds(self):
        assert parse_duration_seconds("PT4M13S") == 253

    def test_invalid(self):
        assert parse_duration_seconds("4 minutes") is None
        assert parse_duration_seconds(None) is None


class TestParseTime:
    """Tests for the combined time parser."""

    def test_numbers(self):
        assert parse_time(20) == 20
        assert parse_time(12.6) == 13

    def test_iso(self):
        assert parse_time("PT1H") == 60

    def test_phrases(self):
        assert parse_time("about 40 minutes") == 40
        assert parse_time("1 hour 15 mins") == 75
        assert parse_time_phrase("2 hrs") == 120

    def test_leading_integer(self):
        assert parse_time("35") == 35

    def test_unparseable(self):
        assert parse_time("overnight") is None
        assert parse_time(None) is None
        assert parse_time(True) is None


class TestParseQuantity:
    """Tests for ingredient quantity parsing."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("2", 2.0),
            ("1/2", 0.5),
            ("1 1/2", 1.5),
            (".25", 0.25),
            ("½", 0.5),
            ("1½", 1.5),
            ("2 ¼", 2.25),
        ],
    )
    def test_valid(self, text, expected):
        assert parse_quantity(text) == pytest.approx(expected)

    def test_invalid(self):
        assert parse_quantity("a pinch") is None
        assert parse_quantity("1/0") is None
        assert parse_quantity("") is None
        assert parse_quantity(None) is None

    def test_non_finite_rejected(self):
        assert parse_quantity("inf") is None
        assert parse_quantity(float("nan")) is None


class TestParseServings:
    """Tests for recipe yield/servings parsing."""

    def test_parse_plain_number(self):
        assert parse_servings("4") == 4
        assert parse_servings(6) == 6

    def test_parse_with_text(self):
        assert parse_servings("4 servings") == 4
        assert parse_servings("Serves 8") == 8
        assert parse_servings("Makes 12 cookies") == 12

    def test_parse_list(self):
        assert parse_servings(["24", "24 cookies"]) == 24
        assert parse_servings(["a few", "6 bowls"]) == 6

    def test_parse_none_or_empty(self):
        assert parse_servings(None) is None
        assert parse_servings("") is None


class TestUnits:
    def test_known_units(self):
        assert is_unit("cups")
        assert is_unit("Tbsp.")
        assert not is_unit("large")
        assert not is_unit(None)

    def test_canonical_unit(self):
        assert canonical_unit("Cups") == "cup"
        assert canonical_unit("tablespoons") == "tbsp"
        assert canonical_unit("bowl") == "bowl"


class TestDurationInText:
    def test_minutes(self):
        assert duration_in_text("Bake for 10 minutes") == 10

    def test_hours(self):
        assert duration_in_text("Simmer 2 hrs, stirring") == 120

    def test_none(self):
        assert duration_in_text("Stir well") is None
