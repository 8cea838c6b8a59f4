"""Tests for the consistency validator."""

import pytest

from nutrition_normalizer.domain.entries import CanonicalEntry, Issues, Macros, Serving
from nutrition_normalizer.services.validation import (
    calories_consistent,
    expected_calories,
    validate_entry,
)


def _entry(
    serving: Serving | None = None,
    macros: Macros | None = None,
    calories: float | None = 200,
    issues: Issues | None = None,
) -> CanonicalEntry:
    return CanonicalEntry(
        id="e-1",
        timestamp="2024-05-01T08:00:00Z",
        food_name="Peanut butter",
        serving=serving or Serving(2, "tbsp"),
        macros=macros or Macros(protein=8, carbs=6, fat=16),
        calories=calories,
        issues=issues,
    )


def test_expected_calories_uses_atwater_factors() -> None:
    assert expected_calories(Macros(protein=12, carbs=20, fat=5)) == 173


@pytest.mark.parametrize(
    ("declared", "consistent"),
    [(200, True), (150, True), (240, True), (241, False), (100, False)],
)
def test_calorie_tolerance_band(declared: float, consistent: bool) -> None:
    macros = Macros(protein=25, carbs=20, fat=0)  # expected 180, band 60
    assert calories_consistent(declared, macros) is consistent


def test_clean_entry_has_no_issues() -> None:
    entry = validate_entry(_entry())

    assert entry.issues is None
    assert "issues" not in entry.to_dict()


@pytest.mark.parametrize("unit", ["g", "G", "ml", "ML", "tbsp", "Tbsp"])
def test_recognized_units_are_valid(unit: str) -> None:
    entry = validate_entry(_entry(serving=Serving(1, unit)))

    assert entry.issues is None


def test_unrecognized_unit_is_invalid() -> None:
    entry = validate_entry(_entry(serving=Serving(1, "cup")))

    assert entry.issues == Issues(invalid=("serving",))


@pytest.mark.parametrize("amount", [0, -1, float("inf"), float("nan")])
def test_non_positive_or_non_finite_amount_is_invalid(amount: float) -> None:
    entry = validate_entry(_entry(serving=Serving(amount, "g")))

    assert entry.issues == Issues(invalid=("serving",))


def test_both_serving_checks_flag_serving_once() -> None:
    entry = validate_entry(_entry(serving=Serving(0, "bowl")))

    assert entry.issues == Issues(invalid=("serving",))


def test_negative_macro_is_invalid() -> None:
    entry = validate_entry(
        _entry(macros=Macros(protein=6, carbs=18, fat=-2), calories=78)
    )

    assert entry.issues == Issues(invalid=("macros",))


def test_negative_calories_are_invalid_and_inconsistent() -> None:
    entry = validate_entry(_entry(calories=-10))

    assert entry.issues == Issues(invalid=("calories",), inconsistent=("calories",))


def test_inconsistent_calories_are_flagged() -> None:
    entry = validate_entry(
        _entry(macros=Macros(protein=12, carbs=20, fat=5), calories=300)
    )

    assert entry.issues == Issues(inconsistent=("calories",))
    assert entry.calories == 300


def test_null_calories_skip_calorie_checks() -> None:
    entry = validate_entry(_entry(calories=None))

    assert entry.issues is None


def test_zero_macros_with_zero_calories_are_consistent() -> None:
    entry = validate_entry(_entry(macros=Macros(0, 0, 0), calories=0))

    assert entry.issues is None


def test_existing_unknown_findings_are_kept() -> None:
    entry = validate_entry(
        _entry(
            macros=Macros(protein=0, carbs=20, fat=5),
            calories=400,
            issues=Issues(unknown=("macros", "calories")),
        )
    )

    assert entry.issues == Issues(
        unknown=("macros", "calories"), inconsistent=("calories",)
    )


def test_validation_is_idempotent() -> None:
    once = validate_entry(
        _entry(serving=Serving(0, "cup"), macros=Macros(1, 1, -1), calories=500)
    )
    twice = validate_entry(once)

    assert twice.issues == once.issues
    assert once.issues == Issues(
        invalid=("serving", "macros"), inconsistent=("calories",)
    )
