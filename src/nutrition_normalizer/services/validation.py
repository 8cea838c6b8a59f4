"""Cross-field checks on canonical entries."""

import math
from dataclasses import replace

from nutrition_normalizer.domain.entries import (
    CanonicalEntry,
    IssueCollector,
    Issues,
    Macros,
)

VALID_SERVING_UNITS = frozenset({"g", "ml", "tbsp"})

# kcal per gram of protein, carbohydrate and fat.
_ATWATER_FACTORS = (4.0, 4.0, 9.0)
_CALORIE_TOLERANCE_DIVISOR = 3


def expected_calories(macros: Macros) -> float:
    """Estimate calories from macros with the 4-4-9 Atwater factors."""
    protein_factor, carbs_factor, fat_factor = _ATWATER_FACTORS
    return (
        macros.protein * protein_factor
        + macros.carbs * carbs_factor
        + macros.fat * fat_factor
    )


def calories_consistent(declared: float, macros: Macros) -> bool:
    """Return whether declared calories are within a third of the estimate."""
    expected = expected_calories(macros)
    return abs(expected) / _CALORIE_TOLERANCE_DIVISOR >= abs(expected - declared)


def is_valid_serving_unit(unit: str) -> bool:
    return unit.lower() in VALID_SERVING_UNITS


def validate_entry(entry: CanonicalEntry) -> CanonicalEntry:
    """Append invalid and inconsistent findings to an entry.

    Existing findings are kept. Every check runs regardless of earlier
    results, and validating an already validated entry changes nothing.
    """
    found = IssueCollector()
    serving = entry.serving
    macros = entry.macros

    if not is_valid_serving_unit(serving.unit):
        found.flag("invalid", "serving")
    if not math.isfinite(serving.amount) or serving.amount <= 0:
        found.flag("invalid", "serving")

    if macros.protein < 0 or macros.carbs < 0 or macros.fat < 0:
        found.flag("invalid", "macros")

    if entry.calories is not None:
        if entry.calories < 0:
            found.flag("invalid", "calories")
        if not calories_consistent(entry.calories, macros):
            found.flag("inconsistent", "calories")

    issues = (entry.issues or Issues()).merge(found.build())
    return replace(entry, issues=None if issues.is_empty() else issues)
