"""Shape-specific mapping of raw entries into canonical entries."""

import math
import re
from collections.abc import Callable, Mapping, Sequence

from nutrition_normalizer.domain.entries import (
    CanonicalEntry,
    IssueCollector,
    Issues,
    Macros,
    Serving,
    SourceShape,
)

DEFAULT_UNIT = "unit"

_SERVING_PATTERN = re.compile(r"^(\d+(?:\.\d+)?)\s*(\D.*)$", re.ASCII)
_NUMBER_PATTERN = re.compile(r"\d+(?:\.\d+)?", re.ASCII)
_LEADING_NUMBER_PATTERN = re.compile(
    r"^\s*[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII
)
_ID_UNSAFE_PATTERN = re.compile(r"[^a-zA-Z0-9-]")

_NUTRIENT_KEYS = {
    "protein": "protein",
    "carbohydrate": "carbs",
    "carbs": "carbs",
    "fat": "fat",
    "energy": "energy",
}

Coercer = Callable[[object], float | None]


def parse_serving_size(text: str) -> tuple[Serving, bool]:
    """Parse a free-text serving such as "2 tbsp" or "500ml".

    Returns the serving and whether any part of it had to be defaulted.
    """
    cleaned = text.strip()
    match = _SERVING_PATTERN.match(cleaned)
    if match:
        return Serving(amount=float(match.group(1)), unit=match.group(2).strip()), False

    number = _NUMBER_PATTERN.search(cleaned)
    if number:
        remainder = " ".join(cleaned.replace(number.group(0), "", 1).split())
        if remainder:
            return Serving(amount=float(number.group(0)), unit=remainder), False
        return Serving(amount=float(number.group(0)), unit=DEFAULT_UNIT), True

    return Serving(amount=1.0, unit=cleaned or DEFAULT_UNIT), True


def strict_number(value: object) -> float | None:
    """Convert a number or numeric string, rejecting anything non-finite."""
    number = _raw_number(value)
    if number is None or not math.isfinite(number):
        return None
    return number


def leading_number(value: object) -> float | None:
    """Convert using the leading numeric prefix of a string ("12.5 g" -> 12.5)."""
    if isinstance(value, str):
        match = _LEADING_NUMBER_PATTERN.match(value)
        if not match:
            return None
        return strict_number(match.group(0).strip())
    return strict_number(value)


def normalize_shape_a(record: object) -> CanonicalEntry:
    """Map an `entryId`/`foodName` record."""
    raw = _as_mapping(record)
    issues = IssueCollector()
    timestamp = _text(raw.get("timestamp"), "timestamp", issues)
    food_name = _text(raw.get("foodName"), "foodName", issues)
    return CanonicalEntry(
        id=_native_id(raw.get("entryId"), "a", timestamp, food_name, issues),
        timestamp=timestamp,
        food_name=food_name,
        serving=_verbatim_serving(raw.get("serving"), issues),
        macros=_macros(
            raw.get("macros"), ("protein_g", "carbs_g", "fat_g"), strict_number, issues
        ),
        calories=_calories(raw.get("calories_kcal"), strict_number, issues),
        issues=_finish(issues),
    )


def normalize_shape_b(record: object) -> CanonicalEntry:
    """Map a `loggedAt`/`servingSize` record with string-typed numbers."""
    raw = _as_mapping(record)
    issues = IssueCollector()
    timestamp = _text(raw.get("loggedAt"), "timestamp", issues)
    food_name = _text(raw.get("name"), "foodName", issues)

    serving_size = raw.get("servingSize")
    if isinstance(serving_size, str):
        serving, defaulted = parse_serving_size(serving_size)
    else:
        serving, defaulted = Serving(amount=1.0, unit=DEFAULT_UNIT), True
    if defaulted:
        issues.flag("unknown", "serving")

    metadata: dict[str, object] = {}
    extra = raw.get("extra")
    if extra is not None:
        metadata["extra"] = dict(extra) if isinstance(extra, Mapping) else extra

    return CanonicalEntry(
        id=_native_id(raw.get("id"), "b", timestamp, food_name, issues),
        timestamp=timestamp,
        food_name=food_name,
        serving=serving,
        macros=_macros(
            raw.get("macros"), ("protein", "carbs", "fat"), leading_number, issues
        ),
        calories=_calories(raw.get("calories"), leading_number, issues),
        metadata=metadata or None,
        issues=_finish(issues),
    )


def normalize_shape_c(record: object) -> CanonicalEntry:
    """Map an `item`/`nutrients` record.

    Nutrients arrive as a list of key/value pairs; for repeated keys the last
    entry wins.
    """
    raw = _as_mapping(record)
    issues = IssueCollector()
    item = _as_mapping(raw.get("item"))
    timestamp = _text(raw.get("logged_at"), "timestamp", issues)
    food_name = _text(item.get("label"), "foodName", issues)

    values: dict[str, float | None] = {}
    nutrients = raw.get("nutrients")
    if isinstance(nutrients, Sequence) and not isinstance(nutrients, str | bytes):
        for nutrient in nutrients:
            if not isinstance(nutrient, Mapping):
                continue
            key = nutrient.get("key")
            if not isinstance(key, str):
                continue
            target = _NUTRIENT_KEYS.get(key.strip().lower())
            if target:
                values[target] = strict_number(nutrient.get("value"))

    macro_values = [values.get(name) for name in ("protein", "carbs", "fat")]
    if any(value is None for value in macro_values):
        issues.flag("unknown", "macros")
    protein, carbs, fat = (0.0 if value is None else value for value in macro_values)

    calories = values.get("energy")
    if calories is None:
        issues.flag("unknown", "calories")

    amount = _serving_amount(raw.get("serving_grams"))
    if amount is None:
        amount = 1.0
        issues.flag("unknown", "serving")

    metadata: dict[str, object] = {}
    if raw.get("source"):
        metadata["source"] = raw["source"]
    if item.get("brand"):
        metadata["brand"] = item["brand"]

    return CanonicalEntry(
        id=synthesize_id("c", timestamp, food_name),
        timestamp=timestamp,
        food_name=food_name,
        serving=Serving(amount=amount, unit="g"),
        macros=Macros(protein=protein, carbs=carbs, fat=fat),
        calories=calories,
        metadata=metadata or None,
        issues=_finish(issues),
    )


def normalize_shape_d(record: object) -> CanonicalEntry:
    """Map a `time`/`food` record."""
    raw = _as_mapping(record)
    issues = IssueCollector()
    timestamp = _text(raw.get("time"), "timestamp", issues)
    food_name = _text(raw.get("food"), "foodName", issues)

    metadata: dict[str, object] = {}
    if raw.get("macros_basis"):
        metadata["macros_basis"] = raw["macros_basis"]

    return CanonicalEntry(
        id=_native_id(raw.get("id"), "d", timestamp, food_name, issues),
        timestamp=timestamp,
        food_name=food_name,
        serving=_verbatim_serving(raw.get("serving"), issues),
        macros=_macros(
            raw.get("macros"), ("protein_g", "carbs_g", "fat_g"), strict_number, issues
        ),
        calories=_calories(raw.get("calories_kcal"), strict_number, issues),
        metadata=metadata or None,
        issues=_finish(issues),
    )


NORMALIZERS: dict[SourceShape, Callable[[object], CanonicalEntry]] = {
    SourceShape.A: normalize_shape_a,
    SourceShape.B: normalize_shape_b,
    SourceShape.C: normalize_shape_c,
    SourceShape.D: normalize_shape_d,
}


def synthesize_id(prefix: str, timestamp: str, name: str) -> str:
    """Build an id from timestamp and name, keeping only [a-zA-Z0-9-]."""
    return _ID_UNSAFE_PATTERN.sub("-", f"{prefix}-{timestamp}-{name}")


def _raw_number(value: object) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        try:
            return float(value)
        except OverflowError:
            return math.copysign(math.inf, value)
    if isinstance(value, float):
        return value
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


def _serving_amount(value: object) -> float | None:
    # Non-finite and non-positive amounts pass through for the validator.
    return _raw_number(value)


def _as_mapping(value: object) -> Mapping[str, object]:
    return value if isinstance(value, Mapping) else {}


def _text(value: object, field_name: str, issues: IssueCollector) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, int | float) and not isinstance(value, bool):
        return str(value)
    issues.flag("unknown", field_name)
    return ""


def _native_id(
    value: object,
    prefix: str,
    timestamp: str,
    food_name: str,
    issues: IssueCollector,
) -> str:
    if isinstance(value, str) and value:
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    issues.flag("unknown", "id")
    return synthesize_id(prefix, timestamp, food_name)


def _verbatim_serving(value: object, issues: IssueCollector) -> Serving:
    serving = _as_mapping(value)
    amount = _serving_amount(serving.get("amount"))
    if amount is None:
        amount = 1.0
        issues.flag("unknown", "serving")
    unit = serving.get("unit")
    if not isinstance(unit, str):
        unit = DEFAULT_UNIT
        issues.flag("unknown", "serving")
    return Serving(amount=amount, unit=unit)


def _macros(
    value: object,
    keys: tuple[str, str, str],
    coerce: Coercer,
    issues: IssueCollector,
) -> Macros:
    raw = _as_mapping(value)
    converted = [coerce(raw.get(key)) for key in keys]
    if any(number is None for number in converted):
        issues.flag("unknown", "macros")
    protein, carbs, fat = (0.0 if number is None else number for number in converted)
    return Macros(protein=protein, carbs=carbs, fat=fat)


def _calories(value: object, coerce: Coercer, issues: IssueCollector) -> float | None:
    if value is None or (isinstance(value, str) and not value.strip()):
        issues.flag("unknown", "calories")
        return None
    calories = coerce(value)
    if calories is None:
        issues.flag("unknown", "calories")
    return calories


def _finish(issues: IssueCollector) -> Issues | None:
    built = issues.build()
    return None if built.is_empty() else built
