"""Canonical nutrition entry models."""

from dataclasses import dataclass, field
from enum import Enum

ISSUE_CATEGORIES = ("invalid", "unknown", "inconsistent")


class SourceShape(Enum):
    """Known upstream field layouts."""

    A = "a"
    B = "b"
    C = "c"
    D = "d"


class UnrecognizedSourceShapeError(ValueError):
    """Raised when a batch matches none of the known source shapes."""

    def __init__(self, keys: list[str]) -> None:
        self.keys = keys
        super().__init__(f"Unrecognized source shape (keys: {', '.join(keys)})")


@dataclass(frozen=True)
class Serving:
    """Serving size as declared upstream."""

    amount: float
    unit: str


@dataclass(frozen=True)
class Macros:
    """Macronutrients in grams."""

    protein: float
    carbs: float
    fat: float


@dataclass(frozen=True)
class Issues:
    """Per-field findings grouped by category.

    Each category holds canonical field names in the order they were first
    flagged. Adding a field that is already present is a no-op, so merging
    the same findings twice yields the same result.
    """

    invalid: tuple[str, ...] = ()
    unknown: tuple[str, ...] = ()
    inconsistent: tuple[str, ...] = ()

    def is_empty(self) -> bool:
        return not (self.invalid or self.unknown or self.inconsistent)

    def merge(self, other: "Issues") -> "Issues":
        """Return the union of both findings, keeping first-seen order."""
        return Issues(
            invalid=_union(self.invalid, other.invalid),
            unknown=_union(self.unknown, other.unknown),
            inconsistent=_union(self.inconsistent, other.inconsistent),
        )

    def to_dict(self) -> dict[str, list[str]]:
        """Return only the non-empty categories."""
        payload: dict[str, list[str]] = {}
        for category in ISSUE_CATEGORIES:
            fields = getattr(self, category)
            if fields:
                payload[category] = list(fields)
        return payload


@dataclass
class IssueCollector:
    """Mutable accumulator used while building a single entry."""

    invalid: list[str] = field(default_factory=list)
    unknown: list[str] = field(default_factory=list)
    inconsistent: list[str] = field(default_factory=list)

    def flag(self, category: str, field_name: str) -> None:
        bucket: list[str] = getattr(self, category)
        if field_name not in bucket:
            bucket.append(field_name)

    def build(self) -> Issues:
        return Issues(
            invalid=tuple(self.invalid),
            unknown=tuple(self.unknown),
            inconsistent=tuple(self.inconsistent),
        )


@dataclass(frozen=True)
class CanonicalEntry:
    """Normalized nutrition log entry."""

    id: str
    timestamp: str
    food_name: str
    serving: Serving
    macros: Macros
    calories: float | None
    metadata: dict[str, object] | None = None
    issues: Issues | None = None

    def to_dict(self) -> dict[str, object]:
        """Serialize with the public camelCase field names."""
        payload: dict[str, object] = {
            "id": self.id,
            "timestamp": self.timestamp,
            "foodName": self.food_name,
            "serving": {"amount": self.serving.amount, "unit": self.serving.unit},
            "macros": {
                "protein": self.macros.protein,
                "carbs": self.macros.carbs,
                "fat": self.macros.fat,
            },
            "calories": self.calories,
        }
        if self.metadata:
            payload["metadata"] = self.metadata
        if self.issues is not None and not self.issues.is_empty():
            payload["issues"] = self.issues.to_dict()
        return payload


def _union(first: tuple[str, ...], second: tuple[str, ...]) -> tuple[str, ...]:
    merged = list(first)
    for name in second:
        if name not in merged:
            merged.append(name)
    return tuple(merged)
