"""Source shape detection for raw entry batches."""

from collections.abc import Callable, Mapping, Sequence

from nutrition_normalizer.domain.entries import (
    SourceShape,
    UnrecognizedSourceShapeError,
)


def _is_shape_a(record: Mapping[str, object]) -> bool:
    return "entryId" in record and "foodName" in record


def _is_shape_b(record: Mapping[str, object]) -> bool:
    return (
        "loggedAt" in record
        and "servingSize" in record
        and isinstance(record["servingSize"], str)
    )


def _is_shape_c(record: Mapping[str, object]) -> bool:
    item = record.get("item")
    nutrients = record.get("nutrients")
    return (
        isinstance(item, Mapping)
        and "label" in item
        and isinstance(nutrients, Sequence)
        and not isinstance(nutrients, str | bytes)
    )


def _is_shape_d(record: Mapping[str, object]) -> bool:
    return "time" in record and "food" in record


# Evaluated in order; the first matching signature wins.
_SIGNATURES: tuple[tuple[SourceShape, Callable[[Mapping[str, object]], bool]], ...] = (
    (SourceShape.A, _is_shape_a),
    (SourceShape.B, _is_shape_b),
    (SourceShape.C, _is_shape_c),
    (SourceShape.D, _is_shape_d),
)


def classify_record(record: object) -> SourceShape:
    """Return the shape a single raw record conforms to."""
    if not isinstance(record, Mapping):
        raise UnrecognizedSourceShapeError([])
    for shape, matches in _SIGNATURES:
        if matches(record):
            return shape
    raise UnrecognizedSourceShapeError(sorted(str(key) for key in record))


def classify_batch(records: Sequence[object]) -> SourceShape | None:
    """Pick the shape for a whole batch from its first record.

    Returns None for an empty batch.
    """
    if not records:
        return None
    return classify_record(records[0])
