"""Ordered response-shape recognition.

The backend has shipped several JSON shapes for the same response over time.
Each accepted shape is a ``ResponseShape``: a pure recognizer plus a pure
builder. ``normalize_shape`` tries them in priority order and the first match
wins, so the order of a shape tuple is part of the compatibility contract.
"""

import math
from dataclasses import dataclass
from typing import Any, Callable, Generic, Mapping, Optional, Sequence, TypeVar

from tidepool.core.exceptions import TidepoolError

T = TypeVar("T")


@dataclass(frozen=True)
class ResponseShape(Generic[T]):
    """One historically-seen wire shape.

    Attributes:
        name: Short label used in debug output and tests.
        matches: Returns True if ``data`` has this shape.
        build: Turns matching ``data`` into the canonical model. Receives the
            same keyword context ``normalize_shape`` was called with.
    """

    name: str
    matches: Callable[[Any], bool]
    build: Callable[..., T]


def normalize_shape(data: Any, shapes: Sequence[ResponseShape[T]], label: str, **context: Any) -> T:
    """Build the canonical model from the first matching shape.

    Raises:
        TidepoolError: If no shape matches.
    """
    for shape in shapes:
        if shape.matches(data):
            return shape.build(data, **context)
    raise TidepoolError(f"Unexpected {label} response shape", response=data)


# ---------------------------------------------------------------------------
# Recognizer helpers
# ---------------------------------------------------------------------------


def is_list(data: Any) -> bool:
    """True for a JSON array."""
    return isinstance(data, list)


def is_record(data: Any) -> bool:
    """True for a JSON object."""
    return isinstance(data, Mapping)


def has_list(key: str) -> Callable[[Any], bool]:
    """Recognizer for a record exposing a list under ``key``."""

    def _matches(data: Any) -> bool:
        return isinstance(data, Mapping) and isinstance(data.get(key), list)

    return _matches


# ---------------------------------------------------------------------------
# Field helpers
# ---------------------------------------------------------------------------


def first_present(record: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    """Return the value of the first key that is present and not null."""
    for key in keys:
        value = record.get(key)
        if value is not None:
            return value
    return default


def non_empty_str(value: Any) -> Optional[str]:
    """Return the trimmed string, or None for anything else or blank text."""
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def lenient_int(value: Any, default: int = 0) -> int:
    """Coerce a wire number to int; unusable values fall back to ``default``."""
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return default
    if not math.isfinite(number):
        return default
    return int(number)


def lenient_float(value: Any, default: float = 0.0) -> float:
    """Coerce a wire number to float; unusable values fall back to ``default``."""
    if value is None or isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return default
    return number if math.isfinite(number) else default


def optional_bool(value: Any) -> Optional[bool]:
    """Tri-state flag: a real boolean, or None when absent or unrecognized."""
    return value if isinstance(value, bool) else None
