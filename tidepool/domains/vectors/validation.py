"""Input validation primitives.

Each primitive takes an untyped value and either returns the narrowed value or
raises ``ValidationError`` naming the violated constraint. They run before any
network call, so invalid input never has side effects.
"""

import math
from numbers import Integral, Real
from typing import Any, Mapping, Optional, Sequence

from tidepool.core.exceptions import ValidationError
from tidepool.domains.vectors.types import Document, DistanceMetric, FusionMode, QueryMode


def _is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def as_float(value: Any) -> float:
    """Return ``value`` as a float.

    Non-numbers become NaN; ints too large for a float become an infinity of the
    same sign rather than raising OverflowError.
    """
    if not _is_number(value):
        return math.nan
    try:
        return float(value)
    except OverflowError:
        return math.inf if value > 0 else -math.inf


# ---------------------------------------------------------------------------
# Scalars
# ---------------------------------------------------------------------------


def non_empty_string(value: Any, field_name: str) -> str:
    """Return ``value`` trimmed; reject non-strings and blank strings."""
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field_name} must be a non-empty string")
    return value.strip()


def positive_integer(value: Any, field_name: str) -> int:
    """Return ``value`` as int; reject anything but a finite integer > 0.

    Integral floats such as ``5.0`` are accepted.
    """
    number = as_float(value)
    if not math.isfinite(number) or not number.is_integer() or number <= 0:
        raise ValidationError(f"{field_name} must be a positive integer")
    return int(value)


def normalize_alpha(value: Any) -> float:
    """Clamp the blend weight into [0, 1].

    Out-of-range values are clamped, not rejected; only non-finite or
    non-numeric input fails. Integers of any size are finite and clamp.
    """
    number = as_float(value)
    if math.isnan(number) or (math.isinf(number) and not isinstance(value, Integral)):
        raise ValidationError("alpha must be a finite number")
    return min(1.0, max(0.0, number))


def optional_text(value: Any) -> Optional[str]:
    """Return trimmed text, or None when absent or whitespace-only."""
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError("text must be a string")
    trimmed = value.strip()
    return trimmed or None


# ---------------------------------------------------------------------------
# Vectors
# ---------------------------------------------------------------------------


def validate_vector(value: Any, expected_dims: Optional[int] = None) -> list[float]:
    """Return the vector as a list of floats.

    Raises:
        ValidationError: If ``value`` is not a sequence, is empty, holds a
            non-finite or non-numeric element, or does not have exactly
            ``expected_dims`` elements when given.
    """
    if not _is_sequence(value):
        raise ValidationError("Vector must be an array of numbers")
    if len(value) == 0:
        raise ValidationError("Vector cannot be empty")
    if not all(math.isfinite(as_float(v)) for v in value):
        raise ValidationError("Vector must contain only finite numbers")
    if expected_dims is not None and len(value) != expected_dims:
        raise ValidationError(f"Expected {expected_dims} dimensions, got {len(value)}")
    return [float(v) for v in value]


# ---------------------------------------------------------------------------
# Attributes
# ---------------------------------------------------------------------------


def _attribute_value(value: Any, path: str) -> Any:
    if value is None or isinstance(value, (bool, int, str)):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ValidationError(f"{path} must be a finite number")
        return value
    if isinstance(value, Mapping):
        copied = {}
        for key, item in value.items():
            if not isinstance(key, str):
                raise ValidationError(f"{path} keys must be strings")
            copied[key] = _attribute_value(item, f"{path}.{key}")
        return copied
    if _is_sequence(value):
        return [_attribute_value(item, f"{path}[{i}]") for i, item in enumerate(value)]
    raise ValidationError(f"{path} has unsupported type {type(value).__name__}")


def validate_attributes(value: Any, field_name: str) -> Optional[dict[str, Any]]:
    """Check a JSON-compatible mapping and return a plain copy.

    Values may be null, booleans, finite numbers, strings, lists and string-keyed
    mappings of those, nested to any depth.
    """
    if value is None:
        return None
    if not isinstance(value, Mapping):
        raise ValidationError(f"{field_name} must be a mapping")
    return _attribute_value(value, field_name)


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


def query_mode(mode: Any, has_vector: bool, has_text: bool) -> QueryMode:
    """Validate an explicit mode, or infer one from the inputs present.

    Inference: hybrid with both inputs, text with text only, else vector.
    """
    if mode is None:
        if has_vector and has_text:
            return QueryMode.HYBRID
        if has_text:
            return QueryMode.TEXT
        return QueryMode.VECTOR
    try:
        return QueryMode(mode)
    except ValueError:
        raise ValidationError(
            f"mode must be one of: {', '.join(m.value for m in QueryMode)}"
        ) from None


def fusion_mode(value: Any) -> Optional[FusionMode]:
    """Validate the optional fusion strategy."""
    if value is None:
        return None
    try:
        return FusionMode(value)
    except ValueError:
        raise ValidationError(
            f"fusion must be one of: {', '.join(f.value for f in FusionMode)}"
        ) from None


def distance_metric(value: Any) -> Optional[DistanceMetric]:
    """Validate the optional distance metric hint."""
    if value is None:
        return None
    try:
        return DistanceMetric(value)
    except ValueError:
        raise ValidationError(
            f"distance_metric must be one of: {', '.join(m.value for m in DistanceMetric)}"
        ) from None


# ---------------------------------------------------------------------------
# Batches
# ---------------------------------------------------------------------------


def _document_fields(document: Any, index: int) -> Mapping[str, Any]:
    if isinstance(document, Document):
        return {
            "id": document.id,
            "vector": document.vector,
            "text": document.text,
            "attributes": document.attributes,
        }
    if isinstance(document, Mapping):
        return document
    raise ValidationError(f"Document at index {index} must be a Document or a mapping")


def validate_documents(documents: Any) -> list[Document]:
    """Validate an upsert batch.

    Every id must be a non-empty string and every vector must be finite with
    the first document's dimensionality. Ids are kept exactly as given.

    Returns:
        The batch as ``Document`` values with float vectors.
    """
    if not _is_sequence(documents) or len(documents) == 0:
        raise ValidationError("documents must be a non-empty list")

    validated: list[Document] = []
    expected_dims: Optional[int] = None
    for index, document in enumerate(documents):
        fields = _document_fields(document, index)
        doc_id = fields.get("id")
        non_empty_string(doc_id, "id")
        try:
            vector = validate_vector(fields.get("vector"), expected_dims)
        except ValidationError as e:
            raise ValidationError(f"Document '{doc_id}': {e.message}") from e
        if expected_dims is None:
            expected_dims = len(vector)

        text = fields.get("text")
        if text is not None and not isinstance(text, str):
            raise ValidationError(f"Document '{doc_id}': text must be a string")
        try:
            attributes = validate_attributes(fields.get("attributes"), "attributes")
        except ValidationError as e:
            raise ValidationError(f"Document '{doc_id}': {e.message}") from e

        validated.append(
            Document(id=doc_id, vector=vector, text=text, attributes=attributes)
        )
    return validated


def validate_ids(ids: Any) -> list[str]:
    """Validate a delete batch: a non-empty list of non-empty string ids."""
    if not _is_sequence(ids) or len(ids) == 0:
        raise ValidationError("ids must be a non-empty list")
    for doc_id in ids:
        non_empty_string(doc_id, "id")
    return list(ids)


# ---------------------------------------------------------------------------
# Namespaces
# ---------------------------------------------------------------------------


def resolve_namespace(namespace: Any, default_namespace: str) -> str:
    """Use ``namespace`` if given and non-blank, else the default; re-validate either.

    A non-string override is not replaced by the default and fails validation.
    """
    if namespace is None or (isinstance(namespace, str) and not namespace.strip()):
        candidate = default_namespace
    else:
        candidate = namespace
    return non_empty_string(candidate, "namespace")
