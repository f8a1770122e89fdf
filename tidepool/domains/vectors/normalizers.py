"""Normalizers for query responses.

Accepted query-response shapes, in priority order:

    [ {...}, ... ]                         bare result list
    {"namespace"|"ns": ..., "results": []}
    {"namespace"|"ns": ..., "vectors": []}

Within a result, the score is read from ``score``, then ``dist``, then
``distance``, else 0.
"""

from typing import Any, Mapping

from pydantic import ValidationError as PydanticValidationError

from tidepool.core.exceptions import TidepoolError
from tidepool.core.shapes import (
    ResponseShape,
    first_present,
    has_list,
    is_list,
    lenient_float,
    non_empty_str,
    normalize_shape,
)
from tidepool.domains.vectors.types import QueryResponse, VectorResult

_SCORE_KEYS = ("score", "dist", "distance")


def normalize_vector_result(record: Any) -> VectorResult:
    """Normalize one result record.

    Raises:
        TidepoolError: If the entry is not a record or has no id.
    """
    if not isinstance(record, Mapping) or record.get("id") is None:
        raise TidepoolError("Unexpected query result shape", response=record)

    vector = record.get("vector")
    attributes = record.get("attributes")
    try:
        return VectorResult(
            id=str(record["id"]),
            score=lenient_float(first_present(record, *_SCORE_KEYS)),
            vector=list(vector) if isinstance(vector, list) else None,
            attributes=dict(attributes) if isinstance(attributes, Mapping) else None,
        )
    except PydanticValidationError as e:
        raise TidepoolError("Unexpected query result shape", response=record) from e


def normalize_vector_results(data: Any) -> list[VectorResult]:
    """Normalize a bare list of result records, keeping backend order."""
    if not isinstance(data, list):
        raise TidepoolError("Unexpected query results shape", response=data)
    return [normalize_vector_result(record) for record in data]


def _from_list(data: list, *, fallback_namespace: str) -> QueryResponse:
    return QueryResponse(namespace=fallback_namespace, results=normalize_vector_results(data))


def _from_record(key: str):
    def _build(data: Mapping[str, Any], *, fallback_namespace: str) -> QueryResponse:
        namespace = non_empty_str(first_present(data, "namespace", "ns")) or fallback_namespace
        return QueryResponse(namespace=namespace, results=normalize_vector_results(data[key]))

    return _build


QUERY_RESPONSE_SHAPES: tuple[ResponseShape[QueryResponse], ...] = (
    ResponseShape("bare-list", is_list, _from_list),
    ResponseShape("results-record", has_list("results"), _from_record("results")),
    ResponseShape("vectors-record", has_list("vectors"), _from_record("vectors")),
)


def normalize_query_response(data: Any, fallback_namespace: str) -> QueryResponse:
    """Normalize any accepted query-response shape.

    Args:
        data: Decoded response body.
        fallback_namespace: The namespace that was queried; used when the body
            does not name one.

    Raises:
        TidepoolError: On an unrecognized shape.
    """
    return normalize_shape(
        data, QUERY_RESPONSE_SHAPES, "query", fallback_namespace=fallback_namespace
    )
