"""Vectors domain: documents, queries and query results."""

from tidepool.domains.vectors.normalizers import normalize_query_response, normalize_vector_results
from tidepool.domains.vectors.query import PreparedQuery, prepare_query, reconcile_query
from tidepool.domains.vectors.types import (
    AttributeValue,
    DistanceMetric,
    Document,
    FusionMode,
    QueryMode,
    QueryRequest,
    QueryResponse,
    Vector,
    VectorResult,
)
from tidepool.domains.vectors.validation import validate_vector

__all__ = [
    "AttributeValue",
    "DistanceMetric",
    "Document",
    "FusionMode",
    "PreparedQuery",
    "QueryMode",
    "QueryRequest",
    "QueryResponse",
    "Vector",
    "VectorResult",
    "normalize_query_response",
    "normalize_vector_results",
    "prepare_query",
    "reconcile_query",
    "validate_vector",
]
