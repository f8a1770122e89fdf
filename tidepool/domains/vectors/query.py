"""Query reconciliation and wire-body construction.

``query`` accepts a bare vector plus options, a ``QueryRequest``, a mapping, or
keyword options alone. ``reconcile_query`` folds every calling convention into
one ``QueryRequest`` before anything is validated; ``prepare_query`` then
validates it and builds the snake_case wire body.
"""

from dataclasses import dataclass, fields, replace
from typing import Any, Mapping, Optional

from tidepool.core.exceptions import ValidationError
from tidepool.domains.vectors.types import QueryMode, QueryRequest
from tidepool.domains.vectors.validation import (
    distance_metric,
    fusion_mode,
    normalize_alpha,
    optional_text,
    positive_integer,
    query_mode,
    resolve_namespace,
    validate_attributes,
    validate_vector,
)

DEFAULT_TOP_K = 10

# camelCase spellings accepted from callers coming from the JS client
_OPTION_ALIASES = {
    "topK": "top_k",
    "distanceMetric": "distance_metric",
    "includeVectors": "include_vectors",
    "efSearch": "ef_search",
    "rrfK": "rrf_k",
}

_QUERY_FIELDS = frozenset(f.name for f in fields(QueryRequest))


@dataclass(frozen=True)
class PreparedQuery:
    """A validated query: the resolved namespace and the wire body."""

    namespace: str
    body: dict[str, Any]


# ---------------------------------------------------------------------------
# Reconciliation
# ---------------------------------------------------------------------------


def _canonical_options(options: Mapping[str, Any]) -> dict[str, Any]:
    canonical: dict[str, Any] = {}
    for key, value in options.items():
        name = _OPTION_ALIASES.get(key, key)
        if name not in _QUERY_FIELDS:
            raise ValidationError(f"Unknown query option '{key}'")
        if name in canonical:
            raise ValidationError(f"Query option '{name}' was given more than once")
        canonical[name] = value
    return canonical


def merge_query_options(
    options: Optional[Mapping[str, Any]], keyword_options: Mapping[str, Any]
) -> dict[str, Any]:
    """Combine a positional options mapping with keyword options.

    ``query(vector, {"top_k": 5})`` and ``query(vector, top_k=5)`` are
    equivalent. Naming one option in both places is an error.
    """
    if options is None:
        return dict(keyword_options)
    if not isinstance(options, Mapping):
        raise ValidationError("query options must be a mapping")
    merged = dict(options)
    for key, value in keyword_options.items():
        if key in merged:
            raise ValidationError(f"Query option '{key}' was given more than once")
        merged[key] = value
    return merged


def reconcile_query(
    vector_or_request: Any = None,
    options: Optional[Mapping[str, Any]] = None,
) -> QueryRequest:
    """Fold the supported calling conventions into one QueryRequest.

    Keyword options override fields of a request object or mapping. A
    positional value that is neither a ``QueryRequest`` nor a mapping is
    taken as the query vector.
    """
    overrides = _canonical_options(options or {})

    if vector_or_request is None:
        return QueryRequest(**overrides)
    if isinstance(vector_or_request, QueryRequest):
        return replace(vector_or_request, **overrides) if overrides else vector_or_request
    if isinstance(vector_or_request, Mapping):
        return QueryRequest(**{**_canonical_options(vector_or_request), **overrides})
    if "vector" in overrides:
        raise ValidationError("vector was given both positionally and as an option")
    return QueryRequest(vector=vector_or_request, **overrides)


# ---------------------------------------------------------------------------
# Validation + body
# ---------------------------------------------------------------------------


def _check_mode_inputs(mode: QueryMode, has_vector: bool, has_text: bool) -> None:
    if mode in (QueryMode.VECTOR, QueryMode.HYBRID) and not has_vector:
        raise ValidationError(f"vector is required for {mode.value} queries")
    if mode in (QueryMode.TEXT, QueryMode.HYBRID) and not has_text:
        raise ValidationError(f"text is required for {mode.value} queries")


def prepare_query(request: QueryRequest, default_namespace: str) -> PreparedQuery:
    """Validate a reconciled request and build its wire body.

    Only fields that are present are sent, except ``top_k``,
    ``include_vectors`` and ``mode`` which always are.

    Raises:
        ValidationError: On the first violated constraint.
    """
    top_k = DEFAULT_TOP_K if request.top_k is None else positive_integer(request.top_k, "top_k")
    ef_search = (
        None if request.ef_search is None else positive_integer(request.ef_search, "ef_search")
    )
    nprobe = None if request.nprobe is None else positive_integer(request.nprobe, "nprobe")
    rrf_k = None if request.rrf_k is None else positive_integer(request.rrf_k, "rrf_k")

    vector = None if request.vector is None else validate_vector(request.vector)
    text = optional_text(request.text)
    mode = query_mode(request.mode, vector is not None, text is not None)
    _check_mode_inputs(mode, vector is not None, text is not None)

    alpha = None if request.alpha is None else normalize_alpha(request.alpha)
    fusion = fusion_mode(request.fusion)
    metric = distance_metric(request.distance_metric)

    filters = validate_attributes(request.filters, "filters")
    include_vectors = False if request.include_vectors is None else request.include_vectors
    if not isinstance(include_vectors, bool):
        raise ValidationError("include_vectors must be a boolean")

    namespace = resolve_namespace(request.namespace, default_namespace)

    body: dict[str, Any] = {}
    if vector is not None:
        body["vector"] = vector
    if text is not None:
        body["text"] = text
    body["mode"] = mode.value
    body["top_k"] = top_k
    body["include_vectors"] = include_vectors
    if metric is not None:
        body["distance_metric"] = metric.value
    if filters is not None:
        body["filters"] = filters
    if ef_search is not None:
        body["ef_search"] = ef_search
    if nprobe is not None:
        body["nprobe"] = nprobe
    if alpha is not None:
        body["alpha"] = alpha
    if fusion is not None:
        body["fusion"] = fusion.value
    if rrf_k is not None:
        body["rrf_k"] = rrf_k

    return PreparedQuery(namespace=namespace, body=body)
