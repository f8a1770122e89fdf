"""Types for the vectors domain.

Request-side values (``Document``, ``QueryRequest``) are plain frozen dataclasses:
they are validated by ``tidepool.domains.vectors.validation`` so callers get the
client's own ``ValidationError`` messages rather than coercion. Response-side
values are pydantic models produced by the normalizers.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from pydantic import BaseModel, Field

AttributeValue = Union[
    None,
    bool,
    int,
    float,
    str,
    List["AttributeValue"],
    Dict[str, "AttributeValue"],
]

Vector = List[float]


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class DistanceMetric(str, Enum):
    """Distance metrics understood by the backend."""

    COSINE = "cosine_distance"
    EUCLIDEAN = "euclidean_squared"
    DOT_PRODUCT = "dot_product"


class QueryMode(str, Enum):
    """Search modes. Hybrid needs both a vector and text."""

    VECTOR = "vector"
    TEXT = "text"
    HYBRID = "hybrid"


class FusionMode(str, Enum):
    """How hybrid scores are combined: score blending or reciprocal-rank fusion."""

    BLEND = "blend"
    RRF = "rrf"


# ---------------------------------------------------------------------------
# Request values
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Document:
    """A document to upsert.

    Re-upserting the same id replaces the stored document.
    """

    id: str
    vector: Sequence[float]
    text: Optional[str] = None
    attributes: Optional[Mapping[str, AttributeValue]] = None


@dataclass(frozen=True)
class QueryRequest:
    """Object-style query.

    Every field is optional; the mode decides which inputs are required
    (vector for ``vector``, text for ``text``, both for ``hybrid``).

    Attributes:
        vector: Query vector.
        text: Free text for lexical matching. Blank text counts as absent.
        mode: ``vector``, ``text`` or ``hybrid``; inferred when omitted.
        top_k: Number of results, default 10.
        namespace: Overrides the client's default namespace.
        distance_metric: Distance metric hint.
        include_vectors: Return stored vectors with each result.
        filters: Structural attribute filter, passed through opaquely.
        ef_search: HNSW beam width.
        nprobe: IVF probe count.
        alpha: Blend weight, clamped into [0, 1].
        fusion: ``blend`` or ``rrf``.
        rrf_k: Reciprocal-rank-fusion constant.
    """

    vector: Optional[Sequence[float]] = None
    text: Optional[str] = None
    mode: Optional[Union[QueryMode, str]] = None
    top_k: Optional[int] = None
    namespace: Optional[str] = None
    distance_metric: Optional[Union[DistanceMetric, str]] = None
    include_vectors: Optional[bool] = None
    filters: Optional[Mapping[str, AttributeValue]] = None
    ef_search: Optional[int] = None
    nprobe: Optional[int] = None
    alpha: Optional[float] = None
    fusion: Optional[Union[FusionMode, str]] = None
    rrf_k: Optional[int] = None


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class VectorResult(BaseModel):
    """One ranked query hit."""

    id: str = Field(..., description="Document id.")
    score: float = Field(0.0, description="Relevance score; higher is better.")
    vector: Optional[List[float]] = Field(None, description="Present only if requested.")
    attributes: Optional[Dict[str, Any]] = Field(None, description="Document attributes.")


class QueryResponse(BaseModel):
    """Results in backend rank order for the namespace that was queried."""

    namespace: str = Field(..., description="Namespace the query ran against.")
    results: List[VectorResult] = Field(default_factory=list, description="Ranked hits.")
