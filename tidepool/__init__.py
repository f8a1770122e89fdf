"""Tidepool - typed async client for the Tidepool query and ingest services."""

from tidepool.client import TidepoolClient, TidepoolConfig
from tidepool.core.config import Service
from tidepool.core.exceptions import (
    ErrorKind,
    NotFoundError,
    ServiceUnavailableError,
    TidepoolError,
    ValidationError,
    map_error,
)
from tidepool.core.retry import with_retry
from tidepool.domains.namespaces import IngestStatus, NamespaceInfo, NamespaceStatus
from tidepool.domains.vectors import (
    AttributeValue,
    DistanceMetric,
    Document,
    FusionMode,
    QueryMode,
    QueryRequest,
    QueryResponse,
    Vector,
    VectorResult,
    validate_vector,
)

__version__ = "0.1.0"

__all__ = [
    "AttributeValue",
    "DistanceMetric",
    "Document",
    "ErrorKind",
    "FusionMode",
    "IngestStatus",
    "NamespaceInfo",
    "NamespaceStatus",
    "NotFoundError",
    "QueryMode",
    "QueryRequest",
    "QueryResponse",
    "Service",
    "ServiceUnavailableError",
    "TidepoolClient",
    "TidepoolConfig",
    "TidepoolError",
    "ValidationError",
    "Vector",
    "VectorResult",
    "map_error",
    "validate_vector",
    "with_retry",
]
