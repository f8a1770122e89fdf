"""Namespaces domain: namespace info, listings and maintenance status."""

from tidepool.domains.namespaces.normalizers import (
    normalize_ingest_status,
    normalize_namespace_info,
    normalize_namespace_list,
    normalize_namespace_status,
)
from tidepool.domains.namespaces.types import IngestStatus, NamespaceInfo, NamespaceStatus

__all__ = [
    "IngestStatus",
    "NamespaceInfo",
    "NamespaceStatus",
    "normalize_ingest_status",
    "normalize_namespace_info",
    "normalize_namespace_list",
    "normalize_namespace_status",
]
