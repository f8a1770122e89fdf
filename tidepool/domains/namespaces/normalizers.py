"""Normalizers for namespace info, namespace lists and ingest status.

Keys are read in a fixed priority order (camelCase before snake_case where both
exist); the first non-null value wins. Missing numeric fields default to 0 and
a missing or unparseable ``last_run`` becomes None rather than an error.
"""

from datetime import datetime
from typing import Any, Mapping, Optional

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from tidepool.core.exceptions import TidepoolError
from tidepool.core.shapes import (
    ResponseShape,
    first_present,
    has_list,
    is_list,
    is_record,
    lenient_int,
    non_empty_str,
    normalize_shape,
    optional_bool,
)
from tidepool.domains.namespaces.types import IngestStatus, NamespaceInfo, NamespaceStatus

_DATETIME = TypeAdapter(datetime)

_NAMESPACE_KEYS = ("namespace", "ns")
_COUNT_KEYS = ("approxCount", "approx_count", "count")
_INFO_DIMENSION_KEYS = ("dimensions", "dims", "dimension")
_PENDING_KEYS = ("pendingCompaction", "pending_compaction", "pending")


# ---------------------------------------------------------------------------
# Namespace info
# ---------------------------------------------------------------------------


def _info_from_record(
    data: Mapping[str, Any], *, fallback_namespace: Optional[str] = None
) -> NamespaceInfo:
    namespace = non_empty_str(first_present(data, *_NAMESPACE_KEYS)) or non_empty_str(
        fallback_namespace
    )
    if namespace is None:
        raise TidepoolError("Unexpected namespace response shape", response=data)
    return NamespaceInfo(
        namespace=namespace,
        approx_count=lenient_int(first_present(data, *_COUNT_KEYS)),
        dimensions=lenient_int(first_present(data, *_INFO_DIMENSION_KEYS)),
        pending_compaction=optional_bool(first_present(data, *_PENDING_KEYS)),
    )


NAMESPACE_INFO_SHAPES: tuple[ResponseShape[NamespaceInfo], ...] = (
    ResponseShape("record", is_record, _info_from_record),
)


def normalize_namespace_info(data: Any, fallback_namespace: Optional[str] = None) -> NamespaceInfo:
    """Normalize a namespace info record.

    Args:
        data: Decoded response body.
        fallback_namespace: Namespace that was requested, used when the record
            does not name one.

    Raises:
        TidepoolError: If ``data`` is not a record or no namespace can be determined.
    """
    return normalize_shape(
        data, NAMESPACE_INFO_SHAPES, "namespace", fallback_namespace=fallback_namespace
    )


# ---------------------------------------------------------------------------
# Namespace list
# ---------------------------------------------------------------------------


def _list_entry(entry: Any) -> NamespaceInfo:
    if isinstance(entry, str):
        name = non_empty_str(entry)
        if name is None:
            raise TidepoolError("Unexpected namespaces response shape", response=entry)
        return NamespaceInfo(namespace=name)
    if isinstance(entry, Mapping):
        return _info_from_record(entry)
    raise TidepoolError("Unexpected namespaces response shape", response=entry)


def _entries_from(key: Optional[str]):
    def _build(data: Any) -> list[NamespaceInfo]:
        entries = data if key is None else data[key]
        return [_list_entry(entry) for entry in entries]

    return _build


NAMESPACE_LIST_SHAPES: tuple[ResponseShape[list[NamespaceInfo]], ...] = (
    ResponseShape("bare-list", is_list, _entries_from(None)),
    ResponseShape("namespaces-record", has_list("namespaces"), _entries_from("namespaces")),
    ResponseShape(
        "namespace_list-record", has_list("namespace_list"), _entries_from("namespace_list")
    ),
    ResponseShape(
        "namespaceList-record", has_list("namespaceList"), _entries_from("namespaceList")
    ),
)


def normalize_namespace_list(data: Any) -> list[NamespaceInfo]:
    """Normalize any accepted namespace-list shape.

    Bare names become NamespaceInfo with count and dimensions unset.
    """
    return normalize_shape(data, NAMESPACE_LIST_SHAPES, "namespaces")


# ---------------------------------------------------------------------------
# Status
# ---------------------------------------------------------------------------


def parse_last_run(value: Any) -> Optional[datetime]:
    """Parse a maintenance timestamp leniently; anything unusable is None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value
    try:
        return _DATETIME.validate_python(value)
    except PydanticValidationError:
        return None


def _status_fields(data: Mapping[str, Any]) -> dict[str, Any]:
    return {
        "last_run": parse_last_run(first_present(data, "lastRun", "last_run")),
        "wal_files": lenient_int(first_present(data, "walFiles", "wal_files")),
        "wal_entries": lenient_int(first_present(data, "walEntries", "wal_entries")),
        "segments": lenient_int(first_present(data, "segments")),
        "total_vecs": lenient_int(first_present(data, "totalVecs", "total_vecs")),
        "dimensions": lenient_int(first_present(data, "dimensions", "dims")),
    }


def _ingest_status_from_record(data: Mapping[str, Any]) -> IngestStatus:
    return IngestStatus(**_status_fields(data))


def _namespace_status_from_record(
    data: Mapping[str, Any], *, fallback_namespace: Optional[str] = None
) -> NamespaceStatus:
    namespace = non_empty_str(first_present(data, *_NAMESPACE_KEYS)) or fallback_namespace
    return NamespaceStatus(namespace=namespace, **_status_fields(data))


INGEST_STATUS_SHAPES: tuple[ResponseShape[IngestStatus], ...] = (
    ResponseShape("record", is_record, _ingest_status_from_record),
)

NAMESPACE_STATUS_SHAPES: tuple[ResponseShape[NamespaceStatus], ...] = (
    ResponseShape("record", is_record, _namespace_status_from_record),
)


def normalize_ingest_status(data: Any) -> IngestStatus:
    """Normalize the global ingest status."""
    return normalize_shape(data, INGEST_STATUS_SHAPES, "status")


def normalize_namespace_status(
    data: Any, fallback_namespace: Optional[str] = None
) -> NamespaceStatus:
    """Normalize a per-namespace status, tagging it with the namespace."""
    return normalize_shape(
        data, NAMESPACE_STATUS_SHAPES, "status", fallback_namespace=fallback_namespace
    )
