"""Types for the namespaces domain."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class NamespaceInfo(BaseModel):
    """Summary of one namespace as reported by the query service.

    Count and dimensions are None when the backend only listed the name.
    """

    namespace: str = Field(..., description="Namespace name.")
    approx_count: Optional[int] = Field(None, description="Approximate vector count.")
    dimensions: Optional[int] = Field(None, description="Vector dimensionality.")
    pending_compaction: Optional[bool] = Field(
        None, description="True/False when reported, None when unknown."
    )


class IngestStatus(BaseModel):
    """Ingest-side maintenance status."""

    last_run: Optional[datetime] = Field(
        None, description="Last successful compaction; None when absent or unparseable."
    )
    wal_files: int = Field(0, description="Write-ahead log file count.")
    wal_entries: int = Field(0, description="Write-ahead log entry count.")
    segments: int = Field(0, description="Segment count.")
    total_vecs: int = Field(0, description="Total stored vectors.")
    dimensions: int = Field(0, description="Vector dimensionality.")


class NamespaceStatus(IngestStatus):
    """Ingest status scoped to one namespace."""

    namespace: Optional[str] = Field(None, description="Namespace the status describes.")
