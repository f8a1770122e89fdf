"""Client configuration."""

import math
from dataclasses import dataclass, field

from tidepool.core.config import settings
from tidepool.core.exceptions import ValidationError
from tidepool.domains.vectors.validation import as_float, non_empty_string


@dataclass(frozen=True)
class TidepoolConfig:
    """Client configuration - immutable for the life of a client.

    Attributes:
        query_url: Base URL of the read-only query service.
        ingest_url: Base URL of the ingest (write/maintenance) service.
        timeout_ms: Per-request deadline in milliseconds.
        default_namespace: Namespace used when an operation names none.

    Omitted fields fall back to the ``TIDEPOOL_*`` environment settings.
    """

    query_url: str = field(default_factory=lambda: settings.QUERY_URL)
    ingest_url: str = field(default_factory=lambda: settings.INGEST_URL)
    timeout_ms: float = field(default_factory=lambda: settings.TIMEOUT_MS)
    default_namespace: str = field(default_factory=lambda: settings.NAMESPACE)

    @classmethod
    def from_settings(cls) -> "TidepoolConfig":
        """Build config from environment settings."""
        return cls(
            query_url=settings.QUERY_URL,
            ingest_url=settings.INGEST_URL,
            timeout_ms=settings.TIMEOUT_MS,
            default_namespace=settings.NAMESPACE,
        )


def validate_config(config: TidepoolConfig) -> TidepoolConfig:
    """Check every field and return a trimmed copy.

    Raises:
        ValidationError: On a blank URL, a non-positive timeout or a blank namespace.
    """
    query_url = non_empty_string(config.query_url, "query_url")
    ingest_url = non_empty_string(config.ingest_url, "ingest_url")

    timeout_ms = config.timeout_ms
    if not math.isfinite(as_float(timeout_ms)) or timeout_ms <= 0:
        raise ValidationError("timeout_ms must be a positive number")

    default_namespace = non_empty_string(config.default_namespace, "default_namespace")

    return TidepoolConfig(
        query_url=query_url,
        ingest_url=ingest_url,
        timeout_ms=timeout_ms,
        default_namespace=default_namespace,
    )
