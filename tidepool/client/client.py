"""Tidepool client - one API over the query and ingest services.

Each operation validates its input, builds a request body, makes exactly one
HTTP call and normalizes the response. Invalid input fails before anything is
sent. The client performs no retries; wrap calls in ``with_retry`` for that.

Example:
    async with TidepoolClient() as client:
        await client.upsert([Document(id="doc-1", vector=[0.1, 0.2, 0.3])])
        response = await client.query([0.1, 0.2, 0.3], top_k=5)
"""

from typing import Any, Mapping, Optional, Sequence, Union
from urllib.parse import quote

import httpx

from tidepool.adapters.http.transport import HttpTransport
from tidepool.client.config import TidepoolConfig, validate_config
from tidepool.core.config import Service
from tidepool.core.exceptions import ValidationError
from tidepool.core.logging import ContextualLogger
from tidepool.core.logging import logger as default_logger
from tidepool.domains.namespaces.normalizers import (
    normalize_ingest_status,
    normalize_namespace_info,
    normalize_namespace_list,
    normalize_namespace_status,
)
from tidepool.domains.namespaces.types import IngestStatus, NamespaceInfo, NamespaceStatus
from tidepool.domains.vectors.normalizers import normalize_query_response
from tidepool.domains.vectors.query import merge_query_options, prepare_query, reconcile_query
from tidepool.domains.vectors.types import (
    DistanceMetric,
    Document,
    QueryRequest,
    QueryResponse,
)
from tidepool.domains.vectors.validation import distance_metric as validate_distance_metric
from tidepool.domains.vectors.validation import resolve_namespace, validate_documents, validate_ids


def _segment(value: str) -> str:
    return quote(value, safe="")


class TidepoolClient:
    """Async client for a Tidepool deployment.

    Holds only immutable configuration and one HTTP client, so concurrent
    calls on the same instance do not interfere.
    """

    def __init__(
        self,
        config: Optional[TidepoolConfig] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        logger: Optional[ContextualLogger] = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: Service URLs, timeout and default namespace. Defaults come
                from the ``TIDEPOOL_*`` environment settings.
            transport: Optional httpx transport, e.g. ``httpx.MockTransport``.
            logger: Optional logger.

        Raises:
            ValidationError: If the configuration is invalid.
        """
        self._config = validate_config(config if config is not None else TidepoolConfig())
        self._logger = logger or default_logger
        self._http = HttpTransport(
            timeout_ms=self._config.timeout_ms,
            transport=transport,
            logger=self._logger,
        )

    @property
    def config(self) -> TidepoolConfig:
        """The validated configuration."""
        return self._config

    async def close(self) -> None:
        """Release the underlying HTTP client."""
        await self._http.close()

    async def __aenter__(self) -> "TidepoolClient":
        """Enter the async context."""
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        """Close the client on exit."""
        await self.close()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _base_url(self, service: Service) -> str:
        return self._config.ingest_url if service == Service.INGEST else self._config.query_url

    def _namespace(self, namespace: Optional[str]) -> str:
        return resolve_namespace(namespace, self._config.default_namespace)

    # ------------------------------------------------------------------
    # Health
    # ------------------------------------------------------------------

    async def health(self, service: Union[Service, str] = Service.QUERY) -> Any:
        """Check a service's health endpoint and return the decoded body."""
        try:
            resolved = Service(service)
        except ValueError:
            raise ValidationError(
                f"service must be one of: {', '.join(s.value for s in Service)}"
            ) from None
        return await self._http.request("GET", self._base_url(resolved), "/health")

    # ------------------------------------------------------------------
    # Vectors
    # ------------------------------------------------------------------

    async def upsert(
        self,
        documents: Sequence[Union[Document, Mapping[str, Any]]],
        *,
        namespace: Optional[str] = None,
        distance_metric: Optional[Union[DistanceMetric, str]] = None,
    ) -> None:
        """Insert or replace documents.

        Args:
            documents: Documents sharing one dimensionality.
            namespace: Overrides the default namespace.
            distance_metric: Optional metric hint for a new namespace.

        Raises:
            ValidationError: On an invalid batch, namespace or metric.
        """
        validated = validate_documents(documents)
        metric = validate_distance_metric(distance_metric)
        resolved = self._namespace(namespace)

        entries = []
        for doc in validated:
            entry: dict[str, Any] = {"id": doc.id, "vector": doc.vector}
            if doc.text is not None:
                entry["text"] = doc.text
            if doc.attributes is not None:
                entry["attributes"] = dict(doc.attributes)
            entries.append(entry)

        body: dict[str, Any] = {"vectors": entries}
        if metric is not None:
            body["distance_metric"] = metric.value

        self._logger.debug(f"Upserting {len(entries)} documents into '{resolved}'")
        await self._http.request(
            "POST", self._config.ingest_url, f"/v1/vectors/{_segment(resolved)}", body
        )

    async def query(
        self,
        vector_or_request: Union[Sequence[float], QueryRequest, Mapping[str, Any], None] = None,
        options: Optional[Mapping[str, Any]] = None,
        /,
        **keyword_options: Any,
    ) -> QueryResponse:
        """Search a namespace.

        Accepts a vector with options, given as keywords
        (``query([0.1, 0.2], top_k=5)``) or as a mapping
        (``query([0.1, 0.2], {"topK": 5})``),
        a ``QueryRequest`` or mapping (``query({"text": "hi", "mode": "text"})``),
        or keyword options alone (``query(text="hi")``).

        Raises:
            ValidationError: On invalid options or missing mode inputs.
        """
        request = reconcile_query(
            vector_or_request, merge_query_options(options, keyword_options)
        )
        return await self.search(request)

    async def search(self, request: QueryRequest) -> QueryResponse:
        """Search a namespace with a request object."""
        if not isinstance(request, QueryRequest):
            request = reconcile_query(request)
        prepared = prepare_query(request, self._config.default_namespace)

        data = await self._http.request(
            "POST",
            self._config.query_url,
            f"/v1/vectors/{_segment(prepared.namespace)}",
            prepared.body,
        )
        return normalize_query_response(data, fallback_namespace=prepared.namespace)

    async def delete(self, ids: Sequence[str], *, namespace: Optional[str] = None) -> None:
        """Delete documents by id."""
        validated = validate_ids(ids)
        resolved = self._namespace(namespace)

        self._logger.debug(f"Deleting {len(validated)} documents from '{resolved}'")
        await self._http.request(
            "DELETE",
            self._config.ingest_url,
            f"/v1/vectors/{_segment(resolved)}",
            {"ids": validated},
        )

    # ------------------------------------------------------------------
    # Namespaces
    # ------------------------------------------------------------------

    async def get_namespace(self, namespace: Optional[str] = None) -> NamespaceInfo:
        """Fetch info for one namespace (default namespace when omitted)."""
        resolved = self._namespace(namespace)
        data = await self._http.request(
            "GET", self._config.query_url, f"/v1/namespaces/{_segment(resolved)}"
        )
        return normalize_namespace_info(data, fallback_namespace=resolved)

    async def list_namespaces(self) -> list[NamespaceInfo]:
        """List namespaces known to the query service."""
        data = await self._http.request("GET", self._config.query_url, "/v1/namespaces")
        return normalize_namespace_list(data)

    async def get_namespace_status(self, namespace: Optional[str] = None) -> NamespaceStatus:
        """Fetch ingest status for one namespace."""
        resolved = self._namespace(namespace)
        data = await self._http.request(
            "GET", self._config.ingest_url, f"/v1/namespaces/{_segment(resolved)}/status"
        )
        return normalize_namespace_status(data, fallback_namespace=resolved)

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------

    async def status(self) -> IngestStatus:
        """Fetch the global ingest status."""
        data = await self._http.request("GET", self._config.ingest_url, "/status")
        return normalize_ingest_status(data)

    async def compact(self, namespace: Optional[str] = None) -> None:
        """Trigger compaction so recently ingested vectors become queryable."""
        resolved = self._namespace(namespace)
        self._logger.info(f"Requesting compaction of '{resolved}'")
        await self._http.request(
            "POST", self._config.ingest_url, f"/v1/namespaces/{_segment(resolved)}/compact"
        )
