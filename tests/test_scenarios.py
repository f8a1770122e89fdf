"""End-to-end scenarios against a stubbed Tidepool deployment.

Both services are served by one ``FakeBackend``; requests are told apart by
host. These tests only use the public ``tidepool`` API.
"""

from unittest.mock import AsyncMock

import pytest

from tidepool import (
    Document,
    ErrorKind,
    QueryRequest,
    Service,
    ServiceUnavailableError,
    TidepoolClient,
    TidepoolConfig,
    ValidationError,
    with_retry,
)
from tidepool.adapters.http import FakeBackend, json_response

QUERY_URL = "http://query.test"
INGEST_URL = "http://ingest.test"


def _client(backend: FakeBackend, **overrides) -> TidepoolClient:
    values = {
        "query_url": QUERY_URL,
        "ingest_url": INGEST_URL,
        "timeout_ms": 1000,
        "default_namespace": "default",
    }
    values.update(overrides)
    return TidepoolClient(TidepoolConfig(**values), transport=backend.transport)


@pytest.mark.asyncio
async def test_default_query_round_trip():
    backend = FakeBackend()
    backend.enqueue(
        json_response({"namespace": "default", "results": [{"id": "doc-1", "score": 0.92}]})
    )

    async with _client(backend) as client:
        response = await client.query([0.1, 0.2, 0.3])

    assert backend.last_call().url == f"{QUERY_URL}/v1/vectors/default"
    assert response.namespace == "default"
    assert [(r.id, r.score) for r in response.results] == [("doc-1", 0.92)]


@pytest.mark.asyncio
async def test_overloaded_ingest_service():
    backend = FakeBackend()
    backend.enqueue(json_response({"error": "overloaded"}, status_code=503))

    async with _client(backend) as client:
        with pytest.raises(ServiceUnavailableError) as exc_info:
            await client.status()

    error = exc_info.value
    assert error.message == "overloaded"
    assert error.status_code == 503
    assert error.kind == ErrorKind.SERVICE_UNAVAILABLE


@pytest.mark.asyncio
async def test_namespaces_are_isolated():
    backend = FakeBackend()

    async with _client(backend) as client:
        for namespace in (None, "tenant_a", "tenant_b"):
            await client.upsert([Document(id="doc-1", vector=[1.0, 0.0])], namespace=namespace)
            await client.query([1.0, 0.0], namespace=namespace)
            await client.delete(["doc-1"], namespace=namespace)

    paths = [(c.method, c.url) for c in backend.calls]
    assert paths == [
        ("POST", f"{INGEST_URL}/v1/vectors/default"),
        ("POST", f"{QUERY_URL}/v1/vectors/default"),
        ("DELETE", f"{INGEST_URL}/v1/vectors/default"),
        ("POST", f"{INGEST_URL}/v1/vectors/tenant_a"),
        ("POST", f"{QUERY_URL}/v1/vectors/tenant_a"),
        ("DELETE", f"{INGEST_URL}/v1/vectors/tenant_a"),
        ("POST", f"{INGEST_URL}/v1/vectors/tenant_b"),
        ("POST", f"{QUERY_URL}/v1/vectors/tenant_b"),
        ("DELETE", f"{INGEST_URL}/v1/vectors/tenant_b"),
    ]


@pytest.mark.asyncio
async def test_ingest_then_compact_then_query():
    backend = FakeBackend()
    backend.route("POST", "/v1/vectors/products", json_response({"results": [{"id": "p-1"}]}))
    backend.route("GET", "/v1/namespaces/products/status", json_response({"walEntries": 0}))

    async with _client(backend, default_namespace="products") as client:
        await client.upsert([{"id": "p-1", "vector": [0.5, 0.5], "text": "red shoe"}])
        await client.compact()
        status = await client.get_namespace_status()
        response = await client.query(QueryRequest(text="red", mode="text"))

    assert status.namespace == "products"
    assert status.wal_entries == 0
    assert response.namespace == "products"
    assert [r.id for r in response.results] == ["p-1"]
    assert backend.calls[1].url == f"{INGEST_URL}/v1/namespaces/products/compact"


@pytest.mark.asyncio
async def test_list_namespaces_and_info():
    backend = FakeBackend()
    backend.route("GET", "/v1/namespaces", json_response(["default", "tenant_a"]))
    backend.route(
        "GET",
        "/v1/namespaces/tenant_a",
        json_response({"namespace": "tenant_a", "approx_count": 42, "dims": 3, "pending": True}),
    )

    async with _client(backend) as client:
        names = [info.namespace for info in await client.list_namespaces()]
        info = await client.get_namespace("tenant_a")

    assert names == ["default", "tenant_a"]
    assert (info.approx_count, info.dimensions, info.pending_compaction) == (42, 3, True)


@pytest.mark.asyncio
async def test_with_retry_recovers_from_transient_overload():
    backend = FakeBackend()
    backend.enqueue(
        json_response({"error": "overloaded"}, status_code=503),
        json_response({"error": "overloaded"}, status_code=503),
        json_response({"namespace": "default", "results": [{"id": "doc-1", "score": 1}]}),
    )
    sleep = AsyncMock()

    async with _client(backend) as client:
        response = await with_retry(lambda: client.query([0.1, 0.2]), sleep=sleep)

    assert len(backend.calls) == 3
    assert [c.args[0] for c in sleep.await_args_list] == [0.5, 1.0]
    assert response.results[0].id == "doc-1"


@pytest.mark.asyncio
async def test_with_retry_does_not_retry_validation():
    backend = FakeBackend()
    sleep = AsyncMock()

    async with _client(backend) as client:
        with pytest.raises(ValidationError, match="Vector cannot be empty"):
            await with_retry(lambda: client.query([]), sleep=sleep)

    assert backend.calls == []
    sleep.assert_not_awaited()


@pytest.mark.asyncio
async def test_health_of_both_services():
    backend = FakeBackend()

    async with _client(backend) as client:
        await client.health()
        await client.health(Service.INGEST)

    assert [c.url for c in backend.calls] == [f"{QUERY_URL}/health", f"{INGEST_URL}/health"]
