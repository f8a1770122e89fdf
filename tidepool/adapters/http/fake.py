"""Fake Tidepool backend for testing.

Wraps ``httpx.MockTransport`` and records every request it receives.

Usage:
    backend = FakeBackend()
    backend.enqueue(json_response({"namespace": "default", "results": []}))
    client = TidepoolClient(transport=backend.transport)
    await client.query([0.1, 0.2])
    assert backend.calls[0].path == "/v1/vectors/default"
"""

import json
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Union

import httpx

Responder = Union[httpx.Response, Callable[[httpx.Request], httpx.Response]]


def json_response(data: Any, status_code: int = 200) -> httpx.Response:
    """Create a JSON response."""
    return httpx.Response(
        status_code=status_code,
        content=json.dumps(data).encode(),
        headers={"content-type": "application/json"},
    )


def text_response(text: str, status_code: int = 200) -> httpx.Response:
    """Create a plain-text response."""
    return httpx.Response(
        status_code=status_code,
        content=text.encode(),
        headers={"content-type": "text/plain"},
    )


@dataclass
class RecordedCall:
    """One request received by the fake backend."""

    method: str
    url: str
    path: str
    headers: dict[str, str]
    body: Any = None


@dataclass
class _Route:
    method: str
    path: str
    responder: Responder


@dataclass
class FakeBackend:
    """Stub for both Tidepool services.

    Responses are picked in this order: queued responses (FIFO), then the first
    registered route matching method and exact path, then ``{"ok": true}``.
    """

    calls: list[RecordedCall] = field(default_factory=list)
    _queue: deque = field(default_factory=deque)
    _routes: list[_Route] = field(default_factory=list)

    @property
    def transport(self) -> httpx.MockTransport:
        """An httpx transport serving this backend."""
        return httpx.MockTransport(self._handle)

    def enqueue(self, *responses: Responder) -> None:
        """Queue responses for the next requests, in order."""
        self._queue.extend(responses)

    def route(self, method: str, path: str, responder: Responder) -> None:
        """Serve ``responder`` for every ``method`` request to ``path``."""
        self._routes.append(_Route(method.upper(), path, responder))

    def last_call(self) -> Optional[RecordedCall]:
        """The most recent request, if any."""
        return self.calls[-1] if self.calls else None

    def _handle(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content) if request.content else None
        self.calls.append(
            RecordedCall(
                method=request.method,
                url=str(request.url),
                path=request.url.path,
                headers=dict(request.headers),
                body=body,
            )
        )

        responder: Optional[Responder] = None
        if self._queue:
            responder = self._queue.popleft()
        else:
            for route in self._routes:
                if route.method == request.method and route.path == request.url.path:
                    responder = route.responder
                    break
        if responder is None:
            return json_response({"ok": True})
        if isinstance(responder, httpx.Response):
            # fresh copy so a routed response can be served more than once
            return httpx.Response(
                status_code=responder.status_code,
                headers=responder.headers,
                content=responder.content,
            )
        return responder(request)
