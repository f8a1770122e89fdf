"""HTTP transport for the Tidepool services.

Owns the single ``httpx.AsyncClient`` used by a TidepoolClient and implements the
one request primitive every operation goes through:

- JSON ``Accept`` header always; JSON ``Content-Type`` when a body is sent
- a total per-request deadline; expiry surfaces as a 408 ``TidepoolError``
- non-2xx responses are decoded (JSON or text) and mapped to typed errors
- 204 returns None, non-JSON success returns text, undecodable JSON returns None

The transport keeps no per-call state, so concurrent requests are independent.
"""

import asyncio
import json
import time
from typing import Any, Optional

import httpx

from tidepool.core.exceptions import (
    TidepoolError,
    ValidationError,
    extract_error_message,
    map_error,
)
from tidepool.core.logging import ContextualLogger
from tidepool.core.logging import logger as default_logger


def resolve_url(base_url: str, path: str) -> str:
    """Join ``path`` onto ``base_url`` with standard URL resolution.

    An absolute path replaces any path component of the base URL.
    """
    try:
        return str(httpx.URL(base_url).join(path))
    except httpx.InvalidURL as e:
        raise TidepoolError(f"Invalid URL '{base_url}': {e}") from e


def is_json_response(response: httpx.Response) -> bool:
    """True when the response declares a JSON content type."""
    return "application/json" in response.headers.get("content-type", "")


class HttpTransport:
    """Async JSON-over-HTTP transport with a bounded per-request deadline."""

    def __init__(
        self,
        *,
        timeout_ms: float,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        logger: Optional[ContextualLogger] = None,
    ) -> None:
        """Initialize the transport.

        Args:
            timeout_ms: Deadline for each request, in milliseconds.
            transport: Optional httpx transport (e.g. ``httpx.MockTransport`` in tests).
            logger: Optional logger for request debug lines and failures.
        """
        self._timeout_ms = timeout_ms
        self._logger = logger or default_logger
        self._client: Optional[httpx.AsyncClient] = httpx.AsyncClient(
            timeout=httpx.Timeout(timeout_ms / 1000.0),
            transport=transport,
        )

    @property
    def timeout_ms(self) -> float:
        """The per-request deadline in milliseconds."""
        return self._timeout_ms

    @property
    def is_closed(self) -> bool:
        """True once ``close`` has been called."""
        return self._client is None

    async def close(self) -> None:
        """Release the underlying HTTP client."""
        client, self._client = self._client, None
        if client is not None:
            await client.aclose()

    # ------------------------------------------------------------------
    # Request
    # ------------------------------------------------------------------

    async def request(
        self,
        method: str,
        base_url: str,
        path: str,
        body: Any = None,
    ) -> Any:
        """Send one request and return the decoded body.

        Raises:
            TidepoolError: 408 on timeout; generic on transport failure or a
                closed client; a typed subclass for mapped HTTP statuses.
            ValidationError: If ``body`` cannot be encoded as strict JSON.
        """
        client = self._client
        if client is None:
            raise TidepoolError("HTTP client is closed")

        url = resolve_url(base_url, path)
        headers = {"Accept": "application/json"}
        content = None
        if body is not None:
            headers["Content-Type"] = "application/json"
            try:
                content = json.dumps(body, allow_nan=False)
            except (TypeError, ValueError) as e:
                raise ValidationError(f"Request body is not valid JSON: {e}") from e

        start = time.perf_counter()
        try:
            response = await asyncio.wait_for(
                client.request(method, url, content=content, headers=headers),
                timeout=self._timeout_ms / 1000.0,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            self._logger.warning(
                f"[HttpTransport] {method} {url} timed out after {self._timeout_ms:g}ms"
            )
            raise TidepoolError(
                f"Request timed out after {self._timeout_ms:g}ms", status_code=408
            ) from e
        except httpx.HTTPError as e:
            self._logger.warning(f"[HttpTransport] {method} {url} failed: {e}")
            raise TidepoolError(f"Request failed: {e}") from e

        elapsed_ms = (time.perf_counter() - start) * 1000
        self._logger.debug(
            f"[HttpTransport] {method} {url} -> {response.status_code} in {elapsed_ms:.1f}ms"
        )

        if not response.is_success:
            raise self._error_from(response)
        if response.status_code == 204:
            return None
        if not is_json_response(response):
            return response.text
        try:
            return response.json()
        except ValueError:
            return None

    @staticmethod
    def _error_from(response: httpx.Response) -> TidepoolError:
        """Decode an error response and map it to a typed error."""
        body: Any = None
        text = ""
        if is_json_response(response):
            try:
                body = response.json()
            except ValueError:
                body = None
        else:
            text = response.text

        message = extract_error_message(body, text, response.reason_phrase)
        return map_error(response.status_code, message, body if body is not None else text)
