"""Opt-in retry helper for transient backend unavailability.

The client never retries on its own. Wrap a whole operation when retries are wanted:

Example:
    results = await with_retry(lambda: client.query([0.1, 0.2, 0.3], top_k=5))

Only ``ServiceUnavailableError`` is retried. Every other error, and the last
failure once attempts run out, propagates immediately. Each call is
independent; no state is kept between invocations.
"""

import asyncio
import math
from typing import Any, Awaitable, Callable, Optional, TypeVar

from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt

from tidepool.core.exceptions import ServiceUnavailableError, TidepoolError, ValidationError
from tidepool.core.logging import ContextualLogger
from tidepool.core.logging import logger as default_logger

T = TypeVar("T")

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_BASE_DELAY_MS = 500
MAX_DELAY_MS = 10_000


def backoff_delay_ms(attempt_index: int, base_delay_ms: float) -> float:
    """Capped exponential backoff: ``min(base * 2**attempt_index, 10000)``."""
    return min(base_delay_ms * (2**attempt_index), MAX_DELAY_MS)


def wait_capped_exponential(base_delay_ms: float) -> Callable[[Any], float]:
    """Tenacity wait strategy returning seconds for the backoff above.

    ``attempt_number`` is 1 after the first failure, which is attempt index 0.
    """

    def _wait(retry_state) -> float:
        return backoff_delay_ms(retry_state.attempt_number - 1, base_delay_ms) / 1000.0

    return _wait


def log_retry_attempt(logger: ContextualLogger, max_attempts: int) -> Callable[..., None]:
    """Create a before_sleep callback that logs retry attempts."""

    def before_sleep(retry_state) -> None:
        exception = retry_state.outcome.exception()
        wait_time = retry_state.next_action.sleep if retry_state.next_action else 0
        logger.warning(
            f"Service unavailable ({exception}), retrying in {wait_time:.3f}s "
            f"(attempt {retry_state.attempt_number}/{max_attempts})"
        )

    return before_sleep


def _check_arguments(max_attempts: Any, base_delay_ms: Any) -> None:
    if isinstance(max_attempts, bool) or not isinstance(max_attempts, int) or max_attempts <= 0:
        raise ValidationError("max_attempts must be a positive integer")
    if (
        isinstance(base_delay_ms, bool)
        or not isinstance(base_delay_ms, (int, float))
        or (isinstance(base_delay_ms, float) and not math.isfinite(base_delay_ms))
        or base_delay_ms < 0
    ):
        raise ValidationError("base_delay_ms must be a non-negative number")


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    base_delay_ms: float = DEFAULT_BASE_DELAY_MS,
    *,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    logger: Optional[ContextualLogger] = None,
) -> T:
    """Run ``operation``, retrying on ServiceUnavailableError with capped backoff.

    Args:
        operation: Zero-argument callable returning an awaitable.
        max_attempts: Total number of attempts, including the first.
        base_delay_ms: Delay before the first retry; doubles per retry, capped at 10s.
        sleep: Awaitable sleep taking seconds. Injectable for tests.
        logger: Optional logger for retry warnings.

    Returns:
        The operation's result.

    Raises:
        ValidationError: On invalid retry arguments.
        TidepoolError: Whatever the operation raised last.
    """
    _check_arguments(max_attempts, base_delay_ms)
    log = logger or default_logger

    retrying = AsyncRetrying(
        stop=stop_after_attempt(max_attempts),
        retry=retry_if_exception_type(ServiceUnavailableError),
        wait=wait_capped_exponential(base_delay_ms),
        before_sleep=log_retry_attempt(log, max_attempts),
        sleep=sleep,
        reraise=True,
    )

    async for attempt in retrying:
        with attempt:
            return await operation()

    raise TidepoolError("Retry loop exited without a result")
