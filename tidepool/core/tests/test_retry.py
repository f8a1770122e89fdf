"""Unit tests for with_retry.

Sleeps are injected, so no test waits in real time.
"""

from unittest.mock import AsyncMock

import pytest

from tidepool.core.exceptions import (
    NotFoundError,
    ServiceUnavailableError,
    TidepoolError,
    ValidationError,
)
from tidepool.core.retry import MAX_DELAY_MS, backoff_delay_ms, with_retry


def _flaky(failures: int, exc_factory=lambda: ServiceUnavailableError("busy"), result="ok"):
    """Build an async operation failing ``failures`` times before returning ``result``."""
    calls = {"count": 0}

    async def operation():
        calls["count"] += 1
        if calls["count"] <= failures:
            raise exc_factory()
        return result

    return operation, calls


# ===========================================================================
# Retry behaviour
# ===========================================================================


@pytest.mark.asyncio
async def test_retries_service_unavailable_until_success():
    operation, calls = _flaky(2)
    sleep = AsyncMock()

    result = await with_retry(operation, max_attempts=3, base_delay_ms=1, sleep=sleep)

    assert result == "ok"
    assert calls["count"] == 3
    assert sleep.await_count == 2


@pytest.mark.asyncio
async def test_validation_error_is_not_retried():
    operation, calls = _flaky(1, exc_factory=lambda: ValidationError("bad"))
    sleep = AsyncMock()

    with pytest.raises(ValidationError, match="bad"):
        await with_retry(operation, max_attempts=3, base_delay_ms=1, sleep=sleep)

    assert calls["count"] == 1
    sleep.assert_not_awaited()


@pytest.mark.asyncio
async def test_other_error_kinds_are_not_retried():
    operation, calls = _flaky(1, exc_factory=lambda: NotFoundError("missing"))
    sleep = AsyncMock()

    with pytest.raises(NotFoundError):
        await with_retry(operation, sleep=sleep)

    assert calls["count"] == 1
    sleep.assert_not_awaited()


@pytest.mark.asyncio
async def test_exhausted_attempts_reraise_last_error():
    operation, calls = _flaky(10, exc_factory=lambda: ServiceUnavailableError("still busy"))
    sleep = AsyncMock()

    with pytest.raises(ServiceUnavailableError, match="still busy"):
        await with_retry(operation, max_attempts=3, base_delay_ms=1, sleep=sleep)

    assert calls["count"] == 3
    # no sleep after the final attempt
    assert sleep.await_count == 2


@pytest.mark.asyncio
async def test_single_attempt_never_sleeps():
    operation, calls = _flaky(1)
    sleep = AsyncMock()

    with pytest.raises(ServiceUnavailableError):
        await with_retry(operation, max_attempts=1, sleep=sleep)

    assert calls["count"] == 1
    sleep.assert_not_awaited()


@pytest.mark.asyncio
async def test_success_on_first_attempt_returns_value():
    operation, calls = _flaky(0, result={"status": "ok"})

    assert await with_retry(operation, sleep=AsyncMock()) == {"status": "ok"}
    assert calls["count"] == 1


@pytest.mark.asyncio
async def test_each_invocation_is_independent():
    sleep = AsyncMock()
    first, first_calls = _flaky(1)
    second, second_calls = _flaky(1)

    await with_retry(first, sleep=sleep)
    await with_retry(second, sleep=sleep)

    assert first_calls["count"] == 2
    assert second_calls["count"] == 2


# ===========================================================================
# Backoff
# ===========================================================================


@pytest.mark.asyncio
async def test_sleeps_follow_exponential_backoff():
    operation, _ = _flaky(3)
    sleep = AsyncMock()

    await with_retry(operation, max_attempts=4, base_delay_ms=500, sleep=sleep)

    delays = [call.args[0] for call in sleep.await_args_list]
    assert delays == pytest.approx([0.5, 1.0, 2.0])


@pytest.mark.asyncio
async def test_backoff_is_capped_at_ten_seconds():
    operation, _ = _flaky(3)
    sleep = AsyncMock()

    await with_retry(operation, max_attempts=4, base_delay_ms=4000, sleep=sleep)

    delays = [call.args[0] for call in sleep.await_args_list]
    assert delays == pytest.approx([4.0, 8.0, 10.0])


def test_backoff_delay_formula():
    assert backoff_delay_ms(0, 500) == 500
    assert backoff_delay_ms(1, 500) == 1000
    assert backoff_delay_ms(5, 500) == MAX_DELAY_MS


# ===========================================================================
# Argument validation
# ===========================================================================


@pytest.mark.asyncio
@pytest.mark.parametrize("max_attempts", [0, -1, 1.5, True, "3"])
async def test_invalid_max_attempts(max_attempts):
    operation, calls = _flaky(0)

    with pytest.raises(ValidationError, match="max_attempts"):
        await with_retry(operation, max_attempts=max_attempts, sleep=AsyncMock())

    assert calls["count"] == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("base_delay_ms", [-1, float("nan"), float("inf")])
async def test_invalid_base_delay(base_delay_ms):
    operation, _ = _flaky(0)

    with pytest.raises(ValidationError, match="base_delay_ms"):
        await with_retry(operation, base_delay_ms=base_delay_ms, sleep=AsyncMock())


@pytest.mark.asyncio
async def test_errors_are_tidepool_errors():
    operation, _ = _flaky(5, exc_factory=lambda: TidepoolError("generic", 500))

    with pytest.raises(TidepoolError, match="generic"):
        await with_retry(operation, sleep=AsyncMock())
