import pytest

from shared.utils import retry_async, run_blocking


@pytest.mark.asyncio
async def test_retry_async_eventually_succeeds():
    attempts = []
    retried = []

    async def flaky():
        attempts.append(1)
        if len(attempts) < 3:
            raise ConnectionError("not yet")
        return "ok"

    result = await retry_async(
        flaky,
        retries=5,
        base_delay=0,
        on_retry=lambda attempt, exc, sleep_for: retried.append(attempt),
    )
    assert result == "ok"
    assert retried == [1, 2]


@pytest.mark.asyncio
async def test_retry_async_reraises_last_error():
    async def down():
        raise ConnectionError("down")

    with pytest.raises(ConnectionError):
        await retry_async(down, retries=2, base_delay=0)


@pytest.mark.asyncio
async def test_retry_async_only_retries_listed_errors():
    calls = []

    async def broken():
        calls.append(1)
        raise ValueError("bad input")

    with pytest.raises(ValueError):
        await retry_async(broken, retries=5, base_delay=0, retry_on=(OSError,))
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_run_blocking_returns_result():
    assert await run_blocking(sum, [1, 2, 3]) == 6
