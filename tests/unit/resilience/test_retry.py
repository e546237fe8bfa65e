"""Unit tests for retry logic"""
import pytest
import httpx
from unittest.mock import AsyncMock, patch
from mission_engine.resilience.retry import (
    retry_with_backoff,
    is_retryable_error,
    calculate_backoff,
    MAX_DELAY,
    MAX_RETRIES,
)


@pytest.fixture(autouse=True)
def no_sleep():
    """Skip real backoff waits"""
    with patch("mission_engine.resilience.retry.asyncio.sleep", new=AsyncMock()) as sleep:
        yield sleep


def test_is_retryable_error_timeout():
    """Test that timeout and connection errors are retryable"""
    assert is_retryable_error(httpx.TimeoutException("Timeout")) is True
    assert is_retryable_error(httpx.ReadTimeout("Read timeout")) is True
    assert is_retryable_error(httpx.ConnectError("Refused")) is True


def test_is_retryable_error_http_status():
    """Test that certain HTTP status codes are retryable"""
    retryable_codes = [429, 500, 502, 503, 504]
    non_retryable_codes = [400, 401, 403, 404, 422]

    for code in retryable_codes:
        error = httpx.HTTPStatusError("Error", request=None, response=httpx.Response(code))
        assert is_retryable_error(error) is True, f"HTTP {code} should be retryable"

    for code in non_retryable_codes:
        error = httpx.HTTPStatusError("Error", request=None, response=httpx.Response(code))
        assert is_retryable_error(error) is False, f"HTTP {code} should not be retryable"


def test_malformed_content_is_not_retryable():
    """A bad model reply is not fixed by asking again immediately"""
    assert is_retryable_error(ValueError("Expected a JSON array")) is False
    assert is_retryable_error(KeyError("choices")) is False


def test_calculate_backoff():
    """Test exponential backoff calculation"""
    delay_0 = calculate_backoff(0)
    assert 0.9 <= delay_0 <= 1.1  # 1s ± 10% jitter

    delay_1 = calculate_backoff(1)
    assert 1.8 <= delay_1 <= 2.2

    delay_2 = calculate_backoff(2)
    assert 3.6 <= delay_2 <= 4.4


def test_calculate_backoff_max_delay():
    """Test that backoff respects max delay"""
    assert calculate_backoff(20) <= MAX_DELAY * 1.1


@pytest.mark.asyncio
async def test_retry_with_backoff_success_first_try(no_sleep):
    """Test that function succeeds on first try"""
    call_count = 0

    async def successful_function():
        nonlocal call_count
        call_count += 1
        return "success"

    result = await retry_with_backoff(successful_function)

    assert result == "success"
    assert call_count == 1
    no_sleep.assert_not_awaited()


@pytest.mark.asyncio
async def test_retry_with_backoff_success_after_retries(no_sleep):
    """Test that function succeeds after some retries"""
    attempt = 0

    async def flaky_function():
        nonlocal attempt
        attempt += 1
        if attempt < 3:
            raise httpx.TimeoutException("Simulated timeout")
        return "success"

    result = await retry_with_backoff(flaky_function, max_retries=2)

    assert result == "success"
    assert attempt == 3
    assert no_sleep.await_count == 2


@pytest.mark.asyncio
async def test_retry_with_backoff_exhausted():
    """Test that retries are exhausted for persistent failures"""
    attempt = 0

    async def always_fails():
        nonlocal attempt
        attempt += 1
        raise httpx.TimeoutException("Always fails")

    with pytest.raises(httpx.TimeoutException, match="Always fails"):
        await retry_with_backoff(always_fails)

    # initial + MAX_RETRIES
    assert attempt == MAX_RETRIES + 1


@pytest.mark.asyncio
async def test_retry_with_backoff_non_retryable_error():
    """Test that non-retryable errors are not retried"""
    attempt = 0

    async def non_retryable_function():
        nonlocal attempt
        attempt += 1
        raise ValueError("Non-retryable error")

    with pytest.raises(ValueError, match="Non-retryable error"):
        await retry_with_backoff(non_retryable_function, max_retries=3)

    assert attempt == 1


@pytest.mark.asyncio
async def test_retry_records_metric_per_retry():
    """Each retry, but not the first attempt, is counted"""
    attempt = 0

    async def _post_chat_completion():
        nonlocal attempt
        attempt += 1
        if attempt < 3:
            raise httpx.ConnectError("Refused")
        return "ok"

    with patch("mission_engine.resilience.retry.record_retry") as record:
        assert await retry_with_backoff(_post_chat_completion) == "ok"

    assert record.call_count == 2
    record.assert_called_with("post_chat_completion")


@pytest.mark.asyncio
async def test_retry_with_http_429_rate_limit():
    """Test that HTTP 429 rate limit errors are retried"""
    attempt = 0

    async def rate_limited_function():
        nonlocal attempt
        attempt += 1
        if attempt < 2:
            raise httpx.HTTPStatusError("Rate limited", request=None, response=httpx.Response(429))
        return "success"

    assert await retry_with_backoff(rate_limited_function) == "success"
    assert attempt == 2


@pytest.mark.asyncio
async def test_retry_with_http_401_unauthorized():
    """Test that HTTP 401 unauthorized errors are not retried"""
    attempt = 0

    async def unauthorized_function():
        nonlocal attempt
        attempt += 1
        raise httpx.HTTPStatusError("Unauthorized", request=None, response=httpx.Response(401))

    with pytest.raises(httpx.HTTPStatusError, match="Unauthorized"):
        await retry_with_backoff(unauthorized_function, max_retries=3)

    assert attempt == 1


@pytest.mark.asyncio
async def test_retry_preserves_function_args():
    """Test that retry logic preserves function arguments"""

    async def function_with_args(x, y, z=10):
        return x + y + z

    result = await retry_with_backoff(function_with_args, 5, 3, z=7, max_retries=2)

    assert result == 15


def test_default_max_retries():
    """Generation has a bounded timeout, so only a couple of retries fit"""
    assert MAX_RETRIES == 2
