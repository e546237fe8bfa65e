"""
Bounded retries for generator HTTP calls

A generation request is already capped by MISSION_GENERATION_TIMEOUT, so
retries stay few and short. Only failures that a second attempt can fix are
retried: network timeouts, refused connections, rate limits and 5xx replies.
Anything else (bad credentials, malformed model output, an open breaker)
is raised on the first attempt.
"""

import asyncio
import logging
import random
from typing import Any, Awaitable, Callable, TypeVar

import httpx

from mission_engine.resilience.metrics import record_retry

logger = logging.getLogger(__name__)

T = TypeVar('T')

MAX_RETRIES = 2
INITIAL_DELAY = 1.0  # seconds
MAX_DELAY = 8.0  # seconds
JITTER_RATIO = 0.1

TRANSIENT_STATUS_CODES = frozenset({429, 500, 502, 503, 504})


def is_retryable_error(exc: Exception) -> bool:
    """Whether exc is a transient transport or server failure"""
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code in TRANSIENT_STATUS_CODES
    return isinstance(exc, (httpx.TimeoutException, httpx.ConnectError))


def calculate_backoff(attempt: int) -> float:
    """
    Delay before retry number attempt + 1

    Doubles from INITIAL_DELAY up to MAX_DELAY, then spreads by up to
    JITTER_RATIO either way so concurrent sessions do not retry in lockstep.
    """
    delay = min(INITIAL_DELAY * 2 ** attempt, MAX_DELAY)
    spread = delay * JITTER_RATIO
    return max(0.0, delay + random.uniform(-spread, spread))


async def retry_with_backoff(
    func: Callable[..., Awaitable[T]],
    *args: Any,
    max_retries: int = MAX_RETRIES,
    **kwargs: Any
) -> T:
    """
    Await func(*args, **kwargs), retrying transient failures

    Args:
        func: Coroutine function to call
        max_retries: Retries after the first attempt

    Raises:
        The first non-transient error, or the last error once retries run out
    """
    name = getattr(func, "__name__", repr(func))
    attempt = 0
    while True:
        try:
            return await func(*args, **kwargs)
        except Exception as e:
            if not is_retryable_error(e):
                logger.warning(f"[RETRY] {name} failed with {type(e).__name__}, not retrying: {e}")
                raise
            if attempt >= max_retries:
                logger.error(f"[RETRY] {name} still failing after {max_retries} retries: {e}")
                raise

            delay = calculate_backoff(attempt)
            attempt += 1
            record_retry(name.lstrip('_'))
            logger.info(
                f"[RETRY] {name} hit {type(e).__name__}, "
                f"retry {attempt}/{max_retries} in {delay:.2f}s"
            )
            await asyncio.sleep(delay)
