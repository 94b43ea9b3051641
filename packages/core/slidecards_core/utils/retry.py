"""Retry utilities for content provider calls."""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from slidecards_core.errors import ProviderTransientError
from slidecards_core.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

# Default retry configuration: 3 retries after the first call, waiting 2s, 4s, 8s
DEFAULT_MAX_RETRIES = 3
DEFAULT_BASE_DELAY = 2.0  # seconds
DEFAULT_MAX_DELAY = 60.0  # seconds

SleepFunc = Callable[[float], Awaitable[Any]]

# Exceptions that should trigger a retry
RETRYABLE_EXCEPTIONS = (
    ConnectionError,
    TimeoutError,
    asyncio.TimeoutError,
    ProviderTransientError,
)


def get_async_retry(
    max_retries: int = DEFAULT_MAX_RETRIES,
    base_delay: float = DEFAULT_BASE_DELAY,
    max_delay: float = DEFAULT_MAX_DELAY,
    sleep: SleepFunc = asyncio.sleep,
) -> AsyncRetrying:
    """Create an async retry context manager.

    The n-th retry waits ``base_delay * 2 ** (n - 1)`` seconds.

    Args:
        max_retries: Retries allowed after the first attempt
        base_delay: Wait before the first retry in seconds
        max_delay: Upper bound for a single wait in seconds
        sleep: Awaitable sleep function (replaceable in tests)

    Returns:
        AsyncRetrying context manager
    """
    return AsyncRetrying(
        stop=stop_after_attempt(max_retries + 1),
        wait=wait_exponential(multiplier=base_delay, exp_base=2, min=0, max=max_delay),
        retry=retry_if_exception_type(RETRYABLE_EXCEPTIONS),
        sleep=sleep,
        reraise=True,
    )


def _format_exception(e: Exception) -> str:
    """Format exception for logging, handling nested/empty exceptions."""
    msg = str(e).strip()

    if not msg:
        msg = type(e).__name__

    # Nested exceptions are common in API clients
    if e.__cause__:
        cause_msg = str(e.__cause__).strip()
        if cause_msg and cause_msg not in msg:
            msg = f"{msg} (caused by: {cause_msg})"

    if hasattr(e, "status_code"):
        msg = f"HTTP {e.status_code}: {msg}"

    return msg or "Unknown error"


async def with_retry(
    func: Callable[..., Awaitable[T]],
    *args: Any,
    max_retries: int = DEFAULT_MAX_RETRIES,
    base_delay: float = DEFAULT_BASE_DELAY,
    operation_name: str = "operation",
    sleep: SleepFunc = asyncio.sleep,
    **kwargs: Any,
) -> T:
    """Execute an async function, retrying transient failures with backoff.

    Args:
        func: Async function to execute
        *args: Positional arguments for the function
        max_retries: Retries allowed after the first attempt
        base_delay: Wait before the first retry in seconds
        operation_name: Name for logging purposes
        sleep: Awaitable sleep function used between attempts
        **kwargs: Keyword arguments for the function

    Returns:
        Result of the function

    Raises:
        The last exception if all retries fail, or the first non-retryable one
    """
    attempt = 0
    total_attempts = max_retries + 1

    async for attempt_ctx in get_async_retry(
        max_retries=max_retries, base_delay=base_delay, sleep=sleep
    ):
        with attempt_ctx:
            attempt += 1
            if attempt > 1:
                logger.info(
                    f"Retrying {operation_name} (attempt {attempt}/{total_attempts})"
                )
            try:
                return await func(*args, **kwargs)
            except RETRYABLE_EXCEPTIONS as e:
                logger.warning(
                    f"{operation_name} failed (attempt {attempt}/{total_attempts}): "
                    f"{_format_exception(e)}"
                )
                raise  # Let tenacity handle the retry
            except Exception as e:
                logger.error(
                    f"{operation_name} failed with non-retryable error: "
                    f"{_format_exception(e)}"
                )
                raise

    raise RuntimeError(f"{operation_name} failed after {total_attempts} attempts")
