"""
Exponential backoff for upstream calls.

Attempt the operation, and after each retryable failure wait
base_delay * 2**n before the next try (0.5s, 1s, 2s with the defaults).
NotFound is a definitive answer and is never retried.
"""

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    retry_if_not_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ordering_client.core.exceptions import NotFound, ServerError, TransportError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _log_retry(label: str, max_retries: int) -> Callable[[RetryCallState], None]:
    def log(retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        delay = retry_state.next_action.sleep if retry_state.next_action else 0.0
        logger.warning(
            f"{label} failed ({error}); retry {retry_state.attempt_number}/{max_retries} "
            f"in {delay:.1f}s"
        )
    return log


async def retry_with_backoff(
    operation: Callable[[], Awaitable[T]],
    max_retries: int = 3,
    base_delay: float = 0.5,
    label: str = "request",
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """
    Run operation, retrying ServerError/TransportError up to max_retries times.

    Args:
        operation: Zero-argument coroutine factory
        max_retries: Retries after the first attempt
        base_delay: First delay in seconds
        label: Name used in log messages
        sleep: Awaitable sleep, replaceable in tests

    Returns:
        The operation's result

    Raises:
        The last error once retries are exhausted, or NotFound immediately
    """
    retrying = AsyncRetrying(
        sleep=sleep,
        stop=stop_after_attempt(max_retries + 1),
        wait=wait_exponential(multiplier=base_delay),
        retry=(
            retry_if_exception_type((ServerError, TransportError))
            & retry_if_not_exception_type(NotFound)
        ),
        before_sleep=_log_retry(label, max_retries),
        reraise=True,
    )
    try:
        return await retrying(operation)
    except NotFound:
        raise
    except (ServerError, TransportError) as e:
        logger.error(f"{label} failed after {max_retries + 1} attempts: {e}")
        raise
