"""
Retry With Backoff

A retry policy is a plain callable: attempt_index -> delay in seconds, or
None to give up. It knows nothing about the call it guards, so the same
policy can wrap any async operation.

DEFAULT POLICY:
- Up to 3 retries after the first attempt (4 calls total)
- Delay doubles from the base value: 1s, 2s, 4s
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, TypeVar


logger = logging.getLogger(__name__)

T = TypeVar("T")

RetryPolicy = Callable[[int], Optional[float]]


@dataclass(frozen=True)
class BackoffPolicy:
    """Exponential backoff: base_delay * 2**attempt, for max_retries attempts."""
    max_retries: int = 3
    base_delay: float = 1.0

    def __call__(self, attempt: int) -> Optional[float]:
        if attempt < 0 or attempt >= self.max_retries:
            return None
        return self.base_delay * (2 ** attempt)


NO_RETRY = BackoffPolicy(max_retries=0)


async def call_with_retry(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    is_retryable: Callable[[Exception], bool],
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    label: str = "operation"
) -> T:
    """
    Run operation, retrying retryable failures as long as policy allows.

    Non-retryable errors and the error of the final attempt propagate
    unchanged.
    """
    attempt = 0
    while True:
        try:
            return await operation()
        except Exception as e:
            if not is_retryable(e):
                raise

            delay = policy(attempt)
            if delay is None:
                logger.warning("%s failed after %d retries: %s", label, attempt, e)
                raise

            attempt += 1
            logger.info(
                "Retrying %s in %.2fs (retry %d) after: %s", label, delay, attempt, e
            )
            await sleep(delay)
