"""HTTP retry utilities for external API calls.

Retries a request only while its decoded result is recognised as a transient
upstream fault. Anything else, success or a different error, is returned to the
caller on the spot.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, TypeVar

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RetryExhaustedError(Exception):
    """Raised when every attempt ended in a retryable result."""

    def __init__(self, result: Any, attempts: int):
        super().__init__(f"Request still failing after {attempts} attempts")
        self.result = result
        self.attempts = attempts


async def request_with_retry(
    send: Callable[[], Awaitable[T]],
    *,
    retries: int = 1,
    is_retryable: Callable[[T], bool],
    delay: float = 0.0,
    description: str = "request",
) -> T:
    """Run ``send`` until it yields a non-retryable result or tries run out.

    Args:
        send: Zero-argument coroutine factory performing one attempt
        retries: Extra attempts after the first one (>= 0)
        is_retryable: Predicate telling whether a result is a transient fault
        delay: Seconds to wait between attempts (0 = retry immediately)
        description: Label used in log lines, e.g. "GET contacts"

    Returns:
        The first result for which ``is_retryable`` is False

    Raises:
        ValueError: If retries is negative
        RetryExhaustedError: If all ``retries + 1`` attempts were retryable
    """
    if retries < 0:
        raise ValueError(f"retries must be >= 0, got {retries}")

    tries = retries + 1
    attempt = 0
    result: T

    while tries:
        attempt += 1
        result = await send()

        if not is_retryable(result):
            if attempt > 1:
                logger.info(
                    "[RETRY] %s succeeded on attempt %d/%d",
                    description,
                    attempt,
                    retries + 1,
                )
            return result

        tries -= 1
        if tries:
            logger.warning(
                "[RETRY] %s hit transient fault, retrying (%d/%d)",
                description,
                attempt,
                retries + 1,
            )
            if delay > 0:
                await asyncio.sleep(delay)

    logger.error("[RETRY] %s failed after %d attempts", description, attempt)
    raise RetryExhaustedError(result, attempt)
