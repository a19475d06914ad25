"""Bounded async retries with full-jitter exponential backoff."""

from __future__ import annotations

import asyncio
import logging
import random
from typing import Awaitable, Callable, TypeVar

from mip_vote.exceptions import NetworkError

log = logging.getLogger(__name__)

T = TypeVar("T")


def full_jitter_delay(attempt: int, *, base_delay: float, max_delay: float) -> float:
    """Random delay in [0, min(max_delay, base_delay * 2**(attempt-1))]."""
    if attempt < 1:
        raise ValueError("attempt must be >= 1")
    if base_delay < 0 or max_delay < 0:
        raise ValueError("base_delay and max_delay must be >= 0")

    cap = min(max_delay, base_delay * (2 ** (attempt - 1)))
    return random.uniform(0, cap)


async def retry_transient(
    func: Callable[[], Awaitable[T]],
    *,
    max_attempts: int,
    base_delay: float,
    max_delay: float,
    what: str = "request",
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Await ``func()``, retrying only on NetworkError.

    Any other exception propagates on the first occurrence. The last
    NetworkError is re-raised once ``max_attempts`` is spent.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be >= 1")

    attempt = 1
    while True:
        try:
            return await func()
        except NetworkError as exc:
            if attempt >= max_attempts:
                log.error("%s failed after %d attempts: %s", what, attempt, exc)
                raise

            delay = full_jitter_delay(attempt, base_delay=base_delay, max_delay=max_delay)
            log.warning(
                "%s failed (attempt %d/%d): %s; retrying in %.2fs",
                what, attempt, max_attempts, exc, delay,
            )
            if delay > 0:
                await sleep(delay)
            attempt += 1
