"""Retry with exponential backoff for transient model errors."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, TypeVar

import anthropic

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)

T = TypeVar("T")

RETRYABLE_STATUS = frozenset({429, 500, 502, 503, 529})
_RETRYABLE_PHRASES = ("overloaded", "rate limit", "high demand")


def is_retryable(exc: BaseException) -> bool:
    """Rate-limit and overload errors are retryable; everything else is fatal."""
    if isinstance(exc, (anthropic.RateLimitError, anthropic.APITimeoutError)):
        return True
    status = getattr(exc, "status_code", None)
    if isinstance(status, int) and status in RETRYABLE_STATUS:
        return True
    message = str(exc).lower()
    return any(phrase in message for phrase in _RETRYABLE_PHRASES)


async def with_retry(
    fn: Callable[[], Awaitable[T]],
    label: str,
    *,
    max_attempts: int = 3,
    base_delay: float = 2.0,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Call ``fn`` up to ``max_attempts`` times.

    After a retryable failure on attempt ``n`` (0-based) waits
    ``base_delay * 2**n`` seconds. Non-retryable errors, and the error from
    the final attempt, are re-raised unchanged.
    """
    for attempt in range(max_attempts):
        try:
            return await fn()
        except Exception as exc:
            if attempt + 1 >= max_attempts or not is_retryable(exc):
                raise
            delay = base_delay * 2**attempt
            logger.warning(
                "%s — retrying in %.1fs (attempt %d/%d): %s",
                label,
                delay,
                attempt + 1,
                max_attempts,
                type(exc).__name__,
            )
            await sleep(delay)
    msg = "max_attempts must be at least 1"
    raise ValueError(msg)
