"""Optional exponential-backoff wrapper for gateway calls.

Not applied to any request path by default; callers opt in, e.g.::

    symptoms = await with_retry(lambda: gateway.extract_symptoms_from_audio(path))
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from symptom_assist.config import settings
from symptom_assist.errors import (
    BackendAuthError,
    BackendError,
    BackendQuotaError,
    EmptyResponseError,
    RequestTimeoutError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

TRANSIENT_GATEWAY_ERRORS: tuple[type[Exception], ...] = (
    RequestTimeoutError,
    EmptyResponseError,
    BackendError,
)
NON_RETRYABLE_ERRORS: tuple[type[Exception], ...] = (
    BackendAuthError,
    BackendQuotaError,
)


def is_retryable(
    exc: Exception,
    retry_on: tuple[type[Exception], ...] = TRANSIENT_GATEWAY_ERRORS,
) -> bool:
    if isinstance(exc, NON_RETRYABLE_ERRORS):
        return False
    if isinstance(exc, BackendError):
        # Client-side (4xx) backend rejections repeat on every attempt.
        backend_code = exc.details.get("backend_code")
        if isinstance(backend_code, int) and backend_code < 500:
            return False
    return isinstance(exc, retry_on)


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    *,
    attempts: int | None = None,
    backoff_seconds: float | None = None,
    retry_on: tuple[type[Exception], ...] = TRANSIENT_GATEWAY_ERRORS,
) -> T:
    """Run ``operation`` up to ``attempts`` times, sleeping backoff * 2**n between tries."""
    max_attempts = max(1, attempts if attempts is not None else settings.gemini_retry_attempts)
    base_backoff = (
        backoff_seconds
        if backoff_seconds is not None
        else settings.gemini_retry_backoff_seconds
    )

    last_error: Exception | None = None
    for attempt in range(max_attempts):
        try:
            return await operation()
        except Exception as exc:
            if not is_retryable(exc, retry_on):
                raise
            last_error = exc
            if attempt + 1 >= max_attempts:
                break
            backoff = base_backoff * (2**attempt)
            logger.warning(
                "Gateway call failed (%s). retry %s/%s in %.2fs",
                exc.__class__.__name__,
                attempt + 1,
                max_attempts,
                backoff,
            )
            await asyncio.sleep(backoff)

    raise last_error
