"""Bounded retry of TestRail calls."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, TypeVar

from railreport.core.exceptions import ExhaustedRetries
from railreport.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable

T = TypeVar("T")

logger = get_logger(__name__)

DEFAULT_MAX_ATTEMPTS = 5


def retry_until(
    call: Callable[[], T],
    is_success: Callable[[T], bool],
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    delay: float = 0.0,
    operation: str | None = None,
) -> T:
    """
    Repeat a call until its response is accepted.

    Attempts run one after another, never concurrently: the TestRail API has
    no idempotency key, so an attempt must finish before the next one starts.

    Args:
        call: Zero-argument function performing one attempt.
        is_success: Predicate deciding whether a response is accepted.
        max_attempts: Total number of attempts, at least 1.
        delay: Fixed pause in seconds between attempts.
        operation: Name used in logs and in the error.

    Returns:
        The first accepted response.

    Raises:
        ExhaustedRetries: If no attempt was accepted; carries the last response.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    operation = operation or getattr(call, "__name__", "call")
    response: T | None = None

    for attempt in range(1, max_attempts + 1):
        logger.debug("attempt_started", operation=operation, attempt=attempt)
        response = call()
        if is_success(response):
            return response

        if attempt == max_attempts:
            break

        logger.warning(
            "attempt_rejected",
            operation=operation,
            attempt=attempt,
            max_attempts=max_attempts,
            response=response,
        )
        if delay > 0:
            time.sleep(delay)

    logger.error(
        "retry_exhausted",
        operation=operation,
        attempts=max_attempts,
        response=response,
    )
    raise ExhaustedRetries(operation, max_attempts, response)
