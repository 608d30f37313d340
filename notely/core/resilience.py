"""
Resilience Infrastructure.

Retry policy and structured retry logging for calls to the remote API.

Only read requests are retried, and only for failures that a second
attempt can plausibly fix (network errors, timeouts, 5xx). Writes are
never retried automatically.

Usage:
    from notely.core.resilience import read_retrying

    async for attempt in read_retrying(attempts=2, delay=1.0):
        with attempt:
            notes = await api.list_notes()
"""

from typing import Any

from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from notely.core.exceptions import NetworkError, ServerError
from notely.core.logging import get_logger

logger = get_logger(__name__)

RETRYABLE_ERRORS = (NetworkError, ServerError)


def log_retry(retry_state: Any) -> None:
    """Tenacity before_sleep callback that emits structured retry events.

    Pass this as `before_sleep=log_retry` in any retrying block.

    Args:
        retry_state: tenacity.RetryCallState instance
    """
    duration_ms = None
    if retry_state.outcome_timestamp and retry_state.start_time:
        duration_ms = round(
            (retry_state.outcome_timestamp - retry_state.start_time) * 1000
        )

    error = None
    if retry_state.outcome and retry_state.outcome.failed:
        error = str(retry_state.outcome.exception())

    fn_name = getattr(retry_state.fn, "__name__", "read")

    logger.warning(
        f"Retrying {fn_name} (attempt {retry_state.attempt_number})",
        extra={
            "resilience_event": "retry_attempt",
            "dependency": fn_name,
            "attempt": retry_state.attempt_number,
            "duration_ms": duration_ms,
            "error": error,
        },
    )


def read_retrying(attempts: int, delay: float) -> AsyncRetrying:
    """Build the retry controller for read requests.

    Args:
        attempts: Number of retries after the first try (0 disables retrying)
        delay: Fixed delay in seconds between tries

    Returns:
        Configured AsyncRetrying that re-raises the last error
    """
    return AsyncRetrying(
        stop=stop_after_attempt(attempts + 1),
        wait=wait_fixed(delay),
        retry=retry_if_exception_type(RETRYABLE_ERRORS),
        before_sleep=log_retry,
        reraise=True,
    )
