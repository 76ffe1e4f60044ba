"""
Infrastructure-specific decorators, providing cross-cutting concerns like
retry logic for network operations.
"""

import logging

from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from ..application.domain import Ces, Fetcher
from ..application.exceptions import FetchError

logger = logging.getLogger(__name__)

# --- Constants for Retry Logic ---
_RETRY_MIN_WAIT_SECONDS = 1
_RETRY_MAX_WAIT_SECONDS = 10


def _log_before_retry(retry_state):
    """Log the retry attempt with details about the exception and wait time."""
    exception = retry_state.outcome.exception()
    next_attempt_in = retry_state.next_action.sleep
    logger.warning(
        f"[{exception.year}] Retrying download in {next_attempt_in:.2f}s "
        f"due to {type(exception.cause).__name__} "
        f"(attempt {retry_state.attempt_number})..."
    )


def _is_transient(exception: BaseException) -> bool:
    return isinstance(exception, FetchError) and exception.retryable


def retry_on_transient_fetch_error(
    attempts: int,
    min_wait: float = _RETRY_MIN_WAIT_SECONDS,
    max_wait: float = _RETRY_MAX_WAIT_SECONDS,
) -> AsyncRetrying:
    """
    Build a retry controller for downloads.

    Only FetchErrors flagged as retryable (timeouts, connection failures,
    5xx responses) are retried. With attempts=1 the call runs exactly once
    and its error propagates unchanged.
    """
    return AsyncRetrying(
        stop=stop_after_attempt(max(1, attempts)),
        wait=wait_exponential(multiplier=1, min=min_wait, max=max_wait),
        retry=retry_if_exception(_is_transient),
        before_sleep=_log_before_retry,
        reraise=True,
    )


class RetryingFetcher(Fetcher):
    """Wraps another Fetcher and retries its transient failures."""

    def __init__(
        self,
        inner: Fetcher,
        attempts: int = 1,
        min_wait: float = _RETRY_MIN_WAIT_SECONDS,
        max_wait: float = _RETRY_MAX_WAIT_SECONDS,
    ):
        self.inner = inner
        self.attempts = attempts
        self.min_wait = min_wait
        self.max_wait = max_wait

    def url(self, ces: Ces) -> str:
        return self.inner.url(ces)

    async def fetch(self, ces: Ces) -> bytes:
        retrying = retry_on_transient_fetch_error(
            self.attempts, self.min_wait, self.max_wait
        )
        async for attempt in retrying:
            with attempt:
                return await self.inner.fetch(ces)
