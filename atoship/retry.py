"""Retry logic with capped exponential backoff and cooperative cancellation."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, TypeVar

from .exceptions import (
    APIError,
    APIRateLimitError,
    RequestCancelledError,
    TRANSIENT_KINDS,
)

T = TypeVar("T")


class CancellationToken:
    """
    Cooperative cancellation signal for a call (or a group of calls).

    The retry layer checks it before every attempt and wakes up from a backoff
    wait as soon as it is cancelled.

    A token belongs to the event loop that first waits on it. Create a new one
    for each ``asyncio.run``; ``cancel()`` must be called from that loop's thread.
    """

    def __init__(self):
        self._event = asyncio.Event()

    def cancel(self):
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    async def wait(self, timeout: float) -> bool:
        """Wait up to ``timeout`` seconds; return True if cancelled meanwhile."""
        try:
            await asyncio.wait_for(self._event.wait(), timeout)
        except asyncio.TimeoutError:
            pass
        return self._event.is_set()


@dataclass
class RetryState:
    """Bookkeeping for one logical call. Never shared between calls."""

    attempt: int = 0
    total_delay: float = 0.0
    last_error: Optional[APIError] = None


@dataclass(frozen=True)
class RetryConfig:
    """Configuration for retry behavior with exponential backoff."""

    max_retries: int = 3
    base_delay: float = 1.0
    max_delay: float = 30.0

    # Callbacks for monitoring
    on_retry: Optional[Callable[[int, APIError, float], None]] = None
    on_give_up: Optional[Callable[[APIError], None]] = None

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    def should_retry(self, error: APIError) -> bool:
        """Only transient kinds (rate limit, network, server) are retried."""
        return error.kind in TRANSIENT_KINDS

    def calculate_delay(self, next_attempt: int, retry_after: Optional[float] = None) -> float:
        """
        Delay before attempt ``next_attempt`` (2 for the first retry).

        The computed backoff is ``base_delay * 2 ** (next_attempt - 2)``. A
        retry-after hint wins when it is longer. Both are capped at max_delay.
        """
        computed = self.base_delay * (2 ** max(0, next_attempt - 2))
        delay = computed
        if retry_after is not None and retry_after > computed:
            delay = retry_after
        return min(delay, self.max_delay)


NO_RETRY = RetryConfig(max_retries=0)


class RetryManager:
    """Runs an attempt function under a RetryConfig."""

    def __init__(self, config: Optional[RetryConfig] = None, logger: Optional[logging.Logger] = None):
        self.config = config or RetryConfig()
        self._logger = logger

    def _log(self, level: int, message: str, *args):
        if self._logger:
            self._logger.log(level, message, *args)

    async def _wait(self, delay: float, token: Optional[CancellationToken]) -> bool:
        if token is None:
            await asyncio.sleep(delay)
            return False
        return await token.wait(delay)

    async def execute(
        self,
        func: Callable[[], Awaitable[T]],
        cancel_token: Optional[CancellationToken] = None,
        description: str = "request",
    ) -> T:
        """
        Execute ``func`` with retries.

        Raises:
            APIError: The last classified error once retries are exhausted, or
                the first non-transient one
            RequestCancelledError: If ``cancel_token`` fired before an attempt
                or during a backoff wait
        """
        state = RetryState()

        while True:
            if cancel_token is not None and cancel_token.cancelled:
                self._log(logging.INFO, "%s cancelled after %d attempt(s)", description, state.attempt)
                raise RequestCancelledError(attempts=state.attempt) from state.last_error

            state.attempt += 1
            try:
                result = await func()
            except APIError as e:
                state.last_error = e
                self._log(
                    logging.WARNING,
                    "%s attempt %d/%d failed: %s (%s)",
                    description,
                    state.attempt,
                    self.config.max_attempts,
                    e.kind.value,
                    e.message,
                )

                if not self.config.should_retry(e) or state.attempt >= self.config.max_attempts:
                    if self.config.on_give_up:
                        self.config.on_give_up(e)
                    raise

                retry_after = e.retry_after if isinstance(e, APIRateLimitError) else None
                delay = self.config.calculate_delay(state.attempt + 1, retry_after)

                if self.config.on_retry:
                    self.config.on_retry(state.attempt, e, delay)
                self._log(logging.INFO, "%s retrying in %.2fs", description, delay)

                if await self._wait(delay, cancel_token):
                    self._log(logging.INFO, "%s cancelled during backoff", description)
                    raise RequestCancelledError(attempts=state.attempt) from e
                state.total_delay += delay
                continue

            if state.attempt > 1:
                self._log(
                    logging.INFO,
                    "%s succeeded on attempt %d after %.2fs of backoff",
                    description,
                    state.attempt,
                    state.total_delay,
                )
            return result
