"""Paced, timed, retrying wrapper for outbound calls, returning a result value."""
from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Union

import aiohttp

from ..errors import DataSourceError, TerminalError

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[Any]]
Operation = Callable[[], Awaitable[Any]]


# ---------------------------------------------------------------------------
# Result type
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Ok:
    value: Any
    attempts: int = 1

    @property
    def ok(self) -> bool:
        return True

    @property
    def reason(self) -> str | None:
        return None

    def unwrap(self) -> Any:
        return self.value


@dataclass(frozen=True)
class _Err:
    error: Exception
    attempts: int = 1

    @property
    def ok(self) -> bool:
        return False

    @property
    def reason(self) -> str:
        return str(self.error) or type(self.error).__name__

    def unwrap(self) -> Any:
        raise self.error


class RetryableErr(_Err):
    """Transient failure that outlived the retry budget."""


class FatalErr(_Err):
    """Failure that retrying cannot fix; returned after the first attempt."""


Result = Union[Ok, RetryableErr, FatalErr]


def is_retryable(error: BaseException) -> bool:
    """Timeouts, transport errors and provider throttling are worth retrying."""
    if isinstance(error, TerminalError):
        return False
    return isinstance(
        error, (asyncio.TimeoutError, aiohttp.ClientError, OSError, DataSourceError)
    )


# ---------------------------------------------------------------------------
# Caller
# ---------------------------------------------------------------------------


class RateLimitedCaller:
    """Wrap single network operations with pacing, a timeout and backoff.

    - consecutive attempts are at least ``call_delay`` seconds apart
    - every attempt is bounded by ``timeout`` seconds
    - retryable failures are retried up to ``max_retries`` times, sleeping
      ``base_delay * 2 ** (k - 1)`` before retry ``k``
    - terminal failures return immediately as ``FatalErr``
    """

    def __init__(
        self,
        call_delay: float = 0.2,
        max_retries: int = 3,
        base_delay: float = 0.2,
        timeout: float = 30.0,
        sleep: Sleep = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.call_delay = call_delay
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.timeout = timeout
        self._sleep = sleep
        self._clock = clock
        self._last_call: float | None = None

    async def _throttle(self) -> None:
        if self._last_call is not None and self.call_delay > 0:
            wait = self._last_call + self.call_delay - self._clock()
            if wait > 0:
                await self._sleep(wait)
        self._last_call = self._clock()

    async def call(
        self,
        operation: Operation,
        description: str = "call",
        max_retries: int | None = None,
        base_delay: float | None = None,
    ) -> Result:
        """Run ``operation`` until it succeeds or the retry budget runs out."""
        retries = self.max_retries if max_retries is None else max_retries
        base = self.base_delay if base_delay is None else base_delay

        attempt = 0
        while True:
            attempt += 1
            await self._throttle()
            try:
                value = await asyncio.wait_for(operation(), timeout=self.timeout)
                return Ok(value, attempt)
            except Exception as e:
                if not is_retryable(e):
                    logger.error("%s failed permanently: %s", description, e)
                    return FatalErr(e, attempt)
                if attempt > retries:
                    logger.error("%s failed after %d attempts: %s", description, attempt, e)
                    return RetryableErr(e, attempt)

                delay = base * (2 ** (attempt - 1))
                logger.warning(
                    "%s attempt %d failed (%s), retrying in %.2fs",
                    description,
                    attempt,
                    str(e) or type(e).__name__,
                    delay,
                )
                await self._sleep(delay)
