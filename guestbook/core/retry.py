"""
Sequential retry policy for startup-only operations.

Fixed backoff by default, optional exponential growth, never jitter. Request
handlers do not retry; this is only used while bootstrapping the store.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)


class RetryExhausted(RuntimeError):
    def __init__(self, attempts: int, last_error: BaseException) -> None:
        super().__init__(f"Gave up after {attempts} attempt(s): {last_error}")
        self.attempts = attempts
        self.last_error = last_error


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 5
    backoff_s: float = 2.0
    exponential: bool = False

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1.")
        if self.backoff_s < 0:
            raise ValueError("backoff_s must be >= 0.")

    def delay_for(self, attempt: int) -> float:
        """
        Seconds to wait after failed attempt number `attempt` (1-based).
        """
        if attempt < 1:
            raise ValueError("attempt is 1-based.")
        if self.exponential:
            return self.backoff_s * (2 ** (attempt - 1))
        return self.backoff_s

    async def run(
        self,
        operation: Callable[[], Awaitable[T]],
        *,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
        on_failure: Callable[[int, Exception], None] | None = None,
    ) -> T:
        """
        Await `operation()` until it succeeds or attempts run out.

        Every failed attempt is reported; only the final one raises
        (`RetryExhausted`, chained from the last error).
        """
        attempt = 1
        while True:
            try:
                return await operation()
            except Exception as exc:
                if on_failure is not None:
                    on_failure(attempt, exc)
                else:
                    logger.warning(
                        "attempt_failed attempt=%s max_attempts=%s error=%s",
                        attempt,
                        self.max_attempts,
                        exc,
                    )
                if attempt >= self.max_attempts:
                    raise RetryExhausted(self.max_attempts, exc) from exc
            await sleep(self.delay_for(attempt))
            attempt += 1
