"""Bounded retry with exponential backoff."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional, TypeVar

T = TypeVar("T")

SleepFn = Callable[[float], Awaitable[None]]
RetryHook = Callable[[int, float, BaseException], None]


@dataclass(frozen=True)
class RetryPolicy:
    """Retry an async operation up to ``max_attempts`` times.

    After failed attempt ``n`` (1-based) the policy sleeps
    ``base_delay * multiplier ** (n - 1)`` seconds, so the defaults wait
    100 ms, then 200 ms. The final failure is re-raised unchanged.
    """

    max_attempts: int = 3
    base_delay: float = 0.1
    multiplier: float = 2.0
    sleep: SleepFn = field(default=asyncio.sleep, compare=False, repr=False)

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.base_delay < 0 or self.multiplier < 1:
            raise ValueError("base_delay must be >= 0 and multiplier >= 1")

    def delay_for(self, attempt: int) -> float:
        """Backoff to wait after failed attempt number ``attempt``."""

        return self.base_delay * self.multiplier ** (attempt - 1)

    def delays(self) -> list[float]:
        """Every backoff the policy can wait, in order."""

        return [self.delay_for(attempt) for attempt in range(1, self.max_attempts)]

    async def run(
        self,
        operation: Callable[[], Awaitable[T]],
        *,
        retry_on: tuple[type[BaseException], ...] = (Exception,),
        on_retry: Optional[RetryHook] = None,
    ) -> T:
        attempt = 1
        while True:
            try:
                return await operation()
            except retry_on as exc:
                if attempt >= self.max_attempts:
                    raise
                delay = self.delay_for(attempt)
                if on_retry is not None:
                    on_retry(attempt, delay, exc)
                await self.sleep(delay)
                attempt += 1


__all__ = ["RetryPolicy"]
