"""Fixed-interval rate limiting for calls to external providers."""

import asyncio
from typing import Awaitable, Callable


class RateLimiter:
    """Pause for a fixed delay after every ``every`` calls.

    ``every=1`` gives a constant gap between consecutive calls (history
    pagination, holder loop); ``every=10`` gives a pause per batch of ten
    lookups (metadata scans).
    """

    def __init__(
        self,
        every: int = 1,
        delay: float = 0.2,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    ):
        if every <= 0:
            raise ValueError(f"every must be positive, got {every}")
        if delay < 0:
            raise ValueError(f"delay must be non-negative, got {delay}")
        self.every = every
        self.delay = delay
        self._sleep = sleep
        self._count = 0

    @property
    def count(self) -> int:
        """Number of calls recorded since the last reset."""
        return self._count

    async def tick(self) -> None:
        """Record one call and wait if a batch boundary was reached."""
        self._count += 1
        if self._count % self.every == 0 and self.delay > 0:
            await self._sleep(self.delay)

    def reset(self) -> None:
        """Forget all recorded calls."""
        self._count = 0
