"""
Bounded polling - explicit deadlines and cooperative cancellation for every wait point
"""

import asyncio
import time
from typing import Any, Awaitable, Callable, Optional

from ..error_handler import CaptureCancelledError, RenderTimeoutError


class CancellationToken:
    """Shared flag checked by every poll loop of a run"""

    def __init__(self):
        self.cancelled = False
        self.reason: Optional[str] = None

    def cancel(self, reason: str = "cancelled"):
        self.reason = reason
        self.cancelled = True

    def raise_if_cancelled(self):
        if self.cancelled:
            raise CaptureCancelledError(f"Capture cancelled: {self.reason}")


class Deadline:
    """A point in monotonic time after which a wait must give up"""

    def __init__(self, timeout_ms: float, clock: Callable[[], float] = time.monotonic):
        self.timeout_ms = timeout_ms
        self._clock = clock
        self._expires_at = clock() + timeout_ms / 1000.0

    def remaining(self) -> float:
        """Seconds left, never negative"""
        return max(0.0, self._expires_at - self._clock())

    def expired(self) -> bool:
        return self._clock() >= self._expires_at


async def poll_until(probe: Callable[[], Awaitable[Any]],
                     predicate: Callable[[Any], bool],
                     deadline: Deadline,
                     interval_ms: float,
                     token: Optional[CancellationToken] = None,
                     description: str = "condition",
                     error_cls=RenderTimeoutError) -> Any:
    """
    Call ``probe`` until ``predicate`` accepts its value or the deadline passes.

    The probe is always evaluated at least once, and sleeps never overrun the
    deadline. Returns the accepted value; raises ``error_cls`` on timeout and
    ``CaptureCancelledError`` when the token is cancelled.
    """
    interval = interval_ms / 1000.0
    last_value = None

    while True:
        if token:
            token.raise_if_cancelled()

        last_value = await probe()
        if predicate(last_value):
            return last_value

        if deadline.expired():
            raise error_cls(
                f"Timed out after {deadline.timeout_ms:.0f}ms waiting for {description} "
                f"(last value: {last_value!r})"
            )

        await asyncio.sleep(min(interval, deadline.remaining()))


async def wait_until_stable(probe: Callable[[], Awaitable[Any]],
                            window_ms: float,
                            deadline: Deadline,
                            interval_ms: float,
                            token: Optional[CancellationToken] = None,
                            clock: Callable[[], float] = time.monotonic,
                            description: str = "value to stabilize") -> Any:
    """
    Poll ``probe`` until it returns the same non-None value for ``window_ms``.

    Returns the stable value. Raises ``RenderTimeoutError`` if the deadline
    passes first.
    """
    state = {'value': None, 'since': None}
    window = window_ms / 1000.0

    def is_stable(value) -> bool:
        now = clock()
        if value is None or value != state['value']:
            state['value'] = value
            state['since'] = now
            return False
        return now - state['since'] >= window

    return await poll_until(probe, is_stable, deadline, interval_ms, token, description)
