"""Cancellation and deadline token passed to every storage operation.

An ``OperationContext`` carries an optional absolute deadline (monotonic
clock) and a cancellation flag. Transports create one per request; storage
backends check it before blocking work and between steps of long-running
work (result pages, table readiness polling, retry backoff).

Usage:
    ctx = OperationContext.with_timeout(30)
    event = repository.get(ctx, "abc")

    # From another thread
    ctx.cancel()
"""

import threading
import time
from typing import Optional


class OperationCancelledError(Exception):
    """Raised when an operation context is cancelled or its deadline passes.

    Storage backends re-raise this as a ``StorageError`` subclass so callers
    only have to handle one failure type.
    """

    def __init__(self, message: str, error_code: str = "CANCELLED"):
        super().__init__(message)
        self.message = message
        self.error_code = error_code


class OperationContext:
    """Deadline and cancellation token for a unit of work."""

    def __init__(self, deadline: Optional[float] = None):
        self._deadline = deadline
        self._cancelled = threading.Event()

    @classmethod
    def background(cls) -> "OperationContext":
        """Context with no deadline that is only stopped by ``cancel()``."""
        return cls()

    @classmethod
    def with_timeout(cls, seconds: float) -> "OperationContext":
        """Context that expires ``seconds`` from now."""
        return cls(deadline=time.monotonic() + seconds)

    @property
    def deadline(self) -> Optional[float]:
        return self._deadline

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def expired(self) -> bool:
        return self._deadline is not None and time.monotonic() >= self._deadline

    @property
    def done(self) -> bool:
        return self.cancelled or self.expired

    def cancel(self) -> None:
        self._cancelled.set()

    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline, ``None`` when unbounded."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def check(self) -> None:
        """Raise ``OperationCancelledError`` if the context is done."""
        if self.cancelled:
            raise OperationCancelledError("operation cancelled", "CANCELLED")
        if self.expired:
            raise OperationCancelledError(
                "operation deadline exceeded", "DEADLINE_EXCEEDED"
            )

    def wait(self, seconds: float) -> bool:
        """Sleep up to ``seconds``, waking early on cancellation or deadline.

        Returns:
            True if the full delay elapsed, False if the context finished first.
        """
        remaining = self.remaining()
        if remaining is not None and remaining < seconds:
            self._cancelled.wait(remaining)
            return False
        return not self._cancelled.wait(seconds)
