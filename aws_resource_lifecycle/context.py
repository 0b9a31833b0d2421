"""Cancellation and deadline handling for lifecycle operations."""
from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Optional

from .errors import OperationCancelled


@dataclass
class OperationContext:
    """Carries an optional deadline and a cancellation signal.

    ``deadline`` is an absolute value on the ``clock`` scale. Operations call
    :meth:`check` before each remote attempt and :meth:`wait` between
    attempts, so a cancelled context stops a retry loop at the next boundary.
    """

    deadline: Optional[float] = None
    clock: Callable[[], float] = time.monotonic
    cancelled: threading.Event = field(default_factory=threading.Event)

    @classmethod
    def with_timeout(cls, seconds: float, clock: Callable[[], float] = time.monotonic) -> "OperationContext":
        return cls(deadline=clock() + seconds, clock=clock)

    def cancel(self) -> None:
        self.cancelled.set()

    def remaining(self) -> Optional[float]:
        """Return the seconds left before the deadline, or ``None`` when unbounded."""

        if self.deadline is None:
            return None
        return max(self.deadline - self.clock(), 0.0)

    def check(self) -> None:
        """Raise :class:`OperationCancelled` if the context is done."""

        if self.cancelled.is_set():
            raise OperationCancelled("operation cancelled")
        if self.deadline is not None and self.clock() >= self.deadline:
            raise OperationCancelled("operation deadline exceeded")

    def wait(self, seconds: float) -> None:
        """Sleep for up to *seconds*, returning early when cancelled."""

        remaining = self.remaining()
        if remaining is not None:
            seconds = min(seconds, remaining)
        if seconds > 0:
            self.cancelled.wait(seconds)


__all__ = ["OperationContext"]
