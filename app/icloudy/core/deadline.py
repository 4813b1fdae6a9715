"""Cooperative deadlines for discovery probes and copy loops.

A Deadline is checked between units of work (one probe, one file) and
caps subprocess timeouts. Nothing is interrupted mid-operation.
"""

import time
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Deadline:
    """A point in monotonic time after which no new work is started.

    Attributes:
        expires_at: Value of time.monotonic() at which the deadline expires.
    """

    expires_at: float

    @classmethod
    def after(cls, seconds: float) -> "Deadline":
        """Create a deadline that expires ``seconds`` from now."""
        return cls(expires_at=time.monotonic() + seconds)

    @property
    def remaining(self) -> float:
        """Seconds left before expiry (never negative)."""
        return max(0.0, self.expires_at - time.monotonic())

    @property
    def expired(self) -> bool:
        """True once the deadline has passed."""
        return time.monotonic() >= self.expires_at

    def cap(self, timeout: float | None) -> float:
        """Limit a subprocess timeout to the time left on this deadline.

        Args:
            timeout: Requested timeout in seconds, or None for no limit.

        Returns:
            The smaller of ``timeout`` and the remaining time.
        """
        if timeout is None:
            return self.remaining
        return min(timeout, self.remaining)


def is_expired(deadline: Deadline | None) -> bool:
    """Check an optional deadline."""
    return deadline is not None and deadline.expired
