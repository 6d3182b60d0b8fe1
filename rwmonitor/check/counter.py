"""FailureCounter — consecutive failed checks since the last reset."""

from __future__ import annotations


class FailureCounter:
    """Non-negative count of consecutive failed checks.

    Increments by one per failed tick and only ever decreases by a full
    reset to zero.
    """

    def __init__(self) -> None:
        self._count = 0

    def current(self) -> int:
        return self._count

    def on_failure(self) -> int:
        """Record a failed tick and return the new count."""
        self._count += 1
        return self._count

    def on_success(self) -> None:
        """Record a successful tick with no alert outstanding."""
        self._count = 0

    def on_resolved(self) -> None:
        """Reset after a confirmed trigger or resolve delivery."""
        self._count = 0

    def reached(self, threshold: int) -> bool:
        return self._count >= threshold

    def __repr__(self) -> str:
        return f"FailureCounter(count={self._count})"
