"""Consecutive-failure circuit breaker for one classification run."""

from __future__ import annotations


class CircuitBreaker:
    """Counts consecutive failed external calls; opens at ``threshold``.

    Each failed attempt counts (a call retried once and failed twice adds two),
    and any success resets the count. Once open it stays open for the run.
    """

    def __init__(self, threshold: int) -> None:
        if threshold < 1:
            raise ValueError("threshold must be >= 1")
        self.threshold = threshold
        self.consecutive_failures = 0
        self.total_failures = 0
        self._open = False

    @property
    def is_open(self) -> bool:
        return self._open

    def record_success(self) -> None:
        if not self._open:
            self.consecutive_failures = 0

    def record_failure(self) -> None:
        self.total_failures += 1
        self.consecutive_failures += 1
        if self.consecutive_failures >= self.threshold:
            self._open = True
