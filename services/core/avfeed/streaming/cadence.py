from __future__ import annotations

import time
from typing import Callable


class PollCadence:
    """Elapsed-time gate for starting a new polling cycle."""

    def __init__(self, interval_seconds: float = 60.0, clock: Callable[[], float] = time.monotonic):
        if interval_seconds <= 0:
            raise ValueError(f"interval_seconds must be positive, got {interval_seconds}")
        self.interval_seconds = interval_seconds
        self._clock = clock
        self._last_cycle: float | None = None

    @property
    def last_cycle(self) -> float | None:
        return self._last_cycle

    def is_due(self) -> bool:
        if self._last_cycle is None:
            return True
        return self._clock() - self._last_cycle >= self.interval_seconds

    def mark(self) -> None:
        self._last_cycle = self._clock()

    def try_start(self) -> bool:
        """Record a new cycle and return True if one is due."""
        if not self.is_due():
            return False
        self.mark()
        return True

    def seconds_until_due(self) -> float:
        if self._last_cycle is None:
            return 0.0
        return max(0.0, self.interval_seconds - (self._clock() - self._last_cycle))
