"""Fixed-capacity circular buffer of per-bucket maxima.

The window is anchored to "now" lazily: every read or write first catches the
buffer up to the current time, zeroing buckets that aged out. There is no
background timer.
"""
import logging
import math
from typing import Optional

import numpy as np

from trending.determinism import TimeProvider

logger = logging.getLogger(__name__)

DEFAULT_STEP_SEC = 24 * 3600.0
DEFAULT_DURATION_SEC = 7 * 24 * 3600.0


def truncate(ts: float, step: float) -> float:
    return math.floor(ts / step) * step


class RollingMaxWindow:
    def __init__(self, step_sec: float = DEFAULT_STEP_SEC, duration_sec: float = DEFAULT_DURATION_SEC, time_provider=None):
        step = float(step_sec)
        duration = float(duration_sec)
        if step <= 0 or duration <= 0:
            raise ValueError("step_sec and duration_sec must be positive")
        length = int(duration // step)
        if length < 1:
            raise ValueError(f"duration_sec={duration} must cover at least one step of {step}s")
        self.tp = time_provider or TimeProvider()
        self.step = step
        self.duration = duration
        self.length = length
        self._buffer = np.zeros(length, dtype=float)
        # newest accepts writes; oldest is the next slot to be recycled
        self._newest = 0
        self._oldest = 1 % length
        self._end = truncate(self.tp.now(), step) - duration

    def insert(self, value: float, now: Optional[float] = None) -> None:
        self.advance(now)
        if value > self._buffer[self._newest]:
            self._buffer[self._newest] = value

    def current_max(self, now: Optional[float] = None) -> float:
        """Maximum across all buckets, 0.0 when nothing has been inserted."""
        self.advance(now)
        m = float(self._buffer.max())
        return m if m > 0.0 else 0.0

    def advance(self, now: Optional[float] = None) -> int:
        """Shift the buffer forward to `now`. Returns the number of steps taken."""
        if now is None:
            now = self.tp.now()
        new_end = truncate(now, self.step) - self.duration
        if new_end <= self._end:
            return 0
        steps = int(round((new_end - self._end) / self.step))
        if steps >= self.length:
            logger.debug("window idle for %d steps, clearing", steps)
            self._buffer.fill(0.0)
            self._newest = (self._newest + steps) % self.length
            self._oldest = (self._newest + 1) % self.length
        else:
            for _ in range(steps):
                self._buffer[self._oldest] = 0.0
                self._newest = self._oldest
                self._oldest = (self._oldest + 1) % self.length
        self._end = new_end
        return steps

    def snapshot(self) -> list:
        """Bucket values oldest first, without advancing."""
        order = [(self._oldest + i) % self.length for i in range(self.length)]
        return [float(self._buffer[i]) for i in order]
