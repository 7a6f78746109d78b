"""In-memory multi-resolution event counter.

Each level is a ring of fixed-size time buckets. Fine levels answer short
range queries precisely, coarse levels keep a long history cheaply.
"""
import logging
import math
from typing import List, Optional, Sequence

import numpy as np

from trending.determinism import TimeProvider
from trending.interfaces import EventCounter
from trending.rolling_window import truncate
from trending.types import Granularity

logger = logging.getLogger(__name__)

DEFAULT_GRANULARITIES = (
    Granularity(1.0, 120),
    Granularity(60.0, 120),
    Granularity(3600.0, 48),
    Granularity(86400.0, 14),
)


def granularities_for(storage_duration_sec: float) -> List[Granularity]:
    """Default levels with the daily level stretched to cover `storage_duration_sec`."""
    levels = list(DEFAULT_GRANULARITIES)
    daily = levels[-1]
    days = int(math.ceil(storage_duration_sec / daily.step_sec)) + 1
    levels[-1] = Granularity(daily.step_sec, max(daily.count, days))
    return levels


class _Level:
    def __init__(self, granularity: Granularity, now: float):
        self.step = float(granularity.step_sec)
        self.count = int(granularity.count)
        self.buckets = np.zeros(self.count, dtype=float)
        self.newest = 0
        self.newest_start = truncate(now, self.step)

    def earliest(self) -> float:
        return self.newest_start - (self.count - 1) * self.step

    def advance(self, now: float) -> None:
        target = truncate(now, self.step)
        if target <= self.newest_start:
            return
        steps = int(round((target - self.newest_start) / self.step))
        if steps >= self.count:
            self.buckets.fill(0.0)
            self.newest = (self.newest + steps) % self.count
        else:
            for _ in range(steps):
                self.newest = (self.newest + 1) % self.count
                self.buckets[self.newest] = 0.0
        self.newest_start = target

    def add(self, amount: float, timestamp: float) -> bool:
        start = truncate(timestamp, self.step)
        if start < self.earliest() or start > self.newest_start:
            return False
        age = int(round((self.newest_start - start) / self.step))
        self.buckets[(self.newest - age) % self.count] += amount
        return True

    def sum_interval(self, start: float, end: float) -> float:
        """Sum whole buckets overlapping [start, end].

        Partial buckets count in full, so the range is effectively widened by
        up to one bucket at each edge.
        """
        total = 0.0
        for age in range(self.count):
            bucket_start = self.newest_start - age * self.step
            if bucket_start > end:
                continue
            if bucket_start + self.step <= start:
                break
            total += float(self.buckets[(self.newest - age) % self.count])
        return total


class MemoryTimeSeries(EventCounter):
    def __init__(self, granularities: Optional[Sequence[Granularity]] = None, time_provider=None):
        levels = list(DEFAULT_GRANULARITIES if granularities is None else granularities)
        if not levels:
            raise ValueError("at least one granularity is required")
        for g in levels:
            if g.step_sec <= 0 or g.count < 1:
                raise ValueError(f"invalid granularity {g}")
        for finer, coarser in zip(levels, levels[1:]):
            if coarser.step_sec * coarser.count < finer.step_sec * finer.count:
                raise ValueError("granularities must be ordered finest first with growing coverage")
        self.tp = time_provider or TimeProvider()
        now = self.tp.now()
        self._levels: List[_Level] = [_Level(g, now) for g in levels]

    def _advance(self, now: float) -> None:
        for level in self._levels:
            level.advance(now)

    def increase(self, amount: float, timestamp: float) -> None:
        self._advance(max(self.tp.now(), timestamp))
        recorded = False
        for level in self._levels:
            recorded = level.add(amount, timestamp) or recorded
        if not recorded:
            logger.debug("dropping event at %s: older than retention", timestamp)

    def range_sum(self, start: float, end: float) -> float:
        """Events in [start, end] at the finest level that reaches back to `start`.

        Counts whole buckets, so the answer may include up to one extra bucket
        of that level on either side of the range.
        """
        if start > end:
            raise ValueError(f"invalid range: start {start} is after end {end}")
        self._advance(self.tp.now())
        for level in self._levels:
            if start >= level.earliest():
                return level.sum_interval(start, end)
        return self._levels[-1].sum_interval(start, end)
