"""Per-entity trending state.

An item turns its recent and historical event counts into a surprise score:
the KL term of the recent probability against the rolling-maximum baseline,
blended with a running peak of past KL scores that decays with a half-life.
"""
import logging
import threading
from typing import Optional

from trending.config import TrendingConfig
from trending.determinism import TimeProvider
from trending.interfaces import EventCounter
from trending.memory_decay import blend_scores, decay_factor, kl_divergence
from trending.rolling_window import RollingMaxWindow
from trending.types import ScoreRecord

logger = logging.getLogger(__name__)


class Item:
    def __init__(self, item_id: str, config: TrendingConfig, counter: EventCounter,
                 window: RollingMaxWindow, time_provider=None):
        self.item_id = item_id
        self.cfg = config
        self.counter = counter
        self.window = window
        self.tp = time_provider or TimeProvider()
        self.peak = 0.0
        self.peak_time = self.tp.now()
        self.last_event_ts: Optional[float] = None
        self.default_count = config.default_historical_count
        self.default_expectation = config.default_expectation
        self.lock = threading.Lock()

    def record_event(self, timestamp: float, amount: float = 1.0) -> None:
        with self.lock:
            self.counter.increase(amount, timestamp)
            if self.last_event_ts is None or timestamp > self.last_event_ts:
                self.last_event_ts = timestamp

    def score(self, now: Optional[float] = None) -> Optional[ScoreRecord]:
        """Current score, or None when recent activity is below count_threshold."""
        if now is None:
            now = self.tp.now()
        with self.lock:
            return self._score(now)

    def _score(self, now: float) -> Optional[ScoreRecord]:
        recent_count = self._count(now - self.cfg.recent_duration_sec, now)
        total_count = self._count(now - self.cfg.storage_duration_sec, now)
        if recent_count < self.cfg.count_threshold:
            return None
        if recent_count >= total_count:
            # no history outside the recent window yet
            logger.debug("%s: first observation, substituting default count", self.item_id)
            total_count = recent_count + self.default_count
        probability = recent_count / total_count if total_count > 0 else 0.0

        # Read the baseline before inserting, or this observation raises its own expectation.
        expectation = self.window.current_max(now)
        self.window.insert(probability, now)
        if expectation == 0.0:
            expectation = self.default_expectation

        kl_score = kl_divergence(probability, expectation)
        if kl_score > self.peak:
            self._update_peak(kl_score, now)
        self.decay_peak(now)
        return ScoreRecord(
            item_id=self.item_id,
            score=blend_scores(kl_score, self.peak),
            probability=probability,
            expectation=expectation,
            peak=self.peak,
            kl_score=kl_score,
        )

    def _count(self, start: float, end: float) -> float:
        try:
            return float(self.counter.range_sum(start, end))
        except Exception as e:
            logger.warning("range query for %s failed, counting 0: %s", self.item_id, e)
            return 0.0

    def _update_peak(self, value: float, now: float) -> None:
        self.peak = value
        self.peak_time = now

    def decay_peak(self, now: Optional[float] = None) -> float:
        """Decay the peak by the time since its last update; a no-op at zero elapsed."""
        if now is None:
            now = self.tp.now()
        f = decay_factor(now - self.peak_time, self.cfg.half_life_sec)
        self._update_peak(self.peak * f, now)
        return self.peak
