"""Ranks a growing set of entities by trending score.

Every `rank()` call rescores all known items from scratch; nothing is cached
between calls.
"""
import logging
import threading
from typing import Callable, Dict, List, Optional

from trending.config import TrendingConfig
from trending.determinism import TimeProvider
from trending.interfaces import EventCounter
from trending.item import Item
from trending.rolling_window import RollingMaxWindow
from trending.time_series import MemoryTimeSeries, granularities_for
from trending.types import ScoreRecord

logger = logging.getLogger(__name__)

EventCounterFactory = Callable[[str], EventCounter]
RollingWindowFactory = Callable[[str], RollingMaxWindow]


class Scorer:
    def __init__(self, config: Optional[TrendingConfig] = None, *,
                 event_counter_factory: Optional[EventCounterFactory] = None,
                 rolling_window_factory: Optional[RollingWindowFactory] = None,
                 time_provider=None):
        self.cfg = config or TrendingConfig()
        self.tp = time_provider or TimeProvider()
        self._counter_factory = event_counter_factory or self._default_counter
        self._window_factory = rolling_window_factory or self._default_window
        self._items: Dict[str, Item] = {}
        self._lock = threading.Lock()

    def _default_counter(self, item_id: str) -> EventCounter:
        return MemoryTimeSeries(granularities_for(self.cfg.storage_duration_sec), time_provider=self.tp)

    def _default_window(self, item_id: str) -> RollingMaxWindow:
        return RollingMaxWindow(self.cfg.bucket_step_sec, self.cfg.storage_duration_sec, self.tp)

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def __contains__(self, item_id) -> bool:
        with self._lock:
            return item_id in self._items

    def item_ids(self) -> List[str]:
        with self._lock:
            return list(self._items)

    def get(self, item_id: str) -> Optional[Item]:
        with self._lock:
            return self._items.get(item_id)

    def add_event(self, item_id: str, timestamp: Optional[float] = None) -> None:
        if timestamp is None:
            timestamp = self.tp.now()
        with self._lock:
            item = self._items.get(item_id)
            if item is None:
                item = Item(item_id, self.cfg, self._counter_factory(item_id),
                            self._window_factory(item_id), self.tp)
                self._items[item_id] = item
            # recorded under the map lock so evict_idle cannot drop the item in between
            item.record_event(timestamp)

    def rank(self, now: Optional[float] = None) -> List[ScoreRecord]:
        """
        Score every item and return the top `max_results`, highest score first.
        Equal scores are ordered by ascending id.
        """
        if now is None:
            now = self.tp.now()
        if self.cfg.idle_eviction_sec is not None:
            self.evict_idle(now)
        with self._lock:
            items = list(self._items.values())
        scores: List[ScoreRecord] = []
        for item in items:
            try:
                rec = item.score(now)
            except Exception:
                logger.exception("scoring %s failed, skipping", item.item_id)
                continue
            if rec is not None:
                scores.append(rec)
        scores.sort(key=lambda s: (-s.score, s.item_id))
        if self.cfg.score_threshold > 0:
            scores = [s for s in scores if s.score >= self.cfg.score_threshold]
        return scores[:self.cfg.max_results]

    def evict_idle(self, now: Optional[float] = None) -> List[str]:
        """Drop items with no event for `idle_eviction_sec`. No-op when unset."""
        if self.cfg.idle_eviction_sec is None:
            return []
        if now is None:
            now = self.tp.now()
        cutoff = now - self.cfg.idle_eviction_sec
        evicted = []
        with self._lock:
            for item_id, item in list(self._items.items()):
                if item.last_event_ts is not None and item.last_event_ts < cutoff:
                    del self._items[item_id]
                    evicted.append(item_id)
        if evicted:
            logger.debug("evicted %d idle items", len(evicted))
        return evicted
