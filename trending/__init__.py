from .config import TrendingConfig, load_config, resolve_trending_config
from .determinism import TimeProvider, FrozenTimeProvider, DeterministicRNG
from .interfaces import EventCounter, NullEventCounter
from .item import Item
from .memory_decay import decay_factor, kl_divergence, blend_scores
from .rolling_window import RollingMaxWindow
from .scorer import Scorer
from .time_series import MemoryTimeSeries, DEFAULT_GRANULARITIES
from .types import Granularity, ScoreRecord

__all__ = [
    "TrendingConfig", "load_config", "resolve_trending_config",
    "TimeProvider", "FrozenTimeProvider", "DeterministicRNG",
    "EventCounter", "NullEventCounter", "Item", "decay_factor", "kl_divergence",
    "blend_scores", "RollingMaxWindow", "Scorer", "MemoryTimeSeries",
    "DEFAULT_GRANULARITIES", "Granularity", "ScoreRecord",
]
