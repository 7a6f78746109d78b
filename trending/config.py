"""Scorer configuration.

`TrendingConfig` is built once and shared by reference with the scorer and
every item. YAML files are read with `load_config` and turned into a
`TrendingConfig` by `resolve_trending_config`, which never raises.
"""
import logging
from dataclasses import dataclass, fields
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)

HOUR_SEC = 3600.0

DEFAULT_HALF_LIFE_SEC = 2 * HOUR_SEC
DEFAULT_RECENT_DURATION_SEC = 60.0
DEFAULT_STORAGE_DURATION_SEC = 7 * 24 * HOUR_SEC
DEFAULT_MAX_RESULTS = 10
DEFAULT_BASE_COUNT = 3.0
DEFAULT_BUCKET_STEP_SEC = 24 * HOUR_SEC


@dataclass(frozen=True)
class TrendingConfig:
    half_life_sec: float = DEFAULT_HALF_LIFE_SEC
    recent_duration_sec: float = DEFAULT_RECENT_DURATION_SEC
    storage_duration_sec: float = DEFAULT_STORAGE_DURATION_SEC
    max_results: int = DEFAULT_MAX_RESULTS
    base_count: float = DEFAULT_BASE_COUNT
    score_threshold: float = 0.0
    count_threshold: float = 0.0
    bucket_step_sec: float = DEFAULT_BUCKET_STEP_SEC
    idle_eviction_sec: Optional[float] = None

    def __post_init__(self):
        for name in ("half_life_sec", "recent_duration_sec", "storage_duration_sec", "bucket_step_sec"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive")
        if self.recent_duration_sec > self.storage_duration_sec:
            raise ValueError("recent_duration_sec must not exceed storage_duration_sec")
        if self.bucket_step_sec > self.storage_duration_sec:
            raise ValueError("bucket_step_sec must not exceed storage_duration_sec")
        if self.max_results <= 0:
            raise ValueError("max_results must be positive")
        if self.base_count <= 0:
            raise ValueError("base_count must be positive")
        if self.score_threshold < 0 or self.count_threshold < 0:
            raise ValueError("thresholds must be >= 0")
        if self.idle_eviction_sec is not None and self.idle_eviction_sec <= 0:
            raise ValueError("idle_eviction_sec must be positive when set")

    @property
    def default_historical_count(self) -> float:
        """Stand-in history for an entity seen only inside the recent window."""
        return self.base_count * self.storage_duration_sec / HOUR_SEC

    @property
    def default_expectation(self) -> float:
        """Baseline probability used until the rolling window has data."""
        return self.base_count * self.recent_duration_sec / HOUR_SEC


def load_config(path: str = "config.yaml") -> dict:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}
    except FileNotFoundError:
        logger.warning("Config file not found, using defaults")
        return {}


def _coerce(name: str, raw: Any, default: Any) -> Any:
    if raw is None:
        return None if name == "idle_eviction_sec" else default
    try:
        if name == "max_results":
            return int(raw)
        return float(raw)
    except (TypeError, ValueError):
        logger.warning("trending.%s=%r is not a number, using %r", name, raw, default)
        return default


def resolve_trending_config(cfg: Optional[Dict[str, Any]]) -> TrendingConfig:
    """Build a TrendingConfig from the `trending` section of a config dict.

    Unknown keys are ignored. Bad values fall back to defaults; a combination
    that fails validation falls back to the full default configuration.
    """
    if not isinstance(cfg, dict):
        cfg = {}
    section = cfg.get("trending", {})
    if not isinstance(section, dict):
        logger.warning("trending section is not a mapping, using defaults")
        section = {}
    defaults = TrendingConfig()
    values = {}
    for f in fields(TrendingConfig):
        if f.name in section:
            values[f.name] = _coerce(f.name, section[f.name], getattr(defaults, f.name))
    try:
        return TrendingConfig(**values)
    except ValueError as e:
        logger.warning("invalid trending config (%s), using defaults", e)
        return defaults
