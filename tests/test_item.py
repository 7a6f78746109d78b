import math
import pytest
from trending.config import TrendingConfig
from trending.determinism import FrozenTimeProvider
from trending.interfaces import EventCounter
from trending.item import Item
from trending.rolling_window import RollingMaxWindow
from trending.time_series import MemoryTimeSeries

NOW = 1_700_000_000.0

class BrokenCounter(EventCounter):
    def increase(self, amount, timestamp):
        pass
    def range_sum(self, start, end):
        raise ValueError("range not covered")

@pytest.fixture
def config():
    return TrendingConfig(
        half_life_sec=600.0,
        recent_duration_sec=60.0,
        storage_duration_sec=3600.0,
        base_count=3.0,
        count_threshold=0.0,
        bucket_step_sec=60.0,
    )

def make_item(config, counter=None, now=NOW):
    tp = FrozenTimeProvider(now)
    counter = counter or MemoryTimeSeries(time_provider=tp)
    window = RollingMaxWindow(config.bucket_step_sec, config.storage_duration_sec, tp)
    return Item("a", config, counter, window, tp), tp

def test_below_count_threshold_is_not_eligible(config):
    cfg = TrendingConfig(recent_duration_sec=60.0, storage_duration_sec=3600.0,
                         bucket_step_sec=60.0, count_threshold=2.0)
    item, _ = make_item(cfg)
    item.record_event(NOW)
    assert item.score() is None
    item.record_event(NOW)
    assert item.score() is not None

def test_first_observation_uses_defaults(config):
    item, _ = make_item(config)
    item.record_event(NOW)
    rec = item.score()
    # total = 1 + 3 * (3600 / 3600); expectation = 3 * 60 / 3600
    assert math.isclose(rec.probability, 0.25)
    assert math.isclose(rec.expectation, 0.05)
    assert math.isclose(rec.kl_score, 0.25 * math.log(5))
    assert math.isclose(rec.peak, rec.kl_score)
    assert math.isclose(rec.score, rec.kl_score)
    assert rec.item_id == "a"

def test_baseline_is_read_before_insert(config):
    item, _ = make_item(config)
    item.record_event(NOW)
    first = item.score()
    assert math.isclose(first.expectation, 0.05)
    second = item.score()
    # the first probability is now the baseline for later scores
    assert math.isclose(second.expectation, 0.25)
    assert math.isclose(second.kl_score, 0.0, abs_tol=1e-12)
    assert math.isclose(second.peak, first.peak)
    assert math.isclose(second.score, 0.5 * first.peak)

def test_peak_decay_law(config):
    item, tp = make_item(config)
    item.peak = 2.0
    item.peak_time = NOW
    assert math.isclose(item.decay_peak(NOW), 2.0)
    assert math.isclose(item.decay_peak(NOW + 600), 1.0)
    assert math.isclose(item.decay_peak(NOW + 1200), 0.5)

def test_peak_decays_between_scores(config):
    item, tp = make_item(config)
    item.record_event(NOW)
    burst = item.score()
    tp.advance(600)
    later = item.score()
    # event left the recent window: probability 0, peak halved
    assert later.probability == 0.0
    assert later.kl_score == 0.0
    assert math.isclose(later.peak, burst.peak * 0.5)
    assert math.isclose(later.score, burst.peak * 0.25)

def test_peak_never_grows_without_new_high(config):
    item, tp = make_item(config)
    item.record_event(NOW)
    peaks = [item.score().peak]
    for _ in range(5):
        tp.advance(30)
        peaks.append(item.score().peak)
    for prev, cur in zip(peaks, peaks[1:]):
        assert cur <= prev

def test_counter_failure_counts_as_zero(config):
    item, _ = make_item(config, counter=BrokenCounter())
    rec = item.score()
    assert rec is not None
    assert rec.probability == 0.0
    assert rec.kl_score == 0.0
    assert rec.score == 0.0
    assert not math.isnan(rec.score)

def test_record_event_tracks_last_timestamp(config):
    item, _ = make_item(config)
    assert item.last_event_ts is None
    item.record_event(NOW)
    item.record_event(NOW - 30)
    assert item.last_event_ts == NOW
