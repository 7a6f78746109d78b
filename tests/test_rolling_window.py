import pytest
from trending.determinism import FrozenTimeProvider
from trending.rolling_window import RollingMaxWindow

DAY = 24 * 3600.0
START = 1484395200.0  # 2017-01-14T12:00:00Z

def make_window(step=DAY, duration=7 * DAY, start=START):
    tp = FrozenTimeProvider(start)
    return RollingMaxWindow(step, duration, tp), tp

def test_fresh_window_is_empty():
    sw, _ = make_window()
    assert sw.current_max() == 0.0
    assert sw.snapshot() == [0.0] * 7

def test_insert_keeps_bucket_maximum():
    sw, _ = make_window()
    sw.insert(1.0)
    sw.insert(2.0)
    assert sw.current_max() == 2.0
    sw.insert(1.5)
    assert sw.current_max() == 2.0

def test_daily_inserts_slide_out():
    sw, tp = make_window()
    sw.insert(2.0)
    for v in (1.2, 1.3, 1.4, 1.5, 1.6, 1.7):
        tp.advance(DAY)
        sw.insert(v)
    # seven buckets: 2.0 still inside
    assert sw.current_max() == 2.0
    tp.advance(DAY)
    sw.insert(1.8)
    assert sw.current_max() == 1.8
    tp.advance(DAY)
    sw.insert(1.9)
    assert sw.current_max() == 1.9
    assert sw.snapshot() == [1.3, 1.4, 1.5, 1.6, 1.7, 1.8, 1.9]

def test_full_retention_gap_clears():
    sw, tp = make_window()
    sw.insert(3.0)
    tp.advance(7 * DAY)
    assert sw.current_max() == 0.0

def test_very_long_gap_is_a_full_clear():
    sw, tp = make_window()
    sw.insert(3.0)
    tp.advance(1000 * DAY)
    assert sw.advance() == 1000
    assert sw.current_max() == 0.0
    sw.insert(0.4)
    assert sw.current_max() == 0.4
    tp.advance(DAY)
    sw.insert(0.2)
    assert sw.snapshot()[-2:] == [0.4, 0.2]

def test_partial_gap_keeps_recent_buckets():
    sw, tp = make_window()
    sw.insert(3.0)
    tp.advance(3 * DAY)
    sw.insert(1.0)
    assert sw.current_max() == 3.0
    tp.advance(4 * DAY)
    assert sw.current_max() == 1.0

def test_explicit_now_overrides_clock():
    sw, _ = make_window()
    sw.insert(5.0, now=START)
    assert sw.current_max(now=START + 8 * DAY) == 0.0

def test_single_bucket_window():
    sw, tp = make_window(step=DAY, duration=DAY)
    sw.insert(0.7)
    assert sw.current_max() == 0.7
    tp.advance(DAY)
    assert sw.current_max() == 0.0

def test_invalid_sizes():
    tp = FrozenTimeProvider(START)
    with pytest.raises(ValueError):
        RollingMaxWindow(DAY, DAY / 2, tp)
    with pytest.raises(ValueError):
        RollingMaxWindow(0, DAY, tp)
