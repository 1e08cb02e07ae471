from __future__ import annotations

import numpy as np
import pytest
from live_fakes import FakeSink

from live.playback import PlaybackScheduler


def _samples(seconds: float, rate: int = 24000) -> np.ndarray:
    return np.zeros(int(seconds * rate), dtype=np.float32)


def test_buffers_are_scheduled_back_to_back():
    sink = FakeSink()
    sink.now = 3.0
    scheduler = PlaybackScheduler(sink, sample_rate=24000)

    first = scheduler.schedule(_samples(0.5))
    sink.now = 3.1
    second = scheduler.schedule(_samples(0.25))
    sink.now = 3.2
    third = scheduler.schedule(_samples(1.0))

    assert first.start_time == pytest.approx(3.0)
    assert second.start_time == pytest.approx(3.5)
    assert third.start_time == pytest.approx(3.75)
    assert scheduler.cursor == pytest.approx(4.75)
    assert set(scheduler.active) == {first.buffer_id, second.buffer_id, third.buffer_id}


def test_late_buffer_starts_at_current_time():
    sink = FakeSink()
    scheduler = PlaybackScheduler(sink, sample_rate=24000)

    scheduler.schedule(_samples(0.5))
    sink.now = 10.0
    late = scheduler.schedule(_samples(0.5))

    assert late.start_time == pytest.approx(10.0)


def test_natural_completion_removes_buffer_from_registry():
    sink = FakeSink()
    scheduler = PlaybackScheduler(sink, sample_rate=24000)

    scheduled = scheduler.schedule(_samples(0.1))
    sink.finish(scheduled.buffer_id)

    assert scheduler.active == {}
    scheduler.stop_all()
    assert sink.stopped == []


def test_stop_all_resets_cursor_to_clock():
    sink = FakeSink()
    sink.now = 1.0
    scheduler = PlaybackScheduler(sink, sample_rate=24000)

    scheduler.schedule(_samples(2.0))
    scheduler.schedule(_samples(2.0))
    scheduler.stop_all()

    assert sorted(sink.stopped) == [0, 1]
    assert scheduler.active == {}

    sink.now = 1.5
    fresh = scheduler.schedule(_samples(0.1))
    assert fresh.start_time == pytest.approx(1.5)


def test_empty_buffer_is_ignored():
    sink = FakeSink()
    scheduler = PlaybackScheduler(sink)
    assert scheduler.schedule(np.zeros(0, dtype=np.float32)) is None
    assert sink.started == []
