"""Gap-free sequencing of inbound assistant audio."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

import numpy as np

LOGGER = logging.getLogger(__name__)


class PlaybackSink(Protocol):
    """Audio output with its own clock, measured in seconds."""

    @property
    def current_time(self) -> float:  # pragma: no cover - protocol stub
        ...

    def play(
        self,
        buffer_id: int,
        samples: np.ndarray,
        sample_rate: int,
        start_at: float,
        on_ended: Callable[[], None],
    ) -> None:  # pragma: no cover - protocol stub
        """Start ``samples`` at ``start_at`` and call ``on_ended`` once it finished."""
        ...

    def stop(self, buffer_id: int) -> None:  # pragma: no cover - protocol stub
        ...


@dataclass(frozen=True, slots=True)
class ScheduledBuffer:
    buffer_id: int
    start_time: float
    duration: float

    @property
    def end_time(self) -> float:
        return self.start_time + self.duration


class PlaybackScheduler:
    """Schedules buffers back to back and tracks the ones still playing.

    Each buffer starts at the later of the previous buffer's end and the
    sink's current time. Live buffers are kept in an id-keyed registry:
    inserted on schedule, removed on natural completion or on ``stop_all``.
    """

    def __init__(self, sink: PlaybackSink, *, sample_rate: int = 24000) -> None:
        self._sink = sink
        self._sample_rate = sample_rate
        self._cursor = 0.0
        self._next_id = 0
        self._active: dict[int, ScheduledBuffer] = {}

    @property
    def cursor(self) -> float:
        return self._cursor

    @property
    def active(self) -> dict[int, ScheduledBuffer]:
        return dict(self._active)

    def schedule(self, samples: np.ndarray) -> ScheduledBuffer | None:
        if samples.size == 0:
            return None

        start = max(self._cursor, self._sink.current_time)
        duration = samples.size / self._sample_rate
        buffer_id = self._next_id
        self._next_id += 1

        scheduled = ScheduledBuffer(buffer_id=buffer_id, start_time=start, duration=duration)
        self._active[buffer_id] = scheduled
        self._sink.play(
            buffer_id,
            samples,
            self._sample_rate,
            start,
            lambda: self._finished(buffer_id),
        )
        self._cursor = start + duration
        return scheduled

    def _finished(self, buffer_id: int) -> None:
        self._active.pop(buffer_id, None)

    def stop_all(self) -> None:
        """Stop and forget every scheduled buffer; the next one starts fresh."""

        for buffer_id in list(self._active):
            try:
                self._sink.stop(buffer_id)
            except Exception:
                LOGGER.exception("Failed to stop playback buffer %s", buffer_id)
            self._active.pop(buffer_id, None)
        # 0 means "the clock's current time" for the next schedule().
        self._cursor = 0.0
