"""Stage timing for the detector pipeline.

The detector reports three stages per MOVE update when a profiler is
attached: ``tracking`` (snapshots and pointer moves), ``fitting`` and
``dispatch`` (listener call).

Usage:
    profiler = PipelineProfiler()
    detector = FreeformGestureDetector(listener, profiler=profiler)
    ...
    print(profiler.summary())
"""

from __future__ import annotations

import time
from collections import deque
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Optional

import numpy as np


@dataclass
class StageStats:
    """Timing statistics for one stage, in milliseconds."""
    name: str
    avg_ms: float
    min_ms: float
    max_ms: float
    p95_ms: float
    call_count: int


class PipelineProfiler:
    """Keeps a rolling window of per-stage durations."""

    def __init__(self, window_size: int = 240):
        self._window_size = window_size
        self._timings: dict[str, deque[float]] = {}
        self._counts: dict[str, int] = {}
        self.enabled = True

    @contextmanager
    def stage(self, name: str) -> Iterator[None]:
        """Time the enclosed block under ``name``."""
        if not self.enabled:
            yield
            return

        t0 = time.perf_counter()
        try:
            yield
        finally:
            elapsed_ms = (time.perf_counter() - t0) * 1000.0
            if name not in self._timings:
                self._timings[name] = deque(maxlen=self._window_size)
                self._counts[name] = 0
            self._timings[name].append(elapsed_ms)
            self._counts[name] += 1

    def get_stage_stats(self, name: str) -> Optional[StageStats]:
        timings = self._timings.get(name)
        if not timings:
            return None

        samples = np.fromiter(timings, dtype=np.float64)
        return StageStats(
            name=name,
            avg_ms=float(samples.mean()),
            min_ms=float(samples.min()),
            max_ms=float(samples.max()),
            p95_ms=float(np.percentile(samples, 95)),
            call_count=self._counts[name],
        )

    def summary(self) -> dict[str, dict]:
        result = {}
        for name in self._timings:
            stats = self.get_stage_stats(name)
            if stats is None:
                continue
            result[name] = {
                "avg_ms": round(stats.avg_ms, 4),
                "min_ms": round(stats.min_ms, 4),
                "max_ms": round(stats.max_ms, 4),
                "p95_ms": round(stats.p95_ms, 4),
                "calls": stats.call_count,
            }
        return result

    def reset(self):
        self._timings.clear()
        self._counts.clear()

    @property
    def stages(self) -> list[str]:
        return list(self._timings)
