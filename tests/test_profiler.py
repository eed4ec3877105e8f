"""Tests for the pipeline stage profiler."""

import time

from freeform_gesture.profiler import PipelineProfiler


class TestPipelineProfiler:
    def test_stage_timing(self):
        profiler = PipelineProfiler()
        with profiler.stage("fitting"):
            time.sleep(0.001)

        stats = profiler.get_stage_stats("fitting")
        assert stats is not None
        assert stats.call_count == 1
        assert stats.avg_ms >= 0.5

    def test_call_counts(self):
        profiler = PipelineProfiler(window_size=5)
        for _ in range(10):
            with profiler.stage("tracking"):
                pass

        stats = profiler.get_stage_stats("tracking")
        assert stats.call_count == 10
        assert stats.min_ms <= stats.p95_ms <= stats.max_ms

    def test_timing_recorded_when_block_raises(self):
        profiler = PipelineProfiler()
        try:
            with profiler.stage("dispatch"):
                raise RuntimeError("listener failed")
        except RuntimeError:
            pass
        assert profiler.get_stage_stats("dispatch").call_count == 1

    def test_summary(self):
        profiler = PipelineProfiler()
        with profiler.stage("tracking"):
            pass
        with profiler.stage("fitting"):
            pass

        summary = profiler.summary()
        assert set(summary) == {"tracking", "fitting"}
        assert "avg_ms" in summary["fitting"]

    def test_disabled(self):
        profiler = PipelineProfiler()
        profiler.enabled = False
        with profiler.stage("fitting"):
            pass
        assert profiler.get_stage_stats("fitting") is None

    def test_reset(self):
        profiler = PipelineProfiler()
        with profiler.stage("fitting"):
            pass
        profiler.reset()
        assert profiler.get_stage_stats("fitting") is None
        assert profiler.stages == []
