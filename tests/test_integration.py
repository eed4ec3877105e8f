"""End-to-end tests: synthetic gestures through the full detector."""

import numpy as np
import pytest

from freeform_gesture import matrix as mx
from freeform_gesture import synthetic
from freeform_gesture.detector import FreeformGestureDetector
from freeform_gesture.events import ContactAction


class Composer:
    """Listener that consumes every transform and keeps the running product."""

    def __init__(self):
        self.total = mx.identity()
        self.calls = 0

    def on_transform(self, event, matrix):
        self.total = matrix @ self.total
        self.calls += 1
        return True


def run(events, **kwargs):
    composer = Composer()
    detector = FreeformGestureDetector(composer, **kwargs)
    emitted = detector.process(events)
    assert emitted == composer.calls
    return composer, detector


def first_and_last_positions(events):
    first_move = next(e for e in events if e.action is ContactAction.MOVE)
    last_move = [e for e in events if e.action is ContactAction.MOVE][-1]
    begins = [e.points[0] for e in events if e.action is ContactAction.BEGIN]
    start = np.array([[p.x, p.y] for p in begins])
    end = np.array([[p.x, p.y] for p in last_move.points])
    assert first_move.pointer_ids == last_move.pointer_ids
    return start, end


class TestSyntheticGestures:
    def test_drag(self):
        composer, detector = run(synthetic.drag(dx=50, steps=10))
        # 5 units per step: the second step crosses the default slop of 8.
        assert composer.calls == 9
        np.testing.assert_allclose(composer.total, mx.translation(50, 0), atol=1e-9)
        assert detector.state.value == "idle"

    def test_pinch(self):
        events = synthetic.pinch(scale=0.5, steps=10)
        composer, _ = run(events)
        np.testing.assert_allclose(composer.total, mx.scaling(0.5, 0.5, 200, 200), atol=1e-9)

        parts = mx.decompose(composer.total)
        assert parts.scale_x == pytest.approx(0.5)
        assert parts.rotation_degrees == pytest.approx(0, abs=1e-9)

    def test_rotate(self):
        events = synthetic.rotate(degrees=90, steps=10)
        composer, _ = run(events)
        start, end = first_and_last_positions(events)
        np.testing.assert_allclose(mx.map_points(composer.total, start), end, atol=1e-9)
        assert mx.decompose(composer.total).rotation_degrees == pytest.approx(90)

    def test_warp_uses_four_points(self):
        events = synthetic.warp(offset=(40, 25), steps=10)
        composer, detector = run(events)
        assert detector.last_fit.pointer_count == 4

        start, end = first_and_last_positions(events)
        np.testing.assert_allclose(mx.map_points(composer.total, start), end, atol=1e-6)
        assert not mx.is_affine(composer.total)

    def test_warp_capped_to_affine(self):
        events = synthetic.warp(offset=(40, 25), steps=10)
        composer, detector = run(events, max_pointers=3)
        assert detector.last_fit.pointer_count == 3
        assert mx.is_affine(composer.total)

        start, end = first_and_last_positions(events)
        # The first three corners are followed exactly; the fourth is extrapolated.
        np.testing.assert_allclose(mx.map_points(composer.total, start[:3]), end[:3], atol=1e-9)

    def test_max_pointers_zero_emits_nothing(self):
        composer, _ = run(synthetic.pinch(steps=10), max_pointers=0)
        assert composer.calls == 0

    def test_large_slop_suppresses_small_gesture(self):
        composer, _ = run(synthetic.drag(dx=20, steps=10), touch_slop=50.0)
        assert composer.calls == 0


class TestNoisyInput:
    def test_jitter_only_touches_moves(self):
        events = synthetic.drag(steps=5)
        noisy = synthetic.jitter(events, sigma=1.0, seed=3)
        assert len(noisy) == len(events)
        assert noisy[0] == events[0]
        assert noisy[-1] == events[-1]
        assert noisy[1] != events[1]

    def test_jitter_is_reproducible(self):
        events = synthetic.rotate(steps=5)
        assert synthetic.jitter(events, 0.5, seed=7) == synthetic.jitter(events, 0.5, seed=7)

    def test_noisy_drag_tracks_last_position(self):
        noisy = synthetic.jitter(synthetic.drag(dx=50, steps=20), sigma=0.5, seed=11)
        composer, _ = run(noisy)
        last = [e for e in noisy if e.action is ContactAction.MOVE][-1].points[0]
        np.testing.assert_allclose(
            mx.map_points(composer.total, [[100.0, 100.0]]), [[last.x, last.y]], atol=1e-9
        )


class TestUnknownKind:
    def test_generate_rejects_unknown_kind(self):
        with pytest.raises(ValueError):
            synthetic.generate("swirl")

    @pytest.mark.parametrize("kind", synthetic.GESTURE_KINDS)
    def test_generate_every_kind_emits(self, kind):
        composer, _ = run(synthetic.generate(kind, steps=10))
        assert composer.calls > 0
