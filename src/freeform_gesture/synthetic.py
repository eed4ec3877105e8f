"""Synthetic contact streams for demos, benchmarks and tests.

Each generator returns a complete gesture: BEGIN for every finger, ``steps``
MOVE batches, then END for every finger. Timestamps advance by
``frame_interval`` seconds per event.
"""

from __future__ import annotations

import numpy as np

from freeform_gesture import matrix as mx
from freeform_gesture.events import ContactAction, ContactEvent, ContactPoint

GESTURE_KINDS = ("drag", "pinch", "rotate", "warp")


def _stream(start: np.ndarray, end_for_step, steps: int, frame_interval: float) -> list[ContactEvent]:
    events: list[ContactEvent] = []
    t = 0.0
    for pid, (x, y) in enumerate(start):
        events.append(ContactEvent.begin(pid, float(x), float(y), timestamp=t))
        t += frame_interval

    current = start
    for step in range(1, steps + 1):
        current = end_for_step(step / steps)
        events.append(ContactEvent(
            action=ContactAction.MOVE,
            points=[ContactPoint(pid, float(x), float(y)) for pid, (x, y) in enumerate(current)],
            timestamp=t,
        ))
        t += frame_interval

    for pid, (x, y) in enumerate(current):
        events.append(ContactEvent.end(pid, float(x), float(y), timestamp=t))
        t += frame_interval
    return events


def drag(dx: float = 50.0, dy: float = 0.0, steps: int = 10, origin=(100.0, 100.0),
         frame_interval: float = 1 / 60) -> list[ContactEvent]:
    """One finger moving by (dx, dy)."""
    start = np.array([origin], dtype=np.float64)
    return _stream(start, lambda f: start + [dx * f, dy * f], steps, frame_interval)


def pinch(scale: float = 0.5, steps: int = 10, center=(200.0, 200.0), spread: float = 100.0,
          frame_interval: float = 1 / 60) -> list[ContactEvent]:
    """Two fingers scaling about their midpoint."""
    cx, cy = center
    start = np.array([[cx - spread / 2, cy], [cx + spread / 2, cy]], dtype=np.float64)

    def at(f: float) -> np.ndarray:
        s = 1.0 + (scale - 1.0) * f
        return mx.map_points(mx.scaling(s, s, cx, cy), start)

    return _stream(start, at, steps, frame_interval)


def rotate(degrees: float = 90.0, steps: int = 10, center=(200.0, 200.0), spread: float = 100.0,
           frame_interval: float = 1 / 60) -> list[ContactEvent]:
    """Two fingers rotating about their midpoint."""
    cx, cy = center
    start = np.array([[cx - spread / 2, cy], [cx + spread / 2, cy]], dtype=np.float64)
    return _stream(start, lambda f: mx.map_points(mx.rotation(degrees * f, cx, cy), start), steps, frame_interval)


def warp(offset=(40.0, 25.0), steps: int = 10, origin=(100.0, 100.0), size: float = 200.0,
         frame_interval: float = 1 / 60) -> list[ContactEvent]:
    """Four fingers on a square; the third corner is dragged by ``offset``."""
    x0, y0 = origin
    start = np.array(
        [[x0, y0], [x0 + size, y0], [x0 + size, y0 + size], [x0, y0 + size]],
        dtype=np.float64,
    )

    def at(f: float) -> np.ndarray:
        pts = start.copy()
        pts[2] += np.asarray(offset, dtype=np.float64) * f
        return pts

    return _stream(start, at, steps, frame_interval)


def generate(kind: str, steps: int = 10) -> list[ContactEvent]:
    """Build a default gesture of the named kind."""
    generators = {"drag": drag, "pinch": pinch, "rotate": rotate, "warp": warp}
    if kind not in generators:
        raise ValueError(f"Unknown gesture kind {kind!r}; expected one of {', '.join(GESTURE_KINDS)}")
    return generators[kind](steps=steps)


def jitter(events: list[ContactEvent], sigma: float, seed: int = 0) -> list[ContactEvent]:
    """Copy of ``events`` with gaussian noise added to every MOVE position."""
    rng = np.random.default_rng(seed)
    noisy = []
    for event in events:
        if event.action is ContactAction.MOVE:
            points = [
                ContactPoint(p.pointer_id, p.x + float(rng.normal(0, sigma)), p.y + float(rng.normal(0, sigma)))
                for p in event.points
            ]
        else:
            points = list(event.points)
        noisy.append(ContactEvent(event.action, points, event.timestamp))
    return noisy
