"""Freeform transform gesture detection.

Feeds contact events through the pointer tracker and the transform fitter,
composes each fitted delta onto a pending matrix, and hands that matrix to
a listener once the gesture has moved past the touch slop.

Freeform gestures cover single-finger drags, two-finger scale and rotation,
three-finger skew and four-finger quadrilateral distortion. ``max_pointers``
caps how many contacts are used and so how many degrees of freedom the
emitted matrices can have.

Usage:
    def on_transform(event, matrix):
        view.apply(matrix)
        return True  # consumed; start accumulating from identity again

    detector = FreeformGestureDetector(on_transform, touch_slop=8.0)
    # In the input handler:
    detector.on_touch_event(ContactEvent.begin(0, 120.0, 80.0))
    detector.on_touch_event(ContactEvent.move_one(0, 150.0, 80.0))
"""

from __future__ import annotations

import logging
from contextlib import nullcontext
from enum import Enum
from typing import Callable, Iterable, Optional, Union

import numpy as np

from freeform_gesture import matrix as mx
from freeform_gesture.config import (
    DEFAULT_MAX_POINTERS,
    DEFAULT_TOUCH_SLOP,
    DetectorConfig,
    validate_max_pointers,
    validate_touch_slop,
)
from freeform_gesture.errors import NullListenerError
from freeform_gesture.events import ContactAction, ContactEvent, ContactPoint
from freeform_gesture.fitting import FitResult, fit_transform
from freeform_gesture.profiler import PipelineProfiler
from freeform_gesture.tracker import PointerTracker

logger = logging.getLogger("freeform_gesture.detector")

TransformListener = Callable[[ContactEvent, np.ndarray], bool]


class GestureState(Enum):
    IDLE = "idle"
    TRACKING_PRE_SLOP = "tracking_pre_slop"
    TRACKING_POST_SLOP = "tracking_post_slop"


def _resolve_listener(listener) -> TransformListener:
    if listener is None:
        raise NullListenerError("listener must not be None")
    on_transform = getattr(listener, "on_transform", None)
    if callable(on_transform):
        return on_transform
    if callable(listener):
        return listener
    raise TypeError(f"listener must be callable or define on_transform(), got {type(listener).__name__}")


class FreeformGestureDetector:
    """Turns a contact event stream into transform matrices.

    The pending matrix collects every fitted delta since the listener last
    reported an event as handled. The listener receives a copy of it on each
    MOVE update after slop has been crossed; returning True resets it to the
    identity, returning False keeps it so later deltas compose on top.

    States:
    - IDLE: no contacts, pending matrix is the identity
    - TRACKING_PRE_SLOP: contacts down, fitting runs but nothing is emitted
    - TRACKING_POST_SLOP: slop crossed this gesture, non-identity deltas are emitted
    """

    def __init__(
        self,
        listener: Union[TransformListener, object],
        touch_slop: float = DEFAULT_TOUCH_SLOP,
        max_pointers: int = DEFAULT_MAX_POINTERS,
        profiler: Optional[PipelineProfiler] = None,
    ):
        self._listener = _resolve_listener(listener)
        self._max_pointers = validate_max_pointers(max_pointers)
        self._tracker = PointerTracker(validate_touch_slop(touch_slop))
        self.profiler = profiler

        self._accumulated = mx.identity()
        self._has_pending = False
        self._last_fit: Optional[FitResult] = None

    @classmethod
    def from_config(
        cls,
        config: DetectorConfig,
        listener: Union[TransformListener, object],
        profiler: Optional[PipelineProfiler] = None,
    ) -> FreeformGestureDetector:
        return cls(
            listener,
            touch_slop=config.touch_slop,
            max_pointers=config.max_pointers,
            profiler=profiler,
        )

    def on_touch_event(self, event: ContactEvent) -> bool:
        """Process one contact event.

        The stream must be complete and consistent: every MOVE/END id needs
        an earlier BEGIN, and ids are not reused while active.

        Returns:
            True if the listener was called for this event.
        """
        if event.action is ContactAction.BEGIN:
            for point in event.points:
                self._begin(point)
            return False

        if event.action is ContactAction.MOVE:
            return self._apply_move(event)

        # END and CANCEL are processed one pointer at a time, in order.
        for point in event.points:
            self._end(point)
        return False

    def process(self, events: Iterable[ContactEvent]) -> int:
        """Feed a sequence of events. Returns how many emitted a transform."""
        return sum(1 for event in events if self.on_touch_event(event))

    def reset(self):
        """Abandon the current gesture and return to IDLE."""
        self._tracker.reset()
        self._reset_accumulation()
        self._last_fit = None

    def _begin(self, point: ContactPoint):
        if self._tracker.active_count == 0:
            logger.debug("Gesture started by pointer %r", point.pointer_id)
            self._reset_accumulation()
        self._tracker.begin(point.pointer_id, point.x, point.y)

    def _end(self, point: ContactPoint):
        self._tracker.end(point.pointer_id, point.x, point.y)
        if self._tracker.active_count == 0:
            logger.debug("Gesture ended by pointer %r", point.pointer_id)
            self._reset_accumulation()

    def _apply_move(self, event: ContactEvent) -> bool:
        with self._stage("tracking"):
            before = self._tracker.snapshot_before()
            for point in event.points:
                self._tracker.move(point.pointer_id, point.x, point.y)
            after = self._tracker.snapshot_after()

        with self._stage("fitting"):
            fit = fit_transform(before, after, self._max_pointers)
        self._last_fit = fit

        if fit is None or fit.is_identity:
            return False

        self._accumulated = fit.matrix @ self._accumulated
        self._has_pending = True

        if not self._tracker.past_slop:
            return False

        with self._stage("dispatch"):
            consumed = self._listener(event, self._accumulated.copy())
        if consumed:
            self._reset_accumulation()
        return True

    def _reset_accumulation(self):
        self._accumulated = mx.identity()
        self._has_pending = False

    def _stage(self, name: str):
        if self.profiler is None:
            return nullcontext()
        return self.profiler.stage(name)

    @property
    def touch_slop(self) -> float:
        return self._tracker.touch_slop

    @touch_slop.setter
    def touch_slop(self, value: float):
        self._tracker.touch_slop = validate_touch_slop(value)

    @property
    def max_pointers(self) -> int:
        return self._max_pointers

    @max_pointers.setter
    def max_pointers(self, value: int):
        self._max_pointers = validate_max_pointers(value)

    @property
    def state(self) -> GestureState:
        if self._tracker.active_count == 0:
            return GestureState.IDLE
        if self._tracker.past_slop:
            return GestureState.TRACKING_POST_SLOP
        return GestureState.TRACKING_PRE_SLOP

    @property
    def past_slop(self) -> bool:
        return self._tracker.active_count > 0 and self._tracker.past_slop

    @property
    def has_pending(self) -> bool:
        """True while fitted deltas are waiting to be consumed by the listener."""
        return self._has_pending

    @property
    def accumulated(self) -> np.ndarray:
        return self._accumulated.copy()

    @property
    def last_fit(self) -> Optional[FitResult]:
        """Result of the most recent MOVE update's fit (None if nothing was solvable)."""
        return self._last_fit

    @property
    def active_pointer_count(self) -> int:
        return self._tracker.active_count

    @property
    def tracker(self) -> PointerTracker:
        return self._tracker
