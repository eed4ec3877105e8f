"""Active contact tracking and touch-slop evaluation."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Hashable, Optional

import numpy as np

from freeform_gesture.config import DEFAULT_TOUCH_SLOP
from freeform_gesture.errors import UnknownPointerError

logger = logging.getLogger("freeform_gesture.tracker")


@dataclass
class Pointer:
    """One contact currently on the surface."""
    pointer_id: Hashable
    x: float
    y: float
    # Only recorded while the gesture is still inside the slop radius.
    start: Optional[tuple[float, float]] = None

    @property
    def position(self) -> tuple[float, float]:
        return (self.x, self.y)


class PointerTracker:
    """Keeps the set of active pointers for a single gesture.

    A gesture runs from the first contact beginning to the last contact
    ending. The past-slop flag belongs to the gesture, not to a pointer:
    once any pointer has moved ``touch_slop`` away from its start, it stays
    set until the next gesture begins.

    Snapshots for one update are taken in pairs: ``snapshot_before()`` before
    the moves of a batch are applied and ``snapshot_after()`` afterwards. Both
    use the id order pinned by ``snapshot_before()``, so row ``i`` of each
    array always belongs to the same pointer.
    """

    def __init__(self, touch_slop: float = DEFAULT_TOUCH_SLOP):
        self.touch_slop = touch_slop
        self._pointers: dict[Hashable, Pointer] = {}
        self._past_slop = False
        self._batch_ids: Optional[list[Hashable]] = None

    def begin(self, pointer_id: Hashable, x: float, y: float):
        """Register a new contact."""
        if not self._pointers:
            self._past_slop = False
        if pointer_id in self._pointers:
            logger.warning("Pointer %r began while already active; restarting it", pointer_id)

        x, y = float(x), float(y)
        start = None if self._past_slop else (x, y)
        self._pointers[pointer_id] = Pointer(pointer_id=pointer_id, x=x, y=y, start=start)

    def move(self, pointer_id: Hashable, x: float, y: float):
        """Update a contact's position and check it against the slop radius."""
        pointer = self._require(pointer_id)
        x, y = float(x), float(y)

        if not self._past_slop and pointer.start is not None:
            sx, sy = pointer.start
            if math.hypot(x - sx, y - sy) >= self.touch_slop:
                self._past_slop = True
                logger.debug("Pointer %r moved past touch slop %.2f", pointer_id, self.touch_slop)

        pointer.x = x
        pointer.y = y

    def end(self, pointer_id: Hashable, x: float, y: float):
        """Record the final position of a contact and stop tracking it."""
        pointer = self._require(pointer_id)
        pointer.x = float(x)
        pointer.y = float(y)
        del self._pointers[pointer_id]

    def snapshot_before(self) -> np.ndarray:
        """Positions of all active pointers; pins the order for ``snapshot_after``."""
        self._batch_ids = list(self._pointers)
        return self._positions(self._batch_ids)

    def snapshot_after(self) -> np.ndarray:
        """Positions of the pointers pinned by the last ``snapshot_before``."""
        ids = self._batch_ids if self._batch_ids is not None else list(self._pointers)
        self._batch_ids = None
        return self._positions([pid for pid in ids if pid in self._pointers])

    def snapshot(self) -> tuple[list[Hashable], np.ndarray]:
        ids = list(self._pointers)
        return ids, self._positions(ids)

    def get(self, pointer_id: Hashable) -> Optional[Pointer]:
        return self._pointers.get(pointer_id)

    def is_active(self, pointer_id: Hashable) -> bool:
        return pointer_id in self._pointers

    def reset(self):
        """Drop every pointer and clear the slop flag."""
        self._pointers.clear()
        self._past_slop = False
        self._batch_ids = None

    @property
    def past_slop(self) -> bool:
        return self._past_slop

    @property
    def active_count(self) -> int:
        return len(self._pointers)

    @property
    def pointer_ids(self) -> list[Hashable]:
        return list(self._pointers)

    def _require(self, pointer_id: Hashable) -> Pointer:
        pointer = self._pointers.get(pointer_id)
        if pointer is None:
            raise UnknownPointerError(pointer_id)
        return pointer

    def _positions(self, ids: list[Hashable]) -> np.ndarray:
        if not ids:
            return np.zeros((0, 2), dtype=np.float64)
        return np.array([self._pointers[pid].position for pid in ids], dtype=np.float64)
