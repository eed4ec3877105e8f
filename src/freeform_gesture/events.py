"""Contact event records consumed by the detector.

The platform layer translates its native touch events into these records:
one BEGIN per new contact, one MOVE per frame (batching every contact that
moved), and one END or CANCEL per lifted contact.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Hashable


class ContactAction(Enum):
    BEGIN = "begin"
    MOVE = "move"
    END = "end"
    CANCEL = "cancel"


@dataclass
class ContactPoint:
    """Position of one contact inside an event."""
    pointer_id: Hashable
    x: float
    y: float

    def to_dict(self) -> dict:
        return {"pointer_id": self.pointer_id, "x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data: dict) -> ContactPoint:
        return cls(
            pointer_id=data["pointer_id"],
            x=float(data["x"]),
            y=float(data["y"]),
        )


@dataclass
class ContactEvent:
    """A single input record.

    MOVE events may carry several points that moved in the same frame;
    BEGIN/END/CANCEL events normally carry one.
    """
    action: ContactAction
    points: list[ContactPoint] = field(default_factory=list)
    timestamp: float = 0.0

    @classmethod
    def begin(cls, pointer_id: Hashable, x: float, y: float, timestamp: float = 0.0) -> ContactEvent:
        return cls(ContactAction.BEGIN, [ContactPoint(pointer_id, x, y)], timestamp)

    @classmethod
    def move(cls, *points: ContactPoint, timestamp: float = 0.0) -> ContactEvent:
        """Build a MOVE batch from points or (pointer_id, x, y) tuples."""
        batch = [p if isinstance(p, ContactPoint) else ContactPoint(*p) for p in points]
        return cls(ContactAction.MOVE, batch, timestamp)

    @classmethod
    def move_one(cls, pointer_id: Hashable, x: float, y: float, timestamp: float = 0.0) -> ContactEvent:
        return cls(ContactAction.MOVE, [ContactPoint(pointer_id, x, y)], timestamp)

    @classmethod
    def end(cls, pointer_id: Hashable, x: float, y: float, timestamp: float = 0.0) -> ContactEvent:
        return cls(ContactAction.END, [ContactPoint(pointer_id, x, y)], timestamp)

    @classmethod
    def cancel(cls, pointer_id: Hashable, x: float, y: float, timestamp: float = 0.0) -> ContactEvent:
        return cls(ContactAction.CANCEL, [ContactPoint(pointer_id, x, y)], timestamp)

    @property
    def pointer_ids(self) -> list[Hashable]:
        return [p.pointer_id for p in self.points]

    def to_dict(self) -> dict:
        return {
            "action": self.action.value,
            "timestamp": self.timestamp,
            "points": [p.to_dict() for p in self.points],
        }

    @classmethod
    def from_dict(cls, data: dict) -> ContactEvent:
        return cls(
            action=ContactAction(data["action"]),
            points=[ContactPoint.from_dict(p) for p in data.get("points", [])],
            timestamp=float(data.get("timestamp", 0.0)),
        )
