"""Contact stream recording and replay.

Record real touch sessions for:
- Reproducible detector tests without a touch device
- Replaying bug reports through a different slop / max_pointers setting
- Benchmarks on headless machines
"""

from __future__ import annotations

import json
import time
from pathlib import Path
from typing import Iterator, Optional

import numpy as np

from freeform_gesture.events import ContactAction, ContactEvent, ContactPoint

RECORDING_VERSION = 1

_ACTION_CODES = {action: i for i, action in enumerate(ContactAction)}
_CODE_ACTIONS = {i: action for action, i in _ACTION_CODES.items()}


class ContactRecorder:
    """Captures contact events with timestamps relative to ``start()``.

    Usage:
        recorder = ContactRecorder()
        recorder.start()
        # In your input handler:
        recorder.add_event(event)
        detector.on_touch_event(event)
        # When done:
        recorder.save("session.json")
    """

    def __init__(self):
        self._events: list[ContactEvent] = []
        self._start_time: Optional[float] = None
        self._recording = False

    def start(self):
        """Begin a new recording session."""
        self._events = []
        self._start_time = time.monotonic()
        self._recording = True

    def stop(self) -> int:
        """Stop recording. Returns number of events captured."""
        self._recording = False
        return len(self._events)

    @property
    def is_recording(self) -> bool:
        return self._recording

    @property
    def event_count(self) -> int:
        return len(self._events)

    @property
    def duration(self) -> float:
        if not self._events:
            return 0.0
        return self._events[-1].timestamp

    @property
    def events(self) -> list[ContactEvent]:
        return list(self._events)

    def add_event(self, event: ContactEvent, timestamp: Optional[float] = None):
        """Append an event; ignored unless recording.

        Args:
            event: The contact event to store (copied).
            timestamp: Seconds since start; defaults to the monotonic clock.
        """
        if not self._recording:
            return

        if timestamp is None:
            timestamp = time.monotonic() - self._start_time

        self._events.append(ContactEvent(
            action=event.action,
            points=[ContactPoint(p.pointer_id, p.x, p.y) for p in event.points],
            timestamp=float(timestamp),
        ))

    def save(self, path: str | Path):
        """Save recording to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "version": RECORDING_VERSION,
            "event_count": len(self._events),
            "duration": self.duration,
            "events": [e.to_dict() for e in self._events],
        }

        with open(path, "w") as f:
            json.dump(data, f)

    def save_compact(self, path: str | Path) -> Path:
        """Save as numpy npz: flat point table plus per-event offsets."""
        path = Path(path).with_suffix(".npz")
        path.parent.mkdir(parents=True, exist_ok=True)

        actions = np.array([_ACTION_CODES[e.action] for e in self._events], dtype=np.int8)
        timestamps = np.array([e.timestamp for e in self._events], dtype=np.float64)
        point_counts = np.array([len(e.points) for e in self._events], dtype=np.int32)
        coords = np.array(
            [[p.x, p.y] for e in self._events for p in e.points],
            dtype=np.float64,
        ).reshape(-1, 2)
        # Pointer ids are opaque tokens, so they go through JSON.
        pointer_ids = json.dumps([p.pointer_id for e in self._events for p in e.points])

        np.savez_compressed(
            path,
            version=np.array([RECORDING_VERSION]),
            actions=actions,
            timestamps=timestamps,
            point_counts=point_counts,
            coords=coords,
            pointer_ids=np.array([pointer_ids]),
        )
        return path


class ContactPlayer:
    """Replays a recorded contact stream.

    Usage:
        player = ContactPlayer.load("session.json")
        detector.process(player.play())
    """

    def __init__(self, events: list[ContactEvent]):
        self._events = events

    @classmethod
    def load(cls, path: str | Path) -> ContactPlayer:
        """Load a recording saved by :class:`ContactRecorder`."""
        path = Path(path)

        if path.suffix == ".npz":
            return cls._load_compact(path)

        with open(path) as f:
            data = json.load(f)

        version = data.get("version")
        if version != RECORDING_VERSION:
            raise ValueError(f"Unsupported recording version {version!r} in {path}")

        return cls([ContactEvent.from_dict(e) for e in data["events"]])

    @classmethod
    def _load_compact(cls, path: Path) -> ContactPlayer:
        data = np.load(path, allow_pickle=False)
        version = int(data["version"][0])
        if version != RECORDING_VERSION:
            raise ValueError(f"Unsupported recording version {version} in {path}")

        actions = data["actions"]
        timestamps = data["timestamps"]
        point_counts = data["point_counts"]
        coords = data["coords"]
        pointer_ids = json.loads(str(data["pointer_ids"][0]))

        events = []
        offset = 0
        for i in range(len(actions)):
            n = int(point_counts[i])
            points = [
                ContactPoint(pointer_ids[offset + j], float(coords[offset + j, 0]), float(coords[offset + j, 1]))
                for j in range(n)
            ]
            offset += n
            events.append(ContactEvent(
                action=_CODE_ACTIONS[int(actions[i])],
                points=points,
                timestamp=float(timestamps[i]),
            ))
        return cls(events)

    @property
    def event_count(self) -> int:
        return len(self._events)

    @property
    def duration(self) -> float:
        if not self._events:
            return 0.0
        return self._events[-1].timestamp

    def play(self) -> Iterator[ContactEvent]:
        """Iterate through all events instantly (no timing)."""
        yield from self._events

    def play_realtime(self, speed: float = 1.0) -> Iterator[ContactEvent]:
        """Replay at original timing, scaled by ``speed``."""
        if not self._events:
            return

        start = time.monotonic()
        for event in self._events:
            target_time = event.timestamp / speed
            elapsed = time.monotonic() - start
            if target_time > elapsed:
                time.sleep(target_time - elapsed)
            yield event

    def get_event(self, index: int) -> Optional[ContactEvent]:
        if 0 <= index < len(self._events):
            return self._events[index]
        return None
