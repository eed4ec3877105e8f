"""Detector configuration.

Values can be passed directly to the detector or loaded from YAML:

    touch_slop: 8.0
    max_pointers: 4
    log_level: warning

The mapping may also be nested under a top-level ``detector:`` key.
"""

from __future__ import annotations

import logging
import numbers
from dataclasses import dataclass, asdict
from pathlib import Path

import yaml

from freeform_gesture.errors import InvalidConfigurationError

logger = logging.getLogger("freeform_gesture.config")

# Platform UIs usually derive this from display density; 8 px is the
# unscaled touch slop of a typical handset.
DEFAULT_TOUCH_SLOP = 8.0
DEFAULT_MAX_POINTERS = 4
MAX_SUPPORTED_POINTERS = 4

LOG_LEVELS = ("debug", "info", "warning", "error", "critical")


def validate_max_pointers(value) -> int:
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise InvalidConfigurationError(f"max_pointers must be an integer, got {value!r}")
    if value < 0 or value > MAX_SUPPORTED_POINTERS:
        raise InvalidConfigurationError(
            f"max_pointers must be in the range 0 to {MAX_SUPPORTED_POINTERS}, got {value}"
        )
    return int(value)


def validate_touch_slop(value) -> float:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidConfigurationError(f"touch_slop must be a number, got {value!r}")
    if value < 0:
        raise InvalidConfigurationError(f"touch_slop must not be negative, got {value}")
    return float(value)


@dataclass
class DetectorConfig:
    """Settings for a :class:`~freeform_gesture.detector.FreeformGestureDetector`."""
    touch_slop: float = DEFAULT_TOUCH_SLOP
    max_pointers: int = DEFAULT_MAX_POINTERS
    log_level: str = "warning"

    def __post_init__(self):
        self.validate()

    def validate(self):
        self.touch_slop = validate_touch_slop(self.touch_slop)
        self.max_pointers = validate_max_pointers(self.max_pointers)
        if str(self.log_level).lower() not in LOG_LEVELS:
            raise InvalidConfigurationError(
                f"log_level must be one of {', '.join(LOG_LEVELS)}, got {self.log_level!r}"
            )
        self.log_level = str(self.log_level).lower()

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> DetectorConfig:
        known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        unknown = sorted(set(data) - set(known))
        if unknown:
            logger.warning("Ignoring unknown config keys: %s", ", ".join(unknown))
        return cls(**known)

    @classmethod
    def from_yaml(cls, path: str | Path) -> DetectorConfig:
        """Load configuration from a YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise InvalidConfigurationError(f"{path}: expected a mapping at top level")
        section = data.get("detector", data)
        if not isinstance(section, dict):
            raise InvalidConfigurationError(f"{path}: 'detector' must be a mapping")
        return cls.from_dict(section)

    def to_yaml(self, path: str | Path):
        with open(path, "w") as f:
            yaml.dump({"detector": self.to_dict()}, f, default_flow_style=False, sort_keys=False)
