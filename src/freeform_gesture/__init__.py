"""FreeformGesture - multi-touch drag, pinch, rotate, skew and warp transforms."""

__version__ = "0.1.0"

from freeform_gesture.config import DetectorConfig, DEFAULT_TOUCH_SLOP, DEFAULT_MAX_POINTERS
from freeform_gesture.errors import (
    FreeformGestureError,
    InvalidConfigurationError,
    NullListenerError,
    UnknownPointerError,
)
from freeform_gesture.events import ContactAction, ContactEvent, ContactPoint
from freeform_gesture.tracker import Pointer, PointerTracker
from freeform_gesture.fitting import FitResult, fit_transform
from freeform_gesture.detector import FreeformGestureDetector, GestureState
from freeform_gesture.recorder import ContactRecorder, ContactPlayer
from freeform_gesture.profiler import PipelineProfiler
