"""Exceptions raised by the freeform gesture detector.

Degenerate point configurations are not errors: the fitter falls back to a
solver with fewer degrees of freedom instead of raising.
"""

from __future__ import annotations


class FreeformGestureError(Exception):
    """Base class for all errors raised by this package."""


class InvalidConfigurationError(FreeformGestureError, ValueError):
    """A configuration value is out of range (e.g. max_pointers not in 0..4)."""


class NullListenerError(FreeformGestureError, TypeError):
    """A detector was created without a transform listener."""


class UnknownPointerError(FreeformGestureError, KeyError):
    """A move/end event referenced a pointer id that is not active.

    This means the input stream is malformed; the detector does not try to
    recover from it.
    """

    def __init__(self, pointer_id):
        self.pointer_id = pointer_id
        super().__init__(pointer_id)

    def __str__(self) -> str:
        return f"pointer {self.pointer_id!r} is not active"
