"""Shared constants for the workout session core."""

from __future__ import annotations

# Default values used throughout the application
DEFAULT_SETS_PER_EXERCISE = 1
DEFAULT_REST_DURATION = 120

# Increments offered by the active rest timer popup
REST_ADJUST_STEPS = (5, 10, 15, 30)

# Seconds to wait for the list to lay out before a drag actually begins
DRAG_SETTLE_DELAY = 0.05

__all__ = [
    "DEFAULT_SETS_PER_EXERCISE",
    "DEFAULT_REST_DURATION",
    "REST_ADJUST_STEPS",
    "DRAG_SETTLE_DELAY",
]
