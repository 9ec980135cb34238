"""
Remaining-Time Tracker: how much of the commute is left.

One instance per playback session. remaining() is recomputed on every call.
"""

import logging

logger = logging.getLogger(__name__)


class RemainingTimeTracker:
    """Tracks initial commute budget and cumulative consumed seconds."""

    def __init__(self, initial_seconds: float = 0):
        self.initial_seconds: float = 0
        self.consumed_seconds: float = 0
        if initial_seconds:
            self.set_initial(initial_seconds)

    def set_initial(self, seconds: float) -> None:
        """Start (or restart) a session with a fresh budget."""
        self.initial_seconds = seconds
        self.consumed_seconds = 0
        logger.debug(f"Remaining-time budget set to {seconds}s")

    def add_consumed(self, seconds: float) -> None:
        """Record watched time. Negative deltas are ignored; consumed never decreases."""
        if seconds is None or seconds < 0:
            logger.debug(f"Ignoring non-positive consumed delta: {seconds}")
            return
        self.consumed_seconds += seconds

    def remaining(self) -> float:
        return max(0, self.initial_seconds - self.consumed_seconds)

    def reset(self) -> None:
        """Tear down the session state."""
        self.initial_seconds = 0
        self.consumed_seconds = 0

    def __repr__(self) -> str:
        return (
            f"RemainingTimeTracker(initial={self.initial_seconds}, "
            f"consumed={self.consumed_seconds}, remaining={self.remaining()})"
        )
