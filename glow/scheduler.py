"""
glow/scheduler.py - Cooperative Frame Scheduler

Single-threaded stand-in for the host's animation-frame primitive. A
callback requested during a tick runs on the next tick, and a cancelled
handle never runs again.
"""

import logging
from typing import Callable, Dict, List

from .types_state import FrameContext

logger = logging.getLogger(__name__)

FrameCallback = Callable[[FrameContext], None]


class FrameScheduler:
    """requestAnimationFrame-style registry of one-shot frame callbacks."""

    def __init__(self):
        self._next_handle = 1
        self._pending: Dict[int, FrameCallback] = {}
        self.frames_run = 0

    def request(self, callback: FrameCallback) -> int:
        """Schedule callback for the next tick; returns a cancellation handle."""
        if not callable(callback):
            raise ValueError(f"frame callback must be callable, got {callback!r}")
        handle = self._next_handle
        self._next_handle += 1
        self._pending[handle] = callback
        return handle

    def cancel(self, handle: int) -> bool:
        """Drop a pending callback. Returns True if it was still pending."""
        return self._pending.pop(handle, None) is not None

    def is_pending(self, handle: int) -> bool:
        return handle in self._pending

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def tick(self, context: FrameContext) -> int:
        """
        Run every callback that was pending when the tick started.

        A callback cancelled by an earlier callback in the same tick is
        skipped.

        Returns:
            int: Number of callbacks run
        """
        batch: List[int] = sorted(self._pending)
        ran = 0
        for handle in batch:
            callback = self._pending.pop(handle, None)
            if callback is None:
                continue
            callback(context)
            ran += 1
        self.frames_run += 1
        logger.debug("frame %.1f ms ran %d callbacks", context.timestamp_ms, ran)
        return ran
