"""
Animation-frame scheduling.

The drag controller never runs radius math directly from a pointer event; it asks a
`FrameScheduler` for the next frame and does the work there. In a browser this maps onto
`requestAnimationFrame` / `cancelAnimationFrame`. Headless callers (CLI replay, the API,
tests) drive frames explicitly with `ManualFrameScheduler`.
"""

from __future__ import annotations

import itertools
import logging
from typing import Callable, Protocol

logger = logging.getLogger(__name__)

FrameCallback = Callable[[], None]


class FrameScheduler(Protocol):
    def request_frame(self, callback: FrameCallback) -> int:
        """Schedule `callback` for the next frame and return a cancellation handle."""
        ...

    def cancel_frame(self, handle: int) -> None:
        """Drop a pending callback. Unknown or already-run handles are ignored."""
        ...


class ManualFrameScheduler:
    """Frame scheduler that only advances when `run_frame()` is called."""

    def __init__(self) -> None:
        self._pending: dict[int, FrameCallback] = {}
        self._ids = itertools.count(1)
        self.frames_run = 0

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def request_frame(self, callback: FrameCallback) -> int:
        handle = next(self._ids)
        self._pending[handle] = callback
        return handle

    def cancel_frame(self, handle: int) -> None:
        self._pending.pop(handle, None)

    def run_frame(self) -> int:
        """Run every callback requested before this call; returns how many ran.

        Callbacks requested while the frame runs are deferred to the next frame.
        """
        batch = list(self._pending.items())
        self._pending.clear()
        self.frames_run += 1
        for _handle, callback in batch:
            callback()
        if batch:
            logger.debug("frame %d ran %d callback(s)", self.frames_run, len(batch))
        return len(batch)
