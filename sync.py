"""
sync.py
Pending-write state machine used for background pushes to GitHub.

Two triggers feed one coalesced write:
- edit settled: no new edit for `debounce` seconds
- timer elapsed: changes have been pending for `interval` seconds
The snapshot is taken when the write starts, so a burst of edits is sent once,
with its final state.
The host calls poll() periodically; nothing here owns a thread.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable

logger = logging.getLogger(__name__)

IDLE = "idle"
PENDING = "pending"
WRITING = "writing"


class PendingWrite:
    def __init__(
        self,
        write: Callable,
        snapshot: Callable,
        debounce: float = 1.0,
        interval: float = 30.0,
        clock: Callable[[], float] = time.monotonic,
        on_result: Callable | None = None,
        on_start: Callable | None = None,
    ):
        self.write = write
        self.snapshot = snapshot
        self.debounce = debounce
        self.interval = interval
        self.clock = clock
        self.on_result = on_result
        self.on_start = on_start

        self.state = IDLE
        self._dirty = False
        self._last_edit = 0.0
        self._pending_since = 0.0
        self._lock = threading.Lock()
        self._write_lock = threading.Lock()

    @property
    def has_pending(self) -> bool:
        return self._dirty

    def mark_dirty(self) -> None:
        with self._lock:
            now = self.clock()
            if not self._dirty:
                self._pending_since = now
            self._dirty = True
            self._last_edit = now
            if self.state == IDLE:
                self.state = PENDING

    def due(self) -> bool:
        with self._lock:
            if not self._dirty or self.state == WRITING:
                return False
            now = self.clock()
            settled = now - self._last_edit >= self.debounce
            overdue = now - self._pending_since >= self.interval
            return settled or overdue

    def poll(self):
        if not self.due():
            return None
        return self.flush()

    def flush(self):
        """Write the current snapshot now, whatever the timers say."""
        with self._write_lock:
            with self._lock:
                self.state = WRITING
                self._dirty = False
            if self.on_start is not None:
                self.on_start()
            try:
                result = self.write(self.snapshot())
            except Exception:
                # write() is expected to report failures in its result
                logger.exception("Background write raised")
                result = None
            with self._lock:
                # A failed write is not retried; the next edit or a manual flush re-arms it.
                self.state = PENDING if self._dirty else IDLE
        if self.on_result is not None:
            self.on_result(result)
        return result
