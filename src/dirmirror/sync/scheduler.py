"""
Fixed-interval trigger for sync passes.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable

from dirmirror.core.logging import SyncLogger


class PeriodicScheduler(threading.Thread):
    """
    Fires a callback every ``interval_seconds`` on the wall clock.

    Each tick runs the callback on its own worker thread, so a slow
    callback does not push later ticks back. Overlap handling is left to
    the callback. ``stop()`` halts the clock and, by default, waits for
    callbacks already running.
    """

    def __init__(
        self,
        callback: Callable[[], object],
        interval_seconds: float,
        logger: SyncLogger,
        name: str = "dirmirror-scheduler",
    ) -> None:
        super().__init__(name=name, daemon=True)
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.callback = callback
        self.interval_seconds = interval_seconds
        self.logger = logger
        self.stop_event = threading.Event()
        self._workers: list[threading.Thread] = []
        self._workers_lock = threading.Lock()
        self._ticks = 0

    @property
    def ticks(self) -> int:
        return self._ticks

    def run(self) -> None:
        next_tick = time.monotonic() + self.interval_seconds
        while not self.stop_event.wait(max(0.0, next_tick - time.monotonic())):
            self._ticks += 1
            self._dispatch()
            next_tick += self.interval_seconds
            # Ticks that were missed entirely are not replayed
            now = time.monotonic()
            if next_tick <= now:
                missed = int((now - next_tick) // self.interval_seconds) + 1
                next_tick += missed * self.interval_seconds

    def stop(self, wait: bool = True, timeout: float | None = None) -> None:
        """Stop firing; optionally wait for running callbacks to finish."""
        self.stop_event.set()
        if self.is_alive() and threading.current_thread() is not self:
            self.join(timeout)
        if wait:
            with self._workers_lock:
                workers = list(self._workers)
            for worker in workers:
                worker.join(timeout)

    def _dispatch(self) -> None:
        worker = threading.Thread(
            target=self._invoke,
            name=f"{self.name}-tick-{self._ticks}",
            daemon=True,
        )
        with self._workers_lock:
            self._workers = [w for w in self._workers if w.is_alive()]
            self._workers.append(worker)
        worker.start()

    def _invoke(self) -> None:
        try:
            self.callback()
        except Exception as e:
            self.logger.error(f"ERROR: Synchronization failed: {e}")
