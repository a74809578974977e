"""
Background scheduler for the overdue sweep.

Runs the sweep on a daemon thread at a fixed interval, independent of
request handling.
"""

import logging
import threading
from typing import Optional

from .job import OverdueSweep, SweepResult

logger = logging.getLogger(__name__)

DAILY = 24 * 60 * 60


class SweepScheduler:
    """Runs an ``OverdueSweep`` every ``interval_seconds``."""

    def __init__(self, sweep: OverdueSweep, interval_seconds: float = DAILY, run_immediately: bool = False):
        self.sweep = sweep
        self.interval_seconds = interval_seconds
        self.run_immediately = run_immediately
        self.last_result: Optional[SweepResult] = None
        self._stop = threading.Event()
        self._lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the scheduler thread."""
        with self._lock:
            if self.is_running:
                logger.warning("Sweep scheduler already running")
                return
            self._stop.clear()
            self._thread = threading.Thread(
                target=self._run_loop, name="overdue-sweep", daemon=True
            )
            self._thread.start()
        logger.info("Sweep scheduler started (every %ss)", self.interval_seconds)

    def stop(self, timeout: Optional[float] = 5.0) -> None:
        """Signal the thread to stop and wait for it."""
        with self._lock:
            thread = self._thread
            if thread is None:
                return
            self._stop.set()
        thread.join(timeout)
        with self._lock:
            self._thread = None
        logger.info("Sweep scheduler stopped")

    def run_once(self) -> Optional[SweepResult]:
        """Run one sweep, logging any unexpected failure."""
        try:
            self.last_result = self.sweep.run()
        except Exception as e:
            logger.error("Overdue sweep failed: %s", e, exc_info=True)
            return None
        return self.last_result

    def _run_loop(self) -> None:
        if self.run_immediately:
            self.run_once()
        while not self._stop.wait(self.interval_seconds):
            self.run_once()
