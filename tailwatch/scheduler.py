"""
Cooperative scheduler that drives the watcher.

A single loop thread owns the watcher. Two periodic timers run on it (the
scan interval and the blink interval), and user actions posted from other
threads are queued and executed on it as well, so watch state never needs
locking.
"""

import queue
import threading
import time
from collections.abc import Callable

from tailwatch.config import (
    DEFAULT_MONITOR_INTERVAL_MS,
    ConfigStore,
    clamp_monitor_interval,
    save_monitor_interval,
)
from tailwatch.logging_config import get_logger
from tailwatch.watcher import LogWatcher

logger = get_logger(__name__)

BLINK_INTERVAL_MS = 500


class ScanScheduler:
    """
    Runs watcher ticks and blink steps on a fixed cadence.

    The clock is injectable and ``run_pending`` fires whatever is due at a
    given time, so the schedule can be stepped deterministically without
    real timers.
    """

    def __init__(  # pylint: disable=too-many-arguments,too-many-positional-arguments
        self,
        watcher: LogWatcher,
        store: ConfigStore,
        interval_ms: int = DEFAULT_MONITOR_INTERVAL_MS,
        blink_interval_ms: int = BLINK_INTERVAL_MS,
        clock: Callable[[], float] = time.monotonic
    ) -> None:
        """
        Initialize the scheduler.

        Args:
            watcher: Watcher to drive
            store: Store used to persist interval changes
            interval_ms: Scan period in milliseconds (clamped to the floor)
            blink_interval_ms: Blink period in milliseconds
            clock: Monotonic time source in seconds
        """
        self.watcher = watcher
        self.store = store
        self.interval_ms = clamp_monitor_interval(interval_ms)
        self.blink_interval_ms = blink_interval_ms
        self.clock = clock

        self.next_scan: float | None = None
        self.next_blink: float | None = None
        self.running = False

        self._actions: queue.SimpleQueue[Callable[[], None]] = queue.SimpleQueue()
        self._wakeup = threading.Event()

    def start(self, now: float | None = None) -> None:
        """Arm both timers relative to ``now``."""
        if now is None:
            now = self.clock()
        self.next_scan = now + self.interval_ms / 1000.0
        self.next_blink = now + self.blink_interval_ms / 1000.0
        self.running = True

    def stop(self) -> None:
        """Stop scheduling further ticks. Safe to call from any thread."""
        self.running = False
        self._wakeup.set()

    def post(self, action: Callable[[], None]) -> None:
        """Queue an action to run on the loop thread."""
        self._actions.put(action)
        self._wakeup.set()

    def request_acknowledge(self) -> None:
        self.post(self.watcher.acknowledge)

    def request_log_path(self, log_path: str) -> None:
        self.post(lambda: self.watcher.set_log_path(log_path))

    def request_interval(self, interval_ms: int) -> None:
        self.post(lambda: self.set_interval(interval_ms))

    def set_interval(self, interval_ms: int, now: float | None = None) -> int:
        """
        Change the scan period without touching watch state.

        The new period is clamped, persisted, and the scan timer is re-armed
        from ``now``.

        Returns:
            The interval actually applied, in milliseconds
        """
        try:
            self.interval_ms = save_monitor_interval(self.store, interval_ms)
        except OSError:
            self.interval_ms = clamp_monitor_interval(interval_ms)
            logger.error("Failed to persist monitor interval %d", self.interval_ms, exc_info=True)

        if self.running:
            if now is None:
                now = self.clock()
            self.next_scan = now + self.interval_ms / 1000.0
        logger.info("Monitor interval set to %d ms", self.interval_ms)
        return self.interval_ms

    def _run_action(self, action: Callable[[], None]) -> None:
        try:
            action()
        except Exception:
            logger.error("Error running scheduled action", exc_info=True)

    def run_pending(self, now: float | None = None) -> float:
        """
        Run queued actions, then every timer that is due.

        Args:
            now: Current time (read from the clock if None)

        Returns:
            Seconds until the next timer is due
        """
        while True:
            try:
                action = self._actions.get_nowait()
            except queue.Empty:
                break
            self._run_action(action)

        if not self.running or self.next_scan is None or self.next_blink is None:
            return 0.0

        if now is None:
            now = self.clock()

        if now >= self.next_scan:
            self._run_action(self.watcher.tick)
            self.next_scan = now + self.interval_ms / 1000.0

        if now >= self.next_blink:
            self._run_action(self.watcher.blink)
            self.next_blink = now + self.blink_interval_ms / 1000.0

        return max(0.0, min(self.next_scan, self.next_blink) - now)

    def run(self) -> None:
        """Block running the loop until stop() is called."""
        if not self.running:
            self.start()

        logger.info(
            "Watching %s every %d ms", self.watcher.state.log_path, self.interval_ms
        )
        while self.running:
            self._wakeup.clear()
            delay = self.run_pending()
            if not self.running:
                break
            self._wakeup.wait(delay)

        logger.info("Scheduler stopped")
