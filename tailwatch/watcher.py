"""
State transitions for the watched log file.

``LogWatcher`` owns the WatchState and is the only thing that mutates it.
It opens the file for the duration of one scan, never longer, so the
writing process can rotate or delete it between ticks.
"""

from dataclasses import dataclass
from enum import Enum
from typing import BinaryIO

from tailwatch.config import (
    DEFAULT_ACK_POPUP_SECONDS,
    ConfigStore,
    WatcherSettings,
    save_ack_offset,
    save_log_path,
)
from tailwatch.core import Notifier
from tailwatch.logging_config import get_logger
from tailwatch.platform import file_size, open_shared
from tailwatch.presentation import tooltip_text
from tailwatch.scanner import ChunkedScanner
from tailwatch.state import WatchState

logger = get_logger(__name__)


class TickOutcome(Enum):
    """What a scan found out about the file."""
    MISSING = "missing"      # could not be opened
    ROTATED = "rotated"      # shrank below the last offset
    GREW = "grew"            # new bytes were scanned
    UNCHANGED = "unchanged"  # same size as last time
    FAILED = "failed"        # size or content could not be read


@dataclass
class TickResult:
    """Outcome of one full rescan or incremental tick."""
    outcome: TickOutcome
    size: int | None = None
    bytes_scanned: int = 0
    refreshed: bool = False


class LogWatcher:
    """
    Detects alert markers in one log file and tracks acknowledgment.

    Three entry points mutate state:
    - full_rescan(): recompute the alert from the acknowledged offset
    - tick(): scan only the bytes appended since the last tick
    - acknowledge(): mark everything seen so far as handled
    """

    def __init__(  # pylint: disable=too-many-arguments,too-many-positional-arguments
        self,
        state: WatchState,
        store: ConfigStore,
        notifiers: list[Notifier] | None = None,
        scanner: ChunkedScanner | None = None,
        ack_popup_seconds: float = DEFAULT_ACK_POPUP_SECONDS
    ):
        """
        Initialize the watcher.

        Args:
            state: Watch state to own
            store: Store used to persist the acknowledged offset and log path
            notifiers: Sinks that render state changes
            scanner: Marker scanner (default marker and chunk size if None)
            ack_popup_seconds: Duration passed to sinks on acknowledgment
        """
        self.state = state
        self.store = store
        self.notifiers = notifiers if notifiers is not None else []
        self.scanner = scanner or ChunkedScanner()
        self.ack_popup_seconds = ack_popup_seconds

    @classmethod
    def from_settings(
        cls,
        settings: WatcherSettings,
        store: ConfigStore,
        notifiers: list[Notifier] | None = None,
        scanner: ChunkedScanner | None = None
    ) -> "LogWatcher":
        """Create a watcher from loaded settings."""
        state = WatchState(
            log_path=settings.log_path,
            acknowledged_offset=settings.ack_offset,
        )
        return cls(
            state,
            store,
            notifiers=notifiers,
            scanner=scanner,
            ack_popup_seconds=settings.ack_popup_seconds,
        )

    def _open(self) -> BinaryIO | None:
        """Open the log file, or return None if it is unavailable."""
        try:
            return open_shared(self.state.log_path)
        except OSError as e:
            logger.debug("Log file unavailable: %s (%s)", self.state.log_path, e)
            return None

    def _persist_ack_offset(self) -> None:
        try:
            save_ack_offset(self.store, self.state.acknowledged_offset)
        except OSError:
            logger.error(
                "Failed to persist acknowledged offset %d",
                self.state.acknowledged_offset,
                exc_info=True
            )

    def _notify_state(self) -> None:
        """Send the current alert state to every notifier."""
        tooltip = tooltip_text(self.state.has_alert)
        for notifier in self.notifiers:
            try:
                if not notifier.on_state_changed(
                    self.state.has_alert, tooltip, self.state.blink_phase
                ):
                    logger.warning(
                        "Notifier %s failed to render state", notifier.__class__.__name__
                    )
            except Exception:
                logger.error(
                    "Error rendering state via %s",
                    notifier.__class__.__name__,
                    exc_info=True
                )

    def _notify_acknowledged(self) -> None:
        for notifier in self.notifiers:
            try:
                notifier.on_acknowledged(self.ack_popup_seconds)
            except Exception:
                logger.error(
                    "Error showing acknowledgment via %s",
                    notifier.__class__.__name__,
                    exc_info=True
                )

    def full_rescan(self) -> TickResult:
        """
        Recompute the alert state from the acknowledged offset.

        Used at startup and after a path change, when it is not known whether
        the unacknowledged tail of the file contains a marker.

        Returns:
            TickResult describing what was found
        """
        state = self.state
        state.last_offset = 0
        state.set_alert(False)

        fh = self._open()
        if fh is None:
            self._notify_state()
            return TickResult(TickOutcome.MISSING)

        with fh:
            try:
                size = file_size(fh)
            except OSError as e:
                logger.warning("Could not read size of %s: %s", state.log_path, e)
                state.last_offset = state.acknowledged_offset
                self._notify_state()
                return TickResult(TickOutcome.FAILED)

            result = TickResult(TickOutcome.UNCHANGED, size=size, refreshed=True)
            if state.clamp_acknowledged(size):
                logger.info(
                    "Acknowledged offset is past the end of %s, rescanning from 0",
                    state.log_path
                )
                self._persist_ack_offset()

            scan = self.scanner.scan(fh, state.acknowledged_offset, size)
            result.bytes_scanned = scan.bytes_read
            if scan.failed:
                # Retry only the unacknowledged tail on the next tick
                state.last_offset = state.acknowledged_offset
                result.outcome = TickOutcome.FAILED
            else:
                state.set_alert(scan.matched)
                state.last_offset = size
                if size > 0:
                    result.outcome = TickOutcome.GREW

        logger.info(
            "Rescanned %s: size=%s, acknowledged=%d, alert=%s",
            state.log_path, size, state.acknowledged_offset, state.has_alert
        )
        self._notify_state()
        return result

    def tick(self) -> TickResult:
        """
        Scan only what was appended since the previous tick.

        Returns:
            TickResult describing what was found
        """
        state = self.state

        fh = self._open()
        if fh is None:
            if state.has_alert:
                logger.info("Log file %s disappeared, clearing alert", state.log_path)
                state.set_alert(False)
                self._notify_state()
            state.last_offset = 0
            return TickResult(TickOutcome.MISSING)

        with fh:
            try:
                size = file_size(fh)
            except OSError as e:
                logger.warning("Could not read size of %s: %s", state.log_path, e)
                return TickResult(TickOutcome.FAILED)

            result = TickResult(TickOutcome.UNCHANGED, size=size)

            if size < state.last_offset:
                logger.info(
                    "Log file %s shrank from %d to %d bytes, treating as rotated",
                    state.log_path, state.last_offset, size
                )
                if state.clamp_acknowledged(size):
                    self._persist_ack_offset()
                state.last_offset = 0
                state.set_alert(False)
                result.outcome = TickOutcome.ROTATED
                result.refreshed = True
            elif size > state.last_offset:
                scan = self.scanner.scan(fh, state.last_offset, size)
                result.bytes_scanned = scan.bytes_read
                if scan.failed:
                    # Keep last_offset so the same range is retried next tick
                    result.outcome = TickOutcome.FAILED
                else:
                    if scan.matched and not state.has_alert:
                        logger.info(
                            "Alert marker found in %s between offsets %d and %d",
                            state.log_path, state.last_offset, size
                        )
                        state.set_alert(True)
                        result.refreshed = True
                    state.last_offset = size
                    result.outcome = TickOutcome.GREW

        if result.refreshed:
            self._notify_state()
        return result

    def acknowledge(self) -> None:
        """Mark everything scanned so far as handled and clear the alert."""
        state = self.state
        state.acknowledged_offset = state.last_offset
        self._persist_ack_offset()
        state.set_alert(False)
        logger.info("Acknowledged %s up to offset %d", state.log_path, state.acknowledged_offset)
        self._notify_state()
        self._notify_acknowledged()

    def set_log_path(self, log_path: str) -> TickResult:
        """
        Switch to another log file and rescan it from the start.

        Args:
            log_path: New file to monitor

        Returns:
            TickResult of the immediate full rescan
        """
        state = self.state
        logger.info("Log path changed from %s to %s", state.log_path, log_path)
        state.log_path = log_path
        try:
            save_log_path(self.store, log_path)
        except OSError:
            logger.error("Failed to persist log path %s", log_path, exc_info=True)
        state.acknowledged_offset = 0
        self._persist_ack_offset()
        return self.full_rescan()

    def blink(self) -> bool:
        """
        Advance the blink cycle.

        Returns:
            True if the blink phase changed and sinks were notified
        """
        state = self.state
        if state.has_alert:
            state.blink_phase = not state.blink_phase
        elif not state.blink_phase:
            state.blink_phase = True
        else:
            return False

        for notifier in self.notifiers:
            try:
                notifier.on_blink(state.has_alert, state.blink_phase)
            except Exception:
                logger.error(
                    "Error updating blink state via %s",
                    notifier.__class__.__name__,
                    exc_info=True
                )
        return True
