"""
Resident watch state for the monitored log file.
"""

from dataclasses import dataclass


@dataclass
class WatchState:
    """
    Everything the watcher knows about the monitored file.

    Only ``acknowledged_offset`` (as ``ack_offset``) and ``log_path`` are
    persisted; the rest is rebuilt by a full rescan at startup.

    Attributes:
        log_path: Monitored file
        acknowledged_offset: Bytes before this offset never raise an alert again
        last_offset: File size as of the last successful scan
        has_alert: A marker was seen past the acknowledged offset
        blink_phase: Presentation toggle, not part of detection
    """
    log_path: str
    acknowledged_offset: int = 0
    last_offset: int = 0
    has_alert: bool = False
    blink_phase: bool = True

    def set_alert(self, has_alert: bool) -> None:
        """Change the alert flag and restart the blink cycle."""
        self.has_alert = has_alert
        self.blink_phase = True

    def clamp_acknowledged(self, size: int) -> bool:
        """
        Reset the acknowledged offset if the file is now smaller than it.

        Returns:
            True if the offset was reset and needs persisting
        """
        if self.acknowledged_offset > size:
            self.acknowledged_offset = 0
            return True
        return False
