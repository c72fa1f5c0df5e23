"""
Pure projections from watch state to what a display shows.

Sinks with an icon (a tray icon, or the console notifier's log line) call
``display_icon`` with the state they receive; the watcher itself never
depends on it.
"""

from enum import Enum

APP_TITLE = "Backrest Watcher"
ACK_MESSAGE = "Acknowledged. Monitoring continues from current log position."


class Icon(Enum):
    """Icon a tray-style display should show."""
    NORMAL = "normal"
    ALERT = "alert"


def display_icon(has_alert: bool, blink_phase: bool) -> Icon:
    """The alert icon is shown only on the "on" half of the blink cycle."""
    return Icon.ALERT if has_alert and blink_phase else Icon.NORMAL


def tooltip_text(has_alert: bool) -> str:
    return f"{APP_TITLE}: {'WARNING/ERROR' if has_alert else 'OK'}"
