"""
Core interfaces for the Tailwatch presentation boundary.

The detection state machine never talks to a display directly. It reports
through notifiers, which decide how an alert is rendered (console banner,
webhook, tray icon, ...).
"""

from abc import ABC, abstractmethod
from typing import Any


class Notifier(ABC):
    """
    Base class for all notification sinks.

    Notifiers consume watcher output only; they never mutate watch state.
    """

    def __init__(self, config: dict[str, Any]):
        """
        Initialize the notifier with configuration.

        Args:
            config: Type-specific configuration dictionary
        """
        self.config = config

    @abstractmethod
    def on_state_changed(self, has_alert: bool, tooltip: str, blink_phase: bool = True) -> bool:
        """
        Render the current alert state.

        Args:
            has_alert: Whether an unacknowledged alert is pending
            tooltip: Short status text
            blink_phase: Presentation toggle driven by the blink timer

        Returns:
            True if the state was rendered successfully, False otherwise
        """
        raise NotImplementedError

    @abstractmethod
    def on_acknowledged(self, popup_seconds: float) -> bool:
        """
        Show a transient "acknowledged" message.

        Args:
            popup_seconds: How long the message should stay visible

        Returns:
            True if the message was shown successfully, False otherwise
        """
        raise NotImplementedError

    def on_blink(self, has_alert: bool, blink_phase: bool) -> None:
        """
        Called on every blink timer step that changes the phase.

        Sinks without an animated display can ignore it.
        """
