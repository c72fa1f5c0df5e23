"""
Console notifier for Tailwatch.
"""

from tailwatch.core import Notifier
from tailwatch.logging_config import get_logger
from tailwatch.presentation import ACK_MESSAGE, APP_TITLE, display_icon
from tailwatch.registry import register_notifier

logger = get_logger(__name__)


@register_notifier("console")
class ConsoleNotifier(Notifier):
    """
    Prints alert state changes to console/stdout.

    Config:
        (none required)
    """

    def on_state_changed(self, has_alert: bool, tooltip: str, blink_phase: bool = True) -> bool:
        """Print a banner when an alert is pending, log otherwise."""
        logger.info("State: %s (icon: %s)", tooltip, display_icon(has_alert, blink_phase).value)

        if has_alert:
            print(f"\n{'=' * 60}")
            print(f"ALERT: {tooltip}")
            print(f"{'=' * 60}\n")
        return True

    def on_blink(self, has_alert: bool, blink_phase: bool) -> None:
        logger.debug("Icon: %s", display_icon(has_alert, blink_phase).value)

    def on_acknowledged(self, popup_seconds: float) -> bool:
        """Print the acknowledgment message."""
        print(f"{APP_TITLE}: {ACK_MESSAGE}")
        return True


# Export for dynamic importing
__all__ = ["ConsoleNotifier"]
