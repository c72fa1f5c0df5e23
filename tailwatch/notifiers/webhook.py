"""
Webhook notifier for Tailwatch.
"""

from datetime import datetime
from typing import Any

import requests

from tailwatch.core import Notifier
from tailwatch.logging_config import get_logger
from tailwatch.registry import register_notifier

logger = get_logger(__name__)


@register_notifier("webhook")
class WebhookNotifier(Notifier):
    """
    Sends alert state changes via HTTP webhook.

    Config:
        url: Webhook URL to send to
        method: HTTP method, POST or PUT (default: POST)
        headers: Optional HTTP headers
        timeout: Request timeout in seconds (default: 10)
    """

    def _send(self, payload: dict[str, Any]) -> bool:
        url = self.config["url"]
        method = self.config.get("method", "POST").upper()
        headers = self.config.get("headers", {})
        timeout = self.config.get("timeout", 10)

        try:
            if method == "POST":
                response = requests.post(url, json=payload, headers=headers, timeout=timeout)
            elif method == "PUT":
                response = requests.put(url, json=payload, headers=headers, timeout=timeout)
            else:
                raise ValueError(f"Unsupported HTTP method: {method}")

            response.raise_for_status()
            logger.info("Webhook '%s' event sent to %s", payload["event"], url)
            return True
        except requests.RequestException:
            logger.error(
                "Failed to send webhook '%s' event to %s",
                payload["event"],
                url,
                exc_info=True
            )
            return False

    def on_state_changed(self, has_alert: bool, tooltip: str, blink_phase: bool = True) -> bool:
        """Send the alert state."""
        return self._send({
            "event": "state_changed",
            "has_alert": has_alert,
            "message": tooltip,
            "timestamp": datetime.now().isoformat(),
        })

    def on_acknowledged(self, popup_seconds: float) -> bool:
        """Send an acknowledgment event."""
        return self._send({
            "event": "acknowledged",
            "has_alert": False,
            "timestamp": datetime.now().isoformat(),
        })


# Export for dynamic importing
__all__ = ["WebhookNotifier"]
