"""
Main daemon entry point for Tailwatch.
"""

import argparse
import signal
import sys
from pathlib import Path
from typing import Any

from tailwatch.config import (
    YamlConfigStore,
    default_log_path,
    load_notifier_configs,
    load_settings,
)
from tailwatch.core import Notifier
from tailwatch.logging_config import get_logger, setup_logging
from tailwatch.plugins import build_notifiers
from tailwatch.scheduler import ScanScheduler
from tailwatch.watcher import LogWatcher

logger = get_logger(__name__)


class TailwatchDaemon:
    """Main daemon class that wires settings, watcher, notifiers and scheduler."""

    def __init__(self, config_path: str) -> None:
        """
        Initialize the daemon.

        Args:
            config_path: Path to the settings file (created if missing)
        """
        self.config_path = Path(config_path)
        self.store = YamlConfigStore(self.config_path)
        self.settings = load_settings(self.store, default_log_path(self.config_path))

        self.notifiers: list[Notifier] = build_notifiers(load_notifier_configs(self.store))

        self.watcher = LogWatcher.from_settings(self.settings, self.store, self.notifiers)
        self.scheduler = ScanScheduler(
            self.watcher,
            self.store,
            interval_ms=self.settings.monitor_interval_ms,
        )

    def start(self) -> None:
        """Rescan the log and run the scheduler until stopped."""
        logger.info("Starting Tailwatch daemon")
        self.watcher.full_rescan()
        self.scheduler.start()
        self.scheduler.run()
        logger.info("Tailwatch daemon stopped")

    def stop(self) -> None:
        """Stop the daemon. Safe to call from a signal handler."""
        logger.info("Stopping Tailwatch daemon")
        self.scheduler.stop()

    def acknowledge(self) -> None:
        """Queue an acknowledgment on the loop thread."""
        self.scheduler.request_acknowledge()


def install_signal_handlers(daemon: TailwatchDaemon) -> None:
    """Stop on SIGINT/SIGTERM; acknowledge on SIGUSR1 where it exists."""
    def stop_handler(_sig: int, _frame: Any) -> None:
        logger.info("Shutdown signal received")
        daemon.stop()

    def ack_handler(_sig: int, _frame: Any) -> None:
        logger.info("Acknowledge signal received")
        daemon.acknowledge()

    signal.signal(signal.SIGINT, stop_handler)
    signal.signal(signal.SIGTERM, stop_handler)
    if hasattr(signal, "SIGUSR1"):
        signal.signal(signal.SIGUSR1, ack_handler)


def main() -> None:
    """Entry point for the daemon."""
    parser = argparse.ArgumentParser(description="Tailwatch log alert daemon")
    parser.add_argument(
        '--config',
        default='tailwatch.yaml',
        help='Path to settings file (default: tailwatch.yaml)'
    )
    parser.add_argument(
        '--log-level',
        default='INFO',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        help='Log level (default: INFO)'
    )
    parser.add_argument(
        '--log-file',
        help='Optional log file path (logs to console if not specified)'
    )
    args = parser.parse_args()

    setup_logging(level=args.log_level, log_file=args.log_file)

    try:
        daemon = TailwatchDaemon(args.config)
        install_signal_handlers(daemon)
        daemon.start()
    except Exception:
        logger.critical("Fatal error", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
