"""
Tailwatch CLI - Command line interface for the Tailwatch daemon.

Provides commands for:
- Settings validation and display
- One-shot status scans
- Offline acknowledgment
- Changing the log path and scan interval
- Running the daemon in the foreground
"""

import argparse
import sys
from pathlib import Path

from tailwatch.config import (
    SECTION,
    YamlConfigStore,
    WatcherSettings,
    default_log_path,
    load_notifier_configs,
    load_settings,
    parse_interval,
    save_ack_offset,
    save_log_path,
    save_monitor_interval,
)
from tailwatch.daemon import TailwatchDaemon, install_signal_handlers
from tailwatch.logging_config import get_logger, setup_logging
from tailwatch.platform import file_size, open_shared
from tailwatch.watcher import LogWatcher

logger = get_logger(__name__)


def _load(config_path: Path) -> tuple[YamlConfigStore, WatcherSettings]:
    store = YamlConfigStore(config_path)
    return store, load_settings(store, default_log_path(config_path))


def cmd_config_validate(args: argparse.Namespace) -> int:
    """Validate the settings file, correcting bad values in place."""
    config_path = Path(args.config)

    if not config_path.exists():
        print(f"Error: Settings file not found: {config_path}", file=sys.stderr)
        return 1

    try:
        store, settings = _load(config_path)
        notifiers = load_notifier_configs(store)
        print(f"✓ Settings valid: {config_path}")
        print(f"  - Log file: {settings.log_path}")
        print(f"  - {len(notifiers)} notifier(s) configured")
        return 0
    except Exception as e:
        print(f"✗ Settings invalid: {e}", file=sys.stderr)
        return 1


def cmd_config_show(args: argparse.Namespace) -> int:
    """Print the effective settings."""
    try:
        store, settings = _load(Path(args.config))
        print(f"[{SECTION}]")
        for key, value in settings.model_dump().items():
            print(f"{key} = {value}")
        print("\n[notifiers]")
        for notifier in load_notifier_configs(store):
            print(f"- {notifier.type}")
        return 0
    except Exception as e:
        print(f"Error loading settings: {e}", file=sys.stderr)
        return 1


def cmd_status(args: argparse.Namespace) -> int:
    """Rescan the log file once and report what was found."""
    try:
        store, settings = _load(Path(args.config))
        watcher = LogWatcher.from_settings(settings, store)
        result = watcher.full_rescan()
        state = watcher.state

        print(f"Log file:      {state.log_path}")
        print(f"Result:        {result.outcome.value}")
        if result.size is not None:
            print(f"Size:          {result.size}")
        print(f"Acknowledged:  {state.acknowledged_offset}")
        print(f"Alert:         {'WARNING/ERROR' if state.has_alert else 'OK'}")
        return 2 if state.has_alert else 0
    except Exception as e:
        print(f"Error scanning log file: {e}", file=sys.stderr)
        return 1


def cmd_ack(args: argparse.Namespace) -> int:
    """Acknowledge everything currently in the log file."""
    try:
        store, settings = _load(Path(args.config))
        try:
            with open_shared(settings.log_path) as fh:
                size = file_size(fh)
        except OSError as e:
            print(f"Error: Cannot open log file {settings.log_path}: {e}", file=sys.stderr)
            return 1

        save_ack_offset(store, size)
        print(f"✓ Acknowledged {settings.log_path} up to offset {size}")
        return 0
    except Exception as e:
        print(f"Error acknowledging: {e}", file=sys.stderr)
        return 1


def cmd_set_path(args: argparse.Namespace) -> int:
    """Change the monitored log file."""
    log_path = Path(args.path)
    if not log_path.is_file():
        print(f"Error: Log file not found: {log_path}", file=sys.stderr)
        return 1

    try:
        store = YamlConfigStore(args.config)
        save_log_path(store, str(log_path.resolve()))
        save_ack_offset(store, 0)
        print(f"✓ Log file set to {log_path.resolve()}")
        return 0
    except Exception as e:
        print(f"Error saving settings: {e}", file=sys.stderr)
        return 1


def cmd_set_interval(args: argparse.Namespace) -> int:
    """Change the scan interval."""
    try:
        interval_ms = parse_interval(args.value, minutes=args.minutes)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        store = YamlConfigStore(args.config)
        interval_ms = save_monitor_interval(store, interval_ms)
        print(f"✓ Check interval set to {interval_ms / 1000.0:.3f} s")
        return 0
    except Exception as e:
        print(f"Error saving settings: {e}", file=sys.stderr)
        return 1


def cmd_daemon_start(args: argparse.Namespace) -> int:
    """Start the Tailwatch daemon in the foreground."""
    setup_logging(level=args.log_level, log_file=args.log_file)

    try:
        print(f"Starting Tailwatch daemon with settings: {args.config}")
        daemon = TailwatchDaemon(args.config)
        install_signal_handlers(daemon)
        daemon.start()
        return 0
    except KeyboardInterrupt:
        print("\nShutting down...")
        return 0
    except Exception as e:
        print(f"Error starting daemon: {e}", file=sys.stderr)
        logger.exception("Error in daemon start")
        return 1


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="tailwatch",
        description="Tailwatch - log file alert watcher"
    )
    parser.add_argument(
        "-c", "--config",
        default="tailwatch.yaml",
        help="Path to settings file (default: tailwatch.yaml)"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Config commands
    config_parser = subparsers.add_parser("config", help="Settings management")
    config_subparsers = config_parser.add_subparsers(dest="subcommand")
    config_subparsers.add_parser("validate", help="Validate settings file")
    config_subparsers.add_parser("show", help="Show effective settings")

    subparsers.add_parser("status", help="Scan the log file once and print its state")
    subparsers.add_parser("ack", help="Acknowledge all current warnings/errors")

    path_parser = subparsers.add_parser("set-path", help="Set the log file to watch")
    path_parser.add_argument("path", help="Path to the log file")

    interval_parser = subparsers.add_parser("set-interval", help="Set the check interval")
    interval_parser.add_argument("value", help="Interval value (decimal)")
    interval_parser.add_argument(
        "--minutes",
        action="store_true",
        help="Interpret the value as minutes instead of seconds"
    )

    # Daemon commands
    daemon_parser = subparsers.add_parser("daemon", help="Daemon management")
    daemon_subparsers = daemon_parser.add_subparsers(dest="subcommand")
    start_parser = daemon_subparsers.add_parser("start", help="Start daemon (foreground)")
    start_parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (default: INFO)"
    )
    start_parser.add_argument(
        "--log-file",
        help="Optional log file path (logs to console if not specified)"
    )

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    if args.command == "config":
        if args.subcommand == "validate":
            return cmd_config_validate(args)
        if args.subcommand == "show":
            return cmd_config_show(args)
        parser.print_help()
        return 0

    if args.command == "status":
        return cmd_status(args)

    if args.command == "ack":
        return cmd_ack(args)

    if args.command == "set-path":
        return cmd_set_path(args)

    if args.command == "set-interval":
        return cmd_set_interval(args)

    if args.command == "daemon":
        if args.subcommand == "start":
            return cmd_daemon_start(args)
        parser.print_help()
        return 0

    parser.print_help()
    return 0


if __name__ == '__main__':
    sys.exit(main())
