"""
Pytest configuration and fixtures for Tailwatch tests.
"""

from pathlib import Path

import pytest

from tailwatch.config import MemoryConfigStore
from tailwatch.core import Notifier
from tailwatch.scanner import ChunkedScanner
from tailwatch.state import WatchState
from tailwatch.watcher import LogWatcher


class RecordingNotifier(Notifier):
    """Notifier that records every call for assertions."""

    def __init__(self) -> None:
        super().__init__({})
        self.states: list[tuple[bool, str]] = []
        self.acks: list[float] = []
        self.blinks: list[tuple[bool, bool]] = []

    def on_state_changed(self, has_alert: bool, tooltip: str, blink_phase: bool = True) -> bool:
        self.states.append((has_alert, tooltip))
        return True

    def on_acknowledged(self, popup_seconds: float) -> bool:
        self.acks.append(popup_seconds)
        return True

    def on_blink(self, has_alert: bool, blink_phase: bool) -> None:
        self.blinks.append((has_alert, blink_phase))


@pytest.fixture
def log_file(tmp_path: Path) -> Path:
    """Path of a (not yet created) log file."""
    return tmp_path / "backrest.log"


@pytest.fixture
def store() -> MemoryConfigStore:
    return MemoryConfigStore()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def watcher(log_file: Path, store: MemoryConfigStore, notifier: RecordingNotifier) -> LogWatcher:
    """Watcher with a one-byte marker and a tiny chunk size."""
    return LogWatcher(
        WatchState(log_path=str(log_file)),
        store,
        notifiers=[notifier],
        scanner=ChunkedScanner(marker=b"X", chunk_size=4),
    )
