"""
Configuration storage and validation for Tailwatch.

Persisted settings live in one section of a key/value store. Values that are
missing, malformed or out of range are replaced on load and written back
straight away, so the store always holds what the watcher is running with.
"""

import math
import os
import re
import uuid
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Annotated, Any

import yaml
from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from tailwatch.logging_config import get_logger

logger = get_logger(__name__)

SECTION = "watcher"

DEFAULT_LOG_FILENAME = "backrest.log"

DEFAULT_MONITOR_INTERVAL_MS = 1500
MIN_MONITOR_INTERVAL_MS = 500
MAX_MONITOR_INTERVAL_MS = 2**32 - 1  # 32-bit millisecond timer limit
MIN_INTERVAL_SECONDS = MIN_MONITOR_INTERVAL_MS / 1000.0
MAX_INTERVAL_SECONDS = MAX_MONITOR_INTERVAL_MS / 1000.0

DEFAULT_ACK_POPUP_SECONDS = 2.5
MIN_ACK_POPUP_SECONDS = 0.5
MAX_ACK_POPUP_SECONDS = 30.0

_OFFSET = TypeAdapter(Annotated[int, Field(ge=0)])
_LEADING_INT = re.compile(r"[+-]?\d+")
_SECONDS = TypeAdapter(Annotated[float, Field(ge=0, allow_inf_nan=False)])


class ConfigStore(ABC):
    """Durable string key/value storage grouped in sections."""

    @abstractmethod
    def load_string(self, section: str, key: str, default: str) -> str:
        """Return the stored value, or ``default`` if the key is absent."""
        raise NotImplementedError

    @abstractmethod
    def save_string(self, section: str, key: str, value: str) -> None:
        """Store a value, replacing any previous one."""
        raise NotImplementedError


class MemoryConfigStore(ConfigStore):
    """Keeps settings in process memory only."""

    def __init__(self, data: dict[str, dict[str, str]] | None = None) -> None:
        self.data: dict[str, dict[str, str]] = data if data is not None else {}

    def load_string(self, section: str, key: str, default: str) -> str:
        return self.data.get(section, {}).get(key, default)

    def save_string(self, section: str, key: str, value: str) -> None:
        self.data.setdefault(section, {})[key] = value


class YamlConfigStore(ConfigStore):
    """
    Settings stored in a YAML file, one mapping per section:

        watcher:
          log_path: /var/log/backrest.log
          monitor_interval_ms: "1500"
          ack_popup_seconds: "2.500"
          ack_offset: "0"

    The file is read on creation and again before every save, so a key
    written by another process survives; each save rewrites it atomically.
    """

    def __init__(self, path: str | Path) -> None:
        """
        Initialize the store.

        Args:
            path: Settings file. It is created on the first save if missing.

        Raises:
            ValueError: If the file exists but is not a YAML mapping
        """
        self.path = Path(path)
        self.data: dict[str, Any] = self._load()

    def _load(self) -> dict[str, Any]:
        """Load the file from disk."""
        if not self.path.exists():
            return {}

        try:
            with self.path.open('r', encoding='utf-8') as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Could not parse settings file {self.path}: {e}") from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ValueError(f"Settings file {self.path} must contain a mapping")
        return data

    def _save(self) -> None:
        """Write the file next to its final location, then swap it in."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = self.path.with_name(f".{self.path.name}.{os.getpid()}.{uuid.uuid4().hex}.tmp")
        try:
            with temp_path.open('w', encoding='utf-8') as f:
                yaml.safe_dump(self.data, f, default_flow_style=False, sort_keys=False)
                f.flush()
                os.fsync(f.fileno())
            os.replace(temp_path, self.path)
        finally:
            if temp_path.exists():
                temp_path.unlink()

    def load_string(self, section: str, key: str, default: str) -> str:
        section_data = self.data.get(section)
        if not isinstance(section_data, dict):
            return default
        value = section_data.get(key)
        if value is None:
            return default
        return str(value)

    def save_string(self, section: str, key: str, value: str) -> None:
        self.data = self._load()
        section_data = self.data.get(section)
        if not isinstance(section_data, dict):
            section_data = {}
            self.data[section] = section_data
        section_data[key] = value
        self._save()

    def load_section(self, section: str) -> Any:
        """Return a whole section as parsed from YAML (None if absent)."""
        return self.data.get(section)


class WatcherSettings(BaseModel):
    """Validated watcher settings."""
    log_path: str = Field(..., min_length=1)
    monitor_interval_ms: int = Field(
        DEFAULT_MONITOR_INTERVAL_MS, ge=MIN_MONITOR_INTERVAL_MS, le=MAX_MONITOR_INTERVAL_MS
    )
    ack_popup_seconds: float = Field(
        DEFAULT_ACK_POPUP_SECONDS, ge=MIN_ACK_POPUP_SECONDS, le=MAX_ACK_POPUP_SECONDS
    )
    ack_offset: int = Field(0, ge=0)


class NotifierConfig(BaseModel):
    """Configuration for a notification sink."""
    type: str  # "console", "webhook", etc.
    config: dict[str, Any] = Field(default_factory=dict)  # Type-specific configuration


class NotifiersConfig(BaseModel):
    """The ``notifiers:`` section of the settings file."""
    notifiers: list[NotifierConfig] = Field(
        default_factory=lambda: [NotifierConfig(type="console")]
    )


def default_log_path(settings_path: str | Path) -> str:
    """The log file expected next to the settings file."""
    return str(Path(settings_path).resolve().parent / DEFAULT_LOG_FILENAME)


def clamp_monitor_interval(interval_ms: int) -> int:
    return max(MIN_MONITOR_INTERVAL_MS, min(interval_ms, MAX_MONITOR_INTERVAL_MS))


def clamp_ack_popup_seconds(seconds: float) -> float:
    return max(MIN_ACK_POPUP_SECONDS, min(seconds, MAX_ACK_POPUP_SECONDS))


def format_seconds(seconds: float) -> str:
    return f"{seconds:.3f}"


def save_log_path(store: ConfigStore, log_path: str) -> None:
    store.save_string(SECTION, "log_path", log_path)


def save_monitor_interval(store: ConfigStore, interval_ms: int) -> int:
    """Clamp and persist the scan interval; returns the stored value."""
    interval_ms = clamp_monitor_interval(interval_ms)
    store.save_string(SECTION, "monitor_interval_ms", str(interval_ms))
    return interval_ms


def save_ack_popup_seconds(store: ConfigStore, seconds: float) -> float:
    """Clamp and persist the popup duration; returns the stored value."""
    seconds = clamp_ack_popup_seconds(seconds)
    store.save_string(SECTION, "ack_popup_seconds", format_seconds(seconds))
    return seconds


def save_ack_offset(store: ConfigStore, offset: int) -> None:
    store.save_string(SECTION, "ack_offset", str(offset))


def _load_log_path(store: ConfigStore, fallback: str) -> str:
    log_path = store.load_string(SECTION, "log_path", "").strip()
    if not log_path:
        logger.info("No log path configured, using %s", fallback)
        save_log_path(store, fallback)
        return fallback
    return log_path


def _load_monitor_interval(store: ConfigStore) -> int:
    raw = store.load_string(SECTION, "monitor_interval_ms", "").strip()
    # Leading digits count, so "1500.0" or "1500ms" read as 1500
    match = _LEADING_INT.match(raw)
    if match is None:
        if raw:
            logger.warning("Invalid monitor_interval_ms %r, using default", raw)
        return save_monitor_interval(store, DEFAULT_MONITOR_INTERVAL_MS)

    interval_ms = int(match.group())
    clamped = clamp_monitor_interval(interval_ms)
    if clamped != interval_ms:
        logger.warning("monitor_interval_ms %d out of range, using %d", interval_ms, clamped)
        save_monitor_interval(store, clamped)
    return clamped


def _load_ack_popup_seconds(store: ConfigStore) -> float:
    raw = store.load_string(SECTION, "ack_popup_seconds", "").strip()
    try:
        seconds = _SECONDS.validate_python(raw)
    except ValidationError:
        if raw:
            logger.warning("Invalid ack_popup_seconds %r, using default", raw)
        return save_ack_popup_seconds(store, DEFAULT_ACK_POPUP_SECONDS)

    clamped = clamp_ack_popup_seconds(seconds)
    if math.fabs(clamped - seconds) > 0.0005:
        logger.warning("ack_popup_seconds %s out of range, using %s", raw, format_seconds(clamped))
        save_ack_popup_seconds(store, clamped)
    return clamped


def _load_ack_offset(store: ConfigStore) -> int:
    raw = store.load_string(SECTION, "ack_offset", "").strip()
    try:
        return _OFFSET.validate_python(raw)
    except ValidationError:
        if raw:
            logger.warning("Invalid ack_offset %r, resetting to 0", raw)
        save_ack_offset(store, 0)
        return 0


def load_settings(store: ConfigStore, fallback_log_path: str) -> WatcherSettings:
    """
    Load watcher settings, correcting and re-persisting bad values.

    Args:
        store: Key/value store holding the ``watcher`` section
        fallback_log_path: Log path to use when none is configured

    Returns:
        Validated WatcherSettings
    """
    return WatcherSettings(
        log_path=_load_log_path(store, fallback_log_path),
        monitor_interval_ms=_load_monitor_interval(store),
        ack_popup_seconds=_load_ack_popup_seconds(store),
        ack_offset=_load_ack_offset(store),
    )


def load_notifier_configs(store: YamlConfigStore) -> list[NotifierConfig]:
    """
    Read and validate the ``notifiers:`` section.

    Returns:
        Notifier configurations; a single console notifier if none are set

    Raises:
        ValueError: If the section is malformed
    """
    raw = store.load_section("notifiers")
    if raw is None:
        return NotifiersConfig().notifiers

    try:
        return NotifiersConfig.model_validate({"notifiers": raw}).notifiers
    except ValidationError as e:
        raise ValueError(f"Notifier configuration error: {e}") from e


def parse_interval(text: str, minutes: bool = False) -> int:
    """
    Convert a user-entered interval into milliseconds.

    Args:
        text: Decimal number, e.g. "2.5"
        minutes: Interpret the number as minutes instead of seconds

    Returns:
        Interval in milliseconds

    Raises:
        ValueError: If the text is not a finite number or is out of range
    """
    try:
        value = float(text.strip())
    except ValueError as e:
        raise ValueError("Invalid value. Enter a numeric interval.") from e
    if not math.isfinite(value):
        raise ValueError("Invalid value. Enter a numeric interval.")

    seconds = value * 60.0 if minutes else value
    if not math.isfinite(seconds) or seconds < MIN_INTERVAL_SECONDS:
        raise ValueError(f"Value must be at least {MIN_INTERVAL_SECONDS:g} seconds.")
    if seconds > MAX_INTERVAL_SECONDS:
        raise ValueError("Value exceeds timer limits.")

    return round(seconds * 1000.0)
