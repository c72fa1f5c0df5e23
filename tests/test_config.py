"""
Tests for settings storage, loading and validation.
"""

from pathlib import Path

import pytest
import yaml

from tailwatch.config import (
    DEFAULT_ACK_POPUP_SECONDS,
    DEFAULT_MONITOR_INTERVAL_MS,
    MAX_MONITOR_INTERVAL_MS,
    MemoryConfigStore,
    YamlConfigStore,
    default_log_path,
    load_notifier_configs,
    load_settings,
    parse_interval,
    save_ack_popup_seconds,
    save_monitor_interval,
)


def watcher_store(**values: str) -> MemoryConfigStore:
    return MemoryConfigStore({"watcher": dict(values)})


class TestYamlConfigStore:
    """Tests for the YAML-backed store."""

    def test_missing_file_is_empty(self, tmp_path: Path) -> None:
        store = YamlConfigStore(tmp_path / "tailwatch.yaml")

        assert store.load_string("watcher", "log_path", "fallback") == "fallback"
        assert not store.path.exists()

    def test_save_creates_file(self, tmp_path: Path) -> None:
        """Test saving writes a readable YAML mapping."""
        path = tmp_path / "nested" / "tailwatch.yaml"
        store = YamlConfigStore(path)

        store.save_string("watcher", "ack_offset", "42")

        assert yaml.safe_load(path.read_text()) == {"watcher": {"ack_offset": "42"}}
        assert YamlConfigStore(path).load_string("watcher", "ack_offset", "0") == "42"

    def test_save_leaves_no_temp_files(self, tmp_path: Path) -> None:
        store = YamlConfigStore(tmp_path / "tailwatch.yaml")

        store.save_string("watcher", "a", "1")
        store.save_string("watcher", "b", "2")

        assert [p.name for p in tmp_path.iterdir()] == ["tailwatch.yaml"]

    def test_save_preserves_other_sections(self, tmp_path: Path) -> None:
        path = tmp_path / "tailwatch.yaml"
        path.write_text("""
notifiers:
  - type: "console"
watcher:
  log_path: "/var/log/backrest.log"
""")
        store = YamlConfigStore(path)

        store.save_string("watcher", "ack_offset", "7")

        data = yaml.safe_load(path.read_text())
        assert data["notifiers"] == [{"type": "console"}]
        assert data["watcher"] == {"log_path": "/var/log/backrest.log", "ack_offset": "7"}

    def test_save_keeps_keys_written_by_another_store(self, tmp_path: Path) -> None:
        """Test a running daemon's save does not undo a concurrent CLI edit."""
        path = tmp_path / "tailwatch.yaml"
        path.write_text("watcher:\n  log_path: /old.log\n  ack_offset: '0'\n")
        daemon_store = YamlConfigStore(path)

        YamlConfigStore(path).save_string("watcher", "log_path", "/new.log")
        daemon_store.save_string("watcher", "ack_offset", "120")

        data = yaml.safe_load(path.read_text())
        assert data["watcher"] == {"log_path": "/new.log", "ack_offset": "120"}
        assert daemon_store.load_string("watcher", "log_path", "") == "/new.log"

    def test_non_string_values_are_stringified(self, tmp_path: Path) -> None:
        path = tmp_path / "tailwatch.yaml"
        path.write_text("watcher:\n  monitor_interval_ms: 2000\n")

        assert YamlConfigStore(path).load_string("watcher", "monitor_interval_ms", "") == "2000"

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        """Test that invalid YAML raises ValueError."""
        path = tmp_path / "tailwatch.yaml"
        path.write_text("invalid: yaml: content: [")

        with pytest.raises(ValueError, match="Could not parse"):
            YamlConfigStore(path)

    def test_non_mapping(self, tmp_path: Path) -> None:
        path = tmp_path / "tailwatch.yaml"
        path.write_text("- just\n- a list\n")

        with pytest.raises(ValueError, match="must contain a mapping"):
            YamlConfigStore(path)


class TestLoadSettings:
    """Tests for load_settings."""

    def test_defaults_are_persisted(self) -> None:
        """Test an empty store is filled with defaults."""
        store = MemoryConfigStore()

        settings = load_settings(store, "/logs/backrest.log")

        assert settings.log_path == "/logs/backrest.log"
        assert settings.monitor_interval_ms == DEFAULT_MONITOR_INTERVAL_MS
        assert settings.ack_popup_seconds == DEFAULT_ACK_POPUP_SECONDS
        assert settings.ack_offset == 0
        assert store.data["watcher"] == {
            "log_path": "/logs/backrest.log",
            "monitor_interval_ms": "1500",
            "ack_popup_seconds": "2.500",
            "ack_offset": "0",
        }

    def test_valid_values_are_kept(self) -> None:
        store = watcher_store(
            log_path="/srv/app.log",
            monitor_interval_ms="2000",
            ack_popup_seconds="4.000",
            ack_offset="123",
        )

        settings = load_settings(store, "/unused")

        assert settings.log_path == "/srv/app.log"
        assert settings.monitor_interval_ms == 2000
        assert settings.ack_popup_seconds == 4.0
        assert settings.ack_offset == 123

    def test_blank_log_path_uses_fallback(self) -> None:
        store = watcher_store(log_path="   ")

        assert load_settings(store, "/fallback.log").log_path == "/fallback.log"
        assert store.data["watcher"]["log_path"] == "/fallback.log"

    @pytest.mark.parametrize("raw,expected,stored", [
        ("100", 500, "500"),
        ("0", 500, "500"),
        (str(MAX_MONITOR_INTERVAL_MS + 1), MAX_MONITOR_INTERVAL_MS, str(MAX_MONITOR_INTERVAL_MS)),
        ("fast", DEFAULT_MONITOR_INTERVAL_MS, "1500"),
        ("1500.0", 1500, "1500.0"),
        ("2000ms", 2000, "2000ms"),
        ("-20", 500, "500"),
    ])
    def test_monitor_interval_corrected(self, raw: str, expected: int, stored: str) -> None:
        store = watcher_store(log_path="/a.log", monitor_interval_ms=raw)

        assert load_settings(store, "/a.log").monitor_interval_ms == expected
        assert store.data["watcher"]["monitor_interval_ms"] == stored

    @pytest.mark.parametrize("raw,expected,stored", [
        ("0.1", 0.5, "0.500"),
        ("45", 30.0, "30.000"),
        ("nan", DEFAULT_ACK_POPUP_SECONDS, "2.500"),
        ("-1", DEFAULT_ACK_POPUP_SECONDS, "2.500"),
        ("soon", DEFAULT_ACK_POPUP_SECONDS, "2.500"),
    ])
    def test_popup_seconds_corrected(self, raw: str, expected: float, stored: str) -> None:
        store = watcher_store(log_path="/a.log", ack_popup_seconds=raw)

        assert load_settings(store, "/a.log").ack_popup_seconds == expected
        assert store.data["watcher"]["ack_popup_seconds"] == stored

    def test_popup_seconds_in_range_not_rewritten(self) -> None:
        """Test a valid value keeps its original formatting."""
        store = watcher_store(log_path="/a.log", ack_popup_seconds="3.25")

        assert load_settings(store, "/a.log").ack_popup_seconds == 3.25
        assert store.data["watcher"]["ack_popup_seconds"] == "3.25"

    @pytest.mark.parametrize("raw", ["-5", "abc", "1.5"])
    def test_invalid_ack_offset_reset(self, raw: str) -> None:
        store = watcher_store(log_path="/a.log", ack_offset=raw)

        assert load_settings(store, "/a.log").ack_offset == 0
        assert store.data["watcher"]["ack_offset"] == "0"

    def test_default_log_path(self, tmp_path: Path) -> None:
        assert default_log_path(tmp_path / "tailwatch.yaml") == str(tmp_path.resolve() / "backrest.log")


class TestSaveHelpers:
    """Tests for the clamping save helpers."""

    def test_save_monitor_interval_clamps(self) -> None:
        store = MemoryConfigStore()

        assert save_monitor_interval(store, 1) == 500
        assert store.data["watcher"]["monitor_interval_ms"] == "500"

    def test_save_ack_popup_seconds_formats(self) -> None:
        store = MemoryConfigStore()

        assert save_ack_popup_seconds(store, 1.23456) == pytest.approx(1.23456)
        assert store.data["watcher"]["ack_popup_seconds"] == "1.235"


class TestLoadNotifierConfigs:
    """Tests for the notifiers section."""

    def test_defaults_to_console(self, tmp_path: Path) -> None:
        store = YamlConfigStore(tmp_path / "tailwatch.yaml")

        notifiers = load_notifier_configs(store)

        assert [n.type for n in notifiers] == ["console"]

    def test_loads_configured_notifiers(self, tmp_path: Path) -> None:
        path = tmp_path / "tailwatch.yaml"
        path.write_text("""
notifiers:
  - type: "webhook"
    config:
      url: "https://example.com/hook"
  - type: "console"
""")

        notifiers = load_notifier_configs(YamlConfigStore(path))

        assert [n.type for n in notifiers] == ["webhook", "console"]
        assert notifiers[0].config == {"url": "https://example.com/hook"}
        assert notifiers[1].config == {}

    def test_invalid_section(self, tmp_path: Path) -> None:
        path = tmp_path / "tailwatch.yaml"
        path.write_text("notifiers:\n  - config: {}\n")

        with pytest.raises(ValueError, match="Notifier configuration error"):
            load_notifier_configs(YamlConfigStore(path))


class TestParseInterval:
    """Tests for parse_interval."""

    @pytest.mark.parametrize("text,minutes,expected", [
        ("1.5", False, 1500),
        (" 2 ", False, 2000),
        ("0.5", False, 500),
        ("1", True, 60_000),
        ("0.25", True, 15_000),
    ])
    def test_valid(self, text: str, minutes: bool, expected: int) -> None:
        assert parse_interval(text, minutes=minutes) == expected

    @pytest.mark.parametrize("text", ["", "abc", "inf", "nan"])
    def test_not_a_number(self, text: str) -> None:
        with pytest.raises(ValueError, match="Enter a numeric interval"):
            parse_interval(text)

    @pytest.mark.parametrize("text,minutes", [("0.4", False), ("-3", False), ("0.001", True)])
    def test_too_small(self, text: str, minutes: bool) -> None:
        with pytest.raises(ValueError, match="at least 0.5 seconds"):
            parse_interval(text, minutes=minutes)

    def test_too_large(self) -> None:
        with pytest.raises(ValueError, match="exceeds timer limits"):
            parse_interval("5000000")
