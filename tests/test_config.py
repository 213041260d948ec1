# tests/test_config.py

from __future__ import annotations

import os
from pathlib import Path

import pytest

from focustimer.config import get_settings

_VARS = (
    "FOCUSTIMER_APP_NAME",
    "FOCUSTIMER_LOG_LEVEL",
    "FOCUSTIMER_LOG_DIR",
    "FOCUSTIMER_TICK_INTERVAL",
    "FOCUSTIMER_QUEUE_SIZE",
    "FOCUSTIMER_DEFAULT_MINUTES",
    "FOCUSTIMER_NOTIFY",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults() -> None:
    settings = get_settings(load_env_file=False)
    assert settings.app_name == "focustimer"
    assert settings.log_level == "INFO"
    assert settings.log_dir == Path.home() / ".config" / "focustimer"
    assert settings.tick_interval_seconds == 1.0
    assert settings.subscriber_queue_size == 16
    assert settings.default_minutes == 25
    assert settings.notify_on_finish is True


def test_overrides(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("FOCUSTIMER_LOG_LEVEL", "debug")
    monkeypatch.setenv("FOCUSTIMER_LOG_DIR", str(tmp_path))
    monkeypatch.setenv("FOCUSTIMER_TICK_INTERVAL", "0.25")
    monkeypatch.setenv("FOCUSTIMER_QUEUE_SIZE", "4")
    monkeypatch.setenv("FOCUSTIMER_DEFAULT_MINUTES", "50")
    monkeypatch.setenv("FOCUSTIMER_NOTIFY", "off")

    settings = get_settings(load_env_file=False)
    assert settings.log_level == "DEBUG"
    assert settings.log_dir == tmp_path
    assert settings.tick_interval_seconds == 0.25
    assert settings.subscriber_queue_size == 4
    assert settings.default_minutes == 50
    assert settings.notify_on_finish is False


def test_malformed_values_fall_back(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FOCUSTIMER_TICK_INTERVAL", "fast")
    monkeypatch.setenv("FOCUSTIMER_QUEUE_SIZE", "many")
    settings = get_settings(load_env_file=False)
    assert settings.tick_interval_seconds == 1.0
    assert settings.subscriber_queue_size == 16


def test_out_of_range_values_are_floored(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FOCUSTIMER_TICK_INTERVAL", "0")
    monkeypatch.setenv("FOCUSTIMER_QUEUE_SIZE", "-3")
    monkeypatch.setenv("FOCUSTIMER_DEFAULT_MINUTES", "0")
    settings = get_settings(load_env_file=False)
    assert settings.tick_interval_seconds == 0.05
    assert settings.subscriber_queue_size == 1
    assert settings.default_minutes == 1


def test_env_file_is_loaded(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    (tmp_path / ".env").write_text("FOCUSTIMER_DEFAULT_MINUTES=45\n")
    monkeypatch.chdir(tmp_path)
    # load_dotenv writes into os.environ; keep that out of other tests.
    monkeypatch.setattr(os, "environ", dict(os.environ))
    settings = get_settings()
    assert settings.default_minutes == 45
