"""Settings loaded from environment variables (+ optional .env).

Every knob has a default, so nothing has to be configured to run a timer.
Malformed values fall back to the default instead of failing at startup.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

ENV_PREFIX = "FOCUSTIMER"

_DEFAULT_LOG_DIR = Path.home() / ".config" / "focustimer"
_MIN_TICK_INTERVAL = 0.05


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    log_dir: Path

    # ---- Timer ----
    tick_interval_seconds: float
    subscriber_queue_size: int
    default_minutes: int

    # ---- Surface ----
    notify_on_finish: bool


def get_settings(*, load_env_file: bool = True) -> Settings:
    """Build a fresh Settings object from the environment."""
    if load_env_file:
        load_dotenv(find_dotenv(usecwd=True), override=False)

    return Settings(
        app_name=_env(_k("APP_NAME"), "focustimer"),
        log_level=_env(_k("LOG_LEVEL"), "INFO").strip().upper() or "INFO",
        log_dir=_env_path(_k("LOG_DIR"), _DEFAULT_LOG_DIR),
        tick_interval_seconds=max(_MIN_TICK_INTERVAL, _env_float(_k("TICK_INTERVAL"), 1.0)),
        subscriber_queue_size=max(1, _env_int(_k("QUEUE_SIZE"), 16)),
        default_minutes=max(1, _env_int(_k("DEFAULT_MINUTES"), 25)),
        notify_on_finish=_env_bool(_k("NOTIFY"), True),
    )
