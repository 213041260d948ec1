"""Logging setup -- the terminal shows the countdown, the log file gets the detail.

The console handler uses a short format and stays quiet about clock and
broadcast chatter so it does not scroll the countdown away.  The file
handler records everything at DEBUG and rotates, since one log file is
shared by every session run from the same directory.
"""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOG_FILE_NAME = "focustimer.log"

_FILE_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s"
_CONSOLE_FORMAT = "%(levelname)s %(name)s: %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Per-tick loggers; their INFO/DEBUG lines only belong in the file.
_CHATTY_LOGGERS = frozenset({"focustimer.core.clock", "focustimer.core.broadcast"})

_MAX_BYTES = 1_000_000
_BACKUP_COUNT = 3


class _ConsoleFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        if record.name in _CHATTY_LOGGERS:
            return record.levelno >= logging.WARNING
        if record.name.startswith("focustimer."):
            return True
        # Third-party loggers and captured warnings.
        return record.levelno >= logging.ERROR


class _FocusTimerHandler:
    """Marker mixin so a second setup_logging() call replaces only our handlers."""


class _ConsoleHandler(_FocusTimerHandler, logging.StreamHandler):
    pass


class _FileHandler(_FocusTimerHandler, RotatingFileHandler):
    pass


def setup_logging(
    *,
    log_dir: str | Path,
    console_level: int = logging.WARNING,
    file_level: int = logging.DEBUG,
) -> Path:
    """Attach the console and file handlers to the root logger.

    Safe to call more than once; handlers added by an earlier call are
    closed and replaced, others are left alone.  Returns the log file path.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for handler in list(root.handlers):
        if isinstance(handler, _FocusTimerHandler):
            root.removeHandler(handler)
            handler.close()

    console = _ConsoleHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
    console.addFilter(_ConsoleFilter())
    root.addHandler(console)

    file_handler = _FileHandler(
        log_file, maxBytes=_MAX_BYTES, backupCount=_BACKUP_COUNT, encoding="utf-8"
    )
    file_handler.setLevel(file_level)
    file_handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt=_DATE_FORMAT))
    root.addHandler(file_handler)

    logging.captureWarnings(True)
    return log_file
