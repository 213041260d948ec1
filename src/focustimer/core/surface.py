"""
Ports for the external display surface and finish notifications.

The core only calls into these; window creation, focus handling and drag
gestures belong to whoever implements them. Implementations signal failure
by raising SurfaceUnavailable (any other exception is treated the same way).
"""

from __future__ import annotations

import logging
from typing import Protocol

logger = logging.getLogger(__name__)


class DisplaySurface(Protocol):
    """The secondary presentation surface that shows the running timer."""

    def open(self) -> None: ...
    def focus(self) -> None: ...
    def close(self) -> None: ...
    def begin_move(self) -> None: ...


class MainWindow(Protocol):
    """The primary application window, hidden while the timer surface is up."""

    def hide(self) -> None: ...
    def show(self) -> None: ...


class Notifier(Protocol):
    """Desktop-style notification sink used when a countdown finishes."""

    def notify(self, title: str, body: str) -> None: ...


class HeadlessSurface:
    """A surface with nothing to show.  Used when no front end is attached."""

    def open(self) -> None:
        logger.debug("headless surface: open")

    def focus(self) -> None:
        logger.debug("headless surface: focus")

    def close(self) -> None:
        logger.debug("headless surface: close")

    def begin_move(self) -> None:
        logger.debug("headless surface: begin_move")


class LogNotifier:
    def notify(self, title: str, body: str) -> None:
        logger.info("%s %s", title, body)
