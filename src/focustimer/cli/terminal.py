"""Terminal implementations of the display surface, notifier and observer."""

from __future__ import annotations

from typing import Callable

import click

from focustimer.core.broadcast import EventKind, Subscription
from focustimer.core.errors import SurfaceUnavailable
from focustimer.core.timer import TimerSnapshot, TimerStatus, format_remaining

Echo = Callable[[str], None]


def describe(snapshot: TimerSnapshot) -> str:
    """One status line for *snapshot*."""
    if snapshot.status == TimerStatus.ACTIVE:
        return f"{format_remaining(snapshot.remaining_seconds)} remaining - {snapshot.task_title}"
    if snapshot.status == TimerStatus.PAUSED:
        return (
            f"{format_remaining(snapshot.remaining_seconds)} remaining (paused)"
            f" - {snapshot.task_title}"
        )
    if snapshot.status == TimerStatus.FINISHED:
        return f"Session finished - {snapshot.task_title}"
    return "No active session"


class TerminalSurface:
    """The terminal itself acts as the timer surface.  It cannot be dragged."""

    def __init__(self, echo: Echo = click.echo) -> None:
        self._echo = echo
        self.visible = False

    def open(self) -> None:
        if not self.visible:
            self._echo("Focus timer  [p]ause [r]esume re[s]tart [?]status [q]uit")
        self.visible = True

    def focus(self) -> None:
        if not self.visible:
            raise SurfaceUnavailable("terminal surface is not open")

    def close(self) -> None:
        if self.visible:
            self._echo("Focus timer closed")
        self.visible = False

    def begin_move(self) -> None:
        raise SurfaceUnavailable("a terminal surface cannot be moved")


class TerminalNotifier:
    def __init__(self, echo: Echo = click.echo) -> None:
        self._echo = echo

    def notify(self, title: str, body: str) -> None:
        self._echo(f"\a{title} {body}")


async def render_events(subscription: Subscription, echo: Echo = click.echo) -> EventKind:
    """Print every snapshot until the session finishes or is closed.

    Returns the event kind that ended the session.
    """
    async for event in subscription:
        if event.kind == EventKind.STATE_CHANGED and event.snapshot is not None:
            echo(describe(event.snapshot))
        elif event.kind in (EventKind.FINISHED, EventKind.CLOSED):
            return event.kind
    return EventKind.CLOSED
