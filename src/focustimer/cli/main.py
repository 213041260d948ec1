"""CLI entry point for focustimer.

Uses Click to expose the ``focustimer`` command group.  ``focustimer run``
starts a session, draws the countdown in the terminal and reads one-letter
commands from stdin until the countdown finishes or the session is closed.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import sys
import threading
import uuid
from typing import IO, Awaitable, Callable

import click

import focustimer
from focustimer.cli.terminal import TerminalNotifier, TerminalSurface, describe, render_events
from focustimer.config import Settings, get_settings
from focustimer.core.broadcast import EventKind
from focustimer.core.errors import TimerError
from focustimer.core.gateway import CommandGateway
from focustimer.core.timer import TimerSnapshot
from focustimer.logging_setup import setup_logging

logger = logging.getLogger(__name__)

_HELP_LINE = "Commands: p (pause), r (resume), s (restart), m (move), ? (status), q (quit)"

_COMMANDS: dict[str, str] = {
    "p": "pause",
    "r": "resume",
    "s": "restart",
    "q": "close",
}


async def _attempt(action: Callable[[], Awaitable[TimerSnapshot]]) -> TimerSnapshot | None:
    """Run *action*, printing a rejected command to stderr instead of stopping the session."""
    try:
        return await action()
    except TimerError as exc:
        click.echo(str(exc), err=True)
        return None


async def _dispatch_commands(gateway: CommandGateway, commands: asyncio.Queue[str]) -> None:
    while True:
        line = (await commands.get()).strip()
        key = line[:1].lower()
        if not key:
            continue
        if key == "?":
            click.echo(describe(await gateway.get_state()))
            continue
        if key == "m":
            if not await gateway.begin_surface_drag():
                click.echo("This surface cannot be moved.", err=True)
            continue
        name = _COMMANDS.get(key)
        if name is None:
            click.echo(f"Unknown command: {line}. {_HELP_LINE}", err=True)
            continue
        await _attempt(getattr(gateway, name))


def _start_input_reader(
    loop: asyncio.AbstractEventLoop, commands: asyncio.Queue[str], stream: IO[str]
) -> threading.Thread:
    """Feed stdin lines into *commands* from a daemon thread."""

    def read() -> None:
        for line in stream:
            try:
                loop.call_soon_threadsafe(commands.put_nowait, line)
            except RuntimeError:
                # Loop already closed: the session is over.
                return

    reader = threading.Thread(target=read, name="focustimer-input", daemon=True)
    reader.start()
    return reader


async def _run_session(
    settings: Settings, task_id: str, title: str, duration_seconds: int, stream: IO[str]
) -> EventKind:
    gateway = CommandGateway.from_settings(
        settings, surface=TerminalSurface(), notifier=TerminalNotifier()
    )
    subscription = gateway.subscribe()
    commands: asyncio.Queue[str] = asyncio.Queue()
    try:
        await gateway.start(task_id, title, duration_seconds)
        _start_input_reader(asyncio.get_running_loop(), commands, stream)
        worker = asyncio.create_task(_dispatch_commands(gateway, commands))
        try:
            return await render_events(subscription)
        finally:
            worker.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await worker
    finally:
        await gateway.aclose()
        gateway.unsubscribe(subscription)


@click.group()
@click.version_option(version=focustimer.__version__, prog_name="focustimer")
def cli() -> None:
    """focustimer: a focus-session countdown for your terminal."""


@cli.command()
@click.argument("title")
@click.option("--task-id", default=None, help="Identifier of the task this session belongs to.")
@click.option("--minutes", type=click.IntRange(min=1), default=None, help="Session length in minutes.")
@click.option("--seconds", type=click.IntRange(min=1), default=None, help="Session length in seconds.")
def run(title: str, task_id: str | None, minutes: int | None, seconds: int | None) -> None:
    """Run a focus session for the task TITLE."""
    if minutes is not None and seconds is not None:
        raise click.UsageError("Use either --minutes or --seconds, not both.")

    settings = get_settings()
    console_level = getattr(logging, settings.log_level, logging.INFO)
    setup_logging(log_dir=settings.log_dir, console_level=console_level)

    if seconds is not None:
        duration = seconds
    else:
        duration = (minutes if minutes is not None else settings.default_minutes) * 60

    task_id = task_id or uuid.uuid4().hex
    logger.info("Starting %s session task_id=%s", settings.app_name, task_id)

    try:
        outcome = asyncio.run(
            _run_session(settings, task_id, title, duration, click.get_text_stream("stdin"))
        )
    except TimerError as exc:
        click.echo(str(exc), err=True)
        sys.exit(1)
    except KeyboardInterrupt:
        outcome = EventKind.CLOSED

    if outcome == EventKind.FINISHED:
        click.echo(f"Session finished: {title}")
    else:
        click.echo("Session closed")


if __name__ == "__main__":
    cli()
