"""Command gateway -- the only entry point external callers use to drive the timer."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from focustimer.core.broadcast import EventBroadcaster, Subscription
from focustimer.core.clock import AsyncioTicker
from focustimer.core.errors import InvalidTransition, NoActiveSession, SurfaceUnavailable
from focustimer.core.surface import (
    DisplaySurface,
    HeadlessSurface,
    LogNotifier,
    MainWindow,
    Notifier,
)
from focustimer.core.timer import (
    TimerController,
    TimerSnapshot,
    TimerStatus,
    validate_duration,
)

if TYPE_CHECKING:
    from focustimer.config import Settings

logger = logging.getLogger(__name__)

_FINISHED_TITLE = "Timer Completed!"

_PAUSE_STATES = frozenset({TimerStatus.ACTIVE})
_RESUME_STATES = frozenset({TimerStatus.PAUSED})

# (collaborator, method) pairs, run in order.  The surface replaces the main
# window while a session runs and hands the screen back when it ends.
_SHOW_STEPS = (("main_window", "hide"), ("surface", "open"), ("surface", "focus"))
_HIDE_STEPS = (("surface", "close"), ("main_window", "show"))


class CommandGateway:
    """Validates commands and serializes them onto the ``TimerController``.

    Every mutating command checks its precondition under the controller lock;
    a rejected command raises and leaves the state untouched.  Calls into the
    display surface and notifier run in a worker thread outside the lock, and
    their failures are logged rather than raised.  Surface calls are
    serialized by a second lock and dropped once a newer session owns the
    surface.
    """

    def __init__(
        self,
        controller: TimerController | None = None,
        *,
        surface: DisplaySurface | None = None,
        notifier: Notifier | None = None,
        main_window: MainWindow | None = None,
    ) -> None:
        self._controller = controller if controller is not None else TimerController()
        self._surface: DisplaySurface = surface if surface is not None else HeadlessSurface()
        self._notifier = notifier
        self._main_window = main_window
        self._surface_lock = asyncio.Lock()
        self._background: set[asyncio.Task[None]] = set()
        self._controller.add_finish_listener(self._on_finished)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        surface: DisplaySurface | None = None,
        notifier: Notifier | None = None,
        main_window: MainWindow | None = None,
    ) -> CommandGateway:
        controller = TimerController(
            broadcaster=EventBroadcaster(queue_size=settings.subscriber_queue_size),
            ticker=AsyncioTicker(interval_seconds=settings.tick_interval_seconds),
        )
        if not settings.notify_on_finish:
            notifier = None
        elif notifier is None:
            notifier = LogNotifier()
        return cls(controller, surface=surface, notifier=notifier, main_window=main_window)

    # -- observers -----------------------------------------------------------

    def subscribe(self) -> Subscription:
        """Attach an observer.  Call :meth:`get_state` afterwards for the current snapshot."""
        return self._controller.broadcaster.subscribe()

    def unsubscribe(self, subscription: Subscription) -> None:
        self._controller.broadcaster.unsubscribe(subscription)

    # -- commands ------------------------------------------------------------

    async def start(self, task_id: str, task_title: str, duration_seconds: int) -> TimerSnapshot:
        """Start a new session, replacing any current one, and show the surface."""
        validate_duration(duration_seconds)
        async with self._controller.lock:
            snapshot = self._controller.start(task_id, task_title, duration_seconds)
            serial = self._controller.session_serial
        await self._sync_surface(serial, _SHOW_STEPS)
        return snapshot

    async def pause(self) -> TimerSnapshot:
        async with self._controller.lock:
            self._require_status("pause", _PAUSE_STATES)
            return self._controller.pause()

    async def resume(self) -> TimerSnapshot:
        async with self._controller.lock:
            self._require_status("resume", _RESUME_STATES)
            return self._controller.resume()

    async def restart(self) -> TimerSnapshot:
        """Reset to the original duration and show the surface again."""
        async with self._controller.lock:
            if not self._controller.has_session_history:
                raise NoActiveSession("restart() requires a session; none has been started")
            snapshot = self._controller.restart()
            serial = self._controller.session_serial
        await self._sync_surface(serial, _SHOW_STEPS)
        return snapshot

    async def close(self) -> TimerSnapshot:
        """Cancel the clock, drop the session and close the surface."""
        async with self._controller.lock:
            snapshot = self._controller.close()
            serial = self._controller.session_serial
        await self._sync_surface(serial, _HIDE_STEPS)
        return snapshot

    async def get_state(self) -> TimerSnapshot:
        async with self._controller.lock:
            return self._controller.snapshot()

    async def begin_surface_drag(self) -> bool:
        """Hand a drag gesture to the display surface.  Returns False if it could not."""
        async with self._surface_lock:
            return await self._call("surface", "begin_move")

    async def drain(self) -> None:
        """Wait for pending finish notifications and surface work."""
        if self._background:
            await asyncio.gather(*self._background)

    async def aclose(self) -> None:
        """Close the session and wait for pending surface/notifier work."""
        await self.close()
        await self.drain()

    # -- private helpers -----------------------------------------------------

    def _require_status(self, command: str, valid: frozenset[TimerStatus]) -> None:
        """Raise if the controller's status is not in *valid*."""
        status = self._controller.status
        if status in valid:
            return
        if not self._controller.has_session_history:
            raise NoActiveSession(f"{command}() requires a session; none has been started")
        raise InvalidTransition(f"{command}() is not valid from {status.value} state")

    async def _sync_surface(self, serial: int, steps: tuple[tuple[str, str], ...]) -> None:
        """Run *steps* in order on behalf of session *serial*.

        Steps stop as soon as a later start, restart or close has taken over,
        so surface calls always end up matching the newest accepted command.
        """
        async with self._surface_lock:
            for target, action in steps:
                if serial != self._controller.session_serial:
                    logger.debug("Skipping %s.%s for superseded session %d", target, action, serial)
                    return
                await self._call(target, action)

    async def _call(self, target: str, action: str) -> bool:
        collaborator = self._surface if target == "surface" else self._main_window
        if collaborator is None:
            return True
        try:
            await asyncio.to_thread(getattr(collaborator, action))
        except SurfaceUnavailable as exc:
            logger.warning("Display %s unavailable (%s): %s", target, action, exc)
            return False
        except Exception:
            logger.exception("Display %s failed (%s)", target, action)
            return False
        return True

    def _on_finished(self, snapshot: TimerSnapshot) -> None:
        # Runs inside a tick; surface work must not hold the controller lock.
        serial = self._controller.session_serial
        task = asyncio.get_running_loop().create_task(self._finish_surface(snapshot, serial))
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def _finish_surface(self, snapshot: TimerSnapshot, serial: int) -> None:
        if self._notifier is not None:
            try:
                await asyncio.to_thread(
                    self._notifier.notify, _FINISHED_TITLE, f"Time's up for: {snapshot.task_title}"
                )
            except Exception:
                logger.exception("Finish notification failed")
        await self._sync_surface(serial, _HIDE_STEPS)
