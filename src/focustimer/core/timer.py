"""Timer core -- the single authoritative focus-timer state machine."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from focustimer.core.broadcast import EventBroadcaster
from focustimer.core.clock import AsyncioTicker, Ticker
from focustimer.core.errors import InvalidArgument

logger = logging.getLogger(__name__)


class TimerStatus(str, Enum):
    """Possible states of the timer."""

    IDLE = "idle"
    ACTIVE = "active"
    PAUSED = "paused"
    FINISHED = "finished"


FinishListener = Callable[["TimerSnapshot"], None]


def validate_duration(duration_seconds: object) -> int:
    """Return *duration_seconds* if it is a positive integer, else raise ``InvalidArgument``."""
    if isinstance(duration_seconds, bool) or not isinstance(duration_seconds, int):
        raise InvalidArgument(
            f"duration_seconds must be an integer, got {type(duration_seconds).__name__}"
        )
    if duration_seconds <= 0:
        raise InvalidArgument(f"duration_seconds must be positive, got {duration_seconds}")
    return duration_seconds


def format_remaining(seconds: float) -> str:
    """Format *seconds* as ``M:SS``."""
    total = int(seconds)
    return f"{total // 60}:{total % 60:02d}"


@dataclass(slots=True)
class TimerState:
    """Mutable countdown progress.  Only ``TimerController`` touches it."""

    task_id: str
    task_title: str
    original_seconds: int
    remaining_seconds: int
    is_active: bool
    is_paused: bool
    started_at: float  # wall-clock (time.time)
    last_tick_at: float  # monotonic reference for elapsed time

    @property
    def status(self) -> TimerStatus:
        if self.is_active:
            return TimerStatus.ACTIVE
        if self.is_paused:
            return TimerStatus.PAUSED
        if self.remaining_seconds == 0:
            return TimerStatus.FINISHED
        return TimerStatus.IDLE


@dataclass(frozen=True, slots=True)
class TimerSnapshot:
    """Immutable copy of the timer state handed to observers."""

    status: TimerStatus
    task_id: str = ""
    task_title: str = ""
    original_seconds: int = 0
    remaining_seconds: int = 0
    is_active: bool = False
    is_paused: bool = False
    started_at: float = 0.0
    last_tick_at: float = 0.0

    @classmethod
    def idle(cls) -> TimerSnapshot:
        return cls(status=TimerStatus.IDLE)

    @classmethod
    def of(cls, state: TimerState) -> TimerSnapshot:
        return cls(
            status=state.status,
            task_id=state.task_id,
            task_title=state.task_title,
            original_seconds=state.original_seconds,
            remaining_seconds=state.remaining_seconds,
            is_active=state.is_active,
            is_paused=state.is_paused,
            started_at=state.started_at,
            last_tick_at=state.last_tick_at,
        )


class TimerController:
    """Sole owner of the ``TimerState`` and sole driver of the periodic clock.

    Mutators assume their preconditions were checked by the caller
    (``CommandGateway``), with the exception of the duration check in
    :meth:`start`.  Every mutation, including ticks, is serialized through
    :attr:`lock`.

    Elapsed time is computed from ``time.monotonic()`` deltas at each tick, so
    a late or skipped tick never under-counts.
    """

    def __init__(
        self,
        broadcaster: EventBroadcaster | None = None,
        ticker: Ticker | None = None,
    ) -> None:
        self.broadcaster: EventBroadcaster = (
            broadcaster if broadcaster is not None else EventBroadcaster()
        )
        self.lock = asyncio.Lock()
        self._ticker: Ticker = ticker if ticker is not None else AsyncioTicker()
        self._state: TimerState | None = None
        # (task_id, task_title, original_seconds) of the most recent session, kept after close()
        self._last_session: tuple[str, str, int] | None = None
        self._clock_generation: int = 0
        # Bumped whenever a session begins or ends; lets callers tell sessions apart.
        self._session_serial: int = 0
        self._finish_listeners: list[FinishListener] = []

    # -- read side -----------------------------------------------------------

    @property
    def status(self) -> TimerStatus:
        if self._state is None:
            return TimerStatus.IDLE
        return self._state.status

    @property
    def session_serial(self) -> int:
        return self._session_serial

    @property
    def has_session_history(self) -> bool:
        """True once any session has been started in this process."""
        return self._last_session is not None

    def snapshot(self) -> TimerSnapshot:
        if self._state is None:
            return TimerSnapshot.idle()
        return TimerSnapshot.of(self._state)

    def add_finish_listener(self, listener: FinishListener) -> None:
        self._finish_listeners.append(listener)

    # -- commands ------------------------------------------------------------

    def start(self, task_id: str, task_title: str, duration_seconds: int) -> TimerSnapshot:
        """Start a new session, replacing any existing one."""
        validate_duration(duration_seconds)

        self._last_session = (task_id, task_title, duration_seconds)
        self._begin_running(task_id, task_title, duration_seconds)
        logger.info("Timer started task_id=%s seconds=%d", task_id, duration_seconds)
        return self._publish()

    def pause(self) -> TimerSnapshot:
        """Freeze the countdown.  Requires an active session."""
        state = self._require_state()
        state.is_active = False
        state.is_paused = True
        logger.info("Timer paused at %s", format_remaining(state.remaining_seconds))
        return self._publish()

    def resume(self) -> TimerSnapshot:
        """Unfreeze a paused countdown, charging time only from now on."""
        state = self._require_state()
        state.is_active = True
        state.is_paused = False
        state.last_tick_at = time.monotonic()
        logger.info("Timer resumed at %s", format_remaining(state.remaining_seconds))
        return self._publish()

    def restart(self) -> TimerSnapshot:
        """Reset to the original duration and run, from any state once a session has existed."""
        if self._state is not None:
            task_id = self._state.task_id
            task_title = self._state.task_title
            original = self._state.original_seconds
        elif self._last_session is not None:
            task_id, task_title, original = self._last_session
        else:
            raise AssertionError("restart() called before any session was started")

        self._begin_running(task_id, task_title, original)
        logger.info("Timer restarted seconds=%d", original)
        return self._publish()

    def close(self) -> TimerSnapshot:
        """Cancel the clock and release the session.  Idempotent.

        Observers always get the idle snapshot; the closed event only goes out
        when there was a session to end.
        """
        self._disarm_clock()
        had_session = self._state is not None
        self._state = None
        self._session_serial += 1
        snapshot = self._publish()
        if had_session:
            self.broadcaster.end_session()
            logger.info("Timer closed")
        return snapshot

    def tick(self) -> None:
        """Advance the countdown by the whole seconds elapsed since the last tick.

        Driven by the periodic clock; not part of the command surface.  A
        no-op unless the session is active.
        """
        state = self._state
        if state is None or not state.is_active:
            return

        elapsed = int(time.monotonic() - state.last_tick_at)
        if elapsed > 0:
            state.remaining_seconds = max(state.remaining_seconds - elapsed, 0)
            # Advance by whole seconds only so the fractional part carries over.
            state.last_tick_at += elapsed

        if state.remaining_seconds > 0:
            self._publish()
            return

        state.is_active = False
        self._disarm_clock()
        snapshot = self._publish()
        self.broadcaster.publish_finished()
        logger.info("Timer finished task_id=%s", state.task_id)
        for listener in list(self._finish_listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("finish listener failed")

    # -- clock ---------------------------------------------------------------

    def _arm_clock(self) -> None:
        self._clock_generation += 1
        generation = self._clock_generation

        async def on_tick() -> None:
            async with self.lock:
                # A tick queued behind close()/restart() belongs to a dead clock.
                if generation != self._clock_generation:
                    return
                try:
                    self.tick()
                except Exception:
                    logger.exception("Timer tick failed; ending session")
                    self._abort()

        self._ticker.arm(on_tick)

    def _disarm_clock(self) -> None:
        self._clock_generation += 1
        self._ticker.cancel()

    def _abort(self) -> None:
        self._disarm_clock()
        self._state = None
        self._session_serial += 1
        self._publish()
        self.broadcaster.end_session()

    # -- private helpers -----------------------------------------------------

    def _begin_running(self, task_id: str, task_title: str, seconds: int) -> None:
        """Install a fresh full-length state, stamp timestamps and arm the clock."""
        self._session_serial += 1
        self._state = TimerState(
            task_id=task_id,
            task_title=task_title,
            original_seconds=seconds,
            remaining_seconds=seconds,
            is_active=True,
            is_paused=False,
            started_at=time.time(),
            last_tick_at=time.monotonic(),
        )
        self._arm_clock()

    def _require_state(self) -> TimerState:
        if self._state is None:
            raise AssertionError("no timer state; preconditions must be checked by the caller")
        return self._state

    def _publish(self) -> TimerSnapshot:
        snapshot = self.snapshot()
        self.broadcaster.publish(snapshot)
        return snapshot
