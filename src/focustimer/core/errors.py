"""Errors raised by the timer core."""


class TimerError(Exception):
    """Base class for every error the timer core raises."""


class InvalidTransition(TimerError):
    """Raised when the current state does not permit the requested command."""


class NoActiveSession(InvalidTransition):
    """Raised when a command needs a session but none has ever been started."""


class InvalidArgument(TimerError, ValueError):
    """Raised when a command argument is out of range (e.g. a non-positive duration)."""


class SurfaceUnavailable(TimerError):
    """Raised by a display surface that cannot open, focus, close or move."""
