"""focustimer: a single authoritative focus timer with broadcast observers."""

__version__ = "0.1.0"
