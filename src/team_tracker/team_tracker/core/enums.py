from __future__ import annotations

from enum import Enum


class SessionState(str, Enum):
    """Lifecycle of a tracked work session."""

    NONE = "NONE"
    OPEN = "OPEN"
    CLOSED = "CLOSED"


class DateScope(str, Enum):
    """Date restriction used by the team dashboard."""

    TODAY = "today"
    ALL = "all"
