from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..core.enums import SessionState


@dataclass(frozen=True)
class Note:
    """A timestamped remark attached to an open session."""

    text: str
    links: tuple[str, ...]
    author: str
    created_at: datetime


@dataclass(frozen=True)
class NewNote:
    """Note content before the store stamps it with authoritative time."""

    text: str
    links: tuple[str, ...]
    author: str


@dataclass(frozen=True)
class Session:
    """Domain entity: one check-in to check-out work interval.

    `user_name` and `user_email` are captured at check-in and not re-synced
    when the user's profile changes later.
    """

    session_id: int
    user_id: int
    user_name: str
    user_email: str
    task: str
    start: datetime
    end: Optional[datetime] = None
    summary: str = ""
    tags: tuple[str, ...] = ()
    notes: tuple[Note, ...] = field(default_factory=tuple)

    @property
    def is_open(self) -> bool:
        return self.end is None

    @property
    def state(self) -> SessionState:
        return SessionState.OPEN if self.end is None else SessionState.CLOSED


def state_of(session: Optional[Session]) -> SessionState:
    if session is None:
        return SessionState.NONE
    return session.state
