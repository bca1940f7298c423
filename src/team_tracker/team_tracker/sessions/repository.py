from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional, Protocol, Sequence

from .model import NewNote, Session


@dataclass(frozen=True)
class QueryDescriptor:
    """Which sessions a query or subscription selects.

    All criteria are optional and combined with AND. Results are ordered by
    start descending and capped at `limit` rows.
    """

    user_id: Optional[int] = None
    window_start: Optional[datetime] = None
    window_end: Optional[datetime] = None
    open_only: bool = False
    limit: Optional[int] = None


OnChange = Callable[[Sequence[Session]], None]
Unsubscribe = Callable[[], None]


class SessionRepository(Protocol):
    """Record store contract consumed by the session services.

    Note (DIP): services depend on this interface, never on a concrete DB.
    Timestamps (`start`, `end`, note `created_at`) are assigned by the store.
    """

    def create_session(
        self,
        *,
        user_id: int,
        user_name: str,
        user_email: str,
        task: str,
        tags: Sequence[str] = (),
        first_note: Optional[NewNote] = None,
    ) -> Session:
        """Atomically create an open session; raises AlreadyActiveError."""

        raise NotImplementedError

    def append_note(self, *, session_id: int, note: NewNote) -> None:
        """Raises SessionClosedError unless the session is open."""

        raise NotImplementedError

    def add_tag(self, *, session_id: int, tag: str) -> None:
        """Idempotent; raises SessionClosedError unless the session is open."""

        raise NotImplementedError

    def close_session(self, *, session_id: int, summary: str) -> None:
        """Raises NotActiveError unless the session is open."""

        raise NotImplementedError

    def get_by_id(self, session_id: int) -> Optional[Session]:
        raise NotImplementedError

    def get_active_for_user(self, user_id: int) -> Optional[Session]:
        raise NotImplementedError

    def query_sessions_by_user(self, user_id: int) -> Sequence[Session]:
        raise NotImplementedError

    def query_sessions_by_window(self, start: datetime, end: datetime) -> Sequence[Session]:
        raise NotImplementedError

    def query(self, descriptor: QueryDescriptor) -> Sequence[Session]:
        raise NotImplementedError

    def subscribe(self, descriptor: QueryDescriptor, on_change: OnChange) -> Unsubscribe:
        raise NotImplementedError
