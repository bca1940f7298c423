from __future__ import annotations

import threading
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Optional

import pytest

from src.team_tracker.team_tracker.common.datetime_utils import as_utc
from src.team_tracker.team_tracker.core.exceptions import AlreadyActiveError, NotActiveError, SessionClosedError
from src.team_tracker.team_tracker.sessions.model import NewNote, Note, Session
from src.team_tracker.team_tracker.sessions.repository import QueryDescriptor
from src.team_tracker.team_tracker.sessions.subscriptions import SnapshotHub
from src.team_tracker.team_tracker.users.model import Actor

T0 = datetime(2026, 2, 2, 9, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Stands in for the store's authoritative time."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


class InMemorySessions:
    def __init__(self, clock: FakeClock):
        self._clock = clock
        self._lock = threading.Lock()
        self._by_id: dict[int, Session] = {}
        self._id = 0
        self._hub = SnapshotHub()
        self.writes = 0

    def _put(self, s: Session) -> None:
        self._by_id[s.session_id] = s
        self.writes += 1

    def create_session(self, *, user_id, user_name, user_email, task, tags=(), first_note=None) -> Session:
        with self._lock:
            if any(s.user_id == user_id and s.is_open for s in self._by_id.values()):
                raise AlreadyActiveError("User already has an active session")
            self._id += 1
            now = self._clock()
            notes = ()
            if first_note is not None:
                notes = (Note(first_note.text, first_note.links, first_note.author, now),)
            s = Session(
                session_id=self._id,
                user_id=user_id,
                user_name=user_name,
                user_email=user_email,
                task=task,
                start=now,
                tags=tuple(tags),
                notes=notes,
            )
            self._put(s)
        self._hub.publish(self.query)
        return s

    def append_note(self, *, session_id: int, note: NewNote) -> None:
        with self._lock:
            s = self._by_id.get(session_id)
            if s is None or not s.is_open:
                raise SessionClosedError("Session is not open")
            self._put(replace(s, notes=(*s.notes, Note(note.text, note.links, note.author, self._clock()))))
        self._hub.publish(self.query)

    def add_tag(self, *, session_id: int, tag: str) -> None:
        with self._lock:
            s = self._by_id.get(session_id)
            if s is None or not s.is_open:
                raise SessionClosedError("Session is not open")
            if tag not in s.tags:
                self._put(replace(s, tags=(*s.tags, tag)))
        self._hub.publish(self.query)

    def close_session(self, *, session_id: int, summary: str) -> None:
        with self._lock:
            s = self._by_id.get(session_id)
            if s is None or not s.is_open:
                raise NotActiveError("Session is not active")
            self._put(replace(s, end=self._clock(), summary=summary))
        self._hub.publish(self.query)

    def get_by_id(self, session_id: int) -> Optional[Session]:
        return self._by_id.get(session_id)

    def get_active_for_user(self, user_id: int) -> Optional[Session]:
        found = self.query(QueryDescriptor(user_id=user_id, open_only=True, limit=1))
        return found[0] if found else None

    def query_sessions_by_user(self, user_id: int):
        return self.query(QueryDescriptor(user_id=user_id))

    def query_sessions_by_window(self, start, end):
        return self.query(QueryDescriptor(window_start=start, window_end=end))

    def query(self, descriptor: QueryDescriptor):
        items = list(self._by_id.values())
        if descriptor.user_id is not None:
            items = [s for s in items if s.user_id == descriptor.user_id]
        if descriptor.window_start is not None:
            items = [s for s in items if as_utc(s.start) >= as_utc(descriptor.window_start)]
        if descriptor.window_end is not None:
            items = [s for s in items if as_utc(s.start) < as_utc(descriptor.window_end)]
        if descriptor.open_only:
            items = [s for s in items if s.is_open]
        items.sort(key=lambda s: (s.start, s.session_id), reverse=True)
        return items[: descriptor.limit] if descriptor.limit is not None else items

    def subscribe(self, descriptor, on_change):
        return self._hub.subscribe(descriptor, on_change, self.query)

    def open_count(self, user_id: int) -> int:
        return sum(1 for s in self._by_id.values() if s.user_id == user_id and s.is_open)


@pytest.fixture
def fixed_now() -> datetime:
    return T0


@pytest.fixture
def clock(fixed_now) -> FakeClock:
    return FakeClock(fixed_now)


@pytest.fixture
def sessions_repo(clock) -> InMemorySessions:
    return InMemorySessions(clock)


@pytest.fixture
def alice() -> Actor:
    return Actor(user_id=1, display_name="Alice", email="alice@example.com")


@pytest.fixture
def bob() -> Actor:
    return Actor(user_id=2, display_name="Bob", email="bob@example.com")


def make_session(
    session_id: int,
    *,
    user_id: int = 1,
    user_name: str = "Alice",
    start: datetime = T0,
    end: Optional[datetime] = None,
    task: str = "Build Android",
    summary: str = "",
    tags: tuple[str, ...] = (),
    user_email: str = "",
) -> Session:
    return Session(
        session_id=session_id,
        user_id=user_id,
        user_name=user_name,
        user_email=user_email or f"{user_name.lower()}@example.com",
        task=task,
        start=start,
        end=end,
        summary=summary,
        tags=tags,
    )
