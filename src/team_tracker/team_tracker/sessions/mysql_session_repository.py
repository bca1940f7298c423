from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

import mysql.connector
from mysql.connector import errorcode

from ..common.datetime_utils import as_utc
from ..core.exceptions import (
    AlreadyActiveError,
    NotActiveError,
    SessionClosedError,
    StoreUnavailableError,
    ValidationError,
)
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_links, fetchall, fetchone, load_links
from .model import NewNote, Note, Session
from .repository import OnChange, QueryDescriptor, SessionRepository, Unsubscribe
from .subscriptions import SnapshotHub

_SESSION_COLUMNS = """
    session_id, user_id, user_name, user_email, task,
    start_time, end_time, summary
"""


def _to_utc_naive(value: datetime) -> datetime:
    return as_utc(value).replace(tzinfo=None)


class MySQLSessionRepository(SessionRepository):
    def __init__(self, conn_factory: DatabaseConnection, *, hub: Optional[SnapshotHub] = None):
        self._conn_factory = conn_factory
        self._hub = hub or SnapshotHub()

    # -- reads -----------------------------------------------------------

    def _hydrate(self, cur, rows: list[dict]) -> list[Session]:
        if not rows:
            return []

        ids = [int(r["session_id"]) for r in rows]
        placeholders = ",".join(["%s"] * len(ids))

        cur.execute(
            f"SELECT session_id, tag FROM session_tags WHERE session_id IN ({placeholders}) ORDER BY session_id, position",
            tuple(ids),
        )
        tags: dict[int, list[str]] = {}
        for t in fetchall(cur):
            tags.setdefault(int(t["session_id"]), []).append(t["tag"])

        cur.execute(
            f"""
            SELECT session_id, text, links, author, created_at
            FROM session_notes
            WHERE session_id IN ({placeholders})
            ORDER BY session_id, note_id
            """,
            tuple(ids),
        )
        notes: dict[int, list[Note]] = {}
        for n in fetchall(cur):
            notes.setdefault(int(n["session_id"]), []).append(
                Note(
                    text=n["text"],
                    links=load_links(n.get("links")),
                    author=n["author"],
                    created_at=as_utc(n["created_at"]),
                )
            )

        return [
            Session(
                session_id=int(r["session_id"]),
                user_id=int(r["user_id"]),
                user_name=r["user_name"],
                user_email=r["user_email"],
                task=r["task"],
                start=as_utc(r["start_time"]),
                end=as_utc(r["end_time"]) if r.get("end_time") else None,
                summary=r.get("summary") or "",
                tags=tuple(tags.get(int(r["session_id"]), ())),
                notes=tuple(notes.get(int(r["session_id"]), ())),
            )
            for r in rows
        ]

    def _select(self, cur, where: str = "", params: tuple = (), limit: Optional[int] = None) -> list[Session]:
        sql = f"SELECT {_SESSION_COLUMNS} FROM sessions"
        if where:
            sql += f" WHERE {where}"
        sql += " ORDER BY start_time DESC, session_id DESC"
        if limit is not None:
            sql += " LIMIT %s"
            params = (*params, int(limit))
        cur.execute(sql, params)
        return self._hydrate(cur, fetchall(cur))

    def get_by_id(self, session_id: int) -> Optional[Session]:
        with db_cursor(self._conn_factory) as (_, cur):
            found = self._select(cur, "session_id=%s", (int(session_id),))
            return found[0] if found else None

    def get_active_for_user(self, user_id: int) -> Optional[Session]:
        with db_cursor(self._conn_factory) as (_, cur):
            found = self._select(cur, "user_id=%s AND end_time IS NULL", (int(user_id),), limit=1)
            return found[0] if found else None

    def query_sessions_by_user(self, user_id: int) -> Sequence[Session]:
        return self.query(QueryDescriptor(user_id=int(user_id)))

    def query_sessions_by_window(self, start: datetime, end: datetime) -> Sequence[Session]:
        return self.query(QueryDescriptor(window_start=start, window_end=end))

    def query(self, descriptor: QueryDescriptor) -> Sequence[Session]:
        clauses: list[str] = []
        params: list[object] = []

        if descriptor.user_id is not None:
            clauses.append("user_id=%s")
            params.append(int(descriptor.user_id))
        if descriptor.window_start is not None:
            clauses.append("start_time >= %s")
            params.append(_to_utc_naive(descriptor.window_start))
        if descriptor.window_end is not None:
            clauses.append("start_time < %s")
            params.append(_to_utc_naive(descriptor.window_end))
        if descriptor.open_only:
            clauses.append("end_time IS NULL")

        with db_cursor(self._conn_factory) as (_, cur):
            return self._select(cur, " AND ".join(clauses), tuple(params), limit=descriptor.limit)

    def subscribe(self, descriptor: QueryDescriptor, on_change: OnChange) -> Unsubscribe:
        return self._hub.subscribe(descriptor, on_change, self.query)

    # -- writes ----------------------------------------------------------

    @staticmethod
    def _insert_note(cur, session_id: int, note: NewNote) -> None:
        cur.execute(
            """
            INSERT INTO session_notes(session_id, text, links, author, created_at)
            VALUES(%s, %s, %s, %s, UTC_TIMESTAMP(6))
            """,
            (session_id, note.text, dump_links(note.links), note.author),
        )

    @staticmethod
    def _lock_open(cur, session_id: int) -> bool:
        cur.execute(
            "SELECT session_id FROM sessions WHERE session_id=%s AND end_time IS NULL FOR UPDATE",
            (int(session_id),),
        )
        return fetchone(cur) is not None

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
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO sessions(user_id, user_name, user_email, task, start_time, end_time, summary)
                    VALUES(%s, %s, %s, %s, UTC_TIMESTAMP(6), NULL, '')
                    """,
                    (int(user_id), user_name, user_email, task),
                )
                session_id = int(cur.lastrowid)
                for position, tag in enumerate(tags):
                    cur.execute(
                        "INSERT IGNORE INTO session_tags(session_id, tag, position) VALUES(%s, %s, %s)",
                        (session_id, tag, position),
                    )
                if first_note is not None:
                    self._insert_note(cur, session_id, first_note)
                session = self._select(cur, "session_id=%s", (session_id,))[0]
        except mysql.connector.IntegrityError as e:
            if e.errno == errorcode.ER_DUP_ENTRY:
                raise AlreadyActiveError("User already has an active session") from e
            if e.errno == errorcode.ER_NO_REFERENCED_ROW_2:
                raise ValidationError("Unknown user") from e
            raise StoreUnavailableError("Session store rejected the check-in") from e

        self._hub.publish(self.query)
        return session

    def append_note(self, *, session_id: int, note: NewNote) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            if not self._lock_open(cur, session_id):
                raise SessionClosedError("Session is not open")
            self._insert_note(cur, int(session_id), note)
        self._hub.publish(self.query)

    def add_tag(self, *, session_id: int, tag: str) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            if not self._lock_open(cur, session_id):
                raise SessionClosedError("Session is not open")
            cur.execute(
                "SELECT COALESCE(MAX(position) + 1, 0) AS next_pos FROM session_tags WHERE session_id=%s",
                (int(session_id),),
            )
            next_pos = int(fetchone(cur)["next_pos"])
            cur.execute(
                "INSERT IGNORE INTO session_tags(session_id, tag, position) VALUES(%s, %s, %s)",
                (int(session_id), tag, next_pos),
            )
        self._hub.publish(self.query)

    def close_session(self, *, session_id: int, summary: str) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE sessions
                SET end_time=UTC_TIMESTAMP(6), summary=%s
                WHERE session_id=%s AND end_time IS NULL
                """,
                (summary, int(session_id)),
            )
            if cur.rowcount == 0:
                raise NotActiveError("Session is not active")
        self._hub.publish(self.query)
