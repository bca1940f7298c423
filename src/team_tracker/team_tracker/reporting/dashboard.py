from __future__ import annotations

import threading
from datetime import datetime
from typing import Optional, Sequence
from zoneinfo import ZoneInfo

from ..common.datetime_utils import day_window, local_date, week_window
from ..core.constants import ALL_TAGS, DEFAULT_TEAM_LOG_LIMIT
from ..core.enums import DateScope
from ..sessions.model import Session
from ..sessions.repository import SessionRepository, Unsubscribe
from .aggregation import Aggregation, aggregate
from .filters import filter_sessions
from .service import team_descriptor


class TeamDashboard:
    """Live team board fed by a store subscription.

    Each notification replaces the whole snapshot; views are recomputed from
    it on demand.
    """

    def __init__(
        self,
        sessions: SessionRepository,
        *,
        tz: ZoneInfo,
        scope: DateScope = DateScope.TODAY,
        limit: int = DEFAULT_TEAM_LOG_LIMIT,
    ):
        self._sessions = sessions
        self._tz = tz
        self._scope = DateScope(scope)
        self._limit = int(limit)
        self._lock = threading.Lock()
        self._snapshot: list[Session] = []
        self._unsubscribe: Optional[Unsubscribe] = None

    def start(self, *, now: datetime) -> None:
        self.stop()
        descriptor = team_descriptor(self._scope, now=now, tz=self._tz, limit=self._limit)
        self._unsubscribe = self._sessions.subscribe(descriptor, self._on_change)

    def stop(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _on_change(self, snapshot: Sequence[Session]) -> None:
        with self._lock:
            self._snapshot = list(snapshot)

    @property
    def snapshot(self) -> list[Session]:
        with self._lock:
            return list(self._snapshot)

    def view(self, *, now: datetime, search: str = "", tag: str = ALL_TAGS) -> list[Session]:
        return filter_sessions(self.snapshot, search, tag, self._scope, now=now, tz=self._tz)

    # Totals read their own window from the store; the snapshot is scoped and capped.
    def today_totals(self, *, now: datetime) -> Aggregation:
        start, end = day_window(local_date(now, self._tz), self._tz)
        return aggregate(self._sessions.query_sessions_by_window(start, end), start, end, now)

    def week_totals(self, *, now: datetime) -> Aggregation:
        start, end = week_window(local_date(now, self._tz), self._tz)
        return aggregate(self._sessions.query_sessions_by_window(start, end), start, end, now)
