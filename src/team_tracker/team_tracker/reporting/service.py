from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional
from zoneinfo import ZoneInfo

from ..common.datetime_utils import day_window, local_date, week_window
from ..core.constants import ALL_TAGS, DEFAULT_TEAM_LOG_LIMIT
from ..core.enums import DateScope
from ..sessions.duration import duration, format_hhmm, format_verbose
from ..sessions.model import Session
from ..sessions.repository import QueryDescriptor, SessionRepository
from .aggregation import Aggregation, aggregate
from .exporter import session_report_filename, to_session_report, to_weekly_report, weekly_report_filename
from .filters import available_tags, filter_sessions


@dataclass(frozen=True)
class TeamView:
    rows: list[dict]
    tags: list[str]


def team_descriptor(scope: DateScope, *, now: datetime, tz: ZoneInfo, limit: int) -> QueryDescriptor:
    if DateScope(scope) == DateScope.TODAY:
        start, end = day_window(local_date(now, tz), tz)
        return QueryDescriptor(window_start=start, window_end=end, limit=limit)
    return QueryDescriptor(limit=limit)


def session_row(s: Session, *, now: datetime) -> dict:
    seconds = duration(s, now)
    return {
        "id": s.session_id,
        "user_id": s.user_id,
        "user_name": s.user_name,
        "user_email": s.user_email,
        "task": s.task,
        "tags": list(s.tags),
        "start": s.start.isoformat(),
        "end": s.end.isoformat() if s.end else None,
        "duration_seconds": seconds,
        "duration": format_verbose(seconds),
        "summary": s.summary,
        "status": s.state.value,
        "notes": [
            {"text": n.text, "links": list(n.links), "author": n.author, "created_at": n.created_at.isoformat()}
            for n in s.notes
        ],
    }


def totals_dict(agg: Aggregation) -> dict:
    return {
        "per_user": [
            {
                "user_id": u.user_id,
                "user_name": u.user_name,
                "total_seconds": u.total_seconds,
                "total_hours": format_hhmm(u.total_seconds),
            }
            for u in agg.per_user
        ],
        "team_total_seconds": agg.team_total_seconds,
        "clock_anomalies": [a.session_id for a in agg.anomalies],
    }


class ReportService:
    """Builds dashboard views and CSV exports from the record store."""

    def __init__(self, sessions: SessionRepository, *, tz: ZoneInfo, limit: int = DEFAULT_TEAM_LOG_LIMIT):
        self._sessions = sessions
        self._tz = tz
        self._limit = int(limit)

    @property
    def tz(self) -> ZoneInfo:
        return self._tz

    def _scoped(self, scope: DateScope, now: datetime) -> list[Session]:
        return list(self._sessions.query(team_descriptor(scope, now=now, tz=self._tz, limit=self._limit)))

    def filtered_sessions(
        self,
        *,
        now: datetime,
        search: str = "",
        tag: str = ALL_TAGS,
        scope: DateScope = DateScope.TODAY,
    ) -> list[Session]:
        return filter_sessions(self._scoped(scope, now), search, tag, scope, now=now, tz=self._tz)

    def team_view(
        self,
        *,
        now: datetime,
        search: str = "",
        tag: str = ALL_TAGS,
        scope: DateScope = DateScope.TODAY,
    ) -> TeamView:
        scoped = self._scoped(scope, now)
        rows = filter_sessions(scoped, search, tag, scope, now=now, tz=self._tz)
        return TeamView(rows=[session_row(s, now=now) for s in rows], tags=available_tags(scoped))

    def daily_totals(self, day: date, *, now: datetime) -> Aggregation:
        start, end = day_window(day, self._tz)
        return aggregate(self._sessions.query_sessions_by_window(start, end), start, end, now)

    def weekly_totals(self, day: date, *, now: datetime) -> Aggregation:
        start, end = week_window(day, self._tz)
        return aggregate(self._sessions.query_sessions_by_window(start, end), start, end, now)

    def export_sessions(
        self,
        *,
        now: datetime,
        search: str = "",
        tag: str = ALL_TAGS,
        scope: DateScope = DateScope.TODAY,
    ) -> tuple[str, str]:
        rows = self.filtered_sessions(now=now, search=search, tag=tag, scope=scope)
        text = to_session_report(rows, now, tz=self._tz)
        return session_report_filename(local_date(now, self._tz)), text

    def export_weekly(self, day: Optional[date] = None, *, now: datetime) -> tuple[str, str]:
        day = day or local_date(now, self._tz)
        agg = self.weekly_totals(day, now=now)
        monday = day - timedelta(days=day.weekday())
        return weekly_report_filename(monday, monday + timedelta(days=6)), to_weekly_report(agg)
