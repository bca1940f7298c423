from __future__ import annotations

import csv
import io
import re
from datetime import date, datetime
from typing import Iterable
from zoneinfo import ZoneInfo

from ..common.datetime_utils import as_utc, local_date
from ..sessions.duration import duration, format_verbose
from ..sessions.model import Session
from .aggregation import Aggregation

SESSION_FIELDS = ["dateKey", "userName", "userEmail", "task", "start", "end", "duration", "summary"]
WEEKLY_FIELDS = ["userName", "hours", "minutes"]

_NEWLINES = re.compile(r"\r\n|\r|\n")


def _isoformat(value: datetime) -> str:
    return as_utc(value).isoformat().replace("+00:00", "Z")


def _write(header: list[str], rows: Iterable[list]) -> str:
    out = io.StringIO()
    writer = csv.writer(out, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(header)
    for row in rows:
        writer.writerow(row)
    return out.getvalue()


def to_session_report(
    sessions: Iterable[Session],
    at: datetime,
    *,
    tz: ZoneInfo,
    collapse_newlines: bool = True,
) -> str:
    """One quoted CSV row per session, in the order given."""

    def row(s: Session) -> list[str]:
        summary = s.summary or ""
        if collapse_newlines:
            summary = _NEWLINES.sub(" ", summary)
        return [
            local_date(s.start, tz).isoformat(),
            s.user_name,
            s.user_email,
            s.task,
            _isoformat(s.start),
            _isoformat(s.end) if s.end is not None else "",
            format_verbose(duration(s, at)),
            summary,
        ]

    return _write(SESSION_FIELDS, (row(s) for s in sessions))


def to_weekly_report(aggregation: Aggregation) -> str:
    """One quoted CSV row per user: whole hours and remaining minutes."""

    return _write(
        WEEKLY_FIELDS,
        (
            [u.user_name, str(u.total_seconds // 3600), str((u.total_seconds % 3600) // 60)]
            for u in aggregation.per_user
        ),
    )


def session_report_filename(day: date) -> str:
    return f"team_logs_{day.isoformat()}.csv"


def weekly_report_filename(first_day: date, last_day: date) -> str:
    return f"team_weekly_{first_day.isoformat()}_{last_day.isoformat()}.csv"
