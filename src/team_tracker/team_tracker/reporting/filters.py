from __future__ import annotations

from datetime import datetime
from typing import Iterable, Sequence
from zoneinfo import ZoneInfo

from ..common.datetime_utils import as_utc, local_date
from ..core.constants import ALL_TAGS
from ..core.enums import DateScope
from ..sessions.model import Session


def _matches_search(s: Session, needle: str) -> bool:
    fields = [s.user_name, s.task, s.summary, *s.tags]
    return any(needle in (v or "").lower() for v in fields)


def filter_sessions(
    sessions: Iterable[Session],
    search_text: str = "",
    tag_filter: str = ALL_TAGS,
    date_scope: DateScope = DateScope.ALL,
    *,
    now: datetime,
    tz: ZoneInfo,
) -> list[Session]:
    """Team dashboard view: search, tag and date filters, newest first."""

    needle = (search_text or "").strip().lower()
    today_only = DateScope(date_scope) == DateScope.TODAY
    tag_filter = tag_filter or ALL_TAGS
    today = local_date(now, tz)

    out: list[Session] = []
    for s in sessions:
        if today_only and local_date(s.start, tz) != today:
            continue
        if tag_filter != ALL_TAGS and tag_filter not in s.tags:
            continue
        if needle and not _matches_search(s, needle):
            continue
        out.append(s)

    # sorted() is stable, also with reverse=True
    return sorted(out, key=lambda s: as_utc(s.start), reverse=True)


def available_tags(sessions: Sequence[Session]) -> list[str]:
    tags = {t for s in sessions for t in s.tags}
    return [ALL_TAGS, *sorted(tags)]
