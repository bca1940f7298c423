from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable

from ..common.datetime_utils import as_utc
from ..core.exceptions import ClockAnomalyWarning
from ..sessions.duration import measure
from ..sessions.model import Session


@dataclass(frozen=True)
class UserTotal:
    user_id: int
    user_name: str
    total_seconds: int


@dataclass(frozen=True)
class Aggregation:
    per_user: list[UserTotal]
    team_total_seconds: int
    anomalies: list[ClockAnomalyWarning] = field(default_factory=list)


def aggregate(
    sessions: Iterable[Session],
    window_start: datetime,
    window_end: datetime,
    at: datetime,
) -> Aggregation:
    """Fold sessions started in [window_start, window_end) into per-user totals.

    Open sessions count their live time up to `at`. The display name of a
    user comes from their most recent session in the window.
    """

    window_start = as_utc(window_start)
    window_end = as_utc(window_end)

    totals: dict[int, int] = {}
    latest: dict[int, Session] = {}
    anomalies: list[ClockAnomalyWarning] = []

    for s in sessions:
        start = as_utc(s.start)
        if not (window_start <= start < window_end):
            continue

        reading = measure(s, at)
        if reading.anomaly is not None:
            anomalies.append(reading.anomaly)

        totals[s.user_id] = totals.get(s.user_id, 0) + reading.seconds
        seen = latest.get(s.user_id)
        if seen is None or start >= as_utc(seen.start):
            latest[s.user_id] = s

    per_user = [
        UserTotal(user_id=user_id, user_name=latest[user_id].user_name, total_seconds=total)
        for user_id, total in totals.items()
    ]
    per_user.sort(key=lambda u: (-u.total_seconds, u.user_name))

    return Aggregation(
        per_user=per_user,
        team_total_seconds=sum(u.total_seconds for u in per_user),
        anomalies=anomalies,
    )
