from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import as_utc
from ..core.exceptions import ClockAnomalyWarning
from .model import Session

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DurationReading:
    seconds: int
    anomaly: Optional[ClockAnomalyWarning] = None


def measure(session: Session, at: datetime) -> DurationReading:
    """Elapsed whole seconds of `session` observed at instant `at`.

    Closed sessions ignore `at`. Negative spans are clamped to zero and
    flagged with a ClockAnomalyWarning (logged, never raised).
    """

    until = session.end if session.end is not None else at
    raw = (as_utc(until) - as_utc(session.start)).total_seconds()
    if raw < 0:
        anomaly = ClockAnomalyWarning(session.session_id, raw)
        logger.warning("Clock anomaly: %s", anomaly)
        return DurationReading(seconds=0, anomaly=anomaly)
    return DurationReading(seconds=int(raw))


def duration(session: Session, at: datetime) -> int:
    return measure(session, at).seconds


def format_hhmm(seconds: int) -> str:
    minutes = int(seconds) // 60
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def format_verbose(seconds: int) -> str:
    """Render like "1h 5m 3s"; zero units are omitted, zero itself is "0s"."""
    seconds = int(seconds)
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    parts = []
    if hours:
        parts.append(f"{hours}h")
    if minutes:
        parts.append(f"{minutes}m")
    if secs:
        parts.append(f"{secs}s")
    return " ".join(parts) or "0s"
