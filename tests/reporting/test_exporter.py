import csv
import io
from datetime import date, timedelta
from zoneinfo import ZoneInfo

from conftest import T0, make_session

from src.team_tracker.team_tracker.reporting.aggregation import Aggregation, UserTotal
from src.team_tracker.team_tracker.reporting.exporter import (
    SESSION_FIELDS,
    session_report_filename,
    to_session_report,
    to_weekly_report,
    weekly_report_filename,
)

UTC = ZoneInfo("UTC")


def parse(text: str) -> list[list[str]]:
    return list(csv.reader(io.StringIO(text)))


def test_session_report_columns():
    closed = make_session(
        1,
        user_name="Alice",
        user_email="alice@example.com",
        start=T0,
        end=T0 + timedelta(seconds=65),
        summary="Fixed build",
    )
    open_ = make_session(2, user_name="Bob", start=T0 + timedelta(seconds=10))

    rows = parse(to_session_report([closed, open_], T0 + timedelta(seconds=40), tz=UTC))

    assert rows[0] == SESSION_FIELDS
    assert rows[1] == [
        "2026-02-02",
        "Alice",
        "alice@example.com",
        "Build Android",
        "2026-02-02T09:00:00Z",
        "2026-02-02T09:01:05Z",
        "1m 5s",
        "Fixed build",
    ]
    assert rows[2][5] == ""
    assert rows[2][6] == "30s"


def test_every_field_is_quoted_and_quotes_doubled():
    s = make_session(1, task='say "hi"', start=T0, end=T0)

    text = to_session_report([s], T0, tz=UTC)
    line = text.splitlines()[1]

    assert line.startswith('"2026-02-02",')
    assert '"say ""hi"""' in line


def test_summary_newlines_are_collapsed():
    s = make_session(1, start=T0, end=T0, summary="line one\nline two\r\nline three")

    rows = parse(to_session_report([s], T0, tz=UTC))

    assert rows[1][7] == "line one line two line three"
    assert len(rows) == 2


def test_round_trip_preserves_tricky_values():
    summary = 'Fixed "build", then\nshipped'
    s = make_session(1, user_name="O'Brien, Pat", task="a,b", start=T0, end=T0 + timedelta(hours=1), summary=summary)

    rows = parse(to_session_report([s], T0, tz=UTC, collapse_newlines=False))

    assert rows[1][1] == "O'Brien, Pat"
    assert rows[1][3] == "a,b"
    assert rows[1][7] == summary


def test_date_key_follows_reference_timezone():
    s = make_session(1, start=T0.replace(hour=3), end=T0.replace(hour=4))

    rows = parse(to_session_report([s], T0, tz=ZoneInfo("America/Toronto")))

    assert rows[1][0] == "2026-02-01"


def test_report_is_deterministic_and_keeps_order():
    sessions = [make_session(i, start=T0 + timedelta(minutes=i), end=T0 + timedelta(minutes=i + 1)) for i in (3, 1, 2)]

    first = to_session_report(sessions, T0, tz=UTC)

    assert first == to_session_report(sessions, T0, tz=UTC)
    assert [r[4][14:16] for r in parse(first)[1:]] == ["03", "01", "02"]


def test_weekly_report_splits_hours_and_minutes():
    agg = Aggregation(
        per_user=[UserTotal(1, "Alice", 8 * 3600 + 5 * 60 + 59), UserTotal(2, "Bob", 59)],
        team_total_seconds=8 * 3600 + 6 * 60 + 58,
    )

    rows = parse(to_weekly_report(agg))

    assert rows == [["userName", "hours", "minutes"], ["Alice", "8", "5"], ["Bob", "0", "0"]]


def test_filenames():
    assert session_report_filename(date(2026, 2, 2)) == "team_logs_2026-02-02.csv"
    assert weekly_report_filename(date(2026, 2, 2), date(2026, 2, 8)) == "team_weekly_2026-02-02_2026-02-08.csv"
