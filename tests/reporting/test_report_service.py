from __future__ import annotations

import csv
import io
from datetime import timedelta
from zoneinfo import ZoneInfo

import pytest

from src.team_tracker.team_tracker.core.enums import DateScope
from src.team_tracker.team_tracker.reporting.service import ReportService, totals_dict
from src.team_tracker.team_tracker.sessions.service import SessionService

UTC = ZoneInfo("UTC")


@pytest.fixture
def seeded(sessions_repo, clock, alice, bob):
    svc = SessionService(sessions_repo)

    clock.advance(-3 * 24 * 3600)  # Friday of the previous week
    old = svc.check_in(alice, "Last week", tags=["Web"])
    clock.advance(3600)
    svc.check_out(alice, old.session_id, "old")

    clock.advance(3 * 24 * 3600 - 3600)  # back to Monday 09:00
    a = svc.check_in(alice, "Build Android", tags=["GovWin"])
    clock.advance(10)
    svc.check_in(bob, "Review bids", tags=["SAM.gov"])
    clock.advance(30)
    return a


def test_team_view_today(sessions_repo, clock, seeded):
    reports = ReportService(sessions_repo, tz=UTC)

    view = reports.team_view(now=clock())

    assert [r["task"] for r in view.rows] == ["Review bids", "Build Android"]
    assert [r["duration_seconds"] for r in view.rows] == [30, 40]
    assert view.rows[0]["status"] == "OPEN"
    assert view.tags == ["All", "GovWin", "SAM.gov"]


def test_team_view_all_with_tag(sessions_repo, clock, seeded):
    reports = ReportService(sessions_repo, tz=UTC)

    view = reports.team_view(now=clock(), tag="Web", scope=DateScope.ALL)

    assert [r["task"] for r in view.rows] == ["Last week"]
    assert view.rows[0]["duration"] == "1h"


def test_daily_and_weekly_totals(sessions_repo, clock, seeded):
    reports = ReportService(sessions_repo, tz=UTC)
    now = clock()

    daily = reports.daily_totals(now.date(), now=now)
    assert daily.team_total_seconds == 70

    weekly = reports.weekly_totals(now.date(), now=now)
    assert weekly.team_total_seconds == 70

    previous = reports.weekly_totals(now.date() - timedelta(days=3), now=now)
    assert totals_dict(previous)["per_user"][0]["total_hours"] == "01:00"


def test_exports(sessions_repo, clock, seeded):
    reports = ReportService(sessions_repo, tz=UTC)
    now = clock()

    name, text = reports.export_sessions(now=now, search="android")
    rows = list(csv.reader(io.StringIO(text)))
    assert name == "team_logs_2026-02-02.csv"
    assert len(rows) == 2
    assert rows[1][3] == "Build Android"

    name, text = reports.export_weekly(now=now)
    rows = list(csv.reader(io.StringIO(text)))
    assert name == "team_weekly_2026-02-02_2026-02-08.csv"
    assert rows[1:] == [["Alice", "0", "0"], ["Bob", "0", "0"]]


def test_team_view_respects_limit(sessions_repo, clock, seeded):
    reports = ReportService(sessions_repo, tz=UTC, limit=1)

    view = reports.team_view(now=clock(), scope=DateScope.ALL)

    assert len(view.rows) == 1
