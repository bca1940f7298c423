from zoneinfo import ZoneInfo

from src.team_tracker.team_tracker.core.enums import DateScope
from src.team_tracker.team_tracker.reporting.dashboard import TeamDashboard
from src.team_tracker.team_tracker.sessions.service import SessionService

UTC = ZoneInfo("UTC")


def test_dashboard_follows_store_updates(sessions_repo, clock, alice, bob):
    board = TeamDashboard(sessions_repo, tz=UTC, scope=DateScope.TODAY)
    board.start(now=clock())
    svc = SessionService(sessions_repo)

    assert board.snapshot == []

    a = svc.check_in(alice, "Build Android", tags=["GovWin"])
    clock.advance(10)
    svc.check_in(bob, "Review", tags=["govwin"])
    clock.advance(30)

    assert [s.task for s in board.view(now=clock())] == ["Review", "Build Android"]
    assert [s.task for s in board.view(now=clock(), tag="GovWin")] == ["Build Android"]

    totals = board.today_totals(now=clock())
    assert [(u.user_name, u.total_seconds) for u in totals.per_user] == [("Alice", 40), ("Bob", 30)]
    assert totals.team_total_seconds == 70

    svc.check_out(alice, a.session_id, "done")
    clock.advance(100)
    assert board.week_totals(now=clock()).per_user[0].user_name == "Bob"


def test_dashboard_stops_receiving_after_stop(sessions_repo, clock, alice):
    board = TeamDashboard(sessions_repo, tz=UTC)
    board.start(now=clock())
    board.stop()

    SessionService(sessions_repo).check_in(alice, "A")

    assert board.snapshot == []


def test_week_totals_include_earlier_days(sessions_repo, clock, alice, bob):
    svc = SessionService(sessions_repo)
    monday = svc.check_in(alice, "Monday work")
    clock.advance(2 * 3600)
    svc.check_out(alice, monday.session_id, "done")

    clock.advance(2 * 86400)
    board = TeamDashboard(sessions_repo, tz=UTC, scope=DateScope.TODAY)
    board.start(now=clock())
    svc.check_in(bob, "Wednesday work")
    clock.advance(60)

    assert [s.task for s in board.snapshot] == ["Wednesday work"]
    assert board.today_totals(now=clock()).team_total_seconds == 60

    week = board.week_totals(now=clock())
    assert [(u.user_name, u.total_seconds) for u in week.per_user] == [("Alice", 7200), ("Bob", 60)]
    assert week.team_total_seconds == 7260


def test_today_totals_are_not_capped_by_view_limit(sessions_repo, clock, alice, bob):
    board = TeamDashboard(sessions_repo, tz=UTC, limit=1)
    board.start(now=clock())
    svc = SessionService(sessions_repo)
    svc.check_in(alice, "A")
    clock.advance(10)
    svc.check_in(bob, "B")
    clock.advance(10)

    assert len(board.snapshot) == 1
    assert board.today_totals(now=clock()).team_total_seconds == 30
