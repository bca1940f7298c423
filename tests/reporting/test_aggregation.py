from datetime import timedelta

from conftest import T0, make_session

from src.team_tracker.team_tracker.reporting.aggregation import aggregate

WINDOW = (T0 - timedelta(hours=9), T0 + timedelta(hours=15))


def test_empty_input():
    agg = aggregate([], *WINDOW, T0)

    assert agg.per_user == []
    assert agg.team_total_seconds == 0


def test_live_totals_for_open_sessions():
    a = make_session(1, user_id=1, user_name="A", start=T0)
    b = make_session(2, user_id=2, user_name="B", start=T0 + timedelta(seconds=10))

    agg = aggregate([a, b], *WINDOW, T0 + timedelta(seconds=40))

    assert [(u.user_name, u.total_seconds) for u in agg.per_user] == [("A", 40), ("B", 30)]
    assert agg.team_total_seconds == 70


def test_groups_by_user_and_uses_latest_name():
    sessions = [
        make_session(1, user_id=1, user_name="Old Name", start=T0, end=T0 + timedelta(minutes=10)),
        make_session(2, user_id=1, user_name="New Name", start=T0 + timedelta(hours=1), end=T0 + timedelta(hours=1, minutes=5)),
        make_session(3, user_id=2, user_name="Bob", start=T0, end=T0 + timedelta(minutes=1)),
    ]

    agg = aggregate(sessions, *WINDOW, T0 + timedelta(hours=2))

    assert agg.per_user[0].user_id == 1
    assert agg.per_user[0].user_name == "New Name"
    assert agg.per_user[0].total_seconds == 15 * 60
    assert agg.team_total_seconds == sum(u.total_seconds for u in agg.per_user)


def test_window_is_half_open_on_start():
    start, end = WINDOW
    inside = make_session(1, user_id=1, start=start, end=start + timedelta(seconds=10))
    at_end = make_session(2, user_id=2, start=end, end=end + timedelta(seconds=10))
    before = make_session(3, user_id=3, start=start - timedelta(seconds=1), end=start + timedelta(seconds=100))

    agg = aggregate([inside, at_end, before], start, end, end + timedelta(hours=1))

    assert [u.user_id for u in agg.per_user] == [1]


def test_ties_are_sorted_by_name():
    sessions = [
        make_session(1, user_id=1, user_name="Zoe", start=T0, end=T0 + timedelta(seconds=30)),
        make_session(2, user_id=2, user_name="Adam", start=T0, end=T0 + timedelta(seconds=30)),
        make_session(3, user_id=3, user_name="Max", start=T0, end=T0 + timedelta(seconds=90)),
    ]

    agg = aggregate(sessions, *WINDOW, T0)

    assert [u.user_name for u in agg.per_user] == ["Max", "Adam", "Zoe"]


def test_clock_anomalies_count_as_zero_and_are_reported():
    bad = make_session(9, user_id=1, start=T0, end=T0 - timedelta(seconds=50))
    good = make_session(10, user_id=1, start=T0, end=T0 + timedelta(seconds=20))

    agg = aggregate([bad, good], *WINDOW, T0)

    assert agg.team_total_seconds == 20
    assert [a.session_id for a in agg.anomalies] == [9]
