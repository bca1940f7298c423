"""Example: use the service layer without Flask.

Prints today's per-user totals and the session CSV for the configured DB.
"""

import importlib

from config import get_settings_module

from src.team_tracker.team_tracker.common.datetime_utils import local_date, now_utc
from src.team_tracker.team_tracker.container import build_container
from src.team_tracker.team_tracker.sessions.duration import format_hhmm


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG, reference_tz=settings.REFERENCE_TZ)
    reports = container.report_service

    now = now_utc()
    totals = reports.daily_totals(local_date(now, reports.tz), now=now)
    for u in totals.per_user:
        print(f"{u.user_name:<20} {format_hhmm(u.total_seconds)}")
    print(f"{'team':<20} {format_hhmm(totals.team_total_seconds)}")

    _, text = reports.export_sessions(now=now)
    print(text)


if __name__ == "__main__":
    main()
