from __future__ import annotations

from dataclasses import dataclass

from .common.datetime_utils import get_zone
from .core.constants import DEFAULT_REFERENCE_TZ, DEFAULT_TEAM_LOG_LIMIT
from .database.connection import DatabaseConnection
from .reporting.service import ReportService
from .sessions.mysql_session_repository import MySQLSessionRepository
from .sessions.service import SessionService
from .users.mysql_user_repository import MySQLUserRepository
from .users.service import AuthService, UserService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    users_repo: MySQLUserRepository
    sessions_repo: MySQLSessionRepository

    auth_service: AuthService
    user_service: UserService
    session_service: SessionService
    report_service: ReportService


def build_container(
    *,
    db_config: dict,
    reference_tz: str = DEFAULT_REFERENCE_TZ,
    team_log_limit: int = DEFAULT_TEAM_LOG_LIMIT,
) -> Container:
    conn = DatabaseConnection.from_dict(db_config)

    users_repo = MySQLUserRepository(conn)
    sessions_repo = MySQLSessionRepository(conn)

    return Container(
        conn=conn,
        users_repo=users_repo,
        sessions_repo=sessions_repo,
        auth_service=AuthService(users_repo),
        user_service=UserService(users_repo),
        session_service=SessionService(sessions_repo),
        report_service=ReportService(sessions_repo, tz=get_zone(reference_tz), limit=team_log_limit),
    )
