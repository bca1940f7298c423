from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import User
from .repository import UserRepository


def _row_to_user(r: dict) -> User:
    return User(
        user_id=int(r["user_id"]),
        username=r["username"],
        display_name=r.get("display_name") or "",
        email=r.get("email") or "",
        password_hash=r["password_hash"],
        is_active=bool(r.get("is_active", 1)),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT user_id, username, display_name, email, password_hash, is_active FROM users WHERE user_id=%s",
                (int(user_id),),
            )
            r = fetchone(cur)
            return _row_to_user(r) if r else None

    def get_by_username(self, username: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT user_id, username, display_name, email, password_hash, is_active FROM users WHERE username=%s",
                (username,),
            )
            r = fetchone(cur)
            return _row_to_user(r) if r else None

    def create_user(self, *, username: str, display_name: str, email: str, password_hash: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO users(username, display_name, email, password_hash)
                VALUES(%s, %s, %s, %s)
                """,
                (username, display_name, email, password_hash),
            )
            return int(cur.lastrowid)
