from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class User:
    """Domain entity: an account allowed to track time.

    Note: Plain data object (no DB access code).
    """

    user_id: int
    username: str
    display_name: str
    email: str
    password_hash: str
    is_active: bool = True


@dataclass(frozen=True)
class Actor:
    """Identity of whoever performs an operation; trusted as given."""

    user_id: int
    display_name: str
    email: str
