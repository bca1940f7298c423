from __future__ import annotations

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import require_non_empty
from ..core.constants import ANONYMOUS_NAME
from ..core.exceptions import AuthenticationError, ValidationError
from .model import Actor, User
from .repository import UserRepository


def to_actor(user: User) -> Actor:
    return Actor(
        user_id=user.user_id,
        display_name=(user.display_name or "").strip() or ANONYMOUS_NAME,
        email=user.email,
    )


class AuthService:
    """Use case: authenticate user (login)."""

    def __init__(self, users: UserRepository):
        self._users = users

    def authenticate(self, username: str, password: str) -> Actor:
        user = self._users.get_by_username((username or "").strip())
        if not user or not user.is_active:
            raise AuthenticationError("Invalid username or password")

        try:
            ok = check_password_hash(user.password_hash, password or "")
        except ValueError:
            # placeholder hashes like 'CHANGE_ME' or corrupted values
            ok = False

        if not ok:
            raise AuthenticationError("Invalid username or password")

        return to_actor(user)


class UserService:
    """Use case: register accounts."""

    MIN_PASSWORD_LENGTH = 6

    def __init__(self, users: UserRepository):
        self._users = users

    def create_account(self, *, username: str, display_name: str, email: str, password: str) -> int:
        username = require_non_empty(username, "Username")
        email = require_non_empty(email, "Email")
        if "@" not in email:
            raise ValidationError("Email is not valid")
        if password is None or len(password) < self.MIN_PASSWORD_LENGTH:
            raise ValidationError(f"Password must be at least {self.MIN_PASSWORD_LENGTH} characters")

        if self._users.get_by_username(username):
            raise ValidationError("Username already exists")

        return self._users.create_user(
            username=username,
            display_name=(display_name or "").strip(),
            email=email,
            password_hash=generate_password_hash(password),
        )
