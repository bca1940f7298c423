from __future__ import annotations

import logging
from functools import wraps

from flask import jsonify, request, session

from ..core.exceptions import (
    AlreadyActiveError,
    AuthenticationError,
    AuthorizationError,
    DomainError,
    NotActiveError,
    SessionClosedError,
    StoreUnavailableError,
    ValidationError,
)
from ..users.model import Actor

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR = (
    (ValidationError, 400),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (AlreadyActiveError, 409),
    (SessionClosedError, 409),
    (NotActiveError, 409),
    (StoreUnavailableError, 503),
)


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"success": False, "message": "Please log in to continue"}), 401
        return view(*args, **kwargs)

    return wrapper


def current_actor() -> Actor:
    return Actor(
        user_id=int(session["user_id"]),
        display_name=session.get("name", ""),
        email=session.get("email", ""),
    )


def json_body() -> dict:
    """Return the JSON object sent with the request, or `{}` when there is none."""

    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def str_field(data, key: str, default: str = "") -> str:
    value = data.get(key, default)
    if value is None:
        return default
    if not isinstance(value, str):
        raise ValidationError(f"{key} must be a string")
    return value


def str_list_field(data, key: str) -> list[str]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ValidationError(f"{key} must be a list of strings")
    return value


def error_response(e: DomainError):
    for error_type, status in _STATUS_BY_ERROR:
        if isinstance(e, error_type):
            break
    else:
        status = 400
    if status >= 500:
        logger.error("%s: %s", type(e).__name__, e)
    return jsonify({"success": False, "error": type(e).__name__, "message": str(e)}), status
