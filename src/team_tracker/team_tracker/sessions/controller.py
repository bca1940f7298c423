from __future__ import annotations

from flask import Flask, jsonify

from ..common.datetime_utils import now_utc
from ..common.http import current_actor, error_response, json_body, login_required, str_field, str_list_field
from ..core.exceptions import DomainError, ValidationError
from ..container import Container
from ..reporting.service import session_row


def register(app: Flask, container: Container) -> None:
    sessions = container.session_service

    @app.route("/api/me/active", methods=["GET"], endpoint="my_active_session")
    @login_required
    def my_active_session():
        try:
            active = sessions.get_active(current_actor().user_id)
        except DomainError as e:
            return error_response(e)
        return jsonify({"active": session_row(active, now=now_utc()) if active else None})

    @app.route("/api/checkin", methods=["POST"], endpoint="checkin")
    @login_required
    def checkin():
        try:
            data = json_body()
            created = sessions.check_in(
                current_actor(),
                str_field(data, "task"),
                tags=str_list_field(data, "tags"),
                note_at_start=str_field(data, "note"),
            )
        except DomainError as e:
            return error_response(e)
        return jsonify({"success": True, "session": session_row(created, now=now_utc())}), 201

    @app.route("/api/checkout", methods=["POST"], endpoint="checkout")
    @login_required
    def checkout():
        actor = current_actor()
        try:
            data = json_body()
            session_id = data.get("session_id")
            if session_id is None:
                active = sessions.get_active(actor.user_id)
                session_id = active.session_id if active else 0
            if isinstance(session_id, bool) or not isinstance(session_id, (int, str)):
                raise ValidationError("session_id must be an integer")
            try:
                session_id = int(session_id)
            except ValueError:
                raise ValidationError("session_id must be an integer")
            sessions.check_out(actor, session_id, str_field(data, "summary"))
        except DomainError as e:
            return error_response(e)
        return jsonify({"success": True})

    @app.route("/api/sessions/<int:session_id>/notes", methods=["POST"], endpoint="add_note")
    @login_required
    def add_note(session_id: int):
        try:
            data = json_body()
            sessions.add_note(current_actor(), session_id, str_field(data, "text"))
        except DomainError as e:
            return error_response(e)
        return jsonify({"success": True}), 201

    @app.route("/api/sessions/<int:session_id>/tags", methods=["POST"], endpoint="add_tag")
    @login_required
    def add_tag(session_id: int):
        try:
            data = json_body()
            sessions.add_tag(current_actor(), session_id, str_field(data, "tag"))
        except DomainError as e:
            return error_response(e)
        return jsonify({"success": True})
