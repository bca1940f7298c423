from __future__ import annotations

from datetime import timedelta

from flask import Flask, jsonify, request, session

from ..common.http import error_response, json_body, str_field
from ..core.exceptions import DomainError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/login", methods=["POST"], endpoint="login")
    def login():
        try:
            data = json_body() or request.form
            actor = container.auth_service.authenticate(str_field(data, "username"), str_field(data, "password"))
        except DomainError as e:
            return error_response(e)

        session.permanent = bool(data.get("remember_me"))
        app.permanent_session_lifetime = timedelta(days=7)
        session["user_id"] = actor.user_id
        session["name"] = actor.display_name
        session["email"] = actor.email
        return jsonify({"success": True, "user_id": actor.user_id, "name": actor.display_name})

    @app.route("/logout", methods=["POST"], endpoint="logout")
    def logout():
        session.clear()
        return jsonify({"success": True})

    @app.route("/register", methods=["POST"], endpoint="register")
    def register_account():
        try:
            data = json_body() or request.form
            user_id = container.user_service.create_account(
                username=str_field(data, "username"),
                display_name=str_field(data, "display_name"),
                email=str_field(data, "email"),
                password=str_field(data, "password"),
            )
        except DomainError as e:
            return error_response(e)
        return jsonify({"success": True, "user_id": user_id}), 201
