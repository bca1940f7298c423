from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import local_date, now_utc, parse_iso_date
from ..common.http import error_response, login_required
from ..core.constants import ALL_TAGS
from ..core.enums import DateScope
from ..core.exceptions import DomainError, ValidationError
from ..container import Container
from .service import totals_dict


def register(app: Flask, container: Container) -> None:
    reports = container.report_service

    def _scope() -> DateScope:
        try:
            return DateScope(request.args.get("scope", DateScope.TODAY.value))
        except ValueError:
            raise ValidationError("scope must be 'today' or 'all'")

    def _day(now):
        value = request.args.get("date")
        if not value:
            return local_date(now, reports.tz)
        try:
            return parse_iso_date(value)
        except ValueError:
            raise ValidationError("date must be YYYY-MM-DD")

    def _csv(filename: str, text: str):
        return app.response_class(
            text.encode("utf-8-sig"),
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    @app.route("/api/team", methods=["GET"], endpoint="team_view")
    @login_required
    def team_view():
        now = now_utc()
        try:
            view = reports.team_view(
                now=now,
                search=request.args.get("search", ""),
                tag=request.args.get("tag", ALL_TAGS),
                scope=_scope(),
            )
        except DomainError as e:
            return error_response(e)
        return jsonify({"rows": view.rows, "tags": view.tags, "generated_at": now.isoformat()})

    @app.route("/api/totals/day", methods=["GET"], endpoint="daily_totals")
    @login_required
    def daily_totals():
        now = now_utc()
        try:
            agg = reports.daily_totals(_day(now), now=now)
        except DomainError as e:
            return error_response(e)
        return jsonify(totals_dict(agg))

    @app.route("/api/totals/week", methods=["GET"], endpoint="weekly_totals")
    @login_required
    def weekly_totals():
        now = now_utc()
        try:
            agg = reports.weekly_totals(_day(now), now=now)
        except DomainError as e:
            return error_response(e)
        return jsonify(totals_dict(agg))

    @app.route("/export/sessions.csv", methods=["GET"], endpoint="export_sessions")
    @login_required
    def export_sessions():
        try:
            filename, text = reports.export_sessions(
                now=now_utc(),
                search=request.args.get("search", ""),
                tag=request.args.get("tag", ALL_TAGS),
                scope=_scope(),
            )
        except DomainError as e:
            return error_response(e)
        return _csv(filename, text)

    @app.route("/export/weekly.csv", methods=["GET"], endpoint="export_weekly")
    @login_required
    def export_weekly():
        now = now_utc()
        try:
            filename, text = reports.export_weekly(_day(now), now=now)
        except DomainError as e:
            return error_response(e)
        return _csv(filename, text)
