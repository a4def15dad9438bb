from __future__ import annotations

from datetime import timedelta

from flask import Flask, request

from ..common.datetime_utils import now_local
from ..common.http import api_login_required, current_actor, json_body, ok, optional_date
from ..container import Container

DEFAULT_HISTORY_DAYS = 30


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service

    @app.route("/api/attendance/clock-in", methods=["POST"], endpoint="api_clock_in")
    @api_login_required
    def clock_in():
        entry = service.clock_in(current_actor(), notes=json_body().get("notes"))
        return ok({"message": "Clocked in successfully", "entry": entry.to_dict()})

    @app.route("/api/attendance/clock-out", methods=["POST"], endpoint="api_clock_out")
    @api_login_required
    def clock_out():
        entry = service.clock_out(current_actor(), notes=json_body().get("notes"))
        return ok({"message": "Clocked out successfully", "entry": entry.to_dict()})

    @app.route("/api/attendance/status", methods=["GET"], endpoint="api_attendance_status")
    @api_login_required
    def status():
        actor = current_actor()
        st = service.status(actor.user_id)
        return ok(
            {
                "is_clocked_in": st.is_clocked_in,
                "last_entry": st.last_entry.to_dict() if st.last_entry else None,
                "today_entries": [e.to_dict() for e in st.today_entries],
            }
        )

    @app.route("/api/attendance/history", methods=["GET"], endpoint="api_attendance_history")
    @api_login_required
    def history():
        actor = current_actor()
        today = now_local().date()
        end = optional_date(request.args.get("end")) or today
        start = optional_date(request.args.get("start")) or end - timedelta(days=DEFAULT_HISTORY_DAYS)
        entries = service.history(actor.user_id, start=start, end=end)
        return ok(
            {
                "start": start.isoformat(),
                "end": end.isoformat(),
                "entries": [e.to_dict() for e in entries],
            }
        )

    @app.route("/api/attendance/today", methods=["GET"], endpoint="api_attendance_today")
    @api_login_required
    def today():
        actor = current_actor()
        entries = service.entries_for_day(actor.user_id, now_local().date())
        return ok({"entries": [e.to_dict() for e in entries]})
