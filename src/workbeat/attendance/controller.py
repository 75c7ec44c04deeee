from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date, parse_iso_datetime
from ..common.validators import require_int
from ..core.exceptions import NotFoundError, ValidationError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    def _parse_date(value: str, field_name: str):
        try:
            return parse_iso_date(value)
        except (TypeError, ValueError):
            raise ValidationError(f"{field_name} must be YYYY-MM-DD")

    @app.route("/api/attendance/events", methods=["POST"], endpoint="attendance_record_event")
    def attendance_record_event():
        payload = request.get_json(silent=True) or {}
        employee_id = require_int(payload.get("employee_id"), "employee_id")
        organization_id = require_int(payload.get("organization_id"), "organization_id")

        timestamp = None
        if payload.get("timestamp"):
            try:
                timestamp = parse_iso_datetime(str(payload["timestamp"]))
            except ValueError:
                raise ValidationError("timestamp must be an ISO-8601 datetime")

        if "schedule" in payload:
            schedule = payload.get("schedule")
        else:
            employee = container.employees_repo.get(employee_id=employee_id, organization_id=organization_id)
            if not employee:
                raise NotFoundError("Employee not found")
            schedule = employee.work_schedule

        result = container.attendance_service.record_event(
            employee_id,
            organization_id,
            payload.get("type"),
            timestamp=timestamp,
            schedule=schedule,
            notes=payload.get("notes"),
        )
        return jsonify({"success": True, "data": result.to_dict(), "is_late": result.is_late}), 201

    @app.route(
        "/api/attendance/<int:employee_id>/<work_date>",
        methods=["GET"],
        endpoint="attendance_day_record",
    )
    def attendance_day_record(employee_id: int, work_date: str):
        organization_id = require_int(request.args.get("organization_id"), "organization_id")
        record = container.attendance_service.get_day_record(
            employee_id, organization_id, _parse_date(work_date, "date")
        )
        if not record:
            raise NotFoundError("No attendance recorded for this day")
        return jsonify({"success": True, "data": record.to_dict()})

    @app.route("/api/attendance/<int:employee_id>", methods=["GET"], endpoint="attendance_history")
    def attendance_history(employee_id: int):
        organization_id = require_int(request.args.get("organization_id"), "organization_id")
        start_s = request.args.get("start")
        end_s = request.args.get("end")
        rows = container.attendance_service.get_history(
            employee_id,
            organization_id,
            start_date=_parse_date(start_s, "start") if start_s else None,
            end_date=_parse_date(end_s, "end") if end_s else None,
            limit=require_int(request.args.get("limit", 30), "limit"),
        )
        return jsonify({"success": True, "data": rows})
