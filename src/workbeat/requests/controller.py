from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import now_local, parse_iso_date
from ..common.validators import require_int
from ..core.exceptions import ValidationError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    def _parse_date(value, field_name: str):
        try:
            return parse_iso_date(str(value))
        except (TypeError, ValueError):
            raise ValidationError(f"{field_name} must be YYYY-MM-DD")

    def _optional_int(value, field_name: str):
        return require_int(value, field_name) if value not in (None, "") else None

    @app.route("/api/leave/requests", methods=["POST"], endpoint="leave_request_create")
    def leave_request_create():
        payload = request.get_json(silent=True) or {}
        if not payload.get("start_date") or not payload.get("end_date"):
            raise ValidationError("Employee, leave type, start date, and end date are required")

        leave_request = container.request_service.create_leave(
            organization_id=require_int(payload.get("organization_id"), "organization_id"),
            employee_id=require_int(payload.get("employee_id"), "employee_id"),
            leave_type_id=require_int(payload.get("leave_type_id"), "leave_type_id"),
            start_date=_parse_date(payload["start_date"], "start_date"),
            end_date=_parse_date(payload["end_date"], "end_date"),
            reason=payload.get("reason") or "",
        )
        return jsonify({"success": True, "data": leave_request.to_dict()}), 201

    @app.route("/api/leave/requests", methods=["GET"], endpoint="leave_request_list")
    def leave_request_list():
        rows = container.request_service.list_requests(
            organization_id=require_int(request.args.get("organization_id"), "organization_id"),
            employee_id=_optional_int(request.args.get("employee_id"), "employee_id"),
            status=request.args.get("status") or None,
            limit=require_int(request.args.get("limit", 200), "limit"),
        )
        return jsonify({"success": True, "data": rows})

    @app.route("/api/leave/requests/<int:request_id>/approve", methods=["POST"], endpoint="leave_request_approve")
    def leave_request_approve(request_id: int):
        payload = request.get_json(silent=True) or {}
        leave_request = container.request_service.approve_leave(
            organization_id=require_int(payload.get("organization_id"), "organization_id"),
            request_id=request_id,
            decided_by=_optional_int(payload.get("approver_id"), "approver_id"),
        )
        return jsonify({"success": True, "data": leave_request.to_dict()})

    @app.route("/api/leave/requests/<int:request_id>/reject", methods=["POST"], endpoint="leave_request_reject")
    def leave_request_reject(request_id: int):
        payload = request.get_json(silent=True) or {}
        leave_request = container.request_service.reject_leave(
            organization_id=require_int(payload.get("organization_id"), "organization_id"),
            request_id=request_id,
            decided_by=_optional_int(payload.get("approver_id"), "approver_id"),
            rejection_reason=payload.get("rejection_reason") or "",
        )
        return jsonify({"success": True, "data": leave_request.to_dict()})

    @app.route("/api/leave/requests/<int:request_id>/cancel", methods=["POST"], endpoint="leave_request_cancel")
    def leave_request_cancel(request_id: int):
        payload = request.get_json(silent=True) or {}
        leave_request = container.request_service.cancel_leave(
            organization_id=require_int(payload.get("organization_id"), "organization_id"),
            request_id=request_id,
        )
        return jsonify({"success": True, "message": "Leave request cancelled", "data": leave_request.to_dict()})

    @app.route("/api/leave/balances/<int:employee_id>", methods=["GET"], endpoint="leave_balances_employee")
    def leave_balances_employee(employee_id: int):
        year = require_int(request.args.get("year", now_local().year), "year")
        summary = container.leave_ledger.employee_summary(
            employee_id,
            require_int(request.args.get("organization_id"), "organization_id"),
            year,
        )
        return jsonify({"success": True, "data": summary["balances"], "summary": summary["summary"]})

    @app.route("/api/leave/balances/initialize", methods=["POST"], endpoint="leave_balances_initialize")
    def leave_balances_initialize():
        payload = request.get_json(silent=True) or {}
        year = require_int(payload.get("year", now_local().year), "year")
        created = container.leave_ledger.initialize_year(
            require_int(payload.get("organization_id"), "organization_id"),
            year,
        )
        return jsonify(
            {
                "success": True,
                "message": f"Initialized {created} leave balances for year {year}",
                "created": created,
            }
        )

    @app.route(
        "/api/leave/balances/<int:employee_id>/<int:leave_type_id>/<int:year>",
        methods=["PUT"],
        endpoint="leave_balance_adjust",
    )
    def leave_balance_adjust(employee_id: int, leave_type_id: int, year: int):
        payload = request.get_json(silent=True) or {}
        fields = {name: payload.get(name) for name in ("allocated_days", "used_days", "pending_days")}
        if all(value is None for value in fields.values()):
            raise ValidationError("Provide at least one of allocated_days, used_days, pending_days")

        balance = container.leave_ledger.adjust(
            employee_id,
            leave_type_id,
            year,
            reason=payload.get("reason"),
            **fields,
        )
        return jsonify({"success": True, "message": "Leave balance updated", "data": balance.to_dict()})
