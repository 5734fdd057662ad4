from __future__ import annotations

from flask import Flask, request

from ..common.http import can_act_for, error_response, make_bearer_required, result_response
from ..common.validators import require_positive_int
from ..core.exceptions import ValidationError
from ..core.result import ErrorKind
from ..container import Container


def register(app: Flask, container: Container) -> None:
    bearer_required = make_bearer_required(container.tokens)
    service = container.attendance_service

    def _resolve_user(raw_user_id: str):
        """Return (user_id, None) or (None, error response)."""
        try:
            user_id = require_positive_int(raw_user_id, "userId")
        except ValidationError as e:
            return None, error_response(ErrorKind.INVALID_INPUT, str(e))
        if not can_act_for(user_id):
            return None, error_response(ErrorKind.FORBIDDEN, "You can only manage your own attendance")
        if container.users_repo.get_by_id(user_id) is None:
            return None, error_response(ErrorKind.NOT_FOUND, "User not found")
        return user_id, None

    @app.route("/api/attendance/check-in/<user_id>", methods=["POST"], endpoint="attendance_check_in")
    @bearer_required
    def check_in(user_id: str):
        uid, err = _resolve_user(user_id)
        if err:
            return err
        return result_response(service.check_in(uid), lambda log: {"attendanceLog": log.to_dict()})

    @app.route("/api/attendance/check-out/<user_id>", methods=["POST"], endpoint="attendance_check_out")
    @bearer_required
    def check_out(user_id: str):
        uid, err = _resolve_user(user_id)
        if err:
            return err
        return result_response(service.check_out(uid), lambda log: {"attendanceLog": log.to_dict()})

    @app.route("/api/attendance/today/<user_id>", methods=["GET"], endpoint="attendance_today")
    @bearer_required
    def today(user_id: str):
        uid, err = _resolve_user(user_id)
        if err:
            return err
        return result_response(service.get_today(uid), lambda log: {"attendanceLog": log.to_dict()})

    @app.route("/api/attendance/logs/<user_id>", methods=["GET"], endpoint="attendance_logs")
    @bearer_required
    def list_logs(user_id: str):
        uid, err = _resolve_user(user_id)
        if err:
            return err
        result = service.list_logs(
            uid,
            page=request.args.get("page"),
            page_size=request.args.get("limit"),
            sort_field=request.args.get("sortBy"),
            sort_direction=request.args.get("sortOrder"),
        )
        return result_response(result, lambda page: page.to_dict())
