"""HTTP endpoints for schedules, their sessions and live session state."""

from __future__ import annotations

from flask import Blueprint, g, jsonify, request

from scheduling.errors import InvalidArgument
from scheduling.routes.context import require_role, require_user, services, to_json

schedules_bp = Blueprint("schedules", __name__, url_prefix="/schedules")

EDITOR_ROLES = ("teacher", "admin")


def _json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise InvalidArgument("Request body must be a JSON object")
    return data


@schedules_bp.get("")
@require_user
def list_schedules():
    schedules = services().store.list_schedules(g.user_id, g.role)
    return jsonify(schedules=to_json(schedules)), 200


@schedules_bp.post("")
@require_role(*EDITOR_ROLES)
def create_schedule():
    result = services().store.create_schedule(_json_body())
    return jsonify(result), 201


@schedules_bp.get("/<schedule_id>")
@require_user
def get_schedule(schedule_id: str):
    return jsonify(to_json(services().store.get_schedule(schedule_id))), 200


@schedules_bp.patch("/<schedule_id>")
@require_role(*EDITOR_ROLES)
def update_schedule(schedule_id: str):
    services().store.update_schedule(schedule_id, _json_body())
    return jsonify(success=True, scheduleId=schedule_id), 200


@schedules_bp.patch("/<schedule_id>/days/<int:day_index>")
@require_role(*EDITOR_ROLES)
def update_single_session(schedule_id: str, day_index: int):
    services().store.update_single_session(schedule_id, day_index, _json_body())
    return jsonify(success=True, scheduleId=schedule_id), 200


@schedules_bp.delete("/<schedule_id>")
@require_role(*EDITOR_ROLES)
def delete_schedule(schedule_id: str):
    cascade = request.args.get("cascade", "true").strip().lower() not in {"0", "false", "no"}
    services().store.delete_schedule(schedule_id, cascade=cascade)
    return jsonify(success=True), 200


@schedules_bp.get("/<schedule_id>/sessions")
@require_user
def list_sessions(schedule_id: str):
    sessions = services().store.list_sessions(schedule_id)
    return jsonify(sessions=to_json(sessions)), 200


@schedules_bp.post("/sessions/start")
@require_role(*EDITOR_ROLES)
def start_session():
    data = _json_body()
    session = services().store.start_session(
        g.user_id, data.get("classId"), session_id=data.get("sessionId")
    )
    return jsonify(to_json(session)), 201


@schedules_bp.post("/sessions/close-all")
@require_role(*EDITOR_ROLES)
def close_all_sessions():
    closed = services().store.close_all_sessions(g.user_id)
    return jsonify(success=True, closed=closed), 200


@schedules_bp.post("/sessions/<session_id>/activity")
@require_user
def touch_session(session_id: str):
    services().store.touch_session(session_id)
    return jsonify(success=True), 200


@schedules_bp.post("/sessions/<session_id>/end")
@require_role(*EDITOR_ROLES)
def end_session(session_id: str):
    services().store.end_session(session_id)
    return jsonify(success=True), 200


__all__ = ["schedules_bp"]
