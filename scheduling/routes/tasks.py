"""Endpoints invoked by the scheduler / trigger host.

Cloud Scheduler calls the sweeps on ``INACTIVITY_CRON`` and ``CLEANUP_CRON``;
the ``users/{userId}`` write trigger posts the before/after documents to
``/tasks/role-sync``.  All of them require the ``X-Tasks-Secret`` header.
"""

from __future__ import annotations

import functools
import hmac
from dataclasses import asdict

from flask import Blueprint, jsonify, request

from scheduling.errors import InvalidArgument, PermissionDenied
from scheduling.roles import sync_role_claim
from scheduling.routes.context import services

tasks_bp = Blueprint("tasks", __name__, url_prefix="/tasks")

SECRET_HEADER = "X-Tasks-Secret"


def require_task_secret(fn):
    @functools.wraps(fn)
    def wrapper(*args, **kwargs):
        expected = services().settings.tasks_secret
        supplied = request.headers.get(SECRET_HEADER, "")
        if not expected or not hmac.compare_digest(expected, supplied):
            raise PermissionDenied("Invalid task secret")
        return fn(*args, **kwargs)

    return wrapper


@tasks_bp.post("/close-inactive")
@require_task_secret
def close_inactive():
    closed = services().janitor.close_inactive_sessions()
    return jsonify(success=True, closed=closed), 200


@tasks_bp.post("/cleanup")
@require_task_secret
def cleanup():
    stats = services().janitor.cleanup_old_data()
    return jsonify(success=True, total=stats.total, **asdict(stats)), 200


@tasks_bp.post("/role-sync")
@require_task_secret
def role_sync():
    body = request.get_json(silent=True)
    if not isinstance(body, dict) or not body.get("userId"):
        raise InvalidArgument("userId is required")
    result = sync_role_claim(
        services().auth, body["userId"], body.get("before"), body.get("after")
    )
    return jsonify(result=result), 200


__all__ = ["tasks_bp", "SECRET_HEADER"]
