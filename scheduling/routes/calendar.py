"""Calendar month projection over HTTP."""

from __future__ import annotations

import logging
from datetime import date

from flask import Blueprint, g, jsonify, request

from scheduling.calendar_view import entries_from_documents, entry_from_payload, project
from scheduling.errors import InvalidArgument
from scheduling.routes.context import require_user, services

calendar_bp = Blueprint("calendar", __name__, url_prefix="/calendar")


def _month_args(source) -> tuple[int, int]:
    today = date.today()
    try:
        year = int(source.get("year", today.year))
        month = int(source.get("month", today.month))
    except (TypeError, ValueError):
        raise InvalidArgument("year and month must be integers") from None
    return year, month


def _serialise(index) -> dict:
    return {
        day.isoformat(): [occurrence.to_dict() for occurrence in occurrences]
        for day, occurrences in sorted(index.items())
    }


@calendar_bp.get("")
@require_user
def month():
    year, month_number = _month_args(request.args)
    schedules = services().store.list_schedules(g.user_id, g.role)
    index = project(entries_from_documents(schedules=schedules), year, month_number)
    return jsonify(year=year, month=month_number, days=_serialise(index)), 200


@calendar_bp.post("/project")
@require_user
def project_entries():
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        body = {}
    year, month_number = _month_args(body)
    raw_entries = body.get("entries") or []
    if not isinstance(raw_entries, list):
        raise InvalidArgument("entries must be a list")
    entries = []
    for raw in raw_entries:
        try:
            if not isinstance(raw, dict):
                raise InvalidArgument("Each entry must be an object")
            entries.append(entry_from_payload(raw))
        except (InvalidArgument, TypeError, ValueError) as exc:
            logging.warning("Skipping calendar entry %r: %s", raw, exc)
    index = project(entries, year, month_number)
    return jsonify(year=year, month=month_number, days=_serialise(index)), 200


__all__ = ["calendar_bp"]
