"""Liveness route."""

from flask import Blueprint, jsonify

from scheduling.routes.context import services

health_bp = Blueprint("health", __name__)


@health_bp.get("/health")
def health():
    settings = services().settings
    return jsonify(
        ok=True,
        timezone=settings.timezone,
        horizonWeeks=settings.horizon_weeks,
        calendarBackend=settings.calendar_backend,
    ), 200


__all__ = ["health_bp"]
