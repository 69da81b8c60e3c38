# auth.py
"""Identity endpoints: role claims and the teacher's Google calendar link."""

from flask import Blueprint, g, jsonify, request

from scheduling.errors import InvalidArgument, NotFound
from scheduling.roles import set_user_role
from scheduling.routes.context import require_role, require_user, services
from scheduling.services.calendar import refresh_access_token

auth_bp = Blueprint("auth", __name__, url_prefix="/auth")

_CREDENTIAL_FIELDS = ("googleAccessToken", "googleRefreshToken", "expiresAt", "associatedEmail")


def _credential_store():
    store = services().credentials
    if store is None:
        raise NotFound("Google calendar integration is not configured")
    return store


@auth_bp.get("/me")
@require_user
def me():
    return jsonify(userId=g.user_id, role=g.role or None), 200


@auth_bp.post("/roles")
@require_user
def assign_role():
    data = request.get_json(silent=True) or {}
    result = set_user_role(services().auth, g.claims, data.get("userId"), data.get("role"))
    return jsonify(result), 200


@auth_bp.post("/google/credentials")
@require_role("teacher", "admin")
def store_google_credentials():
    data = request.get_json(silent=True) or {}
    if not data.get("googleAccessToken"):
        raise InvalidArgument("googleAccessToken is required")
    payload = {key: data.get(key) for key in _CREDENTIAL_FIELDS if data.get(key) is not None}
    _credential_store().store(g.user_id, payload)
    return jsonify(success=True), 200


@auth_bp.delete("/google/credentials")
@require_role("teacher", "admin")
def remove_google_credentials():
    _credential_store().remove(g.user_id)
    return jsonify(success=True), 200


@auth_bp.post("/google/refresh")
@require_role("teacher", "admin")
def refresh_google_token():
    store = _credential_store()
    creds = store.get(g.user_id)
    if not creds:
        raise NotFound("No Google credentials on file")
    settings = services().settings
    refreshed = refresh_access_token(
        creds.get("googleRefreshToken", ""),
        client_id=settings.google_client_id,
        client_secret=settings.google_client_secret,
    )
    store.store(g.user_id, {**creds, **refreshed})
    return jsonify(success=True, expiresAt=refreshed.get("expiresAt")), 200


__all__ = ["auth_bp"]
