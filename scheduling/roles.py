"""Role claims on Firebase Auth users."""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

from firebase_admin import exceptions as firebase_exceptions

from scheduling.errors import Internal, InvalidArgument, PermissionDenied

VALID_ROLES = ("admin", "teacher", "student", "parent")


def caller_role(claims: Optional[Mapping[str, Any]]) -> str:
    return str((claims or {}).get("role") or "")


def set_user_role(
    auth_client: Any,
    caller_claims: Optional[Mapping[str, Any]],
    user_id: str,
    role: str,
) -> Dict[str, bool]:
    """Set ``role`` as a custom claim on ``user_id``.

    Only callers whose token already carries the ``admin`` role may do this.
    """

    if not caller_claims:
        raise PermissionDenied("Only admin users can set roles.")
    if caller_role(caller_claims) != "admin":
        raise PermissionDenied("Only admin users can set roles.")
    if not user_id or not role:
        raise InvalidArgument("The function must be called with userId and role arguments.")
    if role not in VALID_ROLES:
        raise InvalidArgument(f"Unknown role: {role!r}")

    try:
        auth_client.set_custom_user_claims(user_id, {"role": role})
    except (firebase_exceptions.FirebaseError, ValueError) as exc:
        logging.exception("Error setting custom claims for %s: %s", user_id, exc)
        raise Internal("Error setting user role.") from exc
    logging.info("Set role %s for user %s", role, user_id)
    return {"success": True}


def sync_role_claim(
    auth_client: Any,
    user_id: str,
    before: Optional[Mapping[str, Any]],
    after: Optional[Mapping[str, Any]],
) -> Optional[Dict[str, Any]]:
    """Mirror a ``users/{userId}`` role change onto the user's custom claims.

    Returns ``None`` when the document was deleted or the role is unchanged.
    Failures are reported in the result rather than raised, since the write
    that triggered the sync has already happened.
    """

    if not after or (before and before.get("role") == after.get("role")):
        return None

    try:
        auth_client.set_custom_user_claims(user_id, {"role": after.get("role")})
    except (firebase_exceptions.FirebaseError, ValueError) as exc:
        logging.error("Error updating custom claims for %s: %s", user_id, exc)
        return {"success": False, "error": str(exc)}
    return {"success": True}


__all__ = ["VALID_ROLES", "caller_role", "set_user_role", "sync_role_claim"]
