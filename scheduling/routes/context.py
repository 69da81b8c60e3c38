"""Request plumbing shared by the Flask blueprints."""

from __future__ import annotations

import functools
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Optional

from firebase_admin import auth as firebase_auth
from flask import current_app, g, request

from scheduling.config import Settings
from scheduling.errors import PermissionDenied
from scheduling.janitor import SessionJanitor
from scheduling.roles import caller_role
from scheduling.schedule_store import ScheduleStore
from scheduling.services.meet_credentials import MeetCredentialStore

EXTENSION_KEY = "iqra"


@dataclass
class Services:
    """Long-lived collaborators created once by the application factory."""

    settings: Settings
    db: Any
    auth: Any
    store: ScheduleStore
    janitor: SessionJanitor
    credentials: Optional[MeetCredentialStore] = None


def services() -> Services:
    return current_app.extensions[EXTENSION_KEY]


def _bearer_token() -> str:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer":
        return ""
    return token.strip()


def require_user(fn):
    """Verify the Firebase ID token and expose ``g.user_id`` / ``g.role``."""

    @functools.wraps(fn)
    def wrapper(*args, **kwargs):
        token = _bearer_token()
        if not token:
            raise PermissionDenied("Missing bearer token")
        try:
            claims = services().auth.verify_id_token(token)
        except (firebase_auth.InvalidIdTokenError, firebase_auth.ExpiredIdTokenError, ValueError) as exc:
            raise PermissionDenied("Invalid ID token") from exc
        g.user_id = claims.get("uid") or claims.get("sub")
        g.claims = claims
        g.role = caller_role(claims)
        return fn(*args, **kwargs)

    return wrapper


def require_role(*roles: str):
    def decorator(fn):
        @functools.wraps(fn)
        @require_user
        def wrapper(*args, **kwargs):
            if g.role not in roles:
                raise PermissionDenied(f"Requires role: {', '.join(roles)}")
            return fn(*args, **kwargs)

        return wrapper

    return decorator


def to_json(value: Any) -> Any:
    """Recursively turn dates into ISO strings for ``jsonify``."""

    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, dict):
        return {str(key): to_json(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json(item) for item in value]
    return value


__all__ = ["EXTENSION_KEY", "Services", "require_role", "require_user", "services", "to_json"]
