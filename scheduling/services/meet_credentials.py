"""Per-teacher Google credentials stored in ``meetCredentials/{userId}``."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from firebase_admin import firestore

from scheduling.config import Settings
from scheduling.firestore_helpers import coerce_timestamp
from scheduling.services.calendar import (
    CalendarProvider,
    GoogleCalendar,
    PlaceholderCalendar,
    refresh_access_token,
)

COLLECTION_NAME = "meetCredentials"
EXPIRY_BUFFER = timedelta(minutes=5)


def are_credentials_valid(
    credentials: Optional[Dict[str, Any]], *, now: Optional[datetime] = None
) -> bool:
    """True when the stored access token outlives the five minute buffer."""

    if not credentials or not credentials.get("googleAccessToken"):
        return False
    expires_at = coerce_timestamp(credentials.get("expiresAt"))
    if expires_at is None:
        return False
    current = now or datetime.now(timezone.utc)
    return current < expires_at - EXPIRY_BUFFER


class MeetCredentialStore:
    def __init__(self, db: Any) -> None:
        self.db = db

    def _ref(self, user_id: str):
        return self.db.collection(COLLECTION_NAME).document(user_id)

    def get(self, user_id: str) -> Optional[Dict[str, Any]]:
        try:
            snap = self._ref(user_id).get()
            return (snap.to_dict() or {}) if snap.exists else None
        except Exception as exc:  # pragma: no cover - runtime depends on Firestore
            logging.exception("Error getting Meet credentials for %s: %s", user_id, exc)
            return None

    def store(self, user_id: str, credentials: Dict[str, Any]) -> None:
        payload = dict(credentials)
        payload["updatedAt"] = firestore.SERVER_TIMESTAMP
        try:
            self._ref(user_id).set(payload)
        except Exception as exc:
            logging.exception("Error storing Meet credentials for %s: %s", user_id, exc)
            raise

    def remove(self, user_id: str) -> None:
        try:
            self._ref(user_id).delete()
        except Exception as exc:
            logging.exception("Error removing Meet credentials for %s: %s", user_id, exc)
            raise


def calendar_for_teacher(
    teacher_id: str,
    *,
    settings: Settings,
    credential_store: Optional[MeetCredentialStore] = None,
    now: Optional[datetime] = None,
) -> CalendarProvider:
    """Return the calendar provider to use for ``teacher_id``'s sessions.

    With the ``google`` backend the teacher's stored token is used, refreshed
    first when it is about to expire.  Teachers without a connected Google
    account fall back to the placeholder provider.
    """

    if settings.calendar_backend != "google" or credential_store is None:
        return PlaceholderCalendar()

    creds = credential_store.get(teacher_id)
    if not creds:
        logging.warning("No Google credentials for teacher %s; using placeholder calendar", teacher_id)
        return PlaceholderCalendar()

    if not are_credentials_valid(creds, now=now):
        refreshed = refresh_access_token(
            creds.get("googleRefreshToken", ""),
            client_id=settings.google_client_id,
            client_secret=settings.google_client_secret,
        )
        creds = {**creds, **refreshed}
        credential_store.store(teacher_id, creds)

    return GoogleCalendar(creds["googleAccessToken"], time_zone=settings.timezone)


__all__ = [
    "COLLECTION_NAME",
    "MeetCredentialStore",
    "are_credentials_valid",
    "calendar_for_teacher",
]
