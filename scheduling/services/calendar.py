"""Calendar/meeting providers used when sessions are materialised.

``PlaceholderCalendar`` returns synthetic identifiers and is the default until
a teacher connects a Google account.  ``GoogleCalendar`` talks to the Calendar
v3 REST API and asks Google to attach a Meet conference to every event.
"""

from __future__ import annotations

import itertools
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Protocol

import requests
from google.auth.exceptions import RefreshError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials

from scheduling.errors import Internal, PermissionDenied

GOOGLE_CALENDAR_API_BASE = "https://www.googleapis.com/calendar/v3"
GOOGLE_TOKEN_URI = "https://oauth2.googleapis.com/token"
CALENDAR_SCOPES = [
    "https://www.googleapis.com/auth/calendar",
    "https://www.googleapis.com/auth/calendar.events",
]


@dataclass
class EventDetails:
    title: str
    description: str
    start: datetime
    end: datetime
    attendees: List[str] = field(default_factory=list)


class CalendarProvider(Protocol):
    def create_event(self, details: EventDetails) -> Dict[str, Optional[str]]: ...

    def update_event(self, event_id: str, *, start: datetime, end: datetime) -> bool: ...

    def delete_event(self, event_id: str) -> bool: ...


class PlaceholderCalendar:
    """Stand-in provider that only logs what it would have done."""

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._counter = itertools.count(1)

    def create_event(self, details: EventDetails) -> Dict[str, Optional[str]]:
        logging.info("Calendar event to be created: %s at %s", details.title, details.start.isoformat())
        stamp = f"{int(self._clock() * 1000)}{next(self._counter):03d}"
        return {
            "eventId": f"temp_{stamp}",
            "meetLink": f"https://meet.google.com/placeholder-{stamp}",
        }

    def update_event(self, event_id: str, *, start: datetime, end: datetime) -> bool:
        logging.info("Calendar event to be updated: %s -> %s", event_id, start.isoformat())
        return True

    def delete_event(self, event_id: str) -> bool:
        logging.info("Calendar event to be deleted: %s", event_id)
        return True


class GoogleCalendar:
    """Google Calendar v3 client authorised with a user's OAuth access token."""

    def __init__(
        self,
        access_token: str,
        *,
        time_zone: str,
        calendar_id: str = "primary",
        session: Optional[requests.Session] = None,
        timeout: float = 30.0,
    ) -> None:
        if not access_token:
            raise PermissionDenied("A Google access token is required")
        self.time_zone = time_zone
        self.calendar_id = calendar_id
        self.timeout = timeout
        self._session = session or requests.Session()
        self._headers = {"Authorization": f"Bearer {access_token}"}

    def _events_url(self, event_id: str = "") -> str:
        url = f"{GOOGLE_CALENDAR_API_BASE}/calendars/{self.calendar_id}/events"
        return f"{url}/{event_id}" if event_id else url

    def _when(self, value: datetime) -> Dict[str, str]:
        return {"dateTime": value.isoformat(), "timeZone": self.time_zone}

    def create_event(self, details: EventDetails) -> Dict[str, Optional[str]]:
        body = {
            "summary": details.title,
            "description": details.description,
            "start": self._when(details.start),
            "end": self._when(details.end),
            "attendees": [{"email": email} for email in details.attendees if "@" in str(email)],
            "conferenceData": {
                "createRequest": {
                    "requestId": f"iqra-{int(time.time() * 1000)}-{id(details):x}",
                    "conferenceSolutionKey": {"type": "hangoutsMeet"},
                }
            },
        }
        try:
            resp = self._session.post(
                self._events_url(),
                params={"conferenceDataVersion": 1},
                json=body,
                headers=self._headers,
                timeout=self.timeout,
            )
            resp.raise_for_status()
        except requests.RequestException as exc:
            raise Internal(f"Failed to create calendar event: {exc}") from exc
        data = resp.json() or {}
        return {"eventId": data.get("id"), "meetLink": data.get("hangoutLink")}

    def update_event(self, event_id: str, *, start: datetime, end: datetime) -> bool:
        try:
            resp = self._session.patch(
                self._events_url(event_id),
                json={"start": self._when(start), "end": self._when(end)},
                headers=self._headers,
                timeout=self.timeout,
            )
            resp.raise_for_status()
        except requests.RequestException as exc:
            raise Internal(f"Failed to update calendar event {event_id}: {exc}") from exc
        return True

    def delete_event(self, event_id: str) -> bool:
        try:
            resp = self._session.delete(
                self._events_url(event_id), headers=self._headers, timeout=self.timeout
            )
            if resp.status_code in (404, 410):
                return True
            resp.raise_for_status()
        except requests.RequestException as exc:
            raise Internal(f"Failed to delete calendar event {event_id}: {exc}") from exc
        return True


def refresh_access_token(
    refresh_token: str,
    *,
    client_id: str,
    client_secret: str,
    request: Optional[Request] = None,
) -> Dict[str, Any]:
    """Exchange ``refresh_token`` for a fresh calendar-scoped access token."""

    if not refresh_token:
        raise PermissionDenied("No Google refresh token on file")
    if not (client_id and client_secret):
        raise Internal("GOOGLE_CLIENT_ID and GOOGLE_CLIENT_SECRET must be configured")

    creds = Credentials(
        token=None,
        refresh_token=refresh_token,
        token_uri=GOOGLE_TOKEN_URI,
        client_id=client_id,
        client_secret=client_secret,
        scopes=CALENDAR_SCOPES,
    )
    try:
        creds.refresh(request or Request())
    except RefreshError as exc:
        logging.exception("Error refreshing Google token: %s", exc)
        raise Internal("Error refreshing Google token") from exc

    expiry = creds.expiry
    if expiry is not None and expiry.tzinfo is None:
        # google-auth reports naive UTC expiries
        expiry = expiry.replace(tzinfo=timezone.utc)
    return {
        "googleAccessToken": creds.token,
        "expiresAt": expiry.isoformat() if expiry else None,
    }


__all__ = [
    "CALENDAR_SCOPES",
    "CalendarProvider",
    "EventDetails",
    "GoogleCalendar",
    "PlaceholderCalendar",
    "refresh_access_token",
]
