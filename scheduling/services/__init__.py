"""External collaborators of the scheduling core."""

from .calendar import (
    CALENDAR_SCOPES,
    CalendarProvider,
    EventDetails,
    GoogleCalendar,
    PlaceholderCalendar,
    refresh_access_token,
)
from .meet_credentials import MeetCredentialStore, are_credentials_valid, calendar_for_teacher

__all__ = [
    "CALENDAR_SCOPES",
    "CalendarProvider",
    "EventDetails",
    "GoogleCalendar",
    "MeetCredentialStore",
    "PlaceholderCalendar",
    "are_credentials_valid",
    "calendar_for_teacher",
    "refresh_access_token",
]
