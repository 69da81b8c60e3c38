"""Month-by-month calendar projection of schedules and one-off sessions.

Entries come in two explicit kinds: a :class:`RecurringEntry` built from a
schedule document (weekday + time template) and a :class:`SingleDateEntry`
built from a session document (one fixed timestamp).  :func:`project` turns
any mix of them into a ``{date: [CalendarOccurrence, ...]}`` index for one
month.  Entries that cannot be projected are logged and skipped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

import pandas as pd

from scheduling.errors import InvalidArgument
from scheduling.recurrence import (
    normalise_slots,
    parse_start_date,
    recurrence_step,
    week_start,
    weekday_index,
)

UNTITLED_CLASS = "Untitled Class"


class EntryKind(str, Enum):
    RECURRING = "recurring"
    SINGLE = "single"


@dataclass(frozen=True)
class RecurringEntry:
    time_slots: Mapping[int, time]
    recurrence_pattern: str = "weekly"
    start_date: Optional[date] = None
    title: str = UNTITLED_CLASS
    schedule_id: Optional[str] = None
    duration: Optional[int] = None
    kind: EntryKind = field(default=EntryKind.RECURRING, init=False)

    @classmethod
    def from_schedule(cls, doc: Mapping[str, Any]) -> "RecurringEntry":
        if not doc.get("daysOfWeek") or not doc.get("timeSlots"):
            raise InvalidArgument("Schedule has no days or time slots")
        slots = normalise_slots(doc["timeSlots"])
        days = {int(day) for day in doc["daysOfWeek"]}
        start = doc.get("startDate")
        return cls(
            time_slots={day: slot for day, slot in slots.items() if day in days},
            recurrence_pattern=str(doc.get("recurrencePattern") or "weekly"),
            start_date=parse_start_date(start) if start else None,
            title=doc.get("className") or UNTITLED_CLASS,
            schedule_id=doc.get("id"),
            duration=doc.get("duration"),
        )


@dataclass(frozen=True)
class SingleDateEntry:
    when: datetime
    title: str = UNTITLED_CLASS
    session_id: Optional[str] = None
    schedule_id: Optional[str] = None
    duration: Optional[int] = None
    kind: EntryKind = field(default=EntryKind.SINGLE, init=False)

    @classmethod
    def from_session(cls, doc: Mapping[str, Any]) -> "SingleDateEntry":
        raw = doc.get("date")
        if raw is None or raw == "":
            raise InvalidArgument("Session has no date")
        parsed = pd.to_datetime(raw, errors="coerce")
        if parsed is pd.NaT:
            raise InvalidArgument(f"Unreadable session date: {raw!r}")
        return cls(
            when=parsed.to_pydatetime(),
            title=doc.get("className") or doc.get("title") or UNTITLED_CLASS,
            session_id=doc.get("id"),
            schedule_id=doc.get("scheduleId"),
            duration=doc.get("duration"),
        )


ScheduleEntry = Union[RecurringEntry, SingleDateEntry]


@dataclass(frozen=True)
class CalendarOccurrence:
    start: datetime
    title: str
    kind: EntryKind
    schedule_id: Optional[str] = None
    session_id: Optional[str] = None
    duration: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.start.isoformat(timespec="seconds"),
            "className": self.title,
            "kind": self.kind.value,
            "scheduleId": self.schedule_id,
            "sessionId": self.session_id,
            "duration": self.duration,
        }


def entry_from_payload(payload: Mapping[str, Any]) -> ScheduleEntry:
    """Build an entry from a client payload tagged with ``kind``."""

    kind = str(payload.get("kind") or "").strip().lower()
    if kind == EntryKind.RECURRING.value:
        return RecurringEntry.from_schedule(payload)
    if kind == EntryKind.SINGLE.value:
        return SingleDateEntry.from_session(payload)
    raise InvalidArgument(f"Unknown entry kind: {payload.get('kind')!r}")


def entries_from_documents(
    schedules: Iterable[Mapping[str, Any]] = (),
    sessions: Iterable[Mapping[str, Any]] = (),
) -> List[ScheduleEntry]:
    """Convert schedule and session documents, skipping malformed ones."""

    entries: List[ScheduleEntry] = []
    for doc in schedules:
        try:
            entries.append(RecurringEntry.from_schedule(doc))
        except (InvalidArgument, TypeError, ValueError, AttributeError) as exc:
            logging.warning("Skipping malformed schedule %s: %s", _doc_id(doc), exc)
    for doc in sessions:
        try:
            entries.append(SingleDateEntry.from_session(doc))
        except (InvalidArgument, TypeError, ValueError, AttributeError) as exc:
            logging.warning("Skipping malformed session %s: %s", _doc_id(doc), exc)
    return entries


def _doc_id(doc: Any) -> str:
    return str(doc.get("id")) if isinstance(doc, Mapping) else repr(doc)


def month_bounds(year: int, month: int) -> Tuple[date, date]:
    """Return the first and last calendar day of ``year``-``month``."""

    if not 1 <= int(month) <= 12:
        raise InvalidArgument(f"Invalid month: {month!r}")
    # pandas timestamps only cover part of the proleptic calendar
    if not pd.Timestamp.min.year < int(year) < pd.Timestamp.max.year:
        raise InvalidArgument(f"Year out of range: {year!r}")
    period = pd.Period(year=int(year), month=int(month), freq="M")
    return period.start_time.date(), period.end_time.date()


def _recurring_occurrences(
    entry: RecurringEntry, days: Iterable[date]
) -> List[CalendarOccurrence]:
    step = recurrence_step(entry.recurrence_pattern)
    anchor = week_start(entry.start_date) if entry.start_date else None
    occurrences = []
    for day in days:
        slot = entry.time_slots.get(weekday_index(day))
        if slot is None:
            continue
        if step > 1 and anchor is not None:
            weeks = (week_start(day) - anchor).days // 7
            if weeks % step:
                continue
        occurrences.append(
            CalendarOccurrence(
                start=datetime.combine(day, slot),
                title=entry.title,
                kind=entry.kind,
                schedule_id=entry.schedule_id,
                duration=entry.duration,
            )
        )
    return occurrences


def _single_occurrence(
    entry: SingleDateEntry, first: date, last: date
) -> List[CalendarOccurrence]:
    if not first <= entry.when.date() <= last:
        return []
    return [
        CalendarOccurrence(
            start=entry.when,
            title=entry.title,
            kind=entry.kind,
            schedule_id=entry.schedule_id,
            session_id=entry.session_id,
            duration=entry.duration,
        )
    ]


def project(
    entries: Iterable[ScheduleEntry], year: int, month: int
) -> Dict[date, List[CalendarOccurrence]]:
    """Index the occurrences of ``entries`` that fall inside the given month.

    Keys are calendar days; each list keeps the order in which entries were
    supplied.  Nothing outside the month's first and last day is returned.
    """

    first, last = month_bounds(year, month)
    days = [stamp.date() for stamp in pd.date_range(first, last, freq="D")]

    index: Dict[date, List[CalendarOccurrence]] = {}
    for entry in entries:
        try:
            if entry.kind is EntryKind.RECURRING:
                occurrences = _recurring_occurrences(entry, days)
            elif entry.kind is EntryKind.SINGLE:
                occurrences = _single_occurrence(entry, first, last)
            else:
                raise InvalidArgument(f"Unknown entry kind: {entry.kind!r}")
        except (InvalidArgument, TypeError, ValueError, AttributeError) as exc:
            logging.warning("Skipping schedule entry that could not be projected: %s", exc)
            continue
        for occurrence in occurrences:
            index.setdefault(occurrence.start.date(), []).append(occurrence)

    logging.debug("Projected %d days for %04d-%02d", len(index), int(year), int(month))
    return index


class CalendarView:
    """Keeps the projection of the displayed month for day lookups.

    The month is re-projected only when the entries or the displayed month
    change; :meth:`on` reads from the index already built.
    """

    def __init__(self, entries: Iterable[ScheduleEntry] = (), *, today: Optional[date] = None) -> None:
        self._entries: List[ScheduleEntry] = list(entries)
        shown = today or date.today()
        self._month: Tuple[int, int] = (shown.year, shown.month)
        self._index: Dict[date, List[CalendarOccurrence]] = project(self._entries, *self._month)

    @property
    def month(self) -> Tuple[int, int]:
        return self._month

    @property
    def days(self) -> Dict[date, List[CalendarOccurrence]]:
        return self._index

    def set_entries(self, entries: Iterable[ScheduleEntry]) -> None:
        self._entries = list(entries)
        self._index = project(self._entries, *self._month)

    def show(self, year: int, month: int) -> Dict[date, List[CalendarOccurrence]]:
        if (year, month) != self._month:
            self._month = (year, month)
            self._index = project(self._entries, year, month)
        return self._index

    def on(self, day: date) -> List[CalendarOccurrence]:
        """Return the occurrences of ``day``, switching month when needed."""

        self.show(day.year, day.month)
        return list(self._index.get(day, []))


__all__ = [
    "UNTITLED_CLASS",
    "CalendarOccurrence",
    "CalendarView",
    "EntryKind",
    "RecurringEntry",
    "ScheduleEntry",
    "SingleDateEntry",
    "entries_from_documents",
    "entry_from_payload",
    "month_bounds",
    "project",
]
