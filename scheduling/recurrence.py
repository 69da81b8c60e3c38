"""Expansion of recurring class schedules into concrete session times.

Weekday indices follow the convention used by the web client:
Sunday is ``0`` and Saturday is ``6``.  All arithmetic is local wall-clock
arithmetic; the configured zone is attached to each result afterwards, so a
DST change inside the horizon shifts nothing on the wall clock.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Dict, Iterable, List, Mapping, Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from scheduling.errors import InvalidArgument

HORIZON_WEEKS = 12

# Weeks between two occurrences of the same weekday.
RECURRENCE_STEPS: Mapping[str, int] = {
    "weekly": 1,
    "biweekly": 2,
    "monthly": 4,
}

WEEKDAY_NAMES = (
    "Sunday",
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
)

TimeSlotLike = Union[str, time, datetime]
DateLike = Union[str, date, datetime]


def parse_time_slot(value: TimeSlotLike) -> time:
    """Return the time of day held by ``value``.

    Accepts ``"HH:MM"`` / ``"HH:MM:SS"`` strings, :class:`datetime.time`,
    :class:`datetime.datetime` and ISO datetime strings (the web client posts
    full ``Date`` objects for slots).  Seconds and microseconds are dropped.
    """

    if isinstance(value, datetime):
        parsed = value.time()
    elif isinstance(value, time):
        parsed = value
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        try:
            if "T" in text or len(text) > 8:
                parsed = datetime.fromisoformat(text.replace("Z", "+00:00")).time()
            else:
                parsed = time.fromisoformat(text)
        except ValueError as exc:
            raise InvalidArgument(f"Invalid time slot: {value!r}") from exc
    else:
        raise InvalidArgument(f"Invalid time slot: {value!r}")
    return parsed.replace(second=0, microsecond=0, tzinfo=None)


def format_time_slot(value: TimeSlotLike) -> str:
    return parse_time_slot(value).strftime("%H:%M")


def parse_start_date(value: DateLike) -> date:
    """Return ``value`` truncated to its calendar day."""

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        text = value.strip()
        try:
            if len(text) == 10:
                return date.fromisoformat(text)
            return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
        except ValueError as exc:
            raise InvalidArgument(f"Invalid start date: {value!r}") from exc
    raise InvalidArgument(f"Invalid start date: {value!r}")


def weekday_index(day: date) -> int:
    """Return the Sunday-based weekday index of ``day``."""

    return (day.weekday() + 1) % 7


def week_start(day: date) -> date:
    """Return the Sunday that opens the calendar week containing ``day``."""

    return day - timedelta(days=weekday_index(day))


def recurrence_step(pattern: Optional[str]) -> int:
    try:
        return RECURRENCE_STEPS[(pattern or "weekly").strip().lower()]
    except KeyError:
        raise InvalidArgument(f"Unknown recurrence pattern: {pattern!r}") from None


def resolve_timezone(tz: Union[str, tzinfo, None]) -> Optional[tzinfo]:
    if tz is None or isinstance(tz, tzinfo):
        return tz
    try:
        return ZoneInfo(tz)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise InvalidArgument(f"Unknown time zone: {tz!r}") from exc


def normalise_days(days_of_week: Iterable[object]) -> List[int]:
    """Return the distinct weekday indices in ascending order."""

    days = set()
    for raw in days_of_week:
        try:
            day = int(raw)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            raise InvalidArgument(f"Invalid weekday index: {raw!r}") from None
        if not 0 <= day <= 6:
            raise InvalidArgument(f"Weekday index out of range: {day}")
        days.add(day)
    return sorted(days)


def normalise_slots(time_slots: Mapping[object, TimeSlotLike]) -> Dict[int, time]:
    """Return ``time_slots`` keyed by integer weekday (Firestore keys are strings)."""

    slots: Dict[int, time] = {}
    for raw_day, raw_slot in (time_slots or {}).items():
        try:
            day = int(raw_day)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            raise InvalidArgument(f"Invalid weekday index: {raw_day!r}") from None
        slots[day] = parse_time_slot(raw_slot)
    return slots


@dataclass(frozen=True)
class Occurrence:
    """A concrete session time produced by :func:`expand`."""

    start: datetime
    day_index: int
    week: int

    def end(self, duration_minutes: int) -> datetime:
        return self.start + timedelta(minutes=int(duration_minutes))


def expand(
    start_date: DateLike,
    days_of_week: Iterable[object],
    time_slots: Mapping[object, TimeSlotLike],
    horizon_weeks: int = HORIZON_WEEKS,
    *,
    recurrence_pattern: str = "weekly",
    tz: Union[str, tzinfo, None] = None,
) -> List[Occurrence]:
    """Expand a recurrence definition into concrete occurrences.

    Week ``k`` of the horizon is the calendar week (Sunday to Saturday) that
    lies ``k`` weeks after the week containing ``start_date``; the occurrence
    for weekday ``d`` falls on day ``d`` of that week.  Results are ordered
    week first, then by ascending weekday index.  Occurrences falling before
    ``start_date`` inside the first week are kept, not skipped.
    """

    if horizon_weeks < 0:
        raise InvalidArgument("horizon_weeks must not be negative")

    start = parse_start_date(start_date)
    days = normalise_days(days_of_week)
    slots = normalise_slots(time_slots)
    missing = [day for day in days if day not in slots]
    if missing:
        raise InvalidArgument(
            "Missing time slot for " + ", ".join(WEEKDAY_NAMES[day] for day in missing)
        )

    step = recurrence_step(recurrence_pattern)
    zone = resolve_timezone(tz)
    anchor = week_start(start)

    occurrences: List[Occurrence] = []
    for week in range(0, horizon_weeks, step):
        base = anchor + timedelta(weeks=week)
        for day in days:
            when = datetime.combine(base + timedelta(days=day), slots[day])
            if zone is not None:
                when = when.replace(tzinfo=zone)
            occurrences.append(Occurrence(start=when, day_index=day, week=week))
    return occurrences


__all__ = [
    "HORIZON_WEEKS",
    "RECURRENCE_STEPS",
    "WEEKDAY_NAMES",
    "Occurrence",
    "expand",
    "format_time_slot",
    "normalise_days",
    "normalise_slots",
    "parse_start_date",
    "parse_time_slot",
    "recurrence_step",
    "resolve_timezone",
    "week_start",
    "weekday_index",
]
