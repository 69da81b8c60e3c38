"""Firestore persistence for class schedules and their sessions.

A *schedule* document holds the recurrence definition; every expanded
occurrence becomes a *session* document pointing back at it through
``scheduleId``.  The Firestore client and calendar provider are injected so
the same store works against the emulator and production alike.

Sessions move from ``scheduled`` to ``active`` when a teacher starts them
and to ``completed`` when they end; live sessions carry ``startTime`` and
``lastActivity`` for the janitor sweeps.

Writes are not transactional: a failure while materialising sessions leaves
the schedule document in place with fewer sessions than the horizon and
without ``sessionIds``.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional

from firebase_admin import firestore
from google.api_core.exceptions import GoogleAPICallError

from scheduling.errors import Internal, InvalidArgument, NotFound, SchedulingError
from scheduling.firestore_helpers import (
    coerce_timestamp,
    commit_in_batches,
    firestore_where,
    snapshot_data,
)
from scheduling.recurrence import (
    HORIZON_WEEKS,
    RECURRENCE_STEPS,
    WEEKDAY_NAMES,
    expand,
    format_time_slot,
    normalise_days,
    normalise_slots,
    parse_start_date,
    parse_time_slot,
)
from scheduling.services.calendar import CalendarProvider, EventDetails, PlaceholderCalendar

SCHEDULES_COL = "schedules"
SESSIONS_COL = "sessions"
CLASSES_COL = "classes"

SESSION_SCHEDULED = "scheduled"
SESSION_ACTIVE = "active"
SESSION_COMPLETED = "completed"

END_REASON_BULK_CLOSE = "bulk_close"

LIST_ROLES = ("teacher", "student", "admin")

# Firestore rejects ``in`` filters with more values than this.
IN_QUERY_LIMIT = 30

_RECURRENCE_FIELDS = ("daysOfWeek", "timeSlots", "duration", "recurrencePattern")
_UPDATABLE_FIELDS = ("startDate", "classId") + _RECURRENCE_FIELDS


def _positive_duration(value: Any) -> int:
    if isinstance(value, bool):
        raise InvalidArgument(f"Invalid duration: {value!r}")
    try:
        duration = int(value)
    except (TypeError, ValueError):
        raise InvalidArgument(f"Invalid duration: {value!r}") from None
    if duration != value and str(duration) != str(value).strip():
        raise InvalidArgument(f"Duration must be a whole number of minutes: {value!r}")
    if duration <= 0:
        raise InvalidArgument("Duration must be positive")
    return duration


def _recurrence_pattern(value: Any) -> str:
    pattern = str(value or "weekly").strip().lower()
    if pattern not in RECURRENCE_STEPS:
        raise InvalidArgument(f"Unknown recurrence pattern: {value!r}")
    return pattern


def validate_recurrence(days_of_week: Any, time_slots: Any) -> tuple[List[int], Dict[str, str]]:
    """Check that every selected weekday has a time slot.

    Returns ``(days, slots)`` with slots stored under string keys as
    Firestore requires for map fields.
    """

    if not days_of_week:
        raise InvalidArgument("At least one day of the week is required")
    if not isinstance(time_slots, Mapping):
        raise InvalidArgument("timeSlots must map weekday indices to times")
    days = normalise_days(days_of_week)
    slots = normalise_slots(time_slots)
    missing = [day for day in days if day not in slots]
    if missing:
        raise InvalidArgument(
            "Missing time slot for " + ", ".join(WEEKDAY_NAMES[day] for day in missing)
        )
    return days, {str(day): slots[day].strftime("%H:%M") for day in sorted(slots)}


@dataclass
class ScheduleDefinition:
    """Validated input for :meth:`ScheduleStore.create_schedule`."""

    class_id: str
    start_date: date
    days_of_week: List[int]
    time_slots: Dict[str, str]
    duration: int
    recurrence_pattern: str = "weekly"

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "ScheduleDefinition":
        if not isinstance(payload, Mapping):
            raise InvalidArgument("Schedule definition must be an object")
        class_id = str(payload.get("classId") or "").strip()
        if not class_id:
            raise InvalidArgument("classId is required")
        if not payload.get("startDate"):
            raise InvalidArgument("startDate is required")
        days, slots = validate_recurrence(payload.get("daysOfWeek"), payload.get("timeSlots"))
        return cls(
            class_id=class_id,
            start_date=parse_start_date(payload["startDate"]),
            days_of_week=days,
            time_slots=slots,
            duration=_positive_duration(payload.get("duration")),
            recurrence_pattern=_recurrence_pattern(payload.get("recurrencePattern")),
        )


def _wall_clock(value: Any) -> Optional[datetime]:
    """Return a stored session date keeping its own UTC offset."""

    if isinstance(value, datetime):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    return None


def _session_sort_key(session: Mapping[str, Any]) -> tuple:
    when = coerce_timestamp(session.get("date"))
    return (when is None, when or datetime.min.replace(tzinfo=timezone.utc))


@contextmanager
def _logged(action: str) -> Iterator[None]:
    """Log any failure of ``action`` and re-raise it.

    Google API errors surface as :class:`Internal`; scheduling errors pass
    through unchanged.
    """

    try:
        yield
    except SchedulingError:
        logging.exception("Error %s", action)
        raise
    except GoogleAPICallError as exc:
        logging.exception("Error %s: %s", action, exc)
        raise Internal(f"Error {action}") from exc
    except Exception:
        logging.exception("Error %s", action)
        raise


class ScheduleStore:
    """Create, update, list and delete schedules and their sessions."""

    def __init__(
        self,
        db: Any,
        *,
        calendar: Optional[CalendarProvider] = None,
        calendar_for: Optional[Callable[[str], CalendarProvider]] = None,
        horizon_weeks: int = HORIZON_WEEKS,
        timezone_name: Optional[str] = None,
        batch_size: int = 500,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self.db = db
        self.calendar = calendar or PlaceholderCalendar()
        self.calendar_for = calendar_for
        self.horizon_weeks = horizon_weeks
        self.timezone_name = timezone_name
        self.batch_size = batch_size
        self.clock = clock

    def _calendar(self, teacher_id: Optional[str]) -> CalendarProvider:
        if self.calendar_for is not None and teacher_id:
            return self.calendar_for(teacher_id)
        return self.calendar

    def _schedule_snapshot(self, schedule_id: str):
        if not schedule_id:
            raise InvalidArgument("scheduleId is required")
        ref = self.db.collection(SCHEDULES_COL).document(schedule_id)
        snap = ref.get()
        if not snap.exists:
            raise NotFound(f"Schedule not found: {schedule_id}")
        return ref, snapshot_data(snap)

    def _existing_sessions(self, class_id: str) -> Dict[str, str]:
        query = firestore_where(self.db.collection(SESSIONS_COL), "classId", "==", class_id)
        query = firestore_where(query, "status", "==", SESSION_SCHEDULED)
        existing: Dict[str, str] = {}
        for snap in query.stream():
            when = snapshot_data(snap).get("date")
            if when:
                existing[str(when)] = snap.id
        return existing

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def create_schedule(self, payload: Any) -> Dict[str, Any]:
        """Persist a schedule and one session per expanded occurrence.

        Returns ``{"scheduleId": ..., "sessionIds": [...]}``.  An occurrence
        whose timestamp matches an already scheduled session of the class
        reuses that session instead of creating a duplicate.
        """

        with _logged("creating schedule"):
            definition = (
                payload
                if isinstance(payload, ScheduleDefinition)
                else ScheduleDefinition.from_payload(payload)
            )
            class_snap = self.db.collection(CLASSES_COL).document(definition.class_id).get()
            if not class_snap.exists:
                raise NotFound(f"Class not found: {definition.class_id}")
            class_data = snapshot_data(class_snap)
            teacher_id = class_data.get("teacherId")
            class_name = class_data.get("name") or "Class"

            _, schedule_ref = self.db.collection(SCHEDULES_COL).add(
                {
                    "classId": definition.class_id,
                    "teacherId": teacher_id,
                    "startDate": definition.start_date.isoformat(),
                    "recurrencePattern": definition.recurrence_pattern,
                    "daysOfWeek": definition.days_of_week,
                    "duration": definition.duration,
                    "timeSlots": definition.time_slots,
                    "createdAt": firestore.SERVER_TIMESTAMP,
                    "updatedAt": firestore.SERVER_TIMESTAMP,
                }
            )

            existing = self._existing_sessions(definition.class_id)
            calendar = self._calendar(teacher_id)
            occurrences = expand(
                definition.start_date,
                definition.days_of_week,
                definition.time_slots,
                self.horizon_weeks,
                recurrence_pattern=definition.recurrence_pattern,
                tz=self.timezone_name,
            )

            session_ids: List[str] = []
            for occurrence in occurrences:
                start = occurrence.start
                end = occurrence.end(definition.duration)
                start_iso = start.isoformat(timespec="seconds")
                if start_iso in existing:
                    session_ids.append(existing[start_iso])
                    continue

                event = calendar.create_event(
                    EventDetails(
                        title=f"{class_name} - Class Session",
                        description=f"Regular class session for {class_name}",
                        start=start,
                        end=end,
                        attendees=list(class_data.get("studentIds") or []),
                    )
                )
                _, session_ref = self.db.collection(SESSIONS_COL).add(
                    {
                        "scheduleId": schedule_ref.id,
                        "classId": definition.class_id,
                        "teacherId": teacher_id,
                        "date": start_iso,
                        "endDate": end.isoformat(timespec="seconds"),
                        "dayIndex": occurrence.day_index,
                        "duration": definition.duration,
                        "status": SESSION_SCHEDULED,
                        "eventId": event.get("eventId"),
                        "meetLink": event.get("meetLink"),
                        "createdAt": firestore.SERVER_TIMESTAMP,
                        "updatedAt": firestore.SERVER_TIMESTAMP,
                    }
                )
                session_ids.append(session_ref.id)

            schedule_ref.update({"sessionIds": session_ids})
            logging.info(
                "Created schedule %s for class %s with %d sessions",
                schedule_ref.id,
                definition.class_id,
                len(session_ids),
            )
            return {"scheduleId": schedule_ref.id, "sessionIds": session_ids}

    def update_schedule(self, schedule_id: str, updates: Mapping[str, Any]) -> bool:
        """Merge ``updates`` into the schedule without regenerating sessions."""

        with _logged(f"updating schedule {schedule_id}"):
            if not isinstance(updates, Mapping) or not updates:
                raise InvalidArgument("No updates supplied")
            unknown = sorted(set(updates) - set(_UPDATABLE_FIELDS))
            if unknown:
                raise InvalidArgument("Fields cannot be updated: " + ", ".join(unknown))

            ref, current = self._schedule_snapshot(schedule_id)
            payload: Dict[str, Any] = {}
            if "startDate" in updates:
                payload["startDate"] = parse_start_date(updates["startDate"]).isoformat()
            if "classId" in updates:
                class_id = str(updates["classId"] or "").strip()
                if not class_id:
                    raise InvalidArgument("classId must not be empty")
                class_snap = self.db.collection(CLASSES_COL).document(class_id).get()
                if not class_snap.exists:
                    raise NotFound(f"Class not found: {class_id}")
                payload["classId"] = class_id
                payload["teacherId"] = snapshot_data(class_snap).get("teacherId")
            if "duration" in updates:
                payload["duration"] = _positive_duration(updates["duration"])
            if "recurrencePattern" in updates:
                payload["recurrencePattern"] = _recurrence_pattern(updates["recurrencePattern"])
            if "daysOfWeek" in updates or "timeSlots" in updates:
                days, slots = validate_recurrence(
                    updates.get("daysOfWeek", current.get("daysOfWeek")),
                    updates.get("timeSlots", current.get("timeSlots")),
                )
                if "daysOfWeek" in updates:
                    payload["daysOfWeek"] = days
                if "timeSlots" in updates:
                    payload["timeSlots"] = slots

            payload["updatedAt"] = firestore.SERVER_TIMESTAMP
            ref.update(payload)
            return True

    def update_single_session(
        self, schedule_id: str, day_index: Any, updates: Mapping[str, Any]
    ) -> bool:
        """Change the time of one weekday's session.

        The schedule's template slot for ``day_index`` is overwritten, so later
        reads of the schedule see the new time for that weekday.  The earliest
        upcoming scheduled session on that weekday is moved as well, together
        with its calendar event.  Other sessions keep their times.
        """

        with _logged(f"updating session of schedule {schedule_id}"):
            try:
                day = int(day_index)
            except (TypeError, ValueError):
                raise InvalidArgument(f"Invalid weekday index: {day_index!r}") from None
            updates = updates or {}
            raw_slot = updates.get("timeSlot", updates.get("time"))
            if raw_slot is None and "duration" not in updates:
                raise InvalidArgument("timeSlot or duration is required")
            duration = _positive_duration(updates["duration"]) if "duration" in updates else None

            ref, schedule = self._schedule_snapshot(schedule_id)
            if day not in normalise_days(schedule.get("daysOfWeek") or []):
                raise InvalidArgument(f"Schedule has no session on {WEEKDAY_NAMES[day % 7]}")

            slots = {str(k): v for k, v in (schedule.get("timeSlots") or {}).items()}
            if raw_slot is not None:
                slots[str(day)] = format_time_slot(raw_slot)
                ref.update({"timeSlots": slots, "updatedAt": firestore.SERVER_TIMESTAMP})
            slot_text = slots.get(str(day))
            if slot_text is None:
                raise InvalidArgument(f"Missing time slot for {WEEKDAY_NAMES[day]}")

            target = self._next_session_on(schedule_id, day)
            if target is None:
                logging.info("No upcoming session on day %s for schedule %s", day, schedule_id)
                return True

            session_ref, session = target
            current_start = _wall_clock(session.get("date"))
            if current_start is None:
                raise Internal(f"Session {session_ref.id} has no usable date")
            slot = parse_time_slot(slot_text)
            new_start = current_start.replace(hour=slot.hour, minute=slot.minute, second=0, microsecond=0)
            minutes = duration or int(session.get("duration") or schedule.get("duration") or 0)
            new_end = new_start + timedelta(minutes=minutes)

            event_id = session.get("eventId")
            if event_id:
                self._calendar(schedule.get("teacherId")).update_event(
                    event_id, start=new_start, end=new_end
                )

            session_ref.update(
                {
                    "date": new_start.isoformat(timespec="seconds"),
                    "endDate": new_end.isoformat(timespec="seconds"),
                    "duration": minutes,
                    "updatedAt": firestore.SERVER_TIMESTAMP,
                }
            )
            return True

    def _next_session_on(self, schedule_id: str, day: int):
        query = firestore_where(self.db.collection(SESSIONS_COL), "scheduleId", "==", schedule_id)
        query = firestore_where(query, "dayIndex", "==", day)
        query = firestore_where(query, "status", "==", SESSION_SCHEDULED)
        now = self.clock()
        best = None
        for snap in query.stream():
            data = snapshot_data(snap)
            when = coerce_timestamp(data.get("date"))
            if when is None or when < now:
                continue
            if best is None or when < best[0]:
                best = (when, snap.reference, data)
        if best is None:
            return None
        return best[1], best[2]

    def delete_schedule(self, schedule_id: str, *, cascade: bool = True) -> bool:
        """Delete a schedule, and by default its sessions and calendar events."""

        with _logged(f"deleting schedule {schedule_id}"):
            ref, schedule = self._schedule_snapshot(schedule_id)
            if cascade:
                query = firestore_where(
                    self.db.collection(SESSIONS_COL), "scheduleId", "==", schedule_id
                )
                snapshots = list(query.stream())
                calendar = self._calendar(schedule.get("teacherId"))
                for snap in snapshots:
                    event_id = snapshot_data(snap).get("eventId")
                    if not event_id:
                        continue
                    try:
                        calendar.delete_event(event_id)
                    except SchedulingError as exc:
                        logging.warning("Failed to delete calendar event %s: %s", event_id, exc)
                deleted = commit_in_batches(
                    self.db,
                    (snap.reference for snap in snapshots),
                    lambda batch, doc_ref: batch.delete(doc_ref),
                    batch_size=self.batch_size,
                )
                logging.info("Deleted %d sessions of schedule %s", deleted, schedule_id)
            ref.delete()
            return True

    # ------------------------------------------------------------------
    # Live sessions
    # ------------------------------------------------------------------
    def _session_snapshot(self, session_id: str):
        if not session_id:
            raise InvalidArgument("sessionId is required")
        ref = self.db.collection(SESSIONS_COL).document(session_id)
        snap = ref.get()
        if not snap.exists:
            raise NotFound(f"Session not found: {session_id}")
        return ref, snapshot_data(snap)

    def _open_sessions(self, teacher_id: str) -> List[Any]:
        query = firestore_where(self.db.collection(SESSIONS_COL), "teacherId", "==", teacher_id)
        query = firestore_where(query, "status", "==", SESSION_ACTIVE)
        return [snap for snap in query.stream() if not snapshot_data(snap).get("endTime")]

    def start_session(
        self, teacher_id: str, class_id: str, *, session_id: Optional[str] = None
    ) -> Dict[str, Any]:
        """Mark a class session as live and return it.

        An open session of the same class is returned as is.  The teacher's
        open sessions of other classes are completed with
        ``endedAutomatically``.  With ``session_id`` the scheduled session is
        activated, otherwise an ad-hoc session document is created.
        """

        with _logged(f"starting session for class {class_id}"):
            if not teacher_id:
                raise InvalidArgument("teacherId is required")
            class_id = str(class_id or "").strip()
            if not class_id:
                raise InvalidArgument("classId is required")
            class_snap = self.db.collection(CLASSES_COL).document(class_id).get()
            if not class_snap.exists:
                raise NotFound(f"Class not found: {class_id}")
            class_data = snapshot_data(class_snap)

            now = self.clock()
            existing = None
            for snap in self._open_sessions(teacher_id):
                data = snapshot_data(snap)
                if data.get("classId") == class_id and existing is None:
                    existing = {"id": snap.id, **data}
                    continue
                snap.reference.update(
                    {"status": SESSION_COMPLETED, "endTime": now, "endedAutomatically": True}
                )
                logging.info("Auto-completed session %s of teacher %s", snap.id, teacher_id)
            if existing is not None:
                return existing

            live = {
                "status": SESSION_ACTIVE,
                "teacherId": teacher_id,
                "startTime": now,
                "lastActivity": now,
                "endTime": None,
                "updatedAt": firestore.SERVER_TIMESTAMP,
            }
            if session_id:
                ref, session = self._session_snapshot(session_id)
                if session.get("classId") != class_id:
                    raise InvalidArgument(f"Session {session_id} does not belong to class {class_id}")
                if session.get("status") != SESSION_SCHEDULED:
                    raise InvalidArgument(f"Session {session_id} is not scheduled")
                ref.update(live)
                return {"id": session_id, **snapshot_data(ref.get())}

            data = {
                **live,
                "classId": class_id,
                "scheduleId": None,
                "studentIds": list(class_data.get("studentIds") or []),
                "createdAt": firestore.SERVER_TIMESTAMP,
            }
            _, ref = self.db.collection(SESSIONS_COL).add(data)
            logging.info("Started session %s for class %s", ref.id, class_id)
            return {"id": ref.id, **snapshot_data(ref.get())}

    def touch_session(self, session_id: str) -> bool:
        """Stamp ``lastActivity`` on a live session."""

        with _logged(f"recording activity on session {session_id}"):
            ref, session = self._session_snapshot(session_id)
            if session.get("status") != SESSION_ACTIVE:
                raise InvalidArgument(f"Session {session_id} is not active")
            ref.update({"lastActivity": self.clock()})
            return True

    def end_session(self, session_id: str) -> bool:
        with _logged(f"ending session {session_id}"):
            ref, session = self._session_snapshot(session_id)
            if session.get("status") != SESSION_ACTIVE:
                raise InvalidArgument(f"Session {session_id} is not active")
            ref.update(
                {
                    "status": SESSION_COMPLETED,
                    "endTime": self.clock(),
                    "updatedAt": firestore.SERVER_TIMESTAMP,
                }
            )
            return True

    def close_all_sessions(self, teacher_id: str) -> int:
        """Complete every open session of ``teacher_id``; returns how many."""

        with _logged(f"closing sessions of teacher {teacher_id}"):
            if not teacher_id:
                raise InvalidArgument("teacherId is required")
            now = self.clock()
            refs = [snap.reference for snap in self._open_sessions(teacher_id)]
            closed = commit_in_batches(
                self.db,
                refs,
                lambda batch, ref: batch.update(
                    ref,
                    {
                        "status": SESSION_COMPLETED,
                        "endTime": now,
                        "endedAutomatically": True,
                        "endReason": END_REASON_BULK_CLOSE,
                    },
                ),
                batch_size=self.batch_size,
            )
            logging.info("Closed %d sessions of teacher %s", closed, teacher_id)
            return closed

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def get_schedule(self, schedule_id: str) -> Dict[str, Any]:
        with _logged(f"getting schedule {schedule_id}"):
            _, data = self._schedule_snapshot(schedule_id)
            return self._present({"id": schedule_id, **data})

    def list_sessions(self, schedule_id: str) -> List[Dict[str, Any]]:
        """Return the sessions of ``schedule_id`` ordered by date."""

        with _logged(f"listing sessions of schedule {schedule_id}"):
            query = firestore_where(
                self.db.collection(SESSIONS_COL), "scheduleId", "==", schedule_id
            )
            sessions = [{"id": snap.id, **snapshot_data(snap)} for snap in query.stream()]
            sessions.sort(key=_session_sort_key)
            return sessions

    def _student_class_ids(self, user_id: str) -> List[str]:
        query = firestore_where(
            self.db.collection(CLASSES_COL), "studentIds", "array_contains", user_id
        )
        return [snap.id for snap in query.stream()]

    def list_schedules(self, user_id: str, role: str) -> List[Dict[str, Any]]:
        """Return the schedules visible to ``user_id`` acting as ``role``."""

        with _logged(f"listing schedules for {user_id}"):
            schedules_ref = self.db.collection(SCHEDULES_COL)
            if role == "teacher":
                snapshots = list(
                    firestore_where(schedules_ref, "teacherId", "==", user_id).stream()
                )
            elif role == "student":
                class_ids = self._student_class_ids(user_id)
                if not class_ids:
                    return []
                snapshots = []
                for offset in range(0, len(class_ids), IN_QUERY_LIMIT):
                    chunk = class_ids[offset : offset + IN_QUERY_LIMIT]
                    snapshots.extend(firestore_where(schedules_ref, "classId", "in", chunk).stream())
            elif role == "admin":
                snapshots = list(schedules_ref.stream())
            else:
                raise InvalidArgument(f"Invalid user role: {role!r}")

            class_cache: Dict[str, Optional[Dict[str, Any]]] = {}
            schedules = []
            for snap in snapshots:
                schedule = self._present({"id": snap.id, **snapshot_data(snap)})
                self._attach_class(schedule, class_cache)
                schedules.append(schedule)
            return schedules

    def _attach_class(
        self, schedule: Dict[str, Any], cache: Dict[str, Optional[Dict[str, Any]]]
    ) -> None:
        class_id = schedule.get("classId")
        if not class_id:
            schedule["studentCount"] = 0
            return
        if class_id not in cache:
            try:
                snap = self.db.collection(CLASSES_COL).document(class_id).get()
                cache[class_id] = snapshot_data(snap) if snap.exists else None
            except Exception as exc:  # pragma: no cover - runtime depends on Firestore
                logging.warning("Error fetching class data for %s: %s", class_id, exc)
                cache[class_id] = None
        class_data = cache[class_id]
        if class_data is None:
            schedule["studentCount"] = 0
            return
        schedule["className"] = class_data.get("name")
        schedule["studentCount"] = len(class_data.get("studentIds") or [])

    @staticmethod
    def _present(schedule: Dict[str, Any]) -> Dict[str, Any]:
        start = schedule.get("startDate")
        if start:
            try:
                schedule["startDate"] = parse_start_date(start)
            except InvalidArgument:
                logging.warning("Schedule %s has unreadable startDate %r", schedule.get("id"), start)
        slots = schedule.get("timeSlots") or {}
        schedule["timeSlots"] = {
            int(day): time for day, time in slots.items() if str(day).strip().isdigit()
        }
        return schedule


__all__ = [
    "CLASSES_COL",
    "END_REASON_BULK_CLOSE",
    "SCHEDULES_COL",
    "SESSIONS_COL",
    "SESSION_ACTIVE",
    "SESSION_COMPLETED",
    "SESSION_SCHEDULED",
    "ScheduleDefinition",
    "ScheduleStore",
    "validate_recurrence",
]
