import logging
from datetime import date, datetime, time

import pytest

from scheduling.calendar_view import (
    UNTITLED_CLASS,
    CalendarView,
    EntryKind,
    RecurringEntry,
    SingleDateEntry,
    entries_from_documents,
    entry_from_payload,
    month_bounds,
    project,
)
from scheduling.errors import InvalidArgument


def _schedule(**overrides):
    doc = {
        "id": "sch1",
        "className": "Iqra 1",
        "startDate": "2024-01-01",
        "daysOfWeek": [1, 3],
        "timeSlots": {"1": "09:00", "3": "14:00"},
        "duration": 60,
    }
    doc.update(overrides)
    return doc


def test_month_bounds_handles_leap_february():
    assert month_bounds(2024, 2) == (date(2024, 2, 1), date(2024, 2, 29))
    assert month_bounds(2023, 12) == (date(2023, 12, 1), date(2023, 12, 31))


def test_month_bounds_rejects_bad_month():
    with pytest.raises(InvalidArgument):
        month_bounds(2024, 13)


def test_project_places_recurring_slots_on_matching_weekdays():
    index = project([RecurringEntry.from_schedule(_schedule())], 2024, 1)

    mondays = [day for day in index if day.weekday() == 0]
    wednesdays = [day for day in index if day.weekday() == 2]
    assert len(mondays) == 5
    assert len(wednesdays) == 5
    assert set(index) == set(mondays) | set(wednesdays)
    first = index[date(2024, 1, 1)][0]
    assert first.start == datetime(2024, 1, 1, 9, 0)
    assert first.title == "Iqra 1"
    assert first.kind is EntryKind.RECURRING
    assert index[date(2024, 1, 3)][0].start.time() == time(14, 0)


def test_project_is_idempotent():
    entries = entries_from_documents(
        [_schedule()], [{"id": "x", "date": "2024-01-20T10:00:00", "className": "Extra"}]
    )
    assert project(entries, 2024, 1) == project(entries, 2024, 1)


def test_project_stays_within_month():
    entries = entries_from_documents(
        [_schedule()],
        [
            {"id": "in", "date": "2024-02-10T10:00:00"},
            {"id": "before", "date": "2024-01-31T23:00:00"},
            {"id": "after", "date": "2024-03-01T08:00:00"},
        ],
    )
    index = project(entries, 2024, 2)
    assert all(date(2024, 2, 1) <= day <= date(2024, 2, 29) for day in index)
    single_ids = [o.session_id for items in index.values() for o in items if o.kind is EntryKind.SINGLE]
    assert single_ids == ["in"]


def test_project_keeps_entry_order_within_a_day():
    entries = [
        SingleDateEntry(when=datetime(2024, 1, 1, 18, 0), title="Evening"),
        RecurringEntry.from_schedule(_schedule()),
    ]
    day = project(entries, 2024, 1)[date(2024, 1, 1)]
    assert [o.title for o in day] == ["Evening", "Iqra 1"]


def test_missing_class_name_defaults_to_untitled():
    entry = RecurringEntry.from_schedule(_schedule(className=None))
    session = SingleDateEntry.from_session({"date": "2024-01-05T10:00:00"})
    assert entry.title == UNTITLED_CLASS
    assert session.title == UNTITLED_CLASS


def test_biweekly_entries_follow_start_week_parity():
    entry = RecurringEntry.from_schedule(
        _schedule(daysOfWeek=[1], timeSlots={"1": "09:00"}, recurrencePattern="biweekly")
    )
    index = project([entry], 2024, 1)
    assert sorted(index) == [date(2024, 1, 1), date(2024, 1, 15), date(2024, 1, 29)]


def test_malformed_documents_are_skipped_with_warning(caplog):
    with caplog.at_level(logging.WARNING):
        entries = entries_from_documents(
            [{"id": "empty"}, _schedule(timeSlots={"1": "lunch"})],
            [{"id": "nodate"}, {"id": "garbage", "date": "not a date"}],
        )
    assert entries == []
    messages = " ".join(record.message for record in caplog.records)
    assert "empty" in messages
    assert "garbage" in messages


def test_unknown_pattern_is_skipped_during_projection(caplog):
    entry = RecurringEntry(time_slots={1: time(9, 0)}, recurrence_pattern="daily")
    good = SingleDateEntry(when=datetime(2024, 1, 2, 9, 0))
    with caplog.at_level(logging.WARNING):
        index = project([entry, good], 2024, 1)
    assert list(index) == [date(2024, 1, 2)]
    assert any("could not be projected" in record.message for record in caplog.records)


def test_entry_from_payload_dispatches_on_kind():
    recurring = entry_from_payload({"kind": "recurring", **_schedule()})
    single = entry_from_payload({"kind": "single", "date": "2024-01-05T10:00:00"})
    assert recurring.kind is EntryKind.RECURRING
    assert single.kind is EntryKind.SINGLE
    with pytest.raises(InvalidArgument):
        entry_from_payload({"kind": "weekly"})


def test_calendar_view_switches_month_on_lookup():
    view = CalendarView([RecurringEntry.from_schedule(_schedule())], today=date(2024, 1, 15))
    assert view.month == (2024, 1)
    assert len(view.on(date(2024, 1, 3))) == 1
    assert view.on(date(2024, 1, 4)) == []

    february = view.on(date(2024, 2, 5))
    assert view.month == (2024, 2)
    assert february[0].start == datetime(2024, 2, 5, 9, 0)


def test_calendar_view_set_entries_reprojects_current_month():
    view = CalendarView(today=date(2024, 1, 1))
    assert view.days == {}
    view.set_entries([SingleDateEntry(when=datetime(2024, 1, 9, 12, 0), title="Makeup")])
    assert [o.title for o in view.days[date(2024, 1, 9)]] == ["Makeup"]


def test_occurrence_to_dict():
    occurrence = project([SingleDateEntry(when=datetime(2024, 1, 9, 12, 0), session_id="s1")], 2024, 1)[
        date(2024, 1, 9)
    ][0]
    assert occurrence.to_dict() == {
        "date": "2024-01-09T12:00:00",
        "className": UNTITLED_CLASS,
        "kind": "single",
        "scheduleId": None,
        "sessionId": "s1",
        "duration": None,
    }


@pytest.mark.parametrize("year", [99999, 1, 2300])
def test_month_bounds_rejects_years_outside_pandas_range(year):
    with pytest.raises(InvalidArgument, match="Year out of range"):
        month_bounds(year, 1)
