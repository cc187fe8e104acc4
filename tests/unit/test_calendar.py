"""
Unit tests for CalendarManager.

Dates are pinned to the week of Monday 2025-01-06 so weekday arithmetic is
predictable.
"""

from datetime import UTC, datetime

import pytest

from app.domains.scheduling.calendar import (
    CalendarEvent,
    CalendarManager,
    day_of_week,
    format_clock,
)
from app.exceptions.scheduling import NoAvailableSlotsError
from app.schemas.category import ScheduleWindow
from app.schemas.scheduling import PreferredTime

MONDAY = datetime(2025, 1, 6)
WORK_WEEK = [ScheduleWindow(day_of_week=day, start_hour=9, end_hour=17) for day in range(1, 6)]


def starts(slots):
    return [(s.start.day, s.start.hour, s.start.minute) for s in slots]


class TestHelpers:
    def test_day_of_week_starts_on_sunday(self):
        """Sunday maps to 0 and Saturday to 6."""
        assert day_of_week(datetime(2025, 1, 5)) == 0
        assert day_of_week(MONDAY) == 1
        assert day_of_week(datetime(2025, 1, 11)) == 6

    def test_format_clock(self):
        """Times render on a 12-hour clock."""
        assert format_clock(datetime(2025, 1, 6, 9, 30)) == "9:30 AM"
        assert format_clock(datetime(2025, 1, 6, 0, 0)) == "12:00 AM"
        assert format_clock(datetime(2025, 1, 6, 13, 5)) == "1:05 PM"


class TestGenerateTimeSlots:
    """Test cases for slot generation."""

    def test_slots_step_every_half_hour_inside_window(self):
        """Slots never run past the end of their window."""
        manager = CalendarManager()
        window = [ScheduleWindow(day_of_week=1, start_hour=9, end_hour=11)]

        slots = manager.generate_time_slots(60, MONDAY, MONDAY.replace(hour=23), window)

        assert starts(slots) == [(6, 9, 0), (6, 9, 30), (6, 10, 0)]
        assert all(s.duration == 60 and s.is_available for s in slots)
        assert slots[-1].end == datetime(2025, 1, 6, 11, 0)

    def test_overlapping_windows_are_merged(self):
        """Windows on the same weekday contribute each start time once."""
        manager = CalendarManager()
        windows = [
            ScheduleWindow(day_of_week=1, start_hour=9, end_hour=10),
            ScheduleWindow(day_of_week=1, start_hour=9, end_hour=11),
        ]

        slots = manager.generate_time_slots(30, MONDAY, MONDAY.replace(hour=23), windows)

        assert starts(slots) == [(6, 9, 0), (6, 9, 30), (6, 10, 0), (6, 10, 30)]

    def test_inactive_and_empty_windows_are_skipped(self):
        """Inactive windows and windows with no length produce nothing."""
        manager = CalendarManager()
        windows = [
            ScheduleWindow(day_of_week=1, start_hour=9, end_hour=17, is_active=False),
            ScheduleWindow(day_of_week=1, start_hour=12, end_hour=12),
        ]

        assert manager.generate_time_slots(30, MONDAY, MONDAY.replace(hour=23), windows) == []

    def test_conflicting_slots_are_flagged(self):
        """Slots touching an event are unavailable and list the event."""
        meeting = CalendarEvent(
            start=datetime(2025, 1, 6, 9, 15),
            end=datetime(2025, 1, 6, 9, 45),
            title="Standup",
        )
        manager = CalendarManager(events=[meeting])
        window = [ScheduleWindow(day_of_week=1, start_hour=9, end_hour=11)]

        slots = manager.generate_time_slots(60, MONDAY, MONDAY.replace(hour=23), window)

        assert [s.is_available for s in slots] == [False, False, True]
        assert slots[0].conflicts[0].title == "Standup"

        available = manager.find_available_time_slots(60, MONDAY, MONDAY.replace(hour=23), window)
        assert starts(available) == [(6, 10, 0)]

    def test_adjacent_event_does_not_conflict(self):
        """An event ending exactly when a slot starts leaves it free."""
        meeting = CalendarEvent(start=datetime(2025, 1, 6, 8, 0), end=datetime(2025, 1, 6, 9, 0))
        manager = CalendarManager(events=[meeting])
        window = [ScheduleWindow(day_of_week=1, start_hour=9, end_hour=10)]

        slots = manager.generate_time_slots(60, MONDAY, MONDAY.replace(hour=23), window)

        assert len(slots) == 1
        assert slots[0].is_available is True

    def test_range_spans_several_days(self):
        """Each day of the range uses the windows of its own weekday."""
        manager = CalendarManager()
        windows = [
            ScheduleWindow(day_of_week=1, start_hour=9, end_hour=10),
            ScheduleWindow(day_of_week=3, start_hour=14, end_hour=15),
        ]

        slots = manager.generate_time_slots(60, MONDAY, datetime(2025, 1, 8, 23, 0), windows)

        assert starts(slots) == [(6, 9, 0), (8, 14, 0)]

    def test_slots_end_by_range_end(self):
        """The time of day of the range end is honoured, not just its date."""
        manager = CalendarManager()
        window = [ScheduleWindow(day_of_week=1, start_hour=9, end_hour=17)]

        slots = manager.generate_time_slots(60, MONDAY, datetime(2025, 1, 6, 10, 30), window)

        assert starts(slots) == [(6, 9, 0), (6, 9, 30)]
        assert slots[-1].end == datetime(2025, 1, 6, 10, 30)

    def test_not_before_drops_earlier_slots(self):
        manager = CalendarManager()
        window = [ScheduleWindow(day_of_week=1, start_hour=9, end_hour=11)]

        slots = manager.generate_time_slots(
            60, MONDAY, MONDAY.replace(hour=23), window, not_before=datetime(2025, 1, 6, 9, 10)
        )

        assert starts(slots) == [(6, 9, 30), (6, 10, 0)]

    def test_invalid_arguments(self):
        """Non-positive durations and inverted ranges are rejected."""
        manager = CalendarManager()

        with pytest.raises(ValueError):
            manager.generate_time_slots(0, MONDAY, MONDAY, WORK_WEEK)
        with pytest.raises(ValueError):
            manager.generate_time_slots(30, MONDAY, datetime(2025, 1, 5), WORK_WEEK)

    def test_windows_follow_configured_timezone(self):
        """Window hours are local to the manager's timezone."""
        manager = CalendarManager(tz="America/New_York")
        window = [ScheduleWindow(day_of_week=1, start_hour=9, end_hour=10)]

        slots = manager.generate_time_slots(
            60,
            datetime(2025, 1, 6, 0, 0, tzinfo=UTC),
            datetime(2025, 1, 6, 23, 0, tzinfo=UTC),
            window,
        )

        assert len(slots) == 1
        assert slots[0].start.astimezone(UTC) == datetime(2025, 1, 6, 14, 0, tzinfo=UTC)


class TestSuggestOptimalSchedule:
    """Test cases for picking one slot."""

    def test_first_available_slot_wins(self):
        manager = CalendarManager()

        suggestion = manager.suggest_optimal_schedule(
            60, datetime(2025, 1, 8, 18, 0), WORK_WEEK, now=datetime(2025, 1, 6, 8, 0)
        )

        assert suggestion.suggested_start == datetime(2025, 1, 6, 9, 0)
        assert suggestion.suggested_end == datetime(2025, 1, 6, 10, 0)
        assert suggestion.reason == (
            "Scheduled on Monday at 9:00 AM based on available time and category constraints"
        )
        assert starts(suggestion.alternative_slots) == [(6, 9, 30), (6, 10, 0), (6, 10, 30)]

    def test_preferred_window_wins(self):
        """The first slot inside a preferred window is chosen."""
        manager = CalendarManager()
        preferred = [PreferredTime(day_of_week=2, start_hour=14, end_hour=16)]

        suggestion = manager.suggest_optimal_schedule(
            60,
            datetime(2025, 1, 8, 18, 0),
            WORK_WEEK,
            preferred_times=preferred,
            now=datetime(2025, 1, 6, 8, 0),
        )

        assert suggestion.suggested_start == datetime(2025, 1, 7, 14, 0)
        assert suggestion.reason == "Scheduled during your preferred work time on Tuesday at 2:00 PM"
        assert starts(suggestion.alternative_slots) == [(6, 9, 0), (6, 9, 30), (6, 10, 0)]

    def test_busy_slots_are_skipped(self):
        meeting = CalendarEvent(start=datetime(2025, 1, 6, 9, 0), end=datetime(2025, 1, 6, 12, 0))
        manager = CalendarManager(events=[meeting])

        suggestion = manager.suggest_optimal_schedule(
            60, datetime(2025, 1, 8, 18, 0), WORK_WEEK, now=datetime(2025, 1, 6, 8, 0)
        )

        assert suggestion.suggested_start == datetime(2025, 1, 6, 12, 0)

    def test_past_due_date_has_no_slots(self):
        manager = CalendarManager()

        with pytest.raises(NoAvailableSlotsError):
            manager.suggest_optimal_schedule(
                60, datetime(2025, 1, 5), WORK_WEEK, now=datetime(2025, 1, 6, 8, 0)
            )

    def test_midnight_due_date_excludes_that_day(self):
        """A task due at midnight cannot be scheduled later that day."""
        manager = CalendarManager()
        window = [ScheduleWindow(day_of_week=1, start_hour=9, end_hour=17)]

        with pytest.raises(NoAvailableSlotsError):
            manager.suggest_optimal_schedule(
                60, datetime(2025, 1, 6), window, now=datetime(2025, 1, 5, 20, 0)
            )

    def test_no_windows_has_no_slots(self):
        """Without any availability windows nothing can be suggested."""
        manager = CalendarManager()

        with pytest.raises(NoAvailableSlotsError) as exc_info:
            manager.suggest_optimal_schedule(
                60, datetime(2025, 1, 8, 18, 0), [], now=datetime(2025, 1, 6, 8, 0)
            )

        assert exc_info.value.status_code == 409
