"""Availability and scheduling computation.

Candidate slots are laid out on a 30-minute stride inside the weekly windows
of a category and checked against calendar events the caller has already
fetched. Weekdays follow the 0 = Sunday ... 6 = Saturday convention used by
``CategorySchedule``.

Two policies apply to the windows:

* every window matching a weekday is used; the union of their slots is
  returned with duplicate start times removed, in chronological order;
* a slot whose end would pass the window's ``end_hour`` is never generated.
"""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field, replace
from datetime import UTC, date, datetime, time, timedelta, tzinfo
from typing import Any, Protocol
from zoneinfo import ZoneInfo

from app.exceptions.scheduling import NoAvailableSlotsError

logger = logging.getLogger(__name__)

SLOT_INTERVAL_MINUTES = 30
MAX_ALTERNATIVES = 3
DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]


class WeeklyWindow(Protocol):
    day_of_week: int
    start_hour: int
    end_hour: int


@dataclass
class CalendarEvent:
    start: datetime
    end: datetime
    id: str | None = None
    title: str = ""
    description: str | None = None
    location: str | None = None
    is_all_day: bool = False
    source: str | None = None


@dataclass
class TimeSlot:
    start: datetime
    end: datetime
    duration: int
    is_available: bool
    conflicts: list[CalendarEvent] = field(default_factory=list)


@dataclass
class ScheduleSuggestion:
    suggested_start: datetime
    suggested_end: datetime
    reason: str
    alternative_slots: list[TimeSlot] = field(default_factory=list)


def day_of_week(value: datetime | date) -> int:
    """Weekday with Sunday as 0."""
    return (value.weekday() + 1) % 7


def format_clock(value: datetime) -> str:
    """12-hour clock time such as ``9:30 AM``."""
    hour = value.hour % 12 or 12
    suffix = "AM" if value.hour < 12 else "PM"
    return f"{hour}:{value.minute:02d} {suffix}"


def events_overlap(start: datetime, end: datetime, event: CalendarEvent) -> bool:
    return start < event.end and end > event.start


class CalendarManager:
    """
    Finds free time for a task inside weekly availability windows.

    :param events: External calendar events to avoid.
    :param tz: Timezone the windows are expressed in. Without it all values
        are treated as naive UTC; aware inputs are converted first.
    """

    def __init__(self, events: Iterable[CalendarEvent] | None = None, tz: str | tzinfo | None = None):
        self.tz = ZoneInfo(tz) if isinstance(tz, str) else tz
        self.events = sorted(
            (
                replace(e, start=self._align(e.start), end=self._align(e.end))
                for e in (events or [])
            ),
            key=lambda e: e.start,
        )

    def _align(self, value: datetime) -> datetime:
        if self.tz is None:
            if value.tzinfo is not None:
                return value.astimezone(UTC).replace(tzinfo=None)
            return value
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(self.tz)

    def _day_start(self, day: date) -> datetime:
        return datetime.combine(day, time(), tzinfo=self.tz)

    def _slot_offsets(self, windows: Sequence[Any], required_duration: int) -> list[int]:
        """Start offsets (minutes after midnight) of every slot fitting one of ``windows``."""
        offsets: set[int] = set()
        for window in windows:
            if not getattr(window, "is_active", True):
                continue
            window_start = window.start_hour * 60
            window_end = window.end_hour * 60
            if window_start >= window_end:
                continue
            for offset in range(window_start, window_end, SLOT_INTERVAL_MINUTES):
                if offset + required_duration > window_end:
                    break
                offsets.add(offset)
        return sorted(offsets)

    def generate_time_slots(
        self,
        required_duration: int,
        start_date: datetime,
        end_date: datetime,
        schedules: Sequence[WeeklyWindow],
        not_before: datetime | None = None,
    ) -> list[TimeSlot]:
        """
        Every candidate slot lying entirely between ``start_date`` and ``end_date``.

        Each calendar day of the range contributes the slots of the windows
        matching its weekday. Slots are tagged ``is_available`` and carry the
        events they collide with.

        :param required_duration: Slot length in minutes, must be positive.
        :param not_before: Slots starting earlier than this are dropped.
        :raises ValueError: On a non-positive duration or an inverted range.
        """
        if required_duration <= 0:
            raise ValueError("required_duration must be a positive number of minutes")

        start = self._align(start_date)
        end = self._align(end_date)
        if start > end:
            raise ValueError("start_date must not be after end_date")
        earliest = self._align(not_before) if not_before is not None else None

        by_day: dict[int, list[WeeklyWindow]] = {}
        for window in schedules:
            by_day.setdefault(window.day_of_week, []).append(window)

        duration = timedelta(minutes=required_duration)
        slots: list[TimeSlot] = []
        current = start.date()
        while current <= end.date():
            windows = by_day.get(day_of_week(current), [])
            day_start = self._day_start(current)
            for offset in self._slot_offsets(windows, required_duration):
                slot_start = day_start + timedelta(minutes=offset)
                if earliest is not None and slot_start < earliest:
                    continue
                slot_end = slot_start + duration
                if slot_end > end:
                    continue
                conflicts = [e for e in self.events if events_overlap(slot_start, slot_end, e)]
                slots.append(
                    TimeSlot(
                        start=slot_start,
                        end=slot_end,
                        duration=required_duration,
                        is_available=not conflicts,
                        conflicts=conflicts,
                    )
                )
            current += timedelta(days=1)

        return slots

    def find_available_time_slots(
        self,
        required_duration: int,
        start_date: datetime,
        end_date: datetime,
        schedules: Sequence[WeeklyWindow],
        not_before: datetime | None = None,
    ) -> list[TimeSlot]:
        """Available subset of :meth:`generate_time_slots`."""
        return [
            slot
            for slot in self.generate_time_slots(
                required_duration, start_date, end_date, schedules, not_before=not_before
            )
            if slot.is_available
        ]

    def suggest_optimal_schedule(
        self,
        task_duration: int,
        due_date: datetime,
        schedules: Sequence[WeeklyWindow],
        preferred_times: Sequence[WeeklyWindow] | None = None,
        now: datetime | None = None,
    ) -> ScheduleSuggestion:
        """
        Pick one slot between ``now`` and ``due_date``.

        The first available slot inside a preferred window wins; otherwise the
        first available slot. Up to three other available slots, earliest
        first, are offered as alternatives.

        :raises NoAvailableSlotsError: If no slot is available at all.
        """
        now = self._align(now or datetime.now(UTC))
        due = self._align(due_date)
        if due < now:
            raise NoAvailableSlotsError()

        available = self.find_available_time_slots(
            task_duration, now, due, schedules, not_before=now
        )
        if not available:
            raise NoAvailableSlotsError()

        optimal = available[0]
        if preferred_times:
            for slot in available:
                if self._is_preferred(slot, preferred_times):
                    optimal = slot
                    break

        alternatives = [s for s in available if s.start != optimal.start][:MAX_ALTERNATIVES]
        logger.debug("Suggested slot %s with %d alternatives", optimal.start, len(alternatives))

        return ScheduleSuggestion(
            suggested_start=optimal.start,
            suggested_end=optimal.end,
            reason=self._reason(optimal, preferred_times),
            alternative_slots=alternatives,
        )

    @staticmethod
    def _is_preferred(slot: TimeSlot, preferred_times: Sequence[WeeklyWindow]) -> bool:
        return any(
            pref.day_of_week == day_of_week(slot.start)
            and pref.start_hour <= slot.start.hour < pref.end_hour
            for pref in preferred_times
        )

    def _reason(self, slot: TimeSlot, preferred_times: Sequence[WeeklyWindow] | None) -> str:
        day_name = DAY_NAMES[day_of_week(slot.start)]
        clock = format_clock(slot.start)
        if preferred_times and self._is_preferred(slot, preferred_times):
            return f"Scheduled during your preferred work time on {day_name} at {clock}"
        return (
            f"Scheduled on {day_name} at {clock} "
            "based on available time and category constraints"
        )
