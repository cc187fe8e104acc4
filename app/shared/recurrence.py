"""Recurrence rule helpers.

Rules use a small subset of the iCalendar RRULE syntax:
``FREQ=DAILY|WEEKLY|MONTHLY|YEARLY;INTERVAL=n[;BYDAY=MO,WE][;UNTIL=20250101T000000Z]``.
"""

import calendar
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

FREQUENCIES = ("DAILY", "WEEKLY", "MONTHLY", "YEARLY")
WEEKDAY_CODES = ("MO", "TU", "WE", "TH", "FR", "SA", "SU")
UNTIL_FORMAT = "%Y%m%dT%H%M%SZ"


@dataclass
class RecurrenceRule:
    frequency: str
    interval: int = 1
    by_day: list[str] = field(default_factory=list)
    until: datetime | None = None


def _naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        return value.astimezone(UTC).replace(tzinfo=None)
    return value


def generate_recurrence_rule(
    frequency: str,
    interval: int = 1,
    by_day: list[str] | None = None,
    until: datetime | None = None,
) -> str:
    """Build a rule string. Raises ``ValueError`` on unknown values."""
    frequency = frequency.upper()
    if frequency not in FREQUENCIES:
        raise ValueError(f"Unknown recurrence frequency: {frequency}")
    if interval < 1:
        raise ValueError("Recurrence interval must be at least 1")

    rule = f"FREQ={frequency};INTERVAL={interval}"
    if by_day:
        days = [d.upper() for d in by_day]
        unknown = [d for d in days if d not in WEEKDAY_CODES]
        if unknown:
            raise ValueError(f"Unknown weekday codes: {', '.join(unknown)}")
        rule += f";BYDAY={','.join(days)}"
    if until:
        rule += f";UNTIL={_naive_utc(until).strftime(UNTIL_FORMAT)}"
    return rule


def parse_recurrence_rule(rule: str) -> RecurrenceRule:
    """Parse a rule string. Raises ``ValueError`` when it is malformed."""
    if not rule or not rule.strip():
        raise ValueError("Recurrence rule is empty")

    values: dict[str, str] = {}
    for part in rule.strip().split(";"):
        if not part:
            continue
        key, sep, value = part.partition("=")
        if not sep or not value:
            raise ValueError(f"Malformed recurrence rule part: {part!r}")
        values[key.strip().upper()] = value.strip()

    frequency = values.get("FREQ", "").upper()
    if frequency not in FREQUENCIES:
        raise ValueError(f"Unknown recurrence frequency: {frequency or '<missing>'}")

    try:
        interval = int(values.get("INTERVAL", "1"))
    except ValueError as e:
        raise ValueError(f"Invalid recurrence interval: {values['INTERVAL']}") from e
    if interval < 1:
        raise ValueError("Recurrence interval must be at least 1")

    by_day = [d.upper() for d in values["BYDAY"].split(",")] if "BYDAY" in values else []

    until = None
    if "UNTIL" in values:
        try:
            until = datetime.strptime(values["UNTIL"], UNTIL_FORMAT)
        except ValueError as e:
            raise ValueError(f"Invalid recurrence end: {values['UNTIL']}") from e

    return RecurrenceRule(frequency=frequency, interval=interval, by_day=by_day, until=until)


def add_months(value: datetime, months: int) -> datetime:
    """Shift by whole months, clamping the day to the target month's length."""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def calculate_next_occurrence(rule: str, from_date: datetime | None = None) -> datetime:
    """Next occurrence after ``from_date`` (defaults to now, naive UTC)."""
    parsed = parse_recurrence_rule(rule)
    start = _naive_utc(from_date) if from_date else datetime.now(UTC).replace(tzinfo=None)

    if parsed.frequency == "DAILY":
        return start + timedelta(days=parsed.interval)
    if parsed.frequency == "WEEKLY":
        return start + timedelta(weeks=parsed.interval)
    if parsed.frequency == "MONTHLY":
        return add_months(start, parsed.interval)
    return add_months(start, 12 * parsed.interval)
