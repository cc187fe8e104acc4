"""Unit tests for recurrence rule helpers."""

from datetime import UTC, datetime, timedelta, timezone

import pytest

from app.shared.recurrence import (
    add_months,
    calculate_next_occurrence,
    generate_recurrence_rule,
    parse_recurrence_rule,
)


class TestGenerateRecurrenceRule:
    def test_basic_rule(self):
        assert generate_recurrence_rule("daily") == "FREQ=DAILY;INTERVAL=1"

    def test_rule_with_days_and_end(self):
        """Weekday codes and the end date are appended."""
        rule = generate_recurrence_rule(
            "weekly", interval=2, by_day=["mo", "we"], until=datetime(2025, 1, 1)
        )

        assert rule == "FREQ=WEEKLY;INTERVAL=2;BYDAY=MO,WE;UNTIL=20250101T000000Z"

    def test_aware_end_is_converted_to_utc(self):
        until = datetime(2025, 1, 1, 2, 0, tzinfo=timezone(timedelta(hours=2)))

        assert generate_recurrence_rule("daily", until=until).endswith("UNTIL=20250101T000000Z")

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"frequency": "hourly"},
            {"frequency": "daily", "interval": 0},
            {"frequency": "weekly", "by_day": ["XX"]},
        ],
    )
    def test_invalid_values(self, kwargs):
        """Unknown frequencies, zero intervals and bad weekday codes are rejected."""
        with pytest.raises(ValueError):
            generate_recurrence_rule(**kwargs)


class TestParseRecurrenceRule:
    def test_parse_full_rule(self):
        parsed = parse_recurrence_rule("FREQ=WEEKLY;INTERVAL=3;BYDAY=mo,fr;UNTIL=20251231T000000Z")

        assert parsed.frequency == "WEEKLY"
        assert parsed.interval == 3
        assert parsed.by_day == ["MO", "FR"]
        assert parsed.until == datetime(2025, 12, 31)

    def test_interval_defaults_to_one(self):
        assert parse_recurrence_rule("FREQ=MONTHLY").interval == 1

    @pytest.mark.parametrize(
        "rule",
        [
            "",
            "   ",
            "FREQ=HOURLY",
            "INTERVAL=2",
            "FREQ",
            "FREQ=DAILY;INTERVAL=x",
            "FREQ=DAILY;INTERVAL=0",
            "FREQ=DAILY;UNTIL=tomorrow",
        ],
    )
    def test_malformed_rules(self, rule):
        """Malformed rules raise ValueError."""
        with pytest.raises(ValueError):
            parse_recurrence_rule(rule)


class TestCalculateNextOccurrence:
    def test_daily_interval(self):
        assert calculate_next_occurrence(
            "FREQ=DAILY;INTERVAL=2", datetime(2025, 1, 1, 9, 0)
        ) == datetime(2025, 1, 3, 9, 0)

    def test_weekly(self):
        assert calculate_next_occurrence("FREQ=WEEKLY", datetime(2025, 1, 1)) == datetime(2025, 1, 8)

    def test_monthly_clamps_to_month_end(self):
        """January 31st plus one month lands on February 28th."""
        assert calculate_next_occurrence("FREQ=MONTHLY", datetime(2025, 1, 31)) == datetime(2025, 2, 28)

    def test_yearly_from_leap_day(self):
        assert calculate_next_occurrence("FREQ=YEARLY", datetime(2024, 2, 29)) == datetime(2025, 2, 28)

    def test_aware_start_returns_naive_utc(self):
        start = datetime(2025, 1, 1, 12, 0, tzinfo=timezone(timedelta(hours=-5)))

        assert calculate_next_occurrence("FREQ=DAILY", start) == datetime(2025, 1, 2, 17, 0)

    def test_defaults_to_now(self):
        before = datetime.now(UTC).replace(tzinfo=None)

        result = calculate_next_occurrence("FREQ=DAILY")

        assert result.tzinfo is None
        assert before + timedelta(days=1) <= result <= before + timedelta(days=1, minutes=1)

    def test_add_months_across_year(self):
        assert add_months(datetime(2025, 11, 15), 3) == datetime(2026, 2, 15)
