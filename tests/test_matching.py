"""Tests for pattern matching against an anchor date."""

from datetime import datetime

import pytest

from recurkit.core.engine import matches, occurrences
from recurkit.core.errors import InvalidRuleConfiguration
from recurkit.core.rule import Frequency, RecurrenceRule


class TestSubDailyMatching:
    def test_hourly(self):
        base = datetime(2025, 1, 1, 8, 0)
        rule = RecurrenceRule.hourly(interval=2)
        assert matches(rule, datetime(2025, 1, 1, 10, 0), base)
        assert matches(rule, datetime(2025, 1, 1, 12, 0), base)
        assert not matches(rule, datetime(2025, 1, 1, 11, 0), base)

    def test_minutely(self):
        base = datetime(2025, 1, 1, 10, 0)
        rule = RecurrenceRule.minutely(interval=15)
        assert matches(rule, datetime(2025, 1, 1, 10, 15), base)
        assert matches(rule, datetime(2025, 1, 1, 10, 30), base)
        assert not matches(rule, datetime(2025, 1, 1, 10, 20), base)


class TestDailyMatching:
    def test_interval(self):
        base = datetime(2025, 1, 1)
        rule = RecurrenceRule.daily(interval=2)
        assert matches(rule, datetime(2025, 1, 3), base)
        assert matches(rule, datetime(2025, 1, 5), base)
        assert not matches(rule, datetime(2025, 1, 4), base)

    def test_date_before_base(self):
        rule = RecurrenceRule.daily()
        assert not matches(rule, datetime(2025, 5, 31), datetime(2025, 6, 1))

    def test_date_after_end(self):
        rule = RecurrenceRule.daily(end_date=datetime(2025, 1, 10))
        base = datetime(2025, 1, 1)
        assert matches(rule, datetime(2025, 1, 10), base)
        assert not matches(rule, datetime(2025, 1, 11), base)


class TestWeeklyMatching:
    def test_day_set(self):
        base = datetime(2025, 1, 5)  # Sunday
        rule = RecurrenceRule.weekly({2, 4})
        assert matches(rule, datetime(2025, 1, 6), base)
        assert matches(rule, datetime(2025, 1, 8), base)
        assert not matches(rule, datetime(2025, 1, 7), base)

    def test_interval(self):
        base = datetime(2025, 1, 6)  # Monday
        rule = RecurrenceRule.weekly({2}, interval=2)
        assert matches(rule, datetime(2025, 1, 20), base)
        assert not matches(rule, datetime(2025, 1, 13), base)
        assert matches(rule, datetime(2025, 2, 3), base)

    def test_without_days_uses_base_weekday(self):
        base = datetime(2025, 1, 1)  # Wednesday
        rule = RecurrenceRule.weekly()
        assert matches(rule, datetime(2025, 1, 8), base)
        assert not matches(rule, datetime(2025, 1, 9), base)


class TestMonthlyMatching:
    def test_specific_day(self):
        base = datetime(2025, 1, 15)
        rule = RecurrenceRule.monthly(day_of_month=15)
        assert matches(rule, datetime(2025, 2, 15), base)
        assert matches(rule, datetime(2025, 3, 15), base)
        assert not matches(rule, datetime(2025, 2, 14), base)

    def test_clamped_day(self):
        base = datetime(2025, 1, 31)
        rule = RecurrenceRule.monthly(day_of_month=31)
        assert matches(rule, datetime(2025, 2, 28), base)
        assert not matches(rule, datetime(2025, 2, 27), base)
        assert matches(rule, datetime(2025, 3, 31), base)

    def test_anchor_month_counts(self):
        """Matching includes the anchor's month; generation starts a month later."""
        rule = RecurrenceRule.monthly(day_of_month=15)
        base = datetime(2025, 1, 10)
        assert matches(rule, datetime(2025, 1, 15), base)
        assert occurrences(rule, base, 1) == [datetime(2025, 2, 15)]

    def test_interval(self):
        base = datetime(2025, 1, 10)
        rule = RecurrenceRule.monthly(day_of_month=10, interval=2)
        assert matches(rule, datetime(2025, 3, 10), base)
        assert not matches(rule, datetime(2025, 2, 10), base)


class TestYearlyMatching:
    def test_same_date(self):
        base = datetime(2025, 6, 15)
        rule = RecurrenceRule.yearly()
        assert matches(rule, datetime(2026, 6, 15), base)
        assert matches(rule, datetime(2027, 6, 15), base)
        assert not matches(rule, datetime(2026, 6, 16), base)

    def test_leap_day(self):
        base = datetime(2024, 2, 29)
        rule = RecurrenceRule.yearly()
        assert matches(rule, datetime(2025, 2, 28), base)
        assert matches(rule, datetime(2028, 2, 29), base)
        assert not matches(rule, datetime(2028, 2, 28), base)


class TestCustomMatching:
    def test_custom_interval_matches_as_days(self):
        base = datetime(2025, 1, 1)
        rule = RecurrenceRule(frequency=Frequency.CUSTOM, interval=7)
        assert matches(rule, datetime(2025, 1, 8), base)
        assert matches(rule, datetime(2025, 1, 15), base)
        assert not matches(rule, datetime(2025, 1, 11), base)

    def test_invalid_rule_raises(self):
        with pytest.raises(InvalidRuleConfiguration):
            matches(RecurrenceRule.daily(interval=0), datetime(2025, 1, 2), datetime(2025, 1, 1))
