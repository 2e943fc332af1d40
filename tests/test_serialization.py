"""Tests for rule dict/JSON encoding."""

import json
from datetime import datetime

import pytest

from recurkit.core.errors import InvalidRuleConfiguration
from recurkit.core.rule import Frequency, PreferredTime, RecurrenceRule, RepeatMode
from recurkit.core.serialization import dumps, loads, rule_from_dict, rule_to_dict


@pytest.fixture
def rule():
    return RecurrenceRule(
        frequency=Frequency.WEEKLY,
        interval=2,
        days_of_week=frozenset({6, 2}),
        end_date=datetime(2025, 12, 31, 23, 59),
        max_occurrences=10,
        repeat_mode=RepeatMode.FROM_COMPLETION_DATE,
        preferred_time=PreferredTime(7, 30),
        time_zone="Europe/Berlin",
        recreate_if_incomplete=False,
    )


class TestRuleToDict:
    def test_fields(self, rule):
        data = rule_to_dict(rule)
        assert data["frequency"] == "weekly"
        assert data["days_of_week"] == [2, 6]
        assert data["end_date"] == "2025-12-31T23:59:00"
        assert data["repeat_mode"] == "from_completion"
        assert data["preferred_time"] == "07:30"
        assert data["time_zone"] == "Europe/Berlin"
        assert data["recreate_if_incomplete"] is False

    def test_json_round_trip_keeps_id(self, rule):
        restored = loads(dumps(rule))
        assert restored == rule
        assert restored.id == rule.id

    def test_optional_fields_are_none(self):
        data = rule_to_dict(RecurrenceRule.daily())
        assert data["days_of_week"] is None
        assert data["end_date"] is None
        assert data["preferred_time"] is None


class TestRuleFromDict:
    def test_minimal(self):
        rule = rule_from_dict({"frequency": "daily"})
        assert rule == RecurrenceRule.daily()

    def test_camel_case_payload(self):
        rule = rule_from_dict(
            {
                "frequency": "monthly",
                "interval": 1,
                "dayOfMonth": 31,
                "repeatMode": "from_original",
                "timeZoneIdentifier": "America/Chicago",
                "recreateIfIncomplete": True,
                "preferredTimeHour": 9,
                "preferredTimeMinute": 15,
                "maxOccurrences": 12,
            }
        )
        assert rule.frequency is Frequency.MONTHLY
        assert rule.day_of_month == 31
        assert rule.time_zone == "America/Chicago"
        assert rule.preferred_time == PreferredTime(9, 15)
        assert rule.max_occurrences == 12

    def test_missing_frequency(self):
        with pytest.raises(InvalidRuleConfiguration, match="Missing field: frequency"):
            rule_from_dict({"interval": 2})

    def test_unknown_frequency(self):
        with pytest.raises(InvalidRuleConfiguration, match="Malformed rule"):
            rule_from_dict({"frequency": "fortnightly"})

    def test_bad_preferred_time(self):
        with pytest.raises(InvalidRuleConfiguration, match="Invalid preferred time"):
            rule_from_dict({"frequency": "daily", "preferred_time": "25:00"})

    @pytest.mark.parametrize("value,expected", [("false", False), ("True", True), (False, False), (None, True)])
    def test_recreate_flag_parsing(self, value, expected):
        rule = rule_from_dict({"frequency": "daily", "recreateIfIncomplete": value})
        assert rule.recreate_if_incomplete is expected

    @pytest.mark.parametrize("value", ["no", 0, "yes please"])
    def test_recreate_flag_rejects_non_booleans(self, value):
        with pytest.raises(InvalidRuleConfiguration, match="Expected true or false"):
            rule_from_dict({"frequency": "daily", "recreate_if_incomplete": value})

    def test_does_not_validate_invariants(self):
        """Decoding is lenient like construction; validation happens at use."""
        rule = rule_from_dict({"frequency": "daily", "interval": 0})
        assert not rule.is_valid


class TestLoads:
    def test_invalid_json(self):
        with pytest.raises(InvalidRuleConfiguration, match="Invalid JSON"):
            loads("{not json")

    def test_non_object(self):
        with pytest.raises(InvalidRuleConfiguration, match="must be an object"):
            loads(json.dumps([{"frequency": "daily"}]))
