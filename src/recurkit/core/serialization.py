"""Dict/JSON encoding of recurrence rules."""

import json
from datetime import datetime

from .errors import InvalidRuleConfiguration
from .rule import Frequency, PreferredTime, RecurrenceRule, RepeatMode, parse_time

# camelCase keys found in exported rule files
_CAMEL_KEYS = {
    "daysOfWeek": "days_of_week",
    "dayOfMonth": "day_of_month",
    "endDate": "end_date",
    "maxOccurrences": "max_occurrences",
    "repeatMode": "repeat_mode",
    "timeZoneIdentifier": "time_zone",
    "recreateIfIncomplete": "recreate_if_incomplete",
    "preferredTimeHour": "preferred_time_hour",
    "preferredTimeMinute": "preferred_time_minute",
}


def rule_to_dict(rule: RecurrenceRule) -> dict:
    """Serialize a rule to JSON-compatible primitives."""
    return {
        "id": rule.id,
        "frequency": rule.frequency.value,
        "interval": rule.interval,
        "days_of_week": rule.sorted_days if rule.days_of_week is not None else None,
        "day_of_month": rule.day_of_month,
        "end_date": rule.end_date.isoformat() if rule.end_date else None,
        "max_occurrences": rule.max_occurrences,
        "repeat_mode": rule.repeat_mode.value,
        "preferred_time": str(rule.preferred_time) if rule.preferred_time else None,
        "time_zone": rule.time_zone,
        "recreate_if_incomplete": rule.recreate_if_incomplete,
    }


def _preferred_time(data: dict) -> PreferredTime | None:
    if data.get("preferred_time"):
        parsed = parse_time(data["preferred_time"])
        if parsed is None:
            raise InvalidRuleConfiguration(f"Invalid preferred time: {data['preferred_time']!r}")
        return parsed
    hour = data.get("preferred_time_hour")
    minute = data.get("preferred_time_minute")
    if hour is None or minute is None:
        return None
    return PreferredTime(int(hour), int(minute))


def _parse_bool(value, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    raise InvalidRuleConfiguration(f"Expected true or false, got {value!r}")


def rule_from_dict(data: dict) -> RecurrenceRule:
    """
    Build a rule from a dict produced by `rule_to_dict`.

    Also accepts camelCase keys from exported rule files.
    Raises InvalidRuleConfiguration for malformed payloads.
    """
    data = {_CAMEL_KEYS.get(k, k): v for k, v in data.items()}

    try:
        end_date = datetime.fromisoformat(data["end_date"]) if data.get("end_date") else None
        days = data.get("days_of_week")
        kwargs = dict(
            frequency=Frequency(data["frequency"]),
            interval=int(data.get("interval", 1)),
            days_of_week=frozenset(int(d) for d in days) if days is not None else None,
            day_of_month=int(data["day_of_month"]) if data.get("day_of_month") is not None else None,
            end_date=end_date,
            max_occurrences=(
                int(data["max_occurrences"]) if data.get("max_occurrences") is not None else None
            ),
            repeat_mode=RepeatMode(data.get("repeat_mode") or RepeatMode.FROM_ORIGINAL_DATE.value),
            preferred_time=_preferred_time(data),
            time_zone=data.get("time_zone") or "UTC",
            recreate_if_incomplete=_parse_bool(data.get("recreate_if_incomplete"), True),
        )
    except InvalidRuleConfiguration:
        raise
    except KeyError as e:
        raise InvalidRuleConfiguration(f"Missing field: {e.args[0]}") from e
    except (TypeError, ValueError) as e:
        raise InvalidRuleConfiguration(f"Malformed rule: {e}") from e

    if data.get("id"):
        kwargs["id"] = str(data["id"])
    return RecurrenceRule(**kwargs)


def dumps(rule: RecurrenceRule, indent: int | None = None) -> str:
    return json.dumps(rule_to_dict(rule), indent=indent)


def loads(text: str) -> RecurrenceRule:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise InvalidRuleConfiguration(f"Invalid JSON: {e}") from e
    if not isinstance(data, dict):
        raise InvalidRuleConfiguration("Rule JSON must be an object")
    return rule_from_dict(data)
