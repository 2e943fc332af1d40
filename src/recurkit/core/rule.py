"""Recurrence rule value object - no I/O dependencies."""

import dataclasses
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .errors import InvalidRuleConfiguration, UnresolvableCustomFrequency

# Weekday numbers follow the Sunday-first convention: 1=Sunday .. 7=Saturday.
SUNDAY, MONDAY, TUESDAY, WEDNESDAY, THURSDAY, FRIDAY, SATURDAY = range(1, 8)

MAX_HOURLY_INTERVAL = 24
MAX_MINUTELY_INTERVAL = 1440

AMBIGUOUS_CUSTOM = "Custom frequency has both days of week and a day of month"


class Frequency(Enum):
    """Base stepping unit of a rule."""

    MINUTELY = "minutely"
    HOURLY = "hourly"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"
    CUSTOM = "custom"

    @property
    def is_sub_daily(self) -> bool:
        return self in (Frequency.MINUTELY, Frequency.HOURLY)


class RepeatMode(Enum):
    """Which date the next occurrence is computed from."""

    FROM_ORIGINAL_DATE = "from_original"  # Fixed cadence
    FROM_COMPLETION_DATE = "from_completion"  # Sliding cadence


@dataclass(frozen=True)
class PreferredTime:
    """Wall-clock time pinned onto generated occurrences."""

    hour: int
    minute: int = 0

    def is_valid(self) -> bool:
        return 0 <= self.hour <= 23 and 0 <= self.minute <= 59

    def __str__(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}"


def parse_time(value: str | None) -> PreferredTime | None:
    """
    Parse an "HH:MM" string.

    Returns None for anything that is not exactly two in-range numeric
    components ("9am", "25:00", "12:00:00", ":30" are all rejected).
    """
    if value is None:
        return None
    parts = value.split(":")
    if len(parts) != 2 or not all(p.isdigit() for p in parts):
        return None
    parsed = PreferredTime(int(parts[0]), int(parts[1]))
    return parsed if parsed.is_valid() else None


def _new_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class RecurrenceRule:
    """
    Immutable recurrence rule.

    Editing a rule means building a new one (see `with_changes`); fields are
    never mutated in place. Construction is lenient so that callers can build
    a draft and ask `is_valid`; the engine calls `validate()` before use.
    """

    frequency: Frequency
    interval: int = 1
    days_of_week: frozenset[int] | None = None
    day_of_month: int | None = None
    end_date: datetime | None = None
    max_occurrences: int | None = None
    repeat_mode: RepeatMode = RepeatMode.FROM_ORIGINAL_DATE
    preferred_time: PreferredTime | None = None
    time_zone: str = "UTC"
    recreate_if_incomplete: bool = True
    id: str = field(default_factory=_new_id, compare=False)

    def __post_init__(self):
        if isinstance(self.frequency, str):
            object.__setattr__(self, "frequency", Frequency(self.frequency))
        if isinstance(self.repeat_mode, str):
            object.__setattr__(self, "repeat_mode", RepeatMode(self.repeat_mode))
        if self.days_of_week is not None and not isinstance(self.days_of_week, frozenset):
            object.__setattr__(self, "days_of_week", frozenset(self.days_of_week))

    @property
    def tzinfo(self) -> ZoneInfo:
        """The rule's calendar zone. Raises InvalidRuleConfiguration if unknown."""
        try:
            return ZoneInfo(self.time_zone)
        except (ZoneInfoNotFoundError, TypeError, ValueError) as e:
            raise InvalidRuleConfiguration(f"Unknown time zone: {self.time_zone!r}") from e

    @property
    def sorted_days(self) -> list[int]:
        return sorted(self.days_of_week or ())

    def problems(self) -> list[str]:
        """All invariant violations, empty when the rule is valid."""
        problems = []

        if not isinstance(self.interval, int) or self.interval < 1:
            problems.append(f"Interval must be at least 1, got {self.interval}")
        elif self.frequency == Frequency.HOURLY and self.interval > MAX_HOURLY_INTERVAL:
            problems.append(f"Hourly interval must be at most {MAX_HOURLY_INTERVAL}, got {self.interval}")
        elif self.frequency == Frequency.MINUTELY and self.interval > MAX_MINUTELY_INTERVAL:
            problems.append(
                f"Minutely interval must be at most {MAX_MINUTELY_INTERVAL}, got {self.interval}"
            )

        if self.days_of_week:
            bad = sorted((d for d in self.days_of_week if not (isinstance(d, int) and 1 <= d <= 7)), key=str)
            if bad:
                problems.append(f"Days of week must be in 1-7 (1=Sunday), got {bad}")

        if self.day_of_month is not None and not (
            isinstance(self.day_of_month, int) and 1 <= self.day_of_month <= 31
        ):
            problems.append(f"Day of month must be in 1-31, got {self.day_of_month!r}")

        if self.is_ambiguous_custom:
            problems.append(AMBIGUOUS_CUSTOM)

        if self.max_occurrences is not None and not (
            isinstance(self.max_occurrences, int) and self.max_occurrences >= 1
        ):
            problems.append(f"Max occurrences must be at least 1, got {self.max_occurrences!r}")

        if self.preferred_time is not None and not self.preferred_time.is_valid():
            problems.append(f"Preferred time out of range: {self.preferred_time}")

        try:
            ZoneInfo(self.time_zone)
        except (ZoneInfoNotFoundError, TypeError, ValueError):
            problems.append(f"Unknown time zone: {self.time_zone!r}")

        return problems

    @property
    def is_ambiguous_custom(self) -> bool:
        """Custom rule with both a weekday set and a day of month."""
        return (
            self.frequency == Frequency.CUSTOM
            and bool(self.days_of_week)
            and self.day_of_month is not None
        )

    def validate(self) -> "RecurrenceRule":
        """Raise InvalidRuleConfiguration if any invariant is violated."""
        problems = self.problems()
        if problems:
            if self.is_ambiguous_custom:
                raise UnresolvableCustomFrequency(problems)
            raise InvalidRuleConfiguration(problems)
        return self

    @property
    def is_valid(self) -> bool:
        return not self.problems()

    def with_changes(self, **changes) -> "RecurrenceRule":
        """Return a new rule with the given fields replaced (keeps the id)."""
        return dataclasses.replace(self, **changes)

    # Factories

    @classmethod
    def minutely(
        cls,
        interval: int = 1,
        end_date: datetime | None = None,
        time_zone: str = "UTC",
        recreate_if_incomplete: bool = True,
    ) -> "RecurrenceRule":
        return cls(
            frequency=Frequency.MINUTELY,
            interval=interval,
            end_date=end_date,
            time_zone=time_zone,
            recreate_if_incomplete=recreate_if_incomplete,
        )

    @classmethod
    def hourly(
        cls,
        interval: int = 1,
        end_date: datetime | None = None,
        time_zone: str = "UTC",
        recreate_if_incomplete: bool = True,
    ) -> "RecurrenceRule":
        return cls(
            frequency=Frequency.HOURLY,
            interval=interval,
            end_date=end_date,
            time_zone=time_zone,
            recreate_if_incomplete=recreate_if_incomplete,
        )

    @classmethod
    def daily(
        cls,
        interval: int = 1,
        end_date: datetime | None = None,
        time: str | None = None,
        time_zone: str = "UTC",
        recreate_if_incomplete: bool = True,
    ) -> "RecurrenceRule":
        return cls(
            frequency=Frequency.DAILY,
            interval=interval,
            end_date=end_date,
            preferred_time=parse_time(time),
            time_zone=time_zone,
            recreate_if_incomplete=recreate_if_incomplete,
        )

    @classmethod
    def weekly(
        cls,
        days_of_week=None,
        interval: int = 1,
        end_date: datetime | None = None,
        time: str | None = None,
        time_zone: str = "UTC",
        recreate_if_incomplete: bool = True,
    ) -> "RecurrenceRule":
        return cls(
            frequency=Frequency.WEEKLY,
            interval=interval,
            days_of_week=frozenset(days_of_week) if days_of_week is not None else None,
            end_date=end_date,
            preferred_time=parse_time(time),
            time_zone=time_zone,
            recreate_if_incomplete=recreate_if_incomplete,
        )

    @classmethod
    def monthly(
        cls,
        day_of_month: int | None = None,
        interval: int = 1,
        end_date: datetime | None = None,
        time: str | None = None,
        time_zone: str = "UTC",
        recreate_if_incomplete: bool = True,
    ) -> "RecurrenceRule":
        return cls(
            frequency=Frequency.MONTHLY,
            interval=interval,
            day_of_month=day_of_month,
            end_date=end_date,
            preferred_time=parse_time(time),
            time_zone=time_zone,
            recreate_if_incomplete=recreate_if_incomplete,
        )

    @classmethod
    def yearly(
        cls,
        interval: int = 1,
        end_date: datetime | None = None,
        time: str | None = None,
        time_zone: str = "UTC",
        recreate_if_incomplete: bool = True,
    ) -> "RecurrenceRule":
        return cls(
            frequency=Frequency.YEARLY,
            interval=interval,
            end_date=end_date,
            preferred_time=parse_time(time),
            time_zone=time_zone,
            recreate_if_incomplete=recreate_if_incomplete,
        )

    @classmethod
    def weekdays(cls, **kwargs) -> "RecurrenceRule":
        """Monday through Friday."""
        return cls.weekly({MONDAY, TUESDAY, WEDNESDAY, THURSDAY, FRIDAY}, **kwargs)

    @classmethod
    def weekends(cls, **kwargs) -> "RecurrenceRule":
        """Saturday and Sunday."""
        return cls.weekly({SUNDAY, SATURDAY}, **kwargs)


def common_patterns() -> list[RecurrenceRule]:
    """Quick-pick rules offered by pickers."""
    return [
        RecurrenceRule.daily(),
        RecurrenceRule.weekdays(),
        RecurrenceRule.weekends(),
        RecurrenceRule.monthly(day_of_month=1),
        RecurrenceRule.yearly(),
    ]
