"""Time-zone aware calendar arithmetic - pure helpers, no I/O."""

import calendar
from datetime import date, datetime, timedelta, timezone, tzinfo

from dateutil.relativedelta import relativedelta

from .rule import PreferredTime


def localize(dt: datetime, tz: tzinfo) -> datetime:
    """
    Express a datetime in the given zone.

    Naive datetimes are taken as wall time in `tz`; aware ones are converted.
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=tz)
    return dt.astimezone(tz)


def export(local: datetime, naive: bool) -> datetime:
    """Hand a computed datetime back in the caller's flavor (naive or aware)."""
    return local.replace(tzinfo=None) if naive else local


def instant(dt: datetime) -> datetime:
    """UTC instant for comparisons; same-zone aware comparison ignores fold."""
    return dt.astimezone(timezone.utc)


def normalize(local: datetime) -> datetime:
    """Resolve wall times that fall in a DST gap by moving them forward."""
    return local.astimezone(timezone.utc).astimezone(local.tzinfo)


def add_elapsed(local: datetime, delta: timedelta) -> datetime:
    """Add absolute elapsed time, so DST shifts do not stretch the gap."""
    return (instant(local) + delta).astimezone(local.tzinfo)


def add_days(local: datetime, days: int) -> datetime:
    """Add calendar days, keeping the wall-clock time."""
    return local + relativedelta(days=days)


def add_months(local: datetime, months: int, day: int) -> datetime:
    """Add months and land on `day`, clamped to the target month's length."""
    return local + relativedelta(months=months, day=day)


def add_years(local: datetime, years: int, month: int, day: int) -> datetime:
    """Add years and land on `month`/`day`, clamped (Feb 29 -> Feb 28)."""
    return local + relativedelta(years=years, month=month, day=day)


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def weekday_number(d: date) -> int:
    """Sunday-first weekday number: 1=Sunday .. 7=Saturday."""
    return d.isoweekday() % 7 + 1


def week_start(d: date) -> date:
    """Sunday that starts the week containing `d`."""
    return d - timedelta(days=weekday_number(d) - 1)


def apply_time(local: datetime, time: PreferredTime) -> datetime:
    """Pin hour/minute onto a datetime, zeroing seconds."""
    return local.replace(hour=time.hour, minute=time.minute, second=0, microsecond=0, fold=0)
