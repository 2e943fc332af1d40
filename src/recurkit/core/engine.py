"""
Recurrence engine - pure date-sequence computation.

All arithmetic happens in the rule's time zone. Aware inputs give aware
results in that zone; naive inputs are read as wall time in that zone and
give naive results.
"""

import logging
from collections.abc import Iterator
from datetime import datetime, timedelta
from itertools import islice

from . import calendar_math as cm
from .errors import UnresolvableCustomFrequency
from .rule import AMBIGUOUS_CUSTOM, Frequency, RecurrenceRule

logger = logging.getLogger(__name__)

# Ceiling on consecutive non-advancing candidates per step.
DEFAULT_MAX_STEPS = 10_000


def resolve_frequency(rule: RecurrenceRule) -> Frequency:
    """
    Concrete stepping frequency for a rule.

    Custom rules resolve from their parameters: a weekday set means weekly, a
    day of month means monthly, neither means daily intervals.
    """
    if rule.frequency != Frequency.CUSTOM:
        return rule.frequency

    if rule.is_ambiguous_custom:
        raise UnresolvableCustomFrequency(AMBIGUOUS_CUSTOM)
    if rule.days_of_week:
        return Frequency.WEEKLY
    if rule.day_of_month is not None:
        return Frequency.MONTHLY
    return Frequency.DAILY


def _next_weekday(rule: RecurrenceRule, local: datetime, anchor: datetime) -> datetime:
    current = cm.weekday_number(local)
    days = rule.sorted_days or [cm.weekday_number(anchor)]

    later = [d for d in days if d > current]
    if later:
        return cm.add_days(local, later[0] - current)

    # Wrap to the first selected day, `interval` weeks on
    return cm.add_days(local, 7 * rule.interval + days[0] - current)


def _step(rule: RecurrenceRule, frequency: Frequency, local: datetime, anchor: datetime) -> datetime:
    match frequency:
        case Frequency.MINUTELY:
            return cm.add_elapsed(local, timedelta(minutes=rule.interval))
        case Frequency.HOURLY:
            return cm.add_elapsed(local, timedelta(hours=rule.interval))
        case Frequency.DAILY:
            return cm.add_days(local, rule.interval)
        case Frequency.WEEKLY:
            return _next_weekday(rule, local, anchor)
        case Frequency.MONTHLY:
            return cm.add_months(local, rule.interval, rule.day_of_month or anchor.day)
        case Frequency.YEARLY:
            return cm.add_years(local, rule.interval, anchor.month, anchor.day)
    raise ValueError(f"Unhandled frequency: {frequency}")


def _candidate(rule: RecurrenceRule, frequency: Frequency, cursor: datetime, anchor: datetime) -> datetime:
    candidate = _step(rule, frequency, cursor, anchor)
    if rule.preferred_time is not None and not frequency.is_sub_daily:
        candidate = cm.apply_time(candidate, rule.preferred_time)
    return cm.normalize(candidate)


def _next_local(
    rule: RecurrenceRule,
    frequency: Frequency,
    local: datetime,
    anchor: datetime,
    end: datetime | None,
    max_steps: int = DEFAULT_MAX_STEPS,
) -> datetime | None:
    """
    First candidate strictly after `local`, or None past the end date.

    Candidates that do not advance are stepped over; `max_steps` bounds how
    many of them are tried before giving up.
    """
    cursor = local
    for _ in range(max_steps):
        candidate = _candidate(rule, frequency, cursor, anchor)

        if cm.instant(candidate) > cm.instant(local):
            if end is not None and cm.instant(candidate) > cm.instant(end):
                logger.debug(f"Rule {rule.id}: {candidate.isoformat()} is past end date")
                return None
            return candidate

        logger.debug(f"Rule {rule.id}: {candidate.isoformat()} does not advance past {local.isoformat()}")
        cursor = candidate

    logger.warning(f"Rule {rule.id}: no progress past {local.isoformat()} after {max_steps} steps")
    return None


def _end_local(rule: RecurrenceRule) -> datetime | None:
    if rule.end_date is None:
        return None
    return cm.localize(rule.end_date, rule.tzinfo)


def next_occurrence(
    rule: RecurrenceRule,
    after: datetime,
    *,
    anchor: datetime | None = None,
    generated: int = 0,
    max_steps: int = DEFAULT_MAX_STEPS,
) -> datetime | None:
    """
    Earliest occurrence strictly after `after`, or None when exhausted.

    Args:
        rule: The recurrence rule (validated here)
        after: Exclusive lower bound
        anchor: Date the pattern is aligned to (weekday, day of month,
            month/day); defaults to `after`
        generated: Occurrences already produced since the rule's start,
            counted against `max_occurrences`
        max_steps: Ceiling on consecutive candidates that fail to advance

    Raises:
        InvalidRuleConfiguration: if the rule violates its invariants
    """
    rule.validate()
    frequency = resolve_frequency(rule)

    if rule.max_occurrences is not None and generated >= rule.max_occurrences:
        logger.debug(f"Rule {rule.id}: max occurrences ({rule.max_occurrences}) reached")
        return None

    tz = rule.tzinfo
    local = cm.localize(after, tz)
    anchor_local = cm.localize(anchor, tz) if anchor is not None else local

    result = _next_local(rule, frequency, local, anchor_local, _end_local(rule), max_steps)
    if result is None:
        return None
    return cm.export(result, naive=after.tzinfo is None)


def iter_occurrences(
    rule: RecurrenceRule,
    start: datetime,
    *,
    generated: int = 0,
    max_steps: int = DEFAULT_MAX_STEPS,
) -> Iterator[datetime]:
    """
    Lazily yield occurrences strictly after `start`, in order.

    `start` is the anchor of the pattern. The sequence ends at the rule's end
    date, after `max_occurrences - generated` items, or when `max_steps`
    consecutive candidates fail to advance. Each call returns a fresh
    iterator over the same sequence.
    """
    rule.validate()
    frequency = resolve_frequency(rule)
    return _generate(rule, frequency, start, generated, max_steps)


def _generate(
    rule: RecurrenceRule,
    frequency: Frequency,
    start: datetime,
    generated: int,
    max_steps: int,
) -> Iterator[datetime]:
    naive = start.tzinfo is None
    anchor = current = cm.localize(start, rule.tzinfo)
    end = _end_local(rule)

    remaining = None
    if rule.max_occurrences is not None:
        remaining = rule.max_occurrences - generated

    while remaining is None or remaining > 0:
        nxt = _next_local(rule, frequency, current, anchor, end, max_steps)
        if nxt is None:
            return

        yield cm.export(nxt, naive)
        current = nxt
        if remaining is not None:
            remaining -= 1


def occurrences(
    rule: RecurrenceRule,
    start: datetime,
    limit: int = 50,
    *,
    generated: int = 0,
    max_steps: int = DEFAULT_MAX_STEPS,
) -> list[datetime]:
    """Up to `limit` occurrences strictly after `start`."""
    sequence = iter_occurrences(rule, start, generated=generated, max_steps=max_steps)
    if limit <= 0:
        return []
    return list(islice(sequence, limit))


def matches(rule: RecurrenceRule, candidate: datetime, relative_to: datetime) -> bool:
    """
    Check whether `candidate` falls on the rule's pattern anchored at `relative_to`.

    Dates before the anchor or after the rule's end date never match. Day
    clamping applies: a monthly rule on the 31st matches Feb 28.

    The anchor's own period counts, unlike `occurrences`, which starts one
    interval later. A rule on the 15th anchored at Jan 10 matches Jan 15,
    while its generated sequence begins on Feb 15.
    """
    rule.validate()
    frequency = resolve_frequency(rule)

    tz = rule.tzinfo
    base = cm.localize(relative_to, tz)
    when = cm.localize(candidate, tz)

    if cm.instant(when) < cm.instant(base):
        return False
    end = _end_local(rule)
    if end is not None and cm.instant(when) > cm.instant(end):
        return False

    match frequency:
        case Frequency.MINUTELY | Frequency.HOURLY:
            unit = timedelta(minutes=1) if frequency == Frequency.MINUTELY else timedelta(hours=1)
            elapsed = cm.instant(when) - cm.instant(base)
            return elapsed % (unit * rule.interval) == timedelta(0)

        case Frequency.DAILY:
            days = (when.date() - base.date()).days
            return days % rule.interval == 0

        case Frequency.WEEKLY:
            days = rule.sorted_days or [cm.weekday_number(base)]
            if cm.weekday_number(when) not in days:
                return False
            weeks = (cm.week_start(when.date()) - cm.week_start(base.date())).days // 7
            return weeks % rule.interval == 0

        case Frequency.MONTHLY:
            months = (when.year - base.year) * 12 + when.month - base.month
            target = min(rule.day_of_month or base.day, cm.days_in_month(when.year, when.month))
            return months % rule.interval == 0 and when.day == target

        case Frequency.YEARLY:
            years = when.year - base.year
            target = min(base.day, cm.days_in_month(when.year, base.month))
            return years % rule.interval == 0 and when.month == base.month and when.day == target

    raise ValueError(f"Unhandled frequency: {frequency}")
