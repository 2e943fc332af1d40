"""
Next-instance planning for recurring items.

The engine only answers date questions. These helpers apply the rule's
policy fields (repeat mode, recreate-if-incomplete, occurrence cap) the way
a task or habit manager does when an instance is completed or skipped.
Pure functions - no I/O.
"""

import logging
from dataclasses import dataclass
from datetime import datetime

from .engine import next_occurrence
from .errors import NoFurtherOccurrences
from .rule import RecurrenceRule, RepeatMode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NextInstance:
    """Due date and position of the instance that should follow."""

    due: datetime
    occurrence_index: int


def reference_date(
    rule: RecurrenceRule,
    scheduled: datetime,
    completed_at: datetime | None = None,
    now: datetime | None = None,
) -> datetime:
    """Date the next occurrence is computed from, per the rule's repeat mode."""
    if rule.repeat_mode == RepeatMode.FROM_COMPLETION_DATE:
        return completed_at or now or datetime.now(rule.tzinfo)
    return scheduled


def plan_next_instance(
    rule: RecurrenceRule,
    scheduled: datetime,
    *,
    completed: bool,
    completed_at: datetime | None = None,
    occurrence_index: int = 1,
    now: datetime | None = None,
) -> NextInstance | None:
    """
    Decide the instance that follows the current one.

    Args:
        rule: The item's recurrence rule
        scheduled: Due date of the current instance
        completed: Whether the current instance was completed
        completed_at: When it was completed (used by FROM_COMPLETION_DATE)
        occurrence_index: 1-based position of the current instance
        now: Fallback reference for completion mode when `completed_at` is missing

    Returns:
        The next instance, or None if the rule withholds it until the
        current instance is completed.

    Raises:
        NoFurtherOccurrences: the occurrence cap or end date is reached
        InvalidRuleConfiguration: the rule is invalid
    """
    if not completed and not rule.recreate_if_incomplete:
        logger.info(f"Rule {rule.id}: previous instance incomplete, not recreating")
        return None

    if rule.max_occurrences is not None and occurrence_index >= rule.max_occurrences:
        raise NoFurtherOccurrences(f"Maximum occurrences ({rule.max_occurrences}) reached")

    base = reference_date(rule, scheduled, completed_at, now)
    anchor = scheduled if rule.repeat_mode == RepeatMode.FROM_ORIGINAL_DATE else base

    due = next_occurrence(rule, base, anchor=anchor, generated=occurrence_index)
    if due is None:
        raise NoFurtherOccurrences(f"No occurrence after {base.isoformat()} before end date")

    logger.debug(f"Rule {rule.id}: next instance #{occurrence_index + 1} due {due.isoformat()}")
    return NextInstance(due=due, occurrence_index=occurrence_index + 1)
