"""Functional core - pure recurrence logic with no I/O."""

from .errors import (
    InvalidRuleConfiguration,
    NoFurtherOccurrences,
    RecurrenceError,
    UnresolvableCustomFrequency,
)
from .rule import Frequency, PreferredTime, RecurrenceRule, RepeatMode, common_patterns, parse_time
from .engine import iter_occurrences, matches, next_occurrence, occurrences, resolve_frequency
from .describe import describe, short_label
from .policy import NextInstance, plan_next_instance, reference_date

__all__ = [
    # Errors
    "RecurrenceError",
    "InvalidRuleConfiguration",
    "UnresolvableCustomFrequency",
    "NoFurtherOccurrences",
    # Rule
    "Frequency",
    "RepeatMode",
    "PreferredTime",
    "RecurrenceRule",
    "common_patterns",
    "parse_time",
    # Engine
    "next_occurrence",
    "iter_occurrences",
    "occurrences",
    "matches",
    "resolve_frequency",
    # Describe
    "describe",
    "short_label",
    # Policy
    "NextInstance",
    "plan_next_instance",
    "reference_date",
]
