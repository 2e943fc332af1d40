"""Recurrence error taxonomy."""


class RecurrenceError(Exception):
    """Base class for recurrence errors."""


class InvalidRuleConfiguration(RecurrenceError, ValueError):
    """Rule fields violate the rule invariants."""

    def __init__(self, problems: list[str] | str):
        if isinstance(problems, str):
            problems = [problems]
        self.problems = list(problems)
        super().__init__("; ".join(self.problems))


class UnresolvableCustomFrequency(InvalidRuleConfiguration):
    """A custom rule carries no single stepping rule."""


class NoFurtherOccurrences(RecurrenceError):
    """The rule is exhausted by its end date or occurrence cap."""
