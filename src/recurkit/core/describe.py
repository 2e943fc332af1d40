"""Human-readable rule descriptions for previews and pickers."""

from .rule import Frequency, PreferredTime, RecurrenceRule, RepeatMode

WEEKDAY_NAMES = {1: "Sun", 2: "Mon", 3: "Tue", 4: "Wed", 5: "Thu", 6: "Fri", 7: "Sat"}

DISPLAY_NAMES = {
    Frequency.MINUTELY: "Every minute",
    Frequency.HOURLY: "Hourly",
    Frequency.DAILY: "Daily",
    Frequency.WEEKLY: "Weekly",
    Frequency.MONTHLY: "Monthly",
    Frequency.YEARLY: "Yearly",
    Frequency.CUSTOM: "Custom",
}

SHORT_UNITS = {
    Frequency.MINUTELY: "min",
    Frequency.HOURLY: "h",
    Frequency.DAILY: "d",
    Frequency.WEEKLY: "w",
    Frequency.MONTHLY: "m",
    Frequency.YEARLY: "y",
}


def ordinal(n: int) -> str:
    """1 -> '1st', 22 -> '22nd', 11 -> '11th'."""
    if 10 <= n % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


def format_time(time: PreferredTime, clock: str = "12h") -> str:
    """Format as '9:00 AM' (12h) or '09:00' (24h)."""
    if clock == "24h":
        return str(time)
    hour = time.hour % 12 or 12
    period = "AM" if time.hour < 12 else "PM"
    return f"{hour}:{time.minute:02d} {period}"


def _every(interval: int, unit: str, single: str) -> str:
    return single if interval == 1 else f"Every {interval} {unit}"


def _base_description(rule: RecurrenceRule) -> str:
    interval = rule.interval

    match rule.frequency:
        case Frequency.MINUTELY:
            return _every(interval, "minutes", "Every minute")
        case Frequency.HOURLY:
            return _every(interval, "hours", "Hourly")
        case Frequency.DAILY:
            return _every(interval, "days", "Daily")
        case Frequency.WEEKLY:
            if rule.days_of_week:
                names = ", ".join(WEEKDAY_NAMES.get(d, str(d)) for d in rule.sorted_days)
                prefix = "Weekly on" if interval == 1 else f"Every {interval} weeks on"
                return f"{prefix} {names}"
            return _every(interval, "weeks", "Weekly")
        case Frequency.MONTHLY:
            if rule.day_of_month is not None:
                prefix = "Monthly on the" if interval == 1 else f"Every {interval} months on the"
                return f"{prefix} {ordinal(rule.day_of_month)}"
            return _every(interval, "months", "Monthly")
        case Frequency.YEARLY:
            return _every(interval, "years", "Yearly")
        case _:
            return "Custom pattern"


def describe(rule: RecurrenceRule, clock: str = "12h") -> str:
    """
    Natural-language description of a rule.

    Examples: "Daily", "Every 2 weeks on Mon, Fri at 9:00 AM",
    "Monthly on the 15th after completion".
    """
    text = _base_description(rule)

    if rule.preferred_time is not None and not rule.frequency.is_sub_daily:
        text += f" at {format_time(rule.preferred_time, clock)}"

    if rule.repeat_mode == RepeatMode.FROM_COMPLETION_DATE:
        text += " after completion"

    return text


def short_label(rule: RecurrenceRule) -> str:
    """Compact label for row badges, e.g. 'Daily' or 'Every 3d'."""
    if rule.interval > 1:
        unit = SHORT_UNITS.get(rule.frequency)
        if unit is None:
            return DISPLAY_NAMES[Frequency.CUSTOM]
        return f"Every {rule.interval}{unit}"
    return DISPLAY_NAMES[rule.frequency]
