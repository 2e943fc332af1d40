"""recurkit CLI - preview and check recurrence rules."""

import json
import logging
import sys
from datetime import datetime
from pathlib import Path

import click

from .config import load_config
from .core.describe import describe as describe_rule
from .core.engine import matches as rule_matches
from .core.engine import next_occurrence, occurrences
from .core.errors import RecurrenceError
from .core.rule import Frequency, RecurrenceRule, RepeatMode, parse_time
from .core.serialization import dumps, loads

DAY_NAMES = {"sun": 1, "mon": 2, "tue": 3, "wed": 4, "thu": 5, "fri": 6, "sat": 7}


def parse_days(value: str | None) -> frozenset[int] | None:
    """Parse '2,4,6' or 'mon,wed,fri' into weekday numbers (1=Sunday)."""
    if not value:
        return None
    days = set()
    for part in value.split(","):
        part = part.strip().lower()
        if not part:
            continue
        if part.isdigit():
            days.add(int(part))
        elif part[:3] in DAY_NAMES:
            days.add(DAY_NAMES[part[:3]])
        else:
            raise click.BadParameter(f"Unknown weekday: {part!r}", param_hint="--days")
    return frozenset(days)


def parse_datetime(value: str | None, param_hint: str) -> datetime | None:
    if value is None:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        raise click.BadParameter(f"Expected ISO date/time, got {value!r}", param_hint=param_hint)


def rule_options(f):
    """Options shared by every command that takes a rule."""
    options = [
        click.option("--rule", "rule_file", type=click.Path(exists=True, dir_okay=False, path_type=Path),
                     help="Load the rule from a JSON file"),
        click.option("--frequency", "-f", type=click.Choice([fr.value for fr in Frequency]),
                     default="daily", show_default=True, help="Base frequency"),
        click.option("--interval", "-i", type=int, default=1, show_default=True,
                     help="Every N units"),
        click.option("--days", default=None, help="Weekdays, e.g. 'mon,wed,fri' or '2,4,6'"),
        click.option("--day-of-month", type=int, default=None, help="Day of month (1-31)"),
        click.option("--end", default=None, help="Inclusive end date (ISO)"),
        click.option("--max", "max_occurrences", type=int, default=None,
                     help="Maximum number of occurrences"),
        click.option("--time", "time_str", default=None, help="Preferred time (HH:MM)"),
        click.option("--tz", default=None, help="Time zone (default from config)"),
        click.option("--from-completion", is_flag=True, help="Repeat from completion date"),
    ]
    for option in reversed(options):
        f = option(f)
    return f


def build_rule(config, rule_file, frequency, interval, days, day_of_month, end,
               max_occurrences, time_str, tz, from_completion) -> RecurrenceRule:
    """Build a rule from a JSON file or from command-line options."""
    if rule_file is not None:
        return loads(rule_file.read_text())

    preferred_time = None
    if time_str is not None:
        preferred_time = parse_time(time_str)
        if preferred_time is None:
            raise click.BadParameter(f"Expected HH:MM, got {time_str!r}", param_hint="--time")

    return RecurrenceRule(
        frequency=Frequency(frequency),
        interval=interval,
        days_of_week=parse_days(days),
        day_of_month=day_of_month,
        end_date=parse_datetime(end, "--end"),
        max_occurrences=max_occurrences,
        repeat_mode=RepeatMode.FROM_COMPLETION_DATE if from_completion else RepeatMode.FROM_ORIGINAL_DATE,
        preferred_time=preferred_time,
        time_zone=tz or config.timezone,
    )


def _reference(rule: RecurrenceRule, after: str | None) -> datetime:
    return parse_datetime(after, "--after") or datetime.now(rule.tzinfo)


def _fail(e: Exception) -> None:
    click.echo(f"Error: {e}", err=True)
    sys.exit(1)


@click.group()
@click.version_option()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx, debug: bool):
    """recurkit - Recurrence rule engine CLI."""
    if debug:
        logging.basicConfig(
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            level=logging.DEBUG,
        )
    ctx.obj = load_config()


@main.command("next")
@rule_options
@click.option("--after", "-a", default=None, help="Reference date (ISO), defaults to now")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def next_cmd(config, after: str | None, as_json: bool, **rule_kwargs):
    """Show the next occurrence after a date."""
    try:
        rule = build_rule(config, **rule_kwargs)
        nxt = next_occurrence(rule, _reference(rule, after))
    except RecurrenceError as e:
        _fail(e)

    if as_json:
        click.echo(json.dumps({"next": nxt.isoformat() if nxt else None}))
    elif nxt is None:
        click.echo("No further occurrences.")
    else:
        click.echo(nxt.isoformat())


@main.command()
@rule_options
@click.option("--after", "-a", default=None, help="Start date (ISO), defaults to now")
@click.option("--limit", "-n", type=int, default=None, help="Number of occurrences (default from config)")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def preview(config, after: str | None, limit: int | None, as_json: bool, **rule_kwargs):
    """List upcoming occurrences."""
    try:
        rule = build_rule(config, **rule_kwargs)
        dates = occurrences(
            rule,
            _reference(rule, after),
            limit if limit is not None else config.preview_limit,
            max_steps=config.max_steps,
        )
    except RecurrenceError as e:
        _fail(e)

    if as_json:
        click.echo(json.dumps([d.isoformat() for d in dates], indent=2))
        return

    if not dates:
        click.echo("No upcoming occurrences.")
        return

    click.echo(describe_rule(rule, clock=config.time_format))
    for d in dates:
        click.echo(f"  {d.strftime('%a %Y-%m-%d %H:%M')}")


@main.command()
@rule_options
@click.pass_obj
def describe(config, **rule_kwargs):
    """Describe a rule in plain language."""
    try:
        rule = build_rule(config, **rule_kwargs)
    except RecurrenceError as e:
        _fail(e)
    click.echo(describe_rule(rule, clock=config.time_format))


@main.command()
@rule_options
@click.pass_obj
def check(config, **rule_kwargs):
    """Validate a rule."""
    try:
        rule = build_rule(config, **rule_kwargs)
    except RecurrenceError as e:
        _fail(e)

    problems = rule.problems()
    if problems:
        for problem in problems:
            click.echo(f"  ✗ {problem}", err=True)
        sys.exit(1)

    click.echo(f"✓ Valid: {describe_rule(rule, clock=config.time_format)}")


@main.command()
@rule_options
@click.argument("date")
@click.option("--after", "-a", required=True, help="Anchor date the pattern starts from (ISO)")
@click.pass_obj
def matches(config, date: str, after: str, **rule_kwargs):
    """Check whether DATE falls on the rule's pattern."""
    try:
        rule = build_rule(config, **rule_kwargs)
        result = rule_matches(rule, parse_datetime(date, "DATE"), parse_datetime(after, "--after"))
    except RecurrenceError as e:
        _fail(e)

    click.echo("Matches" if result else "Does not match")


@main.command()
@rule_options
@click.pass_obj
def export(config, **rule_kwargs):
    """Print a rule as JSON (usable with --rule)."""
    try:
        rule = build_rule(config, **rule_kwargs)
    except RecurrenceError as e:
        _fail(e)
    click.echo(dumps(rule, indent=2))


if __name__ == "__main__":
    main()
