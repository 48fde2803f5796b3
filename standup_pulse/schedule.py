"""Parsing of the standup schedule and per-user trigger matching."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import FrozenSet
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .errors import ConfigurationError
from .models import ScheduleSpec

ALL_WEEKDAYS: FrozenSet[int] = frozenset(range(7))


def parse_schedule(expression: str) -> ScheduleSpec:
    """Parse a five-field cron-like string into a :class:`ScheduleSpec`.

    Only the minute, hour and weekday fields are consulted. Minute and hour
    must be plain integers; the weekday field accepts ``*``, an inclusive
    ``a-b`` range, a ``a,b,c`` list or a single number (0 = Sunday).
    """

    fields = expression.split()
    if len(fields) != 5:
        raise ConfigurationError(
            f"Schedule {expression!r} must have 5 fields, got {len(fields)}"
        )

    minute = _parse_int(fields[0], "minute", expression)
    hour = _parse_int(fields[1], "hour", expression)
    if not 0 <= minute <= 59:
        raise ConfigurationError(f"Schedule minute out of range in {expression!r}")
    if not 0 <= hour <= 23:
        raise ConfigurationError(f"Schedule hour out of range in {expression!r}")

    weekdays = _parse_weekdays(fields[4], expression)
    if not weekdays:
        raise ConfigurationError(f"Schedule {expression!r} selects no weekdays")
    return ScheduleSpec(minute=minute, hour=hour, weekdays=weekdays)


def _parse_int(value: str, field: str, expression: str) -> int:
    try:
        return int(value)
    except ValueError as exc:
        raise ConfigurationError(
            f"Schedule {field} {value!r} in {expression!r} is not an integer"
        ) from exc


def _parse_weekdays(value: str, expression: str) -> FrozenSet[int]:
    if value == "*":
        return ALL_WEEKDAYS
    if "-" in value:
        start, _, end = value.partition("-")
        days = range(
            _parse_int(start, "weekday", expression),
            _parse_int(end, "weekday", expression) + 1,
        )
    elif "," in value:
        days = [_parse_int(part, "weekday", expression) for part in value.split(",")]
    else:
        days = [_parse_int(value, "weekday", expression)]

    weekdays = frozenset(days)
    if not weekdays <= ALL_WEEKDAYS:
        raise ConfigurationError(f"Schedule weekday out of range in {expression!r}")
    return weekdays


def get_zone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ConfigurationError(f"Unknown timezone {name!r}") from exc


def local_time(tz_name: str, instant: datetime) -> datetime:
    """Return ``instant`` on the wall clock of ``tz_name``; naive input is UTC."""

    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(get_zone(tz_name))


def cron_weekday(moment: datetime) -> int:
    """Weekday number with Sunday as 0, as used in cron expressions."""

    return moment.isoweekday() % 7


def should_notify(spec: ScheduleSpec, tz_name: str, instant: datetime) -> bool:
    local = local_time(tz_name, instant)
    return (
        local.hour == spec.hour
        and local.minute == spec.minute
        and cron_weekday(local) in spec.weekdays
    )


__all__ = [
    "ALL_WEEKDAYS",
    "parse_schedule",
    "get_zone",
    "local_time",
    "cron_weekday",
    "should_notify",
]
