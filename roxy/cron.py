"""Parsing of cron expressions in the Linux, Vixie and extended-year forms."""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from typing import FrozenSet, Union

MIN_YEAR = 1970
MAX_YEAR = 2099

_U32_MAX = 2**32 - 1
_UNSIGNED = re.compile(r"\+?[0-9]+")


class CronError(ValueError):
    """Raised when a cron expression cannot be parsed."""


class _Span(enum.Enum):
    ALL = "all"
    IGNORE = "ignore"
    UNBOUND = "unbound"

    def __repr__(self) -> str:
        return f"Cron.{self.name}"


Field = Union[_Span, FrozenSet[int]]

_MONTHS = {
    "JAN": 1, "1": 1,
    "FEB": 2, "2": 2,
    "MAR": 3, "3": 3,
    "APR": 4, "4": 4,
    "MAY": 5, "5": 5,
    "JUN": 6, "6": 6,
    "JUL": 7, "7": 7,
    "AUG": 8, "8": 8,
    "SEP": 9, "9": 9,
    "OCT": 10, "10": 10,
    "NOV": 11, "11": 11,
    "DEC": 12, "12": 12,
}

_VIXIE_DAYS = {
    "SUN": 1, "1": 1,
    "MON": 2, "2": 2,
    "TUE": 3, "3": 3,
    "WED": 4, "4": 4,
    "THU": 5, "5": 5,
    "FRI": 6, "6": 6,
    "SAT": 7, "7": 7,
}

_LINUX_DAYS = {
    "SUN": 1, "0": 1, "7": 1,
    "MON": 2, "1": 2,
    "TUE": 3, "2": 3,
    "WED": 4, "3": 4,
    "THU": 5, "4": 5,
    "FRI": 6, "5": 6,
    "SAT": 7, "6": 7,
}


@dataclass(frozen=True)
class Cron:
    """A parsed cron schedule.

    Each field is either a frozenset of allowed values or one of the markers
    ``Cron.ALL``, ``Cron.IGNORE`` (seconds of a five-field expression) and
    ``Cron.UNBOUND`` (years of a five-field expression).
    """

    seconds: Field
    minutes: Field
    hours: Field
    days_of_month: Field
    months: Field
    days_of_week: Field
    years: Field

    ALL = _Span.ALL
    IGNORE = _Span.IGNORE
    UNBOUND = _Span.UNBOUND


def _parse_int(text: str) -> int:
    if not _UNSIGNED.fullmatch(text):
        raise CronError(f"invalid number {text!r}")
    number = int(text)
    if number > _U32_MAX:
        raise CronError(f"number out of range {text!r}")
    return number


def _parse_step(text: str) -> int:
    step = _parse_int(text)
    if step == 0:
        raise CronError("step must be greater than zero")
    return step


def month(value: str) -> int:
    """Return the month number (1-12) for a name or number."""
    try:
        return _MONTHS[value.upper()]
    except KeyError:
        raise CronError(f"invalid month indicator {value!r}") from None


def day_of_week(value: str, is_vixie: bool) -> int:
    """Return the day number (1 = Sunday .. 7 = Saturday) for a name or number."""
    table = _VIXIE_DAYS if is_vixie else _LINUX_DAYS
    try:
        return table[value.upper()]
    except KeyError:
        raise CronError(f"invalid day of week indicator {value!r}") from None


def _parse_unit(text: str, is_vixie: bool, is_dom: bool, is_dow: bool) -> int:
    if is_dom:
        return month(text)
    if is_dow:
        return day_of_week(text, is_vixie)
    return _parse_int(text)


def parse_field(
    value: str,
    minimum: int,
    maximum: int,
    is_vixie: bool,
    is_dow: bool,
    is_dom: bool,
) -> Field:
    """Parse one cron field into ``Cron.ALL`` or a frozenset of values.

    ``is_dom`` selects month names, ``is_dow`` selects day-of-week names.
    """
    values: set[int] = set()

    for part in value.split(","):
        step_parts = part.split("/", 1)
        step_text = step_parts[1] if len(step_parts) > 1 else None
        dash_parts = step_parts[0].split("-", 1)
        left = dash_parts[0]
        right = dash_parts[1] if len(dash_parts) > 1 else None

        if right is not None:
            low = _parse_unit(left, is_vixie, is_dom, is_dow)
            high = _parse_unit(right, is_vixie, is_dom, is_dow)
            in_bounds = minimum <= low <= maximum and minimum <= high <= maximum
            if not in_bounds or low > high:
                raise CronError(f"invalid range {part!r}")
            if step_text is None:
                if low == minimum and high == maximum:
                    return Cron.ALL
                values.update(range(low, high + 1))
            else:
                values.update(range(low, high + 1, _parse_step(step_text)))
        elif step_text is not None:
            if left == "*":
                start = minimum
            else:
                start = _parse_unit(left, is_vixie, is_dom, is_dow)
            values.update(range(start, maximum + 1, _parse_step(step_text)))
        elif left == "*":
            return Cron.ALL
        else:
            values.add(_parse_unit(left, is_vixie, is_dom, is_dow))

    return frozenset(values)


def _seconds(value: str) -> Field:
    return parse_field(value, 0, 59, True, False, False)


def parse_cron(text: str) -> Cron:
    """Parse a five-, six- or seven-field cron expression."""
    fields = text.split()

    if len(fields) == 5:
        return Cron(
            seconds=Cron.IGNORE,
            minutes=parse_field(fields[0], 0, 59, False, False, False),
            hours=parse_field(fields[1], 0, 23, False, False, False),
            days_of_month=parse_field(fields[2], 1, 31, False, False, False),
            months=parse_field(fields[3], 1, 12, False, False, True),
            days_of_week=parse_field(fields[4], 1, 7, False, True, False),
            years=Cron.UNBOUND,
        )

    if len(fields) in (6, 7):
        seconds = _seconds(fields[0])
        minutes = parse_field(fields[1], 0, 59, True, False, False)
        hours = parse_field(fields[2], 0, 23, True, False, False)
        days_of_month = parse_field(fields[3], 1, 31, True, False, False)
        months = parse_field(fields[4], 1, 12, True, False, True)
        days_of_week = parse_field(fields[5], 1, 7, True, True, False)
        if len(fields) == 7:
            years = parse_field(fields[6], MIN_YEAR, MAX_YEAR, True, False, False)
        else:
            years = Cron.ALL
        return Cron(
            seconds=seconds,
            minutes=minutes,
            hours=hours,
            days_of_month=days_of_month,
            months=months,
            days_of_week=days_of_week,
            years=years,
        )

    raise CronError(f"expected 5, 6 or 7 fields, found {len(fields)}")