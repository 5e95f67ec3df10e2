#!/usr/bin/env python3
"""
Six-field cron schedules.

Fields are ``second minute hour day-of-month month day-of-week``, e.g.
``0 0 9 * * *`` fires every day at 09:00:00.

Day-of-week follows classic Unix cron rather than the Quartz-style
numbering some schedulers use: 0 and 7 are Sunday, 1 is Monday, 6 is
Saturday, and three-letter names (``sun``..``sat``) are accepted. When
both day-of-month and day-of-week are restricted, a day fires if EITHER
matches, so ``0 0 9 13 * fri`` runs on every 13th and on every Friday.
"""

import logging
from datetime import datetime, timedelta
from typing import Dict, FrozenSet, List, Optional, Tuple

import pytz
from dateutil.relativedelta import relativedelta

from core.exceptions import ScheduleError

logger = logging.getLogger(__name__)

MONTH_NAMES = {
    'jan': 1, 'feb': 2, 'mar': 3, 'apr': 4, 'may': 5, 'jun': 6,
    'jul': 7, 'aug': 8, 'sep': 9, 'oct': 10, 'nov': 11, 'dec': 12,
}

DAY_NAMES = {
    'sun': 0, 'mon': 1, 'tue': 2, 'wed': 3, 'thu': 4, 'fri': 5, 'sat': 6,
}

# (name, lowest, highest, aliases)
FIELD_SPECS: List[Tuple[str, int, int, Dict[str, int]]] = [
    ('second', 0, 59, {}),
    ('minute', 0, 59, {}),
    ('hour', 0, 23, {}),
    ('day', 1, 31, {}),
    ('month', 1, 12, MONTH_NAMES),
    ('weekday', 0, 7, DAY_NAMES),
]

# Give up looking for a match after this many years
SEARCH_HORIZON_YEARS = 5


def _parse_value(expression: str, token: str, field_name: str, aliases: Dict[str, int]) -> int:
    lowered = token.lower()
    if lowered in aliases:
        return aliases[lowered]
    try:
        return int(token)
    except ValueError:
        raise ScheduleError(expression, f"bad {field_name} value '{token}'")


def _parse_field(expression: str, text: str, field_name: str, low: int, high: int,
                 aliases: Dict[str, int]) -> Tuple[FrozenSet[int], bool]:
    """
    Expand one cron field into its set of allowed values.

    Returns:
        (values, restricted) where restricted is False for a bare wildcard
    """
    if text in ('*', '?'):
        return frozenset(range(low, high + 1)), False

    values = set()
    for part in text.split(','):
        if not part:
            raise ScheduleError(expression, f"empty list item in {field_name}")

        step = 1
        base = part
        if '/' in part:
            base, step_text = part.split('/', 1)
            try:
                step = int(step_text)
            except ValueError:
                raise ScheduleError(expression, f"bad step '{step_text}' in {field_name}")
            if step <= 0:
                raise ScheduleError(expression, f"step must be positive in {field_name}")

        if base in ('*', '?'):
            start, end = low, high
        elif '-' in base:
            start_text, end_text = base.split('-', 1)
            start = _parse_value(expression, start_text, field_name, aliases)
            end = _parse_value(expression, end_text, field_name, aliases)
        else:
            start = _parse_value(expression, base, field_name, aliases)
            end = high if '/' in part else start

        if start < low or end > high or start > end:
            raise ScheduleError(expression, f"{field_name} range {start}-{end} outside {low}-{high}")

        values.update(range(start, end + 1, step))

    return frozenset(values), True


class CronSchedule:
    """Parsed six-field cron expression bound to a timezone."""

    def __init__(self,
                 expression: str,
                 seconds: FrozenSet[int],
                 minutes: FrozenSet[int],
                 hours: FrozenSet[int],
                 days: FrozenSet[int],
                 months: FrozenSet[int],
                 weekdays: FrozenSet[int],
                 day_restricted: bool,
                 weekday_restricted: bool,
                 timezone: str = 'UTC'):
        self.expression = expression
        self.seconds = seconds
        self.minutes = minutes
        self.hours = hours
        self.days = days
        self.months = months
        self.weekdays = weekdays
        self.day_restricted = day_restricted
        self.weekday_restricted = weekday_restricted
        try:
            self.tz = pytz.timezone(timezone)
        except pytz.UnknownTimeZoneError:
            raise ScheduleError(expression, f"unknown timezone '{timezone}'")

    @classmethod
    def parse(cls, expression: str, timezone: str = 'UTC') -> 'CronSchedule':
        """
        Parse a six-field cron expression.

        Raises:
            ScheduleError: If the expression is malformed
        """
        fields = expression.split()
        if len(fields) != len(FIELD_SPECS):
            raise ScheduleError(expression, f"expected {len(FIELD_SPECS)} fields, got {len(fields)}")

        parsed = []
        for text, (field_name, low, high, aliases) in zip(fields, FIELD_SPECS):
            parsed.append(_parse_field(expression, text, field_name, low, high, aliases))

        (seconds, _), (minutes, _), (hours, _), (days, day_restricted), (months, _), (weekdays, weekday_restricted) = parsed

        # 7 is an alias for Sunday
        if 7 in weekdays:
            weekdays = frozenset((weekdays - {7}) | {0})

        return cls(
            expression=expression,
            seconds=seconds,
            minutes=minutes,
            hours=hours,
            days=days,
            months=months,
            weekdays=weekdays,
            day_restricted=day_restricted,
            weekday_restricted=weekday_restricted,
            timezone=timezone,
        )

    def _day_matches(self, moment: datetime) -> bool:
        day_ok = moment.day in self.days
        # datetime.weekday(): Monday=0; cron: Sunday=0
        weekday_ok = (moment.weekday() + 1) % 7 in self.weekdays

        if self.day_restricted and self.weekday_restricted:
            return day_ok or weekday_ok
        if self.day_restricted:
            return day_ok
        if self.weekday_restricted:
            return weekday_ok
        return True

    def matches(self, moment: datetime) -> bool:
        """Check whether a moment (in schedule time) fires."""
        local = self._to_local(moment)
        return (
            local.month in self.months
            and self._day_matches(local)
            and local.hour in self.hours
            and local.minute in self.minutes
            and local.second in self.seconds
        )

    def _to_local(self, moment: datetime) -> datetime:
        """Naive wall-clock time in the schedule timezone."""
        if moment.tzinfo is None:
            return moment
        return moment.astimezone(self.tz).replace(tzinfo=None)

    def next_after(self, moment: datetime) -> datetime:
        """
        First firing instant strictly after ``moment``.

        Naive inputs are read as wall-clock time in the schedule timezone.
        The result is timezone-aware in the schedule timezone.

        Raises:
            ScheduleError: If nothing fires within the search horizon
        """
        candidate = self._to_local(moment).replace(microsecond=0) + timedelta(seconds=1)
        horizon_year = candidate.year + SEARCH_HORIZON_YEARS

        while True:
            if candidate.year > horizon_year:
                raise ScheduleError(self.expression, "no matching time found")

            if candidate.month not in self.months:
                candidate = candidate.replace(day=1, hour=0, minute=0, second=0) + relativedelta(months=1)
                continue

            if not self._day_matches(candidate):
                candidate = candidate.replace(hour=0, minute=0, second=0) + timedelta(days=1)
                continue

            if candidate.hour not in self.hours:
                candidate = candidate.replace(minute=0, second=0) + timedelta(hours=1)
                continue

            if candidate.minute not in self.minutes:
                candidate = candidate.replace(second=0) + timedelta(minutes=1)
                continue

            if candidate.second not in self.seconds:
                candidate = candidate + timedelta(seconds=1)
                continue

            return self.tz.normalize(self.tz.localize(candidate))

    def upcoming(self, count: int, start: Optional[datetime] = None) -> List[datetime]:
        """Next ``count`` firing instants after ``start`` (default: now)."""
        moment = start or datetime.now(self.tz)
        runs = []
        for _ in range(count):
            moment = self.next_after(moment)
            runs.append(moment)
        return runs

    def __repr__(self):
        return f"CronSchedule('{self.expression}', tz='{self.tz.zone}')"
