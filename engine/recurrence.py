"""
Recurrence evaluation: does a rule fire on a given calendar day?

Rules are checked one day at a time (``fires``) rather than expanded by stepping
forward from the start date, so every frequency shares a single window check
and the projection can walk the calendar once per rule.
"""

from __future__ import annotations

import datetime as dt
from datetime import timedelta
from typing import Iterator, List, Optional, Tuple

from dateutil.rrule import DAILY, rrule

from core.models import RecurrenceRule
from core.utils import days_in_month, is_weekend, weekday_index

from .amounts import iter_occurrence_amounts


def matches_monthly_by_day(day: dt.date, day_of_month: int) -> bool:
    """Day-of-month match with the target clamped to the month's length (31 → 28/29/30)."""
    last = days_in_month(day.year, day.month)
    target = min(max(int(day_of_month), 1), last)
    return day.day == target


def nth_weekday_occurrences(year: int, month: int, weekday: int) -> List[int]:
    """Days of the month falling on ``weekday`` (0 = Sunday)."""
    first_dow = weekday_index(dt.date(year, month, 1))
    first = 1 + (weekday - first_dow) % 7
    last = days_in_month(year, month)
    return list(range(first, last + 1, 7))


def matches_monthly_by_nth_weekday(day: dt.date, nth_week: str, weekday: int) -> bool:
    occurrences = nth_weekday_occurrences(day.year, day.month, weekday)
    if not occurrences:
        return False
    if nth_week == "last":
        return day.day == occurrences[-1]
    idx = int(nth_week) - 1
    # a 5th occurrence does not exist in months with only four of that weekday
    if idx < 0 or idx >= len(occurrences):
        return False
    return day.day == occurrences[idx]


def matches_weekly(day: dt.date, weekdays: Tuple[int, ...]) -> bool:
    return weekday_index(day) in weekdays


def matches_biweekly(day: dt.date, weekdays: Tuple[int, ...], anchor: dt.date) -> bool:
    """
    Every other week on each listed weekday, counted from the first occurrence
    of that weekday on or after ``anchor``.
    """
    dow = weekday_index(day)
    if dow not in weekdays:
        return False
    first = anchor + timedelta(days=(dow - weekday_index(anchor)) % 7)
    if day < first:
        return False
    return (day - first).days % 14 == 0


def _nth_weekday(rule: RecurrenceRule) -> int:
    if rule.nth_weekday is not None:
        return min(max(int(rule.nth_weekday), 0), 6)
    if rule.day_of_week:
        return rule.day_of_week[0]
    return 0


def fires(day: dt.date, rule: RecurrenceRule) -> bool:
    """True when ``rule`` produces an occurrence on ``day``."""
    if rule is None or day is None:
        return False
    if not (rule.start_date <= day <= rule.end_date):
        return False

    freq = rule.frequency
    if freq == "once":
        return rule.on_date is not None and day == rule.on_date
    if freq == "daily":
        return not (rule.skip_weekends and is_weekend(day))
    if freq == "weekly":
        return matches_weekly(day, rule.day_of_week)
    if freq == "biweekly":
        return matches_biweekly(day, rule.day_of_week, rule.start_date)
    if freq == "monthly":
        if rule.monthly_mode == "nth":
            return matches_monthly_by_nth_weekday(day, rule.nth_week, _nth_weekday(rule))
        return matches_monthly_by_day(day, rule.day_of_month or 1)
    return False


def iter_occurrences(
    rule: RecurrenceRule,
    start: Optional[dt.date] = None,
    end: Optional[dt.date] = None,
) -> Iterator[dt.date]:
    """Fired dates within [start, end] ∩ [rule.start_date, rule.end_date], in order."""
    lo = max(rule.start_date, start) if start else rule.start_date
    hi = min(rule.end_date, end) if end else rule.end_date
    if lo > hi:
        return
    for d in rrule(DAILY, dtstart=lo, until=hi):
        day = d.date()
        if fires(day, rule):
            yield day


def estimate_occurrences_per_week(rule: Optional[RecurrenceRule]) -> float:
    """Average occurrences per week, used for rough weekly run-rates."""
    if rule is None:
        return 0.0
    if rule.frequency == "daily":
        return 5.0 if rule.skip_weekends else 7.0
    if rule.frequency == "weekly":
        return float(len(rule.day_of_week) or 1)
    if rule.frequency == "biweekly":
        return (len(rule.day_of_week) or 1) / 2
    if rule.frequency == "monthly":
        return 12 / 52
    return 0.0


def next_occurrence(
    entry,
    after: dt.date,
    *,
    horizon: Optional[dt.date] = None,
    window_start: Optional[dt.date] = None,
) -> Optional[Tuple[dt.date, float]]:
    """
    First fired date on or after ``after`` with its resolved amount, or None.

    The escalator is counted from ``window_start`` (default: the rule's own
    start). Pass the projection's start date to get the amount a projection
    over that window posts; a rule that began earlier escalates from its
    first occurrence inside the window.
    """
    rule = getattr(entry, "rule", None)
    if rule is None:
        return None
    fired = iter_occurrences(rule, start=window_start, end=horizon)
    for day, amount in iter_occurrence_amounts(entry, fired):
        if day >= after:
            return day, amount
    return None
