"""
One zero-initialised calendar row per day of the projection window.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from typing import List, Optional

from dateutil.rrule import DAILY, rrule

from core.errors import RangeTooLargeError, ValidationError
from core.utils import days_inclusive


@dataclass
class Detail:
    """One contribution to a day's income or expenses."""
    source: str
    amount: float
    kind: str = "transaction"  # "transaction" | "adjustment"


@dataclass
class CalendarRow:
    date: dt.date
    income: float = 0.0
    expenses: float = 0.0
    net: float = 0.0
    running: float = 0.0
    income_details: List[Detail] = field(default_factory=list)
    expense_details: List[Detail] = field(default_factory=list)


def build_calendar(
    start: dt.date,
    end: dt.date,
    *,
    max_days: Optional[int] = None,
) -> List[CalendarRow]:
    """
    Materialise the inclusive window [start, end] as contiguous daily rows.

    Raises ValidationError when end < start and RangeTooLargeError when the
    window is longer than ``max_days``; the size check runs before any row is built.
    """
    if start is None or end is None:
        raise ValidationError("Calendar requires both a start and an end date.")
    if end < start:
        raise ValidationError(f"Calendar end {end} is before start {start}.")

    n_days = days_inclusive(start, end)
    if max_days is not None and n_days > max_days:
        raise RangeTooLargeError(n_days, max_days)

    return [CalendarRow(date=d.date()) for d in rrule(DAILY, dtstart=start, until=end)]
