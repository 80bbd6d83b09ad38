"""
Amount resolution for recurring entries: stepped overrides and the monthly
escalator.

Escalation is step-like. Each fired occurrence carries the factor of the one
before it, compounded once per whole calendar month elapsed in between, so a
monthly rule of 1000 with a 10 % escalator pays 1000, 1100, 1210, ...
"""

from __future__ import annotations

import datetime as dt
from typing import Iterable, Iterator, Optional, Tuple

from core.models import Entry, RecurrenceRule
from core.utils import months_between


def base_amount(entry: Entry, day: dt.date) -> float:
    """Latest step with ``effective_from <= day``, else the entry amount. Always absolute."""
    amount = entry.amount
    rule = getattr(entry, "rule", None)
    if rule is not None:
        for step in rule.steps:
            if step.effective_from <= day:
                amount = step.amount
            else:
                break
    return abs(float(amount or 0.0))


def escalation_factor(
    rule: Optional[RecurrenceRule],
    previous: Optional[dt.date],
    day: dt.date,
    carried: float = 1.0,
) -> float:
    """
    Multiplier for the occurrence on ``day``.

    ``carried`` is the factor used by the previous fired occurrence. With no
    previous occurrence or a zero escalator the occurrence is unescalated.
    """
    if rule is None or previous is None or not rule.escalator_pct:
        return 1.0
    months = months_between(previous, day)
    return carried * (1.0 + rule.escalator_pct / 100.0) ** months


def resolve_amount(
    entry: Entry,
    day: dt.date,
    previous: Optional[dt.date] = None,
    carried: float = 1.0,
) -> float:
    rule = getattr(entry, "rule", None)
    return base_amount(entry, day) * escalation_factor(rule, previous, day, carried)


def iter_occurrence_amounts(
    entry: Entry, days: Iterable[dt.date]
) -> Iterator[Tuple[dt.date, float]]:
    """
    Resolve amounts for an ordered sequence of fired days.

    Every fired day becomes the next "previous occurrence", including days
    whose amount resolves to zero.
    """
    rule = getattr(entry, "rule", None)
    previous: Optional[dt.date] = None
    factor = 1.0
    for day in days:
        factor = escalation_factor(rule, previous, day, factor)
        yield day, base_amount(entry, day) * factor
        previous = day
