"""
Baseline data model: settings, recurrence rules, transactions, income streams,
adjustments and the state that groups them.

All records are frozen and hold tuples, so a state can only be "changed" by
building a new one (``dataclasses.replace``).  Scenario application relies on
this: the baseline handed to a scenario is never touched.
"""

from __future__ import annotations

import datetime as dt
import math
from dataclasses import dataclass, field
from typing import Optional, Tuple, Union

from .errors import ValidationError
from .schema import FREQUENCIES, MONTHLY_MODES, NTH_WEEKS, SOURCE_TYPES, TRANSACTION_TYPES


def _require_date(value, label: str) -> None:
    if not isinstance(value, dt.date):
        raise ValidationError(f"{label} must be a date, got {value!r}.")


def _require_finite(value, label: str) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        raise ValidationError(f"{label} must be a finite number, got {value!r}.")


@dataclass(frozen=True)
class Settings:
    """Projection window (inclusive) and the balance before its first day."""

    start_date: dt.date
    end_date: dt.date
    starting_balance: float = 0.0

    def __post_init__(self):
        _require_date(self.start_date, "start_date")
        _require_date(self.end_date, "end_date")
        _require_finite(self.starting_balance, "starting_balance")
        if self.start_date > self.end_date:
            raise ValidationError(
                f"start_date {self.start_date} is after end_date {self.end_date}."
            )


@dataclass(frozen=True)
class Step:
    """Amount override effective from a date onward."""

    effective_from: dt.date
    amount: float

    def __post_init__(self):
        _require_date(self.effective_from, "effective_from")
        _require_finite(self.amount, "step amount")


@dataclass(frozen=True)
class RecurrenceRule:
    """
    When a recurring entry fires.

    day_of_week / nth_weekday use 0 = Sunday .. 6 = Saturday.
    nth_week is "1".."5" or "last".
    """

    frequency: str
    start_date: dt.date
    end_date: dt.date
    on_date: Optional[dt.date] = None
    skip_weekends: bool = False
    day_of_week: Tuple[int, ...] = ()
    monthly_mode: str = "day"
    day_of_month: Optional[int] = None
    nth_week: str = "1"
    nth_weekday: Optional[int] = None
    steps: Tuple[Step, ...] = ()
    escalator_pct: float = 0.0

    def __post_init__(self):
        if self.frequency not in FREQUENCIES:
            raise ValidationError(f"Unknown frequency {self.frequency!r}.")
        if self.monthly_mode not in MONTHLY_MODES:
            raise ValidationError(f"Unknown monthly mode {self.monthly_mode!r}.")
        if str(self.nth_week) not in NTH_WEEKS:
            raise ValidationError(f"nth_week must be 1-5 or 'last', got {self.nth_week!r}.")
        _require_date(self.start_date, "start_date")
        _require_date(self.end_date, "end_date")
        if self.on_date is not None:
            _require_date(self.on_date, "on_date")
        if self.start_date > self.end_date:
            raise ValidationError(
                f"Rule start_date {self.start_date} is after end_date {self.end_date}."
            )
        _require_finite(self.escalator_pct, "escalator_pct")

        # normalised copies: weekdays unique + sorted, steps in effective order
        days = sorted({min(max(int(d), 0), 6) for d in self.day_of_week})
        object.__setattr__(self, "day_of_week", tuple(days))
        object.__setattr__(self, "nth_week", str(self.nth_week))
        object.__setattr__(
            self, "steps", tuple(sorted(self.steps, key=lambda s: s.effective_from))
        )


@dataclass(frozen=True)
class Transaction:
    """
    A one-off (``rule is None``, dated by ``date``) or recurring transaction.

    The sign of ``amount`` is not meaningful; direction comes from ``type``.
    """

    id: str
    name: str = ""
    type: str = "expense"
    amount: float = 0.0
    category: str = ""
    date: Optional[dt.date] = None
    rule: Optional[RecurrenceRule] = None
    note: Optional[str] = None
    source_type: str = "one-off"
    parent_id: Optional[str] = None
    is_edited: bool = False
    original_amount: Optional[float] = None

    def __post_init__(self):
        if self.type not in TRANSACTION_TYPES:
            raise ValidationError(f"Transaction type must be income or expense, got {self.type!r}.")
        if self.source_type not in SOURCE_TYPES:
            raise ValidationError(f"Unknown source type {self.source_type!r}.")
        _require_finite(self.amount, "amount")
        if self.date is not None:
            _require_date(self.date, "date")

    @property
    def recurring(self) -> bool:
        return self.rule is not None


@dataclass(frozen=True)
class IncomeStream:
    """Recurring income; same recurrence contract as a recurring transaction."""

    id: str
    name: str
    amount: float
    rule: RecurrenceRule
    category: str = ""
    note: Optional[str] = None
    is_edited: bool = False
    original_amount: Optional[float] = None
    parent_id: Optional[str] = None
    type: str = field(default="income", init=False)
    source_type: str = field(default="income-stream", init=False)

    def __post_init__(self):
        _require_finite(self.amount, "amount")
        if not isinstance(self.rule, RecurrenceRule):
            raise ValidationError(f"Income stream {self.id!r} requires a recurrence rule.")

    @property
    def recurring(self) -> bool:
        return True


@dataclass(frozen=True)
class Adjustment:
    """Manual one-day balance correction."""

    date: dt.date
    amount: float
    note: Optional[str] = None

    def __post_init__(self):
        _require_date(self.date, "adjustment date")
        _require_finite(self.amount, "adjustment amount")


Entry = Union[Transaction, IncomeStream]


@dataclass(frozen=True)
class BaselineState:
    settings: Settings
    transactions: Tuple[Transaction, ...] = ()
    income_streams: Tuple[IncomeStream, ...] = ()
    adjustments: Tuple[Adjustment, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "transactions", tuple(self.transactions))
        object.__setattr__(self, "income_streams", tuple(self.income_streams))
        object.__setattr__(self, "adjustments", tuple(self.adjustments))

    def entries(self) -> Tuple[Entry, ...]:
        """All transactions followed by all income streams."""
        return self.transactions + self.income_streams

    def find(self, entry_id: str) -> Optional[Entry]:
        for entry in self.entries():
            if entry.id == entry_id:
                return entry
        return None
