"""
Fills the daily calendar from a baseline state and derives
the balance statistics.

Posting order per day does not matter (rows are summed), but the steps run in a
fixed order: one-off transactions, recurring transactions and income streams,
then adjustments.  ``settle_calendar`` is the second pass that rounds every
row, threads the running balance and tracks the extremes.
"""

from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import pandas as pd

from core.config import ProjectionConfig
from core.errors import ValidationError
from core.models import Adjustment, BaselineState, Entry
from core.schema import CALENDAR_COLUMNS
from core.utils import days_inclusive, round2

from .amounts import iter_occurrence_amounts
from .calendar import CalendarRow, Detail, build_calendar
from .recurrence import iter_occurrences

logger = logging.getLogger(__name__)

LABEL_SEPARATOR = " – "


@dataclass
class ProjectionResult:
    calendar: List[CalendarRow]
    total_income: float = 0.0
    total_expenses: float = 0.0
    end_balance: float = 0.0
    lowest_balance: float = 0.0
    lowest_balance_date: Optional[dt.date] = None
    peak_balance: float = 0.0
    peak_balance_date: Optional[dt.date] = None
    first_negative_date: Optional[dt.date] = None
    negative_days: int = 0
    projected_weekly_income: float = 0.0
    starting_balance: float = 0.0

    @property
    def days(self) -> int:
        return len(self.calendar)

    def summary(self) -> Dict[str, object]:
        """Headline statistics as a flat dict (no calendar)."""
        return {
            "total_income": self.total_income,
            "total_expenses": self.total_expenses,
            "end_balance": self.end_balance,
            "lowest_balance": self.lowest_balance,
            "lowest_balance_date": self.lowest_balance_date,
            "peak_balance": self.peak_balance,
            "peak_balance_date": self.peak_balance_date,
            "first_negative_date": self.first_negative_date,
            "negative_days": self.negative_days,
            "projected_weekly_income": self.projected_weekly_income,
        }

    def to_frame(self) -> pd.DataFrame:
        """One row per day: date, income, expenses, net, running."""
        df = pd.DataFrame(
            [[getattr(row, c) for c in CALENDAR_COLUMNS] for row in self.calendar],
            columns=list(CALENDAR_COLUMNS),
        )
        df["date"] = pd.to_datetime(df["date"])
        return df


# ---------------------------------------------------------------------------
# Labels
# ---------------------------------------------------------------------------

def detail_label(entry: Entry) -> str:
    """``"name – category"`` from whichever are set; else the note, else a type default."""
    if entry.source_type == "income-stream":
        default = "Income Stream"
    else:
        default = "Income" if entry.type == "income" else "Expense"
    parts = [p for p in (entry.name, entry.category) if p]
    if not parts and entry.note:
        parts.append(entry.note)
    return LABEL_SEPARATOR.join(parts) or default


def adjustment_label(adjustment: Adjustment) -> str:
    if adjustment.note:
        return f"Adjustment{LABEL_SEPARATOR}{adjustment.note}"
    return "Adjustment"


# ---------------------------------------------------------------------------
# Posting
# ---------------------------------------------------------------------------

def _post(row: CalendarRow, is_income: bool, detail: Detail) -> None:
    if is_income:
        row.income += detail.amount
        row.income_details.append(detail)
    else:
        row.expenses += detail.amount
        row.expense_details.append(detail)


def _recurring_postings(
    entry: Entry, start: dt.date, end: dt.date
) -> List[Tuple[dt.date, float]]:
    """Non-zero (day, amount) pairs for a recurring entry inside [start, end]."""
    fired = iter_occurrences(entry.rule, start, end)
    return [(day, amount) for day, amount in iter_occurrence_amounts(entry, fired) if amount]


def populate_calendar(state: BaselineState, rows: List[CalendarRow]) -> List[CalendarRow]:
    """Post every transaction, income stream and adjustment onto ``rows`` (in place)."""
    if not rows:
        return rows
    by_date = {row.date: row for row in rows}
    start, end = rows[0].date, rows[-1].date

    # --- one-offs ---
    for txn in state.transactions:
        if txn.recurring:
            continue
        row = by_date.get(txn.date)
        amount = abs(txn.amount)
        if row is None or not amount:
            continue
        _post(row, txn.type == "income", Detail(detail_label(txn), amount))

    # --- recurring transactions and income streams ---
    for entry in state.entries():
        if not entry.recurring:
            continue
        try:
            postings = _recurring_postings(entry, start, end)
        except (TypeError, ValueError, AttributeError) as exc:
            logger.warning("Skipping recurring entry %r: %s", entry.id, exc)
            continue
        label = detail_label(entry)
        for day, amount in postings:
            _post(by_date[day], entry.type == "income", Detail(label, amount))

    # --- adjustments ---
    for adj in state.adjustments:
        row = by_date.get(adj.date)
        if row is None or not adj.amount:
            continue
        detail = Detail(adjustment_label(adj), abs(adj.amount), kind="adjustment")
        _post(row, adj.amount >= 0, detail)

    return rows


# ---------------------------------------------------------------------------
# Settlement
# ---------------------------------------------------------------------------

def settle_calendar(rows: List[CalendarRow], starting_balance: float) -> ProjectionResult:
    """
    Round, net and thread the running balance through ``rows`` (in place) and
    build the result.

    Lowest and peak balances start at ``starting_balance`` on the first day;
    only a strictly lower (higher) running balance replaces them.
    """
    running = round2(starting_balance)
    first_date = rows[0].date if rows else None
    lowest, lowest_date = running, first_date
    peak, peak_date = running, first_date
    first_negative: Optional[dt.date] = None
    negative_days = 0
    total_income = 0.0
    total_expenses = 0.0
    weekly_income_base = 0.0

    for row in rows:
        row.income = round2(row.income)
        row.expenses = round2(row.expenses)
        row.net = round2(row.income - row.expenses)
        running = round2(running + row.net)
        row.running = running

        total_income += row.income
        total_expenses += row.expenses
        weekly_income_base += sum(d.amount for d in row.income_details if d.kind != "adjustment")

        if running < lowest:
            lowest, lowest_date = running, row.date
        if running > peak:
            peak, peak_date = running, row.date
        if running < 0:
            negative_days += 1
            if first_negative is None:
                first_negative = row.date

    weeks = len(rows) / 7 if rows else 0
    return ProjectionResult(
        calendar=rows,
        total_income=round2(total_income),
        total_expenses=round2(total_expenses),
        end_balance=running,
        lowest_balance=lowest,
        lowest_balance_date=lowest_date,
        peak_balance=peak,
        peak_balance_date=peak_date,
        first_negative_date=first_negative,
        negative_days=negative_days,
        projected_weekly_income=round2(weekly_income_base / weeks) if weeks else 0.0,
        starting_balance=round2(starting_balance),
    )


def project(state: BaselineState, config: Optional[ProjectionConfig] = None) -> ProjectionResult:
    """
    Project a baseline state over its settings window.

    Parameters
    ----------
    state : BaselineState
        Settings, transactions, income streams and adjustments.
    config : ProjectionConfig, optional
        Only ``max_days`` is consulted here.

    Raises
    ------
    ValidationError
        When the state has no settings.
    RangeTooLargeError
        When the window exceeds ``config.max_days``.
    """
    if state is None or getattr(state, "settings", None) is None:
        raise ValidationError("Projection requires settings.")
    cfg = config or ProjectionConfig()
    settings = state.settings

    rows = build_calendar(settings.start_date, settings.end_date, max_days=cfg.max_days)
    populate_calendar(state, rows)
    result = settle_calendar(rows, settings.starting_balance)
    logger.debug(
        "Projected %d days (%s to %s): end balance %.2f",
        days_inclusive(settings.start_date, settings.end_date),
        settings.start_date,
        settings.end_date,
        result.end_balance,
    )
    return result
