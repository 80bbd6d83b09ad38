"""
Condition evaluation for conditional scenario changes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Optional

from core.models import BaselineState
from core.utils import is_finite_number, to_ymd

from .changes import Condition


@dataclass(frozen=True)
class EvaluationContext:
    """
    Projection state at the point a condition is checked.

    balance
        running balance at the evaluation point
    income, expense
        cumulative totals up to the evaluation point
    projection_day
        0-based index of the day being evaluated
    date
        evaluation date as YYYY-MM-DD
    """

    balance: float = 0.0
    income: float = 0.0
    expense: float = 0.0
    transaction_count: int = 0
    projection_day: int = 0
    date: Optional[str] = None


def _actual(condition: Condition, ctx: EvaluationContext) -> Any:
    return {
        "balance": ctx.balance,
        "income": ctx.income,
        "expense": ctx.expense,
        "transaction_count": ctx.transaction_count,
        "projection_day": ctx.projection_day,
        "date": ctx.date,
    }.get(condition.type)


def _strict_equals(a: Any, b: Any) -> bool:
    # booleans never equal numbers; strings never equal numbers
    if isinstance(a, bool) or isinstance(b, bool):
        return isinstance(a, bool) and isinstance(b, bool) and a == b
    if is_finite_number(a) and is_finite_number(b):
        return a == b
    if isinstance(a, str) and isinstance(b, str):
        return a == b
    return False


def evaluate_condition(condition: Condition, ctx: EvaluationContext) -> bool:
    actual = _actual(condition, ctx)
    if actual is None:
        return False
    expected = condition.value
    op = condition.operator

    if op == "equals":
        return _strict_equals(actual, expected)
    if op == "not_equals":
        return not _strict_equals(actual, expected)

    if not (is_finite_number(actual) and is_finite_number(expected)):
        return False
    if op == "greater_than":
        return actual > expected
    if op == "less_than":
        return actual < expected
    if op == "greater_than_or_equal":
        return actual >= expected
    if op == "less_than_or_equal":
        return actual <= expected
    return False


def evaluate_conditions(
    conditions: Iterable[Condition],
    logical_operator: str,
    ctx: EvaluationContext,
) -> bool:
    """AND needs every condition, OR needs one; no conditions is always False."""
    results = [evaluate_condition(c, ctx) for c in conditions]
    if not results:
        return False
    if logical_operator == "OR":
        return any(results)
    return all(results)


def context_from_state(state: BaselineState) -> EvaluationContext:
    """Single pre-projection context: starting balance and the state's gross amounts."""
    entries = state.entries()
    income = sum(abs(e.amount) for e in entries if e.type == "income")
    expense = sum(abs(e.amount) for e in entries if e.type == "expense")
    return EvaluationContext(
        balance=state.settings.starting_balance,
        income=income,
        expense=expense,
        transaction_count=len(entries),
        projection_day=0,
        date=to_ymd(state.settings.start_date),
    )
