"""
Ready-made scenarios.

``TEMPLATES`` are open-ended income/expense percentage adjustments.  The
seasonal templates are tied to a period of a given year and carry a
``date_range``; ``time_bound_template`` builds the same kind of template from
arbitrary changes, and ``template_to_scenario`` turns one into a ``Scenario``.
"""

from __future__ import annotations

import datetime as dt
import uuid
from typing import Dict, List, Optional, Sequence, Tuple

from .changes import (
    DateRange,
    ExpenseAdjust,
    IncomeAdjust,
    PercentPayload,
    Scenario,
    ScenarioChange,
    TransactionAdd,
    _Model,
)

DEFAULT_COLOR = "#6366F1"

# name -> (display name, description, income %, expense %)
TEMPLATES: Dict[str, Tuple[str, str, Optional[float], Optional[float]]] = {
    "conservative": (
        "Conservative", "Reduced income by 15%, increased expenses by 10%", -15.0, 10.0,
    ),
    "aggressive": (
        "Aggressive Growth", "Increased income by 30%, increased expenses by 20%", 30.0, 20.0,
    ),
    "worst-case": (
        "Worst Case", "Reduced income by 30%, increased expenses by 15%", -30.0, 15.0,
    ),
    "cost-cutting": (
        "Cost Cutting", "Same income, reduced expenses by 25%", None, -25.0,
    ),
}


def _describe(direction: str, pct: float) -> str:
    verb = "Increase" if pct > 0 else "Reduce"
    return f"{verb} all {direction} by {abs(pct):g}%"


def scenario_template(name: str, *, scenario_id: Optional[str] = None) -> Scenario:
    """Build one of ``TEMPLATES`` as a fresh scenario."""
    if name not in TEMPLATES:
        raise ValueError(f"Unknown scenario template {name!r}. Choose from {sorted(TEMPLATES)}.")
    display, description, income_pct, expense_pct = TEMPLATES[name]
    sid = scenario_id or str(uuid.uuid4())

    changes: List = []
    if income_pct is not None:
        changes.append(IncomeAdjust(
            id=f"{sid}-income",
            description=_describe("income", income_pct),
            target_type="income",
            changes=PercentPayload(percent_change=income_pct),
        ))
    if expense_pct is not None:
        changes.append(ExpenseAdjust(
            id=f"{sid}-expense",
            description=_describe("expenses", expense_pct),
            target_type="expense",
            changes=PercentPayload(percent_change=expense_pct),
        ))

    return Scenario(id=sid, name=display, description=description, changes=tuple(changes))


# ---------------------------------------------------------------------------
# Time-bound templates
# ---------------------------------------------------------------------------

class ScenarioTemplate(_Model):
    id: str
    name: str
    description: str = ""
    color: str = DEFAULT_COLOR
    changes: Tuple[ScenarioChange, ...] = ()
    date_range: Optional[DateRange] = None
    is_seasonal: bool = False
    seasonal_period: Optional[str] = None


# id -> (name, description, color, period, (start MM-DD, end MM-DD))
SEASONS: Dict[str, Tuple[str, str, str, str, Tuple[str, str]]] = {
    "holiday-season": (
        "Holiday Season", "Increased expenses during Q4 holiday season", "#DC2626", "Q4",
        ("11-01", "12-31"),
    ),
    "tax-season": (
        "Tax Season", "Tax payment and preparation expenses", "#7C3AED", "Q1",
        ("01-01", "04-15"),
    ),
    "summer-vacation": (
        "Summer Vacation", "Increased travel and leisure expenses", "#F59E0B", "Summer",
        ("06-01", "08-31"),
    ),
    "back-to-school": (
        "Back to School", "School-related expenses in fall", "#10B981", "Fall",
        ("08-01", "09-30"),
    ),
}

# id -> (description, name, amount, MM-DD, category) of the one-off each season adds
SEASONAL_EXPENSES: Dict[str, Tuple[str, str, float, str, str]] = {
    "tax-season": ("Tax preparation fee", "Tax preparation", 500.0, "03-15", "Services"),
    "summer-vacation": ("Vacation expenses", "Summer vacation", 3000.0, "07-15", "Travel"),
    "back-to-school": ("School supplies and fees", "School expenses", 800.0, "08-15", "Education"),
}


def _on(year: int, month_day: str) -> dt.date:
    return dt.date.fromisoformat(f"{year}-{month_day}")


def _seasonal_changes(tid: str, year: int) -> Tuple[ScenarioChange, ...]:
    if tid not in SEASONAL_EXPENSES:
        return (ExpenseAdjust(
            id=f"{tid}-expense",
            description="Increase expenses by 30% for holiday shopping",
            target_type="expense",
            changes=PercentPayload(percent_change=30.0),
        ),)
    description, name, amount, month_day, category = SEASONAL_EXPENSES[tid]
    return (TransactionAdd(
        id=f"{tid}-add",
        description=description,
        changes={"new_transaction": {
            "id": f"{tid}-txn",
            "name": name,
            "type": "expense",
            "amount": amount,
            "date": _on(year, month_day),
            "category": category,
        }},
    ),)


def seasonal_templates(year: Optional[int] = None) -> List[ScenarioTemplate]:
    """The seasonal templates for ``year`` (default: the current year)."""
    year = year or dt.date.today().year
    templates = []
    for tid, (name, description, color, period, (start, end)) in SEASONS.items():
        templates.append(ScenarioTemplate(
            id=tid,
            name=name,
            description=description,
            color=color,
            changes=_seasonal_changes(tid, year),
            date_range=DateRange(start_date=_on(year, start), end_date=_on(year, end)),
            is_seasonal=True,
            seasonal_period=period,
        ))
    return templates


def time_bound_template(
    name: str,
    description: str,
    date_range: DateRange,
    changes: Sequence[ScenarioChange],
    color: str = DEFAULT_COLOR,
) -> ScenarioTemplate:
    return ScenarioTemplate(
        id=str(uuid.uuid4()),
        name=name,
        description=description,
        color=color,
        changes=tuple(changes),
        date_range=date_range,
    )


def template_to_scenario(
    template: ScenarioTemplate, *, scenario_id: Optional[str] = None
) -> Scenario:
    """
    Build a scenario from ``template``.

    Seasonal templates tag the scenario with their period (``"seasonal"`` when
    the period is unset).
    """
    tags = (template.seasonal_period or "seasonal",) if template.is_seasonal else None
    return Scenario(
        id=scenario_id or str(uuid.uuid4()),
        name=template.name,
        description=template.description,
        color=template.color,
        changes=template.changes,
        date_range=template.date_range,
        tags=tags,
    )
