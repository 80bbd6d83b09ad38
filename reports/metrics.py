"""
Per-projection metrics.

Computes the headline numbers for EACH projection individually; the
aggregator uses them to compare scenarios against the baseline.
"""

from __future__ import annotations

from typing import Dict, Mapping, Optional

import pandas as pd

from core.utils import round2
from engine.projection import ProjectionResult

BASELINE_LABEL = "Baseline"

METRIC_COLUMNS = (
    "end_balance",
    "lowest_balance",
    "total_income",
    "total_expenses",
    "negative_days",
    "net_cashflow",
    "runway_days",
)


def runway_days(result: ProjectionResult) -> Optional[int]:
    """Days from the first projected day until the balance first drops below zero; None if it never does."""
    if result.first_negative_date is None or not result.calendar:
        return None
    return (result.first_negative_date - result.calendar[0].date).days


def projection_metrics(result: ProjectionResult) -> Dict[str, object]:
    return {
        "end_balance": result.end_balance,
        "lowest_balance": result.lowest_balance,
        "total_income": result.total_income,
        "total_expenses": result.total_expenses,
        "negative_days": result.negative_days,
        "net_cashflow": round2(result.total_income - result.total_expenses),
        "runway_days": runway_days(result),
    }


def compare_projections(
    baseline: ProjectionResult,
    projections: Mapping[str, ProjectionResult],
) -> pd.DataFrame:
    """
    Key metrics table.

    Parameters
    ----------
    baseline : ProjectionResult
        Unmodified projection, reported first as "Baseline".
    projections : mapping of str -> ProjectionResult
        Scenario label to its projection, in display order.

    Returns
    -------
    DataFrame indexed by scenario label with ``METRIC_COLUMNS``.
    """
    rows = {BASELINE_LABEL: projection_metrics(baseline)}
    for label, result in projections.items():
        rows[label] = projection_metrics(result)
    df = pd.DataFrame.from_dict(rows, orient="index", columns=list(METRIC_COLUMNS))
    df.index.name = "scenario"
    return df
