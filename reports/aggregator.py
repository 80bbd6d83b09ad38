"""
Scenario comparison across projections.

Lines the scenarios up against the baseline day by day and summarises the
spread of outcomes (end balance, lowest balance, runway).
"""

from __future__ import annotations

from typing import Dict, Mapping, Optional, Tuple

import numpy as np
import pandas as pd

from engine.projection import ProjectionResult

from .metrics import BASELINE_LABEL, runway_days


def daily_balance_comparison(
    baseline: ProjectionResult,
    projections: Mapping[str, ProjectionResult],
    days: Optional[int] = None,
) -> pd.DataFrame:
    """
    Running balance per day for the baseline and each scenario, plus each
    scenario's difference to the baseline.

    Rows follow the baseline calendar (first ``days`` only, when given).  A
    scenario with a shorter calendar leaves NaN on the missing days.

    Returns
    -------
    DataFrame with columns: date, Baseline, then "<label>" and
    "<label> (Diff)" for every scenario.
    """
    n = len(baseline.calendar) if days is None else min(days, len(baseline.calendar))
    base = baseline.to_frame().iloc[:n]
    out = pd.DataFrame({"date": base["date"], BASELINE_LABEL: base["running"]})

    for label, result in projections.items():
        running = result.to_frame()["running"].iloc[:n].reset_index(drop=True)
        running = running.reindex(range(n))
        out[label] = running.to_numpy()
        out[f"{label} (Diff)"] = np.round(out[label] - out[BASELINE_LABEL], 2)

    return out.reset_index(drop=True)


def _range(values) -> Tuple[Optional[float], Optional[float]]:
    vals = [v for v in values if v is not None]
    if not vals:
        return None, None
    return min(vals), max(vals)


def comparative_metrics(projections: Mapping[str, ProjectionResult]) -> Dict[str, object]:
    """
    Spread of outcomes across scenarios.

    Returns
    -------
    Dict with:
      "end_balance_range":    (min, max) end balance
      "avg_end_balance":      mean end balance
      "lowest_balance_range": (min, max) lowest balance
      "runway_range":         (min, max) runway in days; None where no scenario goes negative
    """
    results = list(projections.values())
    if not results:
        return {
            "end_balance_range": (None, None),
            "avg_end_balance": None,
            "lowest_balance_range": (None, None),
            "runway_range": (None, None),
        }

    end_balances = np.array([r.end_balance for r in results], dtype=float)
    return {
        "end_balance_range": (float(end_balances.min()), float(end_balances.max())),
        "avg_end_balance": float(np.round(end_balances.mean(), 2)),
        "lowest_balance_range": _range(r.lowest_balance for r in results),
        "runway_range": _range(runway_days(r) for r in results),
    }
