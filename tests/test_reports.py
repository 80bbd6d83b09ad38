import datetime as dt

import pytest

from core.models import BaselineState
from engine.projection import project
from engine.runner import run_scenario
from reports import (
    compare_projections,
    comparative_metrics,
    daily_balance_comparison,
    projection_metrics,
    runway_days,
)
from scenarios.templates import scenario_template


@pytest.fixture
def projections(mixed_state):
    return {
        "Conservative": run_scenario(mixed_state, scenario_template("conservative", scenario_id="c")).result,
        "Cost Cutting": run_scenario(mixed_state, scenario_template("cost-cutting", scenario_id="k")).result,
    }


def test_projection_metrics(mixed_state):
    metrics = projection_metrics(project(mixed_state))
    assert metrics["end_balance"] == 3750.0
    assert metrics["net_cashflow"] == 2750.0
    assert metrics["negative_days"] == 4
    assert metrics["runway_days"] == 0


def test_runway_none_when_never_negative(settings):
    assert runway_days(project(BaselineState(settings))) is None


def test_compare_projections(mixed_state, projections):
    df = compare_projections(project(mixed_state), projections)
    assert list(df.index) == ["Baseline", "Conservative", "Cost Cutting"]
    assert df.loc["Baseline", "end_balance"] == 3750.0
    assert df.loc["Cost Cutting", "total_expenses"] == pytest.approx(1200 * 0.75 + 500 * 0.75 + 50)


def test_daily_balance_comparison(mixed_state, projections):
    baseline = project(mixed_state)
    df = daily_balance_comparison(baseline, projections, days=10)
    assert len(df) == 10
    assert list(df.columns) == [
        "date", "Baseline", "Conservative", "Conservative (Diff)", "Cost Cutting", "Cost Cutting (Diff)",
    ]
    first = df.iloc[0]
    assert first["Baseline"] == -300.0
    # cost cutting: 1000 - 1300 * 0.75
    assert first["Cost Cutting"] == 25.0
    assert first["Cost Cutting (Diff)"] == 325.0
    assert df["date"].iloc[0] == dt.datetime(2024, 1, 1)


def test_comparative_metrics(projections):
    metrics = comparative_metrics(projections)
    ends = sorted(p.end_balance for p in projections.values())
    assert metrics["end_balance_range"] == (ends[0], ends[1])
    assert metrics["avg_end_balance"] == pytest.approx(sum(ends) / 2, abs=0.01)
    assert metrics["runway_range"] == (0, 0)


def test_comparative_metrics_empty():
    assert comparative_metrics({})["avg_end_balance"] is None
