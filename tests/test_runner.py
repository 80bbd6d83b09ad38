import datetime as dt

import pytest

from core.config import ProjectionConfig
from core.errors import UnsupportedOperationError
from core.models import BaselineState, RecurrenceRule, Settings, Transaction
from engine.projection import project
from engine.runner import run_scenario, run_scenarios
from scenarios.changes import (
    ConditionalChange,
    ExpenseAdjust,
    Scenario,
    SettingOverride,
    TransactionAdd,
)
from scenarios.templates import scenario_template

JAN_1, JAN_31 = dt.date(2024, 1, 1), dt.date(2024, 1, 31)


@pytest.fixture
def burn_state():
    """1000 starting balance, 100 spent every day of January."""
    spend = Transaction(
        id="spend", name="Spend", amount=100.0, rule=RecurrenceRule("daily", JAN_1, JAN_31),
        source_type="recurring",
    )
    return BaselineState(Settings(JAN_1, JAN_31, 1000.0), transactions=(spend,))


def halve_when(condition, cid="cc"):
    return ConditionalChange(
        id=cid,
        conditions=(condition,),
        change=ExpenseAdjust(id=f"{cid}-change", changes={"percent_change": -50}),
    )


def test_plain_scenario(mixed_state):
    scenario = Scenario(id="s", changes=(ExpenseAdjust(id="e", changes={"percent_change": 10}),))
    run = run_scenario(mixed_state, scenario)
    assert run.scenario_id == "s"
    assert run.errors == ()
    assert run.result.total_expenses == pytest.approx(1750 + 170)
    assert run.result == project(run.state)


def test_conditional_fires_on_evolving_balance(burn_state):
    scenario = Scenario(
        id="s", conditional_changes=(halve_when({"type": "balance", "operator": "less_than", "value": 500}),)
    )
    run = run_scenario(burn_state, scenario)

    # opening balance of day i is 1000 - 100*i; first below 500 on day 6
    assert [(f.change_id, f.projection_day, f.date) for f in run.fired] == [
        ("cc", 6, dt.date(2024, 1, 7))
    ]
    cal = run.result.calendar
    assert [r.expenses for r in cal[:6]] == [100.0] * 6
    assert all(r.expenses == 50.0 for r in cal[6:])
    assert run.result.end_balance == 1000 - 600 - 50 * 25
    assert run.state.find("spend").amount == 50.0


def test_spliced_calendar_keeps_invariants(burn_state):
    scenario = Scenario(
        id="s", conditional_changes=(halve_when({"type": "balance", "operator": "less_than", "value": 500}),)
    )
    result = run_scenario(burn_state, scenario).result
    running = 1000.0
    for row in result.calendar:
        running = round(running + row.net, 2)
        assert row.running == running
    assert result.total_expenses == pytest.approx(sum(r.expenses for r in result.calendar))
    assert len(result.calendar) == 31


def test_conditional_change_fires_once(burn_state):
    # the condition keeps holding after the first firing; expenses must not halve again
    scenario = Scenario(
        id="s", conditional_changes=(halve_when({"type": "balance", "operator": "less_than", "value": 500}),)
    )
    run = run_scenario(burn_state, scenario)
    assert len(run.fired) == 1
    assert run.result.calendar[-1].expenses == 50.0


def test_projection_day_condition(burn_state):
    scenario = Scenario(
        id="s",
        conditional_changes=(halve_when({"type": "projection_day", "operator": "equals", "value": 10}),),
    )
    run = run_scenario(burn_state, scenario)
    assert run.fired[0].projection_day == 10
    assert run.result.calendar[9].expenses == 100.0
    assert run.result.calendar[10].expenses == 50.0


def test_disabled_and_empty_conditionals_never_fire(burn_state):
    disabled = halve_when({"type": "balance", "operator": "less_than", "value": 500}, "off")
    disabled = disabled.model_copy(update={"enabled": False})
    empty = ConditionalChange(id="empty", change=ExpenseAdjust(id="x", changes={"percent_change": -50}))
    run = run_scenario(burn_state, Scenario(id="s", conditional_changes=(disabled, empty)))
    assert run.fired == ()
    assert run.result.end_balance == 1000 - 3100


def test_once_mode_uses_baseline_context(burn_state):
    scenario = Scenario(
        id="s", conditional_changes=(halve_when({"type": "balance", "operator": "less_than", "value": 500}),)
    )
    run = run_scenario(burn_state, scenario, ProjectionConfig(conditional_evaluation="once"))
    assert run.fired == ()
    assert run.result.end_balance == 1000 - 3100

    scenario = Scenario(
        id="s", conditional_changes=(halve_when({"type": "balance", "operator": "equals", "value": 1000}),)
    )
    run = run_scenario(burn_state, scenario, ProjectionConfig(conditional_evaluation="once"))
    assert len(run.fired) == 1
    assert run.result.end_balance == 1000 - 1550


def test_setting_override_rejected_in_conditional(burn_state):
    cc = ConditionalChange(
        id="cc",
        conditions=({"type": "projection_day", "operator": "equals", "value": 0},),
        change=SettingOverride(id="so", changes={"starting_balance": 0}),
    )
    run = run_scenario(burn_state, Scenario(id="s", conditional_changes=(cc,)))
    assert [type(e) for e in run.errors] == [UnsupportedOperationError]
    assert run.errors[0].change_id == "cc"
    assert run.fired == ()


def test_run_scenarios_in_parallel(mixed_state):
    scenarios = [
        scenario_template("conservative", scenario_id="cons"),
        scenario_template("cost-cutting", scenario_id="cut"),
        Scenario(id="base"),
    ]
    runs = run_scenarios(mixed_state, scenarios, max_workers=3)
    assert list(runs) == ["cons", "cut", "base"]
    for s in scenarios:
        assert runs[s.id].result == run_scenario(mixed_state, s).result
    assert runs["base"].result == project(mixed_state)


def loan_when_low(date=None):
    new = {"type": "income", "name": "Loan", "amount": 5000}
    if date is not None:
        new["date"] = date
    return ConditionalChange(
        id="loan",
        conditions=({"type": "balance", "operator": "less_than", "value": 500},),
        change=TransactionAdd(id="loan", changes={"new_transaction": new}),
    )


def test_conditional_add_posts_on_firing_day(burn_state):
    run = run_scenario(burn_state, Scenario(id="s", conditional_changes=(loan_when_low(),)))

    assert run.errors == ()
    assert run.state.find("loan-txn").date == dt.date(2024, 1, 7)
    assert run.result.calendar[6].income == 5000.0
    assert run.result.end_balance == 1000 - 3100 + 5000
    assert run.result == project(run.state)


def test_conditional_add_dated_before_firing_is_refused(burn_state):
    run = run_scenario(burn_state, Scenario(id="s", conditional_changes=(loan_when_low("2024-01-02"),)))

    assert [type(e) for e in run.errors] == [UnsupportedOperationError]
    assert run.errors[0].change_id == "loan"
    assert run.state.find("loan-txn") is None
    assert run.fired == ()
    assert run.result == project(burn_state)
