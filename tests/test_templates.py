import datetime as dt

import pydantic
import pytest

from engine.runner import run_scenario
from scenarios.changes import DateRange, ExpenseAdjust
from scenarios.templates import (
    SEASONS,
    TEMPLATES,
    scenario_template,
    seasonal_templates,
    template_to_scenario,
    time_bound_template,
)


def test_conservative():
    scenario = scenario_template("conservative", scenario_id="s1")
    assert scenario.name == "Conservative"
    assert [(c.type, c.changes.percent_change) for c in scenario.changes] == [
        ("income_adjust", -15.0),
        ("expense_adjust", 10.0),
    ]
    assert scenario.changes[0].description == "Reduce all income by 15%"


def test_cost_cutting_only_touches_expenses():
    scenario = scenario_template("cost-cutting")
    assert [(c.type, c.changes.percent_change) for c in scenario.changes] == [("expense_adjust", -25.0)]


@pytest.mark.parametrize("name", sorted(TEMPLATES))
def test_change_ids_are_unique(name):
    ids = [c.id for c in scenario_template(name).changes]
    assert len(ids) == len(set(ids))


def test_unknown_template():
    with pytest.raises(ValueError):
        scenario_template("moonshot")


# ---------------------------------------------------------------------------
# Seasonal and time-bound
# ---------------------------------------------------------------------------

def test_seasonal_templates_for_year():
    templates = {t.id: t for t in seasonal_templates(2024)}
    assert list(templates) == list(SEASONS)
    assert [t.name for t in templates.values()] == [
        "Holiday Season", "Tax Season", "Summer Vacation", "Back to School",
    ]
    assert all(t.is_seasonal for t in templates.values())

    holiday = templates["holiday-season"]
    assert holiday.date_range == DateRange(start_date=dt.date(2024, 11, 1), end_date=dt.date(2024, 12, 31))
    assert [(c.type, c.changes.percent_change) for c in holiday.changes] == [("expense_adjust", 30.0)]

    tax = templates["tax-season"].changes[0].changes.new_transaction
    assert (tax.name, tax.type, tax.amount, tax.date, tax.category) == (
        "Tax preparation", "expense", 500.0, dt.date(2024, 3, 15), "Services",
    )
    assert templates["tax-season"].date_range.end_date == dt.date(2024, 4, 15)


def test_seasonal_one_offs_fall_inside_their_range():
    for template in seasonal_templates(2025):
        for change in template.changes:
            if change.type == "transaction_add":
                day = change.changes.new_transaction.date
                assert template.date_range.start_date <= day <= template.date_range.end_date


def test_seasonal_template_to_scenario_tags_period():
    summer = next(t for t in seasonal_templates(2024) if t.id == "summer-vacation")
    scenario = template_to_scenario(summer, scenario_id="s")
    assert scenario.id == "s"
    assert scenario.name == "Summer Vacation"
    assert scenario.tags == ("Summer",)
    assert scenario.color == "#F59E0B"
    assert scenario.date_range == summer.date_range
    assert scenario.changes == summer.changes


def test_time_bound_template_is_untagged():
    window = DateRange(start_date=dt.date(2024, 1, 1), end_date=dt.date(2024, 1, 31))
    change = ExpenseAdjust(id="e", changes={"percent_change": 10})
    template = time_bound_template("January", "Pricier January", window, [change])
    assert not template.is_seasonal
    assert template.color == "#6366F1"

    scenario = template_to_scenario(template)
    assert scenario.tags is None
    assert scenario.date_range == window
    assert scenario.changes == (change,)


def test_seasonal_scenario_runs(mixed_state):
    school = next(t for t in seasonal_templates(2024) if t.id == "back-to-school")
    run = run_scenario(mixed_state, template_to_scenario(school))
    # the one-off lands in August, outside a January projection
    assert run.errors == ()
    assert run.state.find("back-to-school-txn").date == dt.date(2024, 8, 15)
    assert run.result.total_expenses == 1750.0


def test_date_range_must_be_ordered():
    with pytest.raises(pydantic.ValidationError):
        DateRange(start_date=dt.date(2024, 2, 1), end_date=dt.date(2024, 1, 1))
