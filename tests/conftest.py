import datetime as dt

import pytest

from core.models import (
    Adjustment,
    BaselineState,
    IncomeStream,
    RecurrenceRule,
    Settings,
    Transaction,
)

JAN_1 = dt.date(2024, 1, 1)
JAN_31 = dt.date(2024, 1, 31)
DEC_31 = dt.date(2024, 12, 31)


def monthly(start=JAN_1, end=DEC_31, **kw):
    return RecurrenceRule("monthly", start, end, **kw)


@pytest.fixture
def settings():
    return Settings(JAN_1, JAN_31, 1000.0)


@pytest.fixture
def rent():
    return Transaction(
        id="rent", name="Rent", type="expense", amount=1200.0, category="Rent",
        rule=monthly(day_of_month=1), source_type="recurring",
    )


@pytest.fixture
def groceries():
    # Mondays: Jan 1, 8, 15, 22, 29
    return Transaction(
        id="groceries", name="Groceries", type="expense", amount=100.0, category="Food",
        rule=RecurrenceRule("weekly", JAN_1, DEC_31, day_of_week=(1,)), source_type="recurring",
    )


@pytest.fixture
def bonus():
    return Transaction(
        id="bonus", name="Bonus", type="income", amount=500.0, category="Windfall",
        date=dt.date(2024, 1, 15),
    )


@pytest.fixture
def salary():
    # Fridays every other week from Jan 5: Jan 5, 19
    return IncomeStream(
        id="salary", name="Salary", amount=2000.0,
        rule=RecurrenceRule("biweekly", JAN_1, DEC_31, day_of_week=(5,)),
        category="Payroll",
    )


@pytest.fixture
def mixed_state(settings, rent, groceries, bonus, salary):
    return BaselineState(
        settings=settings,
        transactions=(rent, groceries, bonus),
        income_streams=(salary,),
        adjustments=(Adjustment(dt.date(2024, 1, 10), -50.0, "bank fee"),),
    )
