import datetime as dt

import pytest

from core.errors import RangeTooLargeError, ValidationError
from core.utils import days_inclusive
from engine.calendar import build_calendar


@pytest.mark.parametrize(
    "start, end",
    [
        (dt.date(2024, 1, 1), dt.date(2024, 1, 1)),
        (dt.date(2024, 1, 1), dt.date(2024, 12, 31)),
        (dt.date(2023, 2, 20), dt.date(2023, 3, 5)),
    ],
)
def test_calendar_is_complete_and_contiguous(start, end):
    rows = build_calendar(start, end)
    assert len(rows) == days_inclusive(start, end)
    assert rows[0].date == start and rows[-1].date == end
    for prev, row in zip(rows, rows[1:]):
        assert row.date - prev.date == dt.timedelta(days=1)


def test_rows_start_at_zero():
    row = build_calendar(dt.date(2024, 1, 1), dt.date(2024, 1, 2))[0]
    assert (row.income, row.expenses, row.net, row.running) == (0.0, 0.0, 0.0, 0.0)
    assert row.income_details == [] and row.expense_details == []


def test_leap_year_has_366_rows():
    assert len(build_calendar(dt.date(2024, 1, 1), dt.date(2024, 12, 31))) == 366


def test_inverted_range_raises():
    with pytest.raises(ValidationError):
        build_calendar(dt.date(2024, 2, 1), dt.date(2024, 1, 1))


def test_range_cap_fails_fast():
    with pytest.raises(RangeTooLargeError) as info:
        build_calendar(dt.date(2024, 1, 1), dt.date(2024, 1, 31), max_days=30)
    assert info.value.days == 31
    assert info.value.max_days == 30


def test_range_at_cap_is_allowed():
    assert len(build_calendar(dt.date(2024, 1, 1), dt.date(2024, 1, 30), max_days=30)) == 30
