from __future__ import annotations

import calendar
import math
import re
from datetime import date, datetime
from typing import Any, Iterable, Mapping, Optional

import numpy as np

_YMD_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def require_keys(data: Mapping[str, Any], keys: Iterable[str]) -> None:
    missing = [k for k in keys if k not in data or data[k] is None]
    if missing:
        raise ValueError(f"Missing required fields: {missing}")


def excel_round(x, decimals: int = 2):
    """Excel ROUND: half away from zero (vectorized)."""
    m = 10 ** decimals
    x = np.asarray(x, dtype=float)
    return np.sign(x) * (np.floor(np.abs(x) * m + 0.5) / m)


def round2(value: float) -> float:
    """Round a scalar to cents; non-finite input rounds to 0."""
    if value is None or not math.isfinite(value):
        return 0.0
    return float(excel_round(value, 2)) + 0.0  # normalise -0.0


def is_finite_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def parse_ymd(value: Any) -> Optional[date]:
    """Parse a strict YYYY-MM-DD string (or pass a date through). None when invalid."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not _YMD_RE.match(value.strip()):
        return None
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        return None


def to_ymd(value: date) -> str:
    return value.isoformat()


def weekday_index(day: date) -> int:
    """Weekday with 0 = Sunday .. 6 = Saturday (stored-state convention)."""
    return (day.weekday() + 1) % 7


def is_weekend(day: date) -> bool:
    return day.weekday() >= 5


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def days_inclusive(start: date, end: date) -> int:
    return (end - start).days + 1


def months_between(start: date, end: date) -> int:
    """
    Whole calendar months from start to end, ignoring the day of month.
    0 when both fall in the same month; never negative.
    """
    if start is None or end is None:
        return 0
    months = (end.year - start.year) * 12 + (end.month - start.month)
    return max(0, int(months))
