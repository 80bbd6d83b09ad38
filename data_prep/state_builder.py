"""
Build a BaselineState from the plain camelCase mapping shape used by the
surrounding application (forms, imports, saved files).

Normalisation follows the stored-state rules:
  - weekday input may be a list, a single value or a comma string; values are
    truncated, clamped to 0..6, deduplicated and sorted
  - nth descriptors accept 1..5 (int or str) and "last", else "1"
  - steps with an invalid date or amount are dropped; amounts become absolute
  - amounts are absolute; direction comes from ``type``

A malformed entry is logged and skipped unless ``strict=True``.
"""

from __future__ import annotations

import logging
import math
import re
from typing import Any, Dict, List, Mapping, Sequence, Tuple

from core.errors import ValidationError
from core.models import (
    Adjustment,
    BaselineState,
    IncomeStream,
    RecurrenceRule,
    Settings,
    Step,
    Transaction,
)
from core.utils import parse_ymd, require_keys, weekday_index

logger = logging.getLogger(__name__)

_SPLIT_RE = re.compile(r"[\s,]+")


# ---------------------------------------------------------------------------
# Scalar normalisers
# ---------------------------------------------------------------------------

def _number(value: Any, default: float = 0.0) -> float:
    """Finite float from loose input; ``default`` for anything else."""
    if value is None or value == "" or isinstance(value, bool):
        return default
    try:
        num = float(value)
    except (TypeError, ValueError):
        return default
    return num if math.isfinite(num) else default


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def normalize_weekdays(value: Any) -> Tuple[int, ...]:
    if value is None:
        return ()
    if isinstance(value, (list, tuple, set)):
        raw: Sequence[Any] = list(value)
    elif isinstance(value, str) and "," in value:
        raw = _SPLIT_RE.split(value)
    else:
        raw = [value]

    days = set()
    for item in raw:
        if item is None or isinstance(item, bool):
            continue
        try:
            num = float(str(item).strip())
        except ValueError:
            continue
        if not math.isfinite(num):
            continue
        days.add(min(max(int(num), 0), 6))
    return tuple(sorted(days))


def normalize_nth(value: Any) -> str:
    if isinstance(value, str):
        trimmed = value.strip().lower()
        if trimmed == "last":
            return "last"
        match = re.match(r"^\d+", trimmed)
        if match and 1 <= int(match.group()) <= 5:
            return str(int(match.group()))
    elif isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value):
        if 1 <= int(value) <= 5:
            return str(int(value))
    return "1"


def first_weekday(value: Any, fallback: int = 0) -> int:
    days = normalize_weekdays(value)
    if days:
        return days[0]
    return min(max(int(_number(fallback)), 0), 6)


def normalize_steps(value: Any) -> Tuple[Step, ...]:
    if not isinstance(value, (list, tuple)):
        return ()
    steps: List[Step] = []
    for item in value:
        if not isinstance(item, Mapping):
            continue
        effective = parse_ymd(item.get("effectiveFrom", item.get("effective_from")))
        amount = _number(item.get("amount"), default=math.nan)
        if effective is None or math.isnan(amount):
            continue
        steps.append(Step(effective_from=effective, amount=abs(amount)))
    return tuple(sorted(steps, key=lambda s: s.effective_from))


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------

def build_settings(data: Mapping[str, Any]) -> Settings:
    try:
        require_keys(data, ["startDate", "endDate"])
    except ValueError as exc:
        raise ValidationError(f"Settings: {exc}") from exc
    start = parse_ymd(data["startDate"])
    end = parse_ymd(data["endDate"])
    if start is None or end is None:
        raise ValidationError(
            f"Settings dates must be YYYY-MM-DD, got {data['startDate']!r} / {data['endDate']!r}."
        )
    return Settings(start, end, _number(data.get("startingBalance")))


def build_rule(data: Mapping[str, Any], frequency: str, start, end) -> RecurrenceRule:
    """Recurrence rule with the per-frequency defaults of the stored state."""
    start_dow = weekday_index(start)
    kwargs: Dict[str, Any] = {
        "on_date": parse_ymd(data.get("onDate")),
        "skip_weekends": bool(data.get("skipWeekends")),
        "steps": normalize_steps(data.get("steps")),
        "escalator_pct": _number(data.get("escalatorPct")),
    }
    if frequency in ("weekly", "biweekly"):
        kwargs["day_of_week"] = normalize_weekdays(data.get("dayOfWeek")) or (start_dow,)
    elif frequency == "monthly":
        mode = "nth" if data.get("monthlyMode") == "nth" else "day"
        kwargs["monthly_mode"] = mode
        if mode == "nth":
            kwargs["day_of_week"] = normalize_weekdays(data.get("dayOfWeek"))
            nth = data.get("nthWeek")
            kwargs["nth_week"] = normalize_nth(nth if nth is not None else data.get("nthWeekNumber"))
            wd = data.get("nthWeekday")
            kwargs["nth_weekday"] = first_weekday(
                wd if wd is not None else data.get("dayOfWeek"), start_dow
            )
        else:
            dom = _number(data.get("dayOfMonth"), default=math.nan)
            dom_int = start.day if math.isnan(dom) else int(dom)
            kwargs["day_of_month"] = min(max(dom_int, 1), 31)
    return RecurrenceRule(frequency=frequency, start_date=start, end_date=end, **kwargs)


def build_transaction(data: Mapping[str, Any], fallback_id: str) -> Transaction:
    if not isinstance(data, Mapping):
        raise ValidationError("Invalid one-off record")
    amount = _number(data.get("amount"), default=math.nan)
    if math.isnan(amount):
        raise ValidationError("Invalid one-off amount")

    common = dict(
        id=data["id"] if isinstance(data.get("id"), str) else fallback_id,
        name=_text(data.get("name")),
        type="income" if data.get("type") == "income" else "expense",
        amount=abs(amount),
        category=_text(data.get("category")),
        note=data.get("note") if isinstance(data.get("note"), str) else None,
        parent_id=data.get("parentId"),
    )

    if not data.get("recurring"):
        day = parse_ymd(data.get("date"))
        if day is None:
            raise ValidationError("Invalid one-off date")
        return Transaction(date=day, source_type="one-off", **common)

    frequency = data.get("frequency")
    start = parse_ymd(data.get("startDate"))
    end = parse_ymd(data.get("endDate", data.get("date")))
    if not isinstance(frequency, str) or start is None or end is None:
        raise ValidationError("Invalid recurring one-off metadata")
    if start > end:
        end = start
    rule = build_rule(data, frequency, start, end)
    return Transaction(rule=rule, source_type="recurring", **common)


def build_income_stream(data: Mapping[str, Any], fallback_id: str) -> IncomeStream:
    if not isinstance(data, Mapping):
        raise ValidationError("Invalid income stream record")
    amount = _number(data.get("amount"), default=math.nan)
    if math.isnan(amount):
        raise ValidationError("Invalid income stream amount")

    frequency = data.get("frequency") if isinstance(data.get("frequency"), str) else "once"
    start = parse_ymd(data.get("startDate", data.get("onDate")))
    end = parse_ymd(data.get("endDate", data.get("onDate")))
    if start is None or end is None:
        raise ValidationError("Invalid income stream date range")
    if start > end:
        start, end = end, start

    rule_data = dict(data)
    if frequency == "once" and parse_ymd(data.get("onDate")) is None:
        rule_data["onDate"] = start
    return IncomeStream(
        id=data["id"] if isinstance(data.get("id"), str) else fallback_id,
        name=_text(data.get("name")),
        amount=abs(amount),
        rule=build_rule(rule_data, frequency, start, end),
        category=_text(data.get("category")),
        note=data.get("note") if isinstance(data.get("note"), str) else None,
    )


def build_adjustment(data: Mapping[str, Any]) -> Adjustment:
    if not isinstance(data, Mapping):
        raise ValidationError("Invalid adjustment record")
    day = parse_ymd(data.get("date"))
    if day is None:
        raise ValidationError(f"Invalid adjustment date {data.get('date')!r}")
    note = data.get("note")
    return Adjustment(day, _number(data.get("amount")), note if isinstance(note, str) else None)


# ---------------------------------------------------------------------------
# State
# ---------------------------------------------------------------------------

def _collect(items: Any, build, label: str, strict: bool) -> list:
    out = []
    for i, item in enumerate(items or ()):
        try:
            out.append(build(item, i))
        except (ValidationError, TypeError, ValueError) as exc:
            if strict:
                raise
            logger.warning("Skipping %s #%d: %s", label, i, exc)
    return out


def build_baseline_state(payload: Mapping[str, Any], *, strict: bool = False) -> BaselineState:
    """
    Parameters
    ----------
    payload : mapping
        ``settings`` (required), ``oneOffs`` or ``transactions``,
        ``incomeStreams``, ``adjustments``.
    strict : bool
        Raise on the first malformed entry instead of skipping it.
    """
    settings_data = payload.get("settings") if isinstance(payload, Mapping) else None
    if not isinstance(settings_data, Mapping):
        raise ValidationError("State requires settings.")
    settings = build_settings(settings_data)

    txn_items = payload.get("oneOffs", payload.get("transactions"))
    transactions = _collect(
        txn_items, lambda d, i: build_transaction(d, f"txn-{i}"), "transaction", strict
    )
    streams = _collect(
        payload.get("incomeStreams"),
        lambda d, i: build_income_stream(d, f"stream-{i}"),
        "income stream",
        strict,
    )
    adjustments = _collect(
        payload.get("adjustments"), lambda d, i: build_adjustment(d), "adjustment", strict
    )

    logger.debug(
        "Built state: %d transactions, %d income streams, %d adjustments",
        len(transactions), len(streams), len(adjustments),
    )
    return BaselineState(settings, transactions, streams, adjustments)
