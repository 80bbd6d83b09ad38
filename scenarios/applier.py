"""
Scenario change application as a left fold of ordered changes over a baseline.

Each change consumes the state produced by the previous one, so
``[expense_adjust(+10%), expense_adjust(+10%)]`` compounds to x1.21.  States
are immutable; every handler returns a new ``BaselineState``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from pydantic import ValidationError as PydanticValidationError

from core.errors import (
    ProjectionError,
    UnresolvedTargetError,
    UnsupportedOperationError,
    ValidationError,
)
from core.models import BaselineState, Entry, Settings, Transaction

from .changes import CHANGE_ADAPTER, ScenarioChange

logger = logging.getLogger(__name__)

Report = Callable[[ProjectionError], None]


@dataclass(frozen=True)
class ApplyOutcome:
    state: BaselineState
    errors: Tuple[ProjectionError, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.errors


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

def parse_change(data: Any) -> ScenarioChange:
    """Build a change from a raw mapping; pydantic failures become ValidationError."""
    try:
        return CHANGE_ADAPTER.validate_python(data)
    except PydanticValidationError as exc:
        change_id = data.get("id") if isinstance(data, Mapping) else None
        raise ValidationError(f"Invalid scenario change: {exc}", change_id=change_id) from exc


def parse_changes(items: Iterable[Any]) -> Tuple[List[ScenarioChange], List[ValidationError]]:
    """Parse a batch; each bad item yields one error and is left out of the result."""
    changes: List[ScenarioChange] = []
    errors: List[ValidationError] = []
    for item in items:
        try:
            changes.append(parse_change(item))
        except ValidationError as exc:
            errors.append(exc)
    return changes, errors


# ---------------------------------------------------------------------------
# Entry helpers
# ---------------------------------------------------------------------------

def _touched(entry: Entry) -> Dict[str, Any]:
    """Edit markers; the original amount is captured only on the first edit."""
    original = entry.original_amount if entry.original_amount is not None else entry.amount
    return {"is_edited": True, "original_amount": original}


def _scale(entry: Entry, multiplier: float) -> Entry:
    """Multiply the entry amount and every step amount."""
    rule = entry.rule
    if rule is not None and rule.steps:
        steps = tuple(replace(s, amount=s.amount * multiplier) for s in rule.steps)
        rule = replace(rule, steps=steps)
    return replace(entry, amount=entry.amount * multiplier, rule=rule, **_touched(entry))


def _set_amount(entry: Entry, amount: float) -> Entry:
    """Replace the amount outright; steps are dropped so the new figure holds for every date."""
    rule = entry.rule
    if rule is not None and rule.steps:
        rule = replace(rule, steps=())
    return replace(entry, amount=amount, rule=rule, **_touched(entry))


def _map_entries(
    state: BaselineState, fn: Callable[[Entry], Entry]
) -> BaselineState:
    return replace(
        state,
        transactions=tuple(fn(t) for t in state.transactions),
        income_streams=tuple(fn(s) for s in state.income_streams),
    )


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------

def _apply_add(state: BaselineState, change, report: Report) -> BaselineState:
    new = change.changes.new_transaction
    txn = Transaction(
        id=new.id or f"{change.id}-txn",
        name=new.name or "Unnamed",
        type=new.type or "expense",
        amount=new.amount or 0.0,
        category=new.category or "",
        date=new.date or state.settings.start_date,
        note=new.note,
        parent_id=new.parent_id,
    )
    return replace(state, transactions=state.transactions + (txn,))


def _apply_remove(state: BaselineState, change, report: Report) -> BaselineState:
    target = change.target_id
    if state.find(target) is None:
        logger.debug("transaction_remove %s: %r not present, nothing to do", change.id, target)
        return state
    return replace(
        state,
        transactions=tuple(t for t in state.transactions if t.id != target),
        income_streams=tuple(s for s in state.income_streams if s.id != target),
    )


def _apply_modify(state: BaselineState, change, report: Report) -> BaselineState:
    target = state.find(change.target_id)
    if target is None:
        report(UnresolvedTargetError(change.target_id, change_id=change.id))
        return state

    payload = change.changes
    if payload.frequency is not None:
        report(UnsupportedOperationError(
            f"Frequency changes are not supported (change {change.id}).", change_id=change.id
        ))

    def modify(entry: Entry) -> Entry:
        if entry.id != target.id:
            return entry
        if payload.amount is not None:
            entry = _set_amount(entry, payload.amount)
        elif payload.amount_multiplier is not None:
            entry = _scale(entry, payload.amount_multiplier)
        if payload.date is not None:
            if entry.recurring:
                report(UnsupportedOperationError(
                    f"Cannot move recurring entry {entry.id!r} to a single date.",
                    change_id=change.id,
                ))
            else:
                entry = replace(entry, date=payload.date)
        return entry

    return _map_entries(state, modify)


def _apply_bulk(state: BaselineState, change, report: Report) -> BaselineState:
    payload = change.changes
    multiplier = 1 + payload.percent_change / 100

    def adjust(entry: Entry) -> Entry:
        if payload.category_filter and entry.category != payload.category_filter:
            return entry
        if payload.type_filter and entry.type != payload.type_filter:
            return entry
        return _scale(entry, multiplier)

    return _map_entries(state, adjust)


def _apply_income(state: BaselineState, change, report: Report) -> BaselineState:
    payload = change.changes
    multiplier = 1 + payload.percent_change / 100
    target = change.target_id

    def adjust(entry: Entry) -> Entry:
        if entry.type != "income":
            return entry
        if target and target not in (entry.id, entry.parent_id):
            return entry
        if payload.category_filter and entry.category != payload.category_filter:
            return entry
        return _scale(entry, multiplier)

    return _map_entries(state, adjust)


def _apply_expense(state: BaselineState, change, report: Report) -> BaselineState:
    payload = change.changes
    multiplier = 1 + payload.percent_change / 100

    def adjust(entry: Entry) -> Entry:
        if entry.type != "expense":
            return entry
        if payload.category_filter and entry.category != payload.category_filter:
            return entry
        return _scale(entry, multiplier)

    return _map_entries(state, adjust)


def _apply_setting_override(state: BaselineState, change, report: Report) -> BaselineState:
    payload = change.changes
    current = state.settings
    settings = Settings(
        start_date=payload.start_date or current.start_date,
        end_date=payload.end_date or current.end_date,
        starting_balance=(
            current.starting_balance
            if payload.starting_balance is None
            else payload.starting_balance
        ),
    )
    return replace(state, settings=settings)


HANDLERS: Dict[str, Callable[[BaselineState, Any, Report], BaselineState]] = {
    "transaction_add": _apply_add,
    "transaction_remove": _apply_remove,
    "transaction_modify": _apply_modify,
    "bulk_adjustment": _apply_bulk,
    "income_adjust": _apply_income,
    "expense_adjust": _apply_expense,
    "setting_override": _apply_setting_override,
}


def _log_report(error: ProjectionError) -> None:
    logger.warning("Scenario change %s: %s", error.change_id, error.message)


# ---------------------------------------------------------------------------
# Folding
# ---------------------------------------------------------------------------

def apply_change(
    state: BaselineState,
    change: ScenarioChange,
    report: Optional[Report] = None,
) -> BaselineState:
    """
    Apply one change.

    Problems that leave the change partly applied (unsupported parts, a missing
    modify target) go to ``report``; an invalid settings merge raises
    ValidationError.  Unknown change types are logged and ignored.
    """
    handler = HANDLERS.get(getattr(change, "type", None))
    if handler is None:
        logger.warning("Unknown change type %r; state left unchanged", getattr(change, "type", None))
        return state
    return handler(state, change, report or _log_report)


def apply_changes_checked(
    state: BaselineState, changes: Iterable[ScenarioChange]
) -> ApplyOutcome:
    """
    Apply ``changes`` in order, collecting one error list for the batch.

    Each change is checked against the state left by the changes before it.
    A change that fails validation is skipped; the rest of the batch still runs.
    """
    errors: List[ProjectionError] = []
    for change in changes:
        change_id = getattr(change, "id", None)
        problems: List[ProjectionError] = []
        try:
            state = apply_change(state, change, problems.append)
        except ValidationError as exc:
            if exc.change_id is None:
                exc.change_id = change_id
            problems.append(exc)
        for problem in problems:
            _log_report(problem)
        errors.extend(problems)
    return ApplyOutcome(state=state, errors=tuple(errors))


def apply_changes(state: BaselineState, changes: Iterable[ScenarioChange]) -> BaselineState:
    """Lenient fold: problems are logged, the resulting state is returned."""
    return apply_changes_checked(state, changes).state
