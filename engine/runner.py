"""
Applies a scenario to a baseline and projects it.

Two modes for conditional changes (``ProjectionConfig.conditional_evaluation``):
  1. "daily": walk the projected calendar; a conditional change fires on the
     first day its conditions hold against the balance carried into that day.
     The state is edited, the calendar re-projected from that day onward and
     re-settled.  Earlier days are never revisited: an undated one-off is
     added on the firing day, one dated earlier is refused.
  2. "once":  conditions are checked a single time against the baseline
     (starting balance, gross amounts) before projecting.

Scenarios are independent, so ``run_scenarios`` fans them out over a thread pool.
"""

from __future__ import annotations

import datetime as dt
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from core.config import ProjectionConfig
from core.errors import ProjectionError, UnsupportedOperationError
from core.models import BaselineState
from core.utils import to_ymd
from scenarios.applier import apply_changes_checked
from scenarios.changes import ConditionalChange, Scenario
from scenarios.conditions import EvaluationContext, context_from_state, evaluate_conditions

from .projection import ProjectionResult, project, settle_calendar

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FiredChange:
    change_id: str
    projection_day: int
    date: dt.date


@dataclass
class ScenarioRun:
    scenario_id: str
    state: BaselineState
    result: ProjectionResult
    errors: Tuple[ProjectionError, ...] = ()
    fired: Tuple[FiredChange, ...] = ()


def _usable_conditionals(
    scenario: Scenario, errors: List[ProjectionError]
) -> List[ConditionalChange]:
    usable = []
    for cc in scenario.conditional_changes:
        if not cc.enabled:
            continue
        if cc.change.type == "setting_override":
            # the calendar window cannot move mid-walk
            errors.append(UnsupportedOperationError(
                f"Conditional change {cc.id} cannot override settings.", change_id=cc.id
            ))
            continue
        usable.append(cc)
    return usable


def _anchor_to_day(cc: ConditionalChange, day: dt.date):
    """
    The change to apply when ``cc`` fires on ``day``.

    An undated ``transaction_add`` is pinned to ``day``. A one-off dated before
    ``day`` would land on a day that is already settled, so it is refused.
    """
    change = cc.change
    if change.type == "transaction_add":
        new = change.changes.new_transaction
        if new.date is None:
            new = new.model_copy(update={"date": day})
            payload = change.changes.model_copy(update={"new_transaction": new})
            return change.model_copy(update={"changes": payload})
        posted = new.date
    elif change.type == "transaction_modify":
        posted = change.changes.date
    else:
        return change
    if posted is not None and posted < day:
        raise UnsupportedOperationError(
            f"Conditional change {cc.id} fired on {day} but posts on {posted}.", change_id=cc.id
        )
    return change


def _run_once(
    state: BaselineState,
    pending: List[ConditionalChange],
    config: ProjectionConfig,
    errors: List[ProjectionError],
) -> Tuple[BaselineState, ProjectionResult, List[FiredChange]]:
    ctx = context_from_state(state)
    fired = []
    for cc in pending:
        if evaluate_conditions(cc.conditions, cc.logical_operator, ctx):
            outcome = apply_changes_checked(state, [cc.change])
            state = outcome.state
            errors.extend(outcome.errors)
            fired.append(FiredChange(cc.id, 0, state.settings.start_date))
    return state, project(state, config), fired


def _run_daily(
    state: BaselineState,
    pending: List[ConditionalChange],
    config: ProjectionConfig,
    errors: List[ProjectionError],
) -> Tuple[BaselineState, ProjectionResult, List[FiredChange]]:
    result = project(state, config)
    rows = result.calendar
    fired: List[FiredChange] = []

    balance = state.settings.starting_balance
    income = expense = 0.0
    i = 0
    while i < len(rows) and pending:
        ctx = EvaluationContext(
            balance=balance,
            income=income,
            expense=expense,
            transaction_count=len(state.entries()),
            projection_day=i,
            date=to_ymd(rows[i].date),
        )
        due = [cc for cc in pending if evaluate_conditions(cc.conditions, cc.logical_operator, ctx)]
        if due:
            for cc in due:
                pending.remove(cc)
                try:
                    change = _anchor_to_day(cc, rows[i].date)
                except UnsupportedOperationError as exc:
                    logger.warning("Skipping conditional change %s: %s", cc.id, exc)
                    errors.append(exc)
                    continue
                outcome = apply_changes_checked(state, [change])
                state = outcome.state
                errors.extend(outcome.errors)
                fired.append(FiredChange(cc.id, i, rows[i].date))
                logger.debug("Conditional change %s fired on day %d (%s)", cc.id, i, rows[i].date)

            # ========= SPLICE: keep days before i, re-project from i =========
            fresh = project(state, config)
            result = settle_calendar(rows[:i] + fresh.calendar[i:], state.settings.starting_balance)
            rows = result.calendar

        row = rows[i]
        balance = row.running
        income += row.income
        expense += row.expenses
        i += 1

    return state, result, fired


def run_scenario(
    state: BaselineState,
    scenario: Scenario,
    config: Optional[ProjectionConfig] = None,
) -> ScenarioRun:
    """
    Apply ``scenario`` to ``state`` and project the result.

    Ordered changes are applied first (errors collected per change), then the
    enabled conditional changes according to the configured evaluation mode.
    """
    cfg = config or ProjectionConfig()
    outcome = apply_changes_checked(state, scenario.changes)
    errors: List[ProjectionError] = list(outcome.errors)
    pending = _usable_conditionals(scenario, errors)

    if cfg.conditional_evaluation == "once":
        new_state, result, fired = _run_once(outcome.state, pending, cfg, errors)
    else:
        new_state, result, fired = _run_daily(outcome.state, pending, cfg, errors)

    return ScenarioRun(
        scenario_id=scenario.id,
        state=new_state,
        result=result,
        errors=tuple(errors),
        fired=tuple(fired),
    )


def run_scenarios(
    state: BaselineState,
    scenarios: Iterable[Scenario],
    config: Optional[ProjectionConfig] = None,
    *,
    max_workers: Optional[int] = None,
) -> Dict[str, ScenarioRun]:
    """Run independent scenarios in parallel; results keyed by scenario id, in input order."""
    cfg = config or ProjectionConfig()
    scenarios = list(scenarios)
    workers = max_workers or cfg.max_workers
    logger.debug("Running %d scenarios (max_workers=%s)", len(scenarios), workers)

    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = [(s.id, pool.submit(run_scenario, state, s, cfg)) for s in scenarios]
        return {sid: fut.result() for sid, fut in futures}
