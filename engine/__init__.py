"""
Projection engine: recurrence evaluation, amount resolution, the daily
calendar, projection and the scenario runner.
"""

from .amounts import base_amount, escalation_factor, iter_occurrence_amounts, resolve_amount
from .calendar import CalendarRow, Detail, build_calendar
from .projection import ProjectionResult, project, settle_calendar
from .recurrence import estimate_occurrences_per_week, fires, iter_occurrences, next_occurrence
from .runner import FiredChange, ScenarioRun, run_scenario, run_scenarios

__all__ = [
    "base_amount",
    "escalation_factor",
    "iter_occurrence_amounts",
    "resolve_amount",
    "CalendarRow",
    "Detail",
    "build_calendar",
    "ProjectionResult",
    "project",
    "settle_calendar",
    "estimate_occurrences_per_week",
    "fires",
    "iter_occurrences",
    "next_occurrence",
    "FiredChange",
    "ScenarioRun",
    "run_scenario",
    "run_scenarios",
]
