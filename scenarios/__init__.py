"""
Scenario layer: typed change models, the change applier, condition
evaluation, version snapshots and templates.
"""

from .applier import ApplyOutcome, apply_change, apply_changes, apply_changes_checked, parse_change, parse_changes
from .changes import (
    BulkAdjustment,
    Condition,
    ConditionalChange,
    DateRange,
    ExpenseAdjust,
    IncomeAdjust,
    Scenario,
    ScenarioChange,
    ScenarioVersion,
    SettingOverride,
    TransactionAdd,
    TransactionModify,
    TransactionRemove,
    VersionHistory,
)
from .conditions import EvaluationContext, context_from_state, evaluate_condition, evaluate_conditions
from .templates import (
    TEMPLATES,
    ScenarioTemplate,
    scenario_template,
    seasonal_templates,
    template_to_scenario,
    time_bound_template,
)
from .versions import (
    VersionDiff,
    create_version,
    diff_versions,
    initialize_history,
    record_version,
    restore_version,
    summarize_diff,
)

__all__ = [
    "ApplyOutcome",
    "apply_change",
    "apply_changes",
    "apply_changes_checked",
    "parse_change",
    "parse_changes",
    "BulkAdjustment",
    "Condition",
    "ConditionalChange",
    "DateRange",
    "ExpenseAdjust",
    "IncomeAdjust",
    "Scenario",
    "ScenarioChange",
    "ScenarioVersion",
    "SettingOverride",
    "TransactionAdd",
    "TransactionModify",
    "TransactionRemove",
    "VersionHistory",
    "EvaluationContext",
    "context_from_state",
    "evaluate_condition",
    "evaluate_conditions",
    "TEMPLATES",
    "ScenarioTemplate",
    "scenario_template",
    "seasonal_templates",
    "template_to_scenario",
    "time_bound_template",
    "VersionDiff",
    "create_version",
    "diff_versions",
    "initialize_history",
    "record_version",
    "restore_version",
    "summarize_diff",
]
