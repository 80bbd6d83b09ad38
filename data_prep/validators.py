"""
Data quality validation for baseline states and scenario changes.

Catches problems early, before a state is projected or a change applied:
- Duplicate ids
- Entries with a zero amount
- Recurrence windows that miss the projection window
- Change targets that do not exist
- Empty setting overrides
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import List

from core.models import BaselineState
from core.schema import CHANGE_TYPES
from scenarios.changes import ScenarioChange


@dataclass
class ValidationResult:
    """Collects all validation warnings/errors for a state or change."""
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def summary(self) -> str:
        lines = []
        if self.errors:
            lines.append(f"ERRORS ({len(self.errors)}):")
            for e in self.errors:
                lines.append(f"  ✗ {e}")
        if self.warnings:
            lines.append(f"WARNINGS ({len(self.warnings)}):")
            for w in self.warnings:
                lines.append(f"  ⚠ {w}")
        if not lines:
            lines.append("✓ All checks passed.")
        return "\n".join(lines)


def validate_state(state: BaselineState) -> ValidationResult:
    """
    Run all checks on a baseline state.
    Errors block projection; warnings are informational.
    """
    result = ValidationResult()

    if state is None or state.settings is None:
        result.errors.append("Settings are missing.")
        return result  # nothing else is meaningful without a window

    settings = state.settings
    entries = state.entries()

    # --- Ids ---
    dup = [i for i, n in Counter(e.id for e in entries).items() if n > 1]
    if dup:
        result.errors.append(f"Duplicate entry ids: {sorted(dup)}")

    # --- Amounts ---
    zero = [e.id for e in entries if not e.amount]
    if zero:
        result.warnings.append(f"{len(zero)} entries have a zero amount and will not post.")

    # --- Dates ---
    for e in entries:
        if e.recurring:
            rule = e.rule
            if rule.end_date < settings.start_date or rule.start_date > settings.end_date:
                result.warnings.append(f"{e.id}: recurrence window lies outside the projection.")
            if rule.frequency == "once" and rule.on_date is None:
                result.warnings.append(f"{e.id}: 'once' rule has no on_date and never fires.")
            if rule.frequency in ("weekly", "biweekly") and not rule.day_of_week:
                result.warnings.append(f"{e.id}: {rule.frequency} rule has no weekdays.")
        elif e.date is None:
            result.errors.append(f"{e.id}: one-off transaction has no date.")
        elif not (settings.start_date <= e.date <= settings.end_date):
            result.warnings.append(f"{e.id}: dated {e.date}, outside the projection.")

    outside = [a for a in state.adjustments if not (settings.start_date <= a.date <= settings.end_date)]
    if outside:
        result.warnings.append(f"{len(outside)} adjustments fall outside the projection.")

    return result


def validate_change(change: ScenarioChange, state: BaselineState) -> ValidationResult:
    """Check a change against the state it is about to be applied to."""
    result = ValidationResult()
    kind = getattr(change, "type", None)

    if kind in ("transaction_remove", "transaction_modify"):
        if state.find(change.target_id) is None:
            msg = f"Transaction with ID {change.target_id} not found"
            # removing something absent is a no-op, modifying it is not
            (result.errors if kind == "transaction_modify" else result.warnings).append(msg)
        if kind == "transaction_modify":
            payload = change.changes
            if payload.frequency is not None:
                result.errors.append("Frequency changes are not supported.")
            if payload.amount is None and payload.amount_multiplier is None and payload.date is None:
                result.warnings.append("Modification changes nothing.")
            target = state.find(change.target_id)
            if payload.date is not None and target is not None and target.recurring:
                result.errors.append("A recurring entry cannot be moved to a single date.")

    elif kind in ("bulk_adjustment", "income_adjust", "expense_adjust"):
        if change.changes.percent_change == 0:
            result.warnings.append("Percentage change of 0 has no effect.")

    elif kind == "setting_override":
        payload = change.changes
        start = payload.start_date or state.settings.start_date
        end = payload.end_date or state.settings.end_date
        if start > end:
            result.errors.append(f"Override would place start {start} after end {end}.")

    elif kind not in CHANGE_TYPES:
        result.errors.append(f"Unknown change type {kind!r}.")

    return result
