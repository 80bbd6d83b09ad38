"""
Scenario version snapshots and diffs.

Snapshots are immutable; recording one bumps the scenario's version counter and
appends to its history.  Restoring replaces the live change list only.
"""

from __future__ import annotations

import datetime as dt
import uuid
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .changes import Scenario, ScenarioChange, ScenarioVersion, VersionHistory


@dataclass(frozen=True)
class ModifiedChange:
    change_id: str
    old_change: ScenarioChange
    new_change: ScenarioChange


@dataclass(frozen=True)
class VersionDiff:
    from_version: ScenarioVersion
    to_version: ScenarioVersion
    changes_added: List[ScenarioChange] = field(default_factory=list)
    changes_removed: List[ScenarioChange] = field(default_factory=list)
    changes_modified: List[ModifiedChange] = field(default_factory=list)
    name_changed: bool = False
    description_changed: bool = False
    tags_changed: bool = False

    @property
    def is_empty(self) -> bool:
        return not (
            self.changes_added
            or self.changes_removed
            or self.changes_modified
            or self.name_changed
            or self.description_changed
            or self.tags_changed
        )


def create_version(
    scenario: Scenario,
    notes: Optional[str] = None,
    *,
    timestamp: Optional[dt.datetime] = None,
    version_id: Optional[str] = None,
) -> ScenarioVersion:
    """Snapshot ``scenario`` as version ``current_version_number + 1``."""
    return ScenarioVersion(
        id=version_id or str(uuid.uuid4()),
        scenario_id=scenario.id,
        version_number=scenario.current_version_number + 1,
        timestamp=timestamp or dt.datetime.now(dt.timezone.utc),
        name=scenario.name,
        description=scenario.description,
        changes=tuple(c.model_copy(deep=True) for c in scenario.changes),
        notes=notes,
        tags=scenario.tags,
    )


def initialize_history(scenario: Scenario) -> Tuple[Scenario, VersionHistory]:
    return record_version(scenario, None, "Initial version")


def record_version(
    scenario: Scenario,
    history: Optional[VersionHistory] = None,
    notes: Optional[str] = None,
) -> Tuple[Scenario, VersionHistory]:
    """Snapshot the scenario and return (bumped scenario, extended history)."""
    version = create_version(scenario, notes)
    previous = history.versions if history is not None else ()
    bumped = scenario.model_copy(update={"current_version_number": version.version_number})
    return bumped, VersionHistory(
        scenario_id=scenario.id,
        versions=previous + (version,),
        current_version_number=version.version_number,
    )


def restore_version(scenario: Scenario, version: ScenarioVersion) -> Scenario:
    """
    Replace the live changes, name and description with the snapshot's.

    The version counter is left alone; history is never rewritten.  Tags fall
    back to the live ones when the snapshot has none.
    """
    return scenario.model_copy(
        update={
            "name": version.name,
            "description": version.description,
            "changes": tuple(c.model_copy(deep=True) for c in version.changes),
            "tags": version.tags if version.tags is not None else scenario.tags,
        }
    )


def diff_versions(from_version: ScenarioVersion, to_version: ScenarioVersion) -> VersionDiff:
    """
    Compare two snapshots by change id.

    Ids only in ``to_version`` are added, ids only in ``from_version`` removed,
    shared ids whose contents differ modified.  A change removed and re-added
    under a new id shows up as both.
    """
    old_by_id = {c.id: c for c in from_version.changes}
    new_by_id = {c.id: c for c in to_version.changes}

    added = [c for c in to_version.changes if c.id not in old_by_id]
    removed = [c for c in from_version.changes if c.id not in new_by_id]
    modified = [
        ModifiedChange(c.id, c, new_by_id[c.id])
        for c in from_version.changes
        if c.id in new_by_id and new_by_id[c.id] != c
    ]

    return VersionDiff(
        from_version=from_version,
        to_version=to_version,
        changes_added=added,
        changes_removed=removed,
        changes_modified=modified,
        name_changed=from_version.name != to_version.name,
        description_changed=from_version.description != to_version.description,
        tags_changed=tuple(from_version.tags or ()) != tuple(to_version.tags or ()),
    )


def summarize_diff(diff: VersionDiff) -> str:
    parts = []
    if diff.name_changed:
        parts.append(f'Name changed from "{diff.from_version.name}" to "{diff.to_version.name}"')
    if diff.changes_added:
        parts.append(f"{len(diff.changes_added)} change(s) added")
    if diff.changes_removed:
        parts.append(f"{len(diff.changes_removed)} change(s) removed")
    if diff.changes_modified:
        parts.append(f"{len(diff.changes_modified)} change(s) modified")
    if diff.description_changed:
        parts.append("Description updated")
    if diff.tags_changed:
        parts.append("Tags updated")
    return ", ".join(parts) if parts else "No changes"
