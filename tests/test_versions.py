import datetime as dt

from scenarios.changes import ExpenseAdjust, IncomeAdjust, Scenario
from scenarios.versions import (
    create_version,
    diff_versions,
    initialize_history,
    record_version,
    restore_version,
    summarize_diff,
)

TS = dt.datetime(2024, 1, 1, tzinfo=dt.timezone.utc)


def change(cid, pct=10):
    return ExpenseAdjust(id=cid, changes={"percent_change": pct})


def version(changes, number=1, **kw):
    scenario = Scenario(id="s", name=kw.pop("name", "Plan"), changes=tuple(changes), **kw)
    return create_version(scenario.model_copy(update={"current_version_number": number - 1}), timestamp=TS)


def test_added_change_is_reported():
    c1, c2 = change("c1"), change("c2")
    diff = diff_versions(version([c1]), version([c1, c2], 2))
    assert diff.changes_added == [c2]
    assert diff.changes_removed == []
    assert diff.changes_modified == []
    assert summarize_diff(diff) == "1 change(s) added"


def test_removed_and_modified():
    a = version([change("c1"), change("c2")])
    b = version([change("c1", pct=20)], 2)
    diff = diff_versions(a, b)
    assert [c.id for c in diff.changes_removed] == ["c2"]
    assert len(diff.changes_modified) == 1
    assert diff.changes_modified[0].change_id == "c1"
    assert diff.changes_modified[0].new_change.changes.percent_change == 20


def test_readded_with_new_id_is_removed_and_added():
    diff = diff_versions(version([change("c1")]), version([change("c9")], 2))
    assert [c.id for c in diff.changes_added] == ["c9"]
    assert [c.id for c in diff.changes_removed] == ["c1"]


def test_same_type_different_variant_is_modified():
    a = version([change("c1")])
    b = version([IncomeAdjust(id="c1", changes={"percent_change": 10})], 2)
    assert len(diff_versions(a, b).changes_modified) == 1


def test_metadata_flags():
    a = version([], name="Plan", description="old", tags=("q1",))
    b = version([], 2, name="Plan B", description="new", tags=("q1", "q2"))
    diff = diff_versions(a, b)
    assert diff.name_changed and diff.description_changed and diff.tags_changed
    assert summarize_diff(diff) == 'Name changed from "Plan" to "Plan B", Description updated, Tags updated'


def test_identical_versions():
    a = version([change("c1")])
    diff = diff_versions(a, a)
    assert diff.is_empty
    assert summarize_diff(diff) == "No changes"


def test_missing_tags_equal_empty_tags():
    assert not diff_versions(version([], tags=None), version([], 2, tags=())).tags_changed


def test_version_numbering_and_history():
    scenario = Scenario(id="s", name="Plan", changes=(change("c1"),))
    scenario, history = initialize_history(scenario)
    assert scenario.current_version_number == 1
    assert history.versions[0].notes == "Initial version"

    scenario = scenario.model_copy(update={"changes": scenario.changes + (change("c2"),)})
    scenario, history = record_version(scenario, history, "added c2")
    assert scenario.current_version_number == 2
    assert [v.version_number for v in history.versions] == [1, 2]
    assert history.current_version_number == 2


def test_restore_keeps_counter_and_history():
    scenario = Scenario(id="s", name="Plan", tags=("a",), changes=(change("c1"),))
    scenario, history = initialize_history(scenario)
    edited = scenario.model_copy(update={"name": "Edited", "changes": (change("c2"),)})
    edited, history = record_version(edited, history)

    restored = restore_version(edited, history.versions[0])
    assert [c.id for c in restored.changes] == ["c1"]
    assert restored.name == "Plan"
    assert restored.current_version_number == 2
    assert len(history.versions) == 2


def test_snapshot_is_independent_of_scenario():
    scenario = Scenario(id="s", changes=(change("c1"),))
    snap = create_version(scenario, "note", timestamp=TS, version_id="v1")
    scenario = scenario.model_copy(update={"changes": ()})
    assert [c.id for c in snap.changes] == ["c1"]
    assert snap.id == "v1" and snap.notes == "note" and snap.version_number == 1
