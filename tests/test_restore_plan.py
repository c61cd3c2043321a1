"""Tests for restore plan maintenance across an incremental chain."""

from db_backup.history.models import RestorePlanEntry
from db_backup.incremental.restore_plan import full_backup_restore_plan, populate_restore_plan
from db_backup.tables import Table


def _tables(*names: str) -> list[Table]:
    return [Table(schema_name="public", name=n) for n in names]


def _plan(*entries: tuple[str, list[str]]) -> list[RestorePlanEntry]:
    return [
        RestorePlanEntry(timestamp=ts, table_fqns=[f"public.{n}" for n in names])
        for ts, names in entries
    ]


def _as_tuples(plan: list[RestorePlanEntry]) -> list[tuple[str, list[str]]]:
    return [(e.timestamp, [fqn.split(".", 1)[1] for fqn in e.table_fqns]) for e in plan]


class TestPopulateRestorePlan:
    """Verify superseded and dropped tables leave older entries."""

    def test_changed_table_moves_to_new_entry(self):
        plan = _plan(("T0", ["a", "b", "c"]))
        result = populate_restore_plan(_tables("b"), plan, _tables("a", "b", "c"), "T1")
        assert _as_tuples(result) == [("T0", ["a", "c"]), ("T1", ["b"])]

    def test_dropped_table_removed(self):
        plan = _plan(("T0", ["a", "b"]))
        result = populate_restore_plan([], plan, _tables("a"), "T1")
        assert _as_tuples(result) == [("T0", ["a"]), ("T1", [])]

    def test_each_entry_pruned_independently(self):
        plan = _plan(("T0", ["a", "b"]), ("T1", ["c", "d"]))
        result = populate_restore_plan(_tables("a", "d"), plan, _tables("a", "b", "c", "d"), "T2")
        assert _as_tuples(result) == [("T0", ["b"]), ("T1", ["c"]), ("T2", ["a", "d"])]

    def test_new_entry_preserves_input_order(self):
        result = populate_restore_plan(_tables("z", "a", "m"), [], _tables("a", "m", "z"), "T0")
        assert _as_tuples(result) == [("T0", ["z", "a", "m"])]

    def test_each_live_table_in_at_most_one_entry(self):
        plan = _plan(("T0", ["a", "c"]), ("T1", ["b"]))
        result = populate_restore_plan(_tables("c"), plan, _tables("a", "b", "c"), "T2")
        seen = [fqn for e in result for fqn in e.table_fqns]
        assert sorted(seen) == ["public.a", "public.b", "public.c"]

    def test_empty_all_tables_clears_old_entries(self):
        plan = _plan(("T0", ["a"]))
        result = populate_restore_plan([], plan, [], "T1")
        assert _as_tuples(result) == [("T0", []), ("T1", [])]

    def test_input_plan_not_mutated(self):
        plan = _plan(("T0", ["a", "b", "c"]))
        populate_restore_plan(_tables("b"), plan, _tables("a", "c"), "T1")
        assert _as_tuples(plan) == [("T0", ["a", "b", "c"])]

    def test_reapplying_appends_duplicate_timestamp(self):
        """The update is a one-shot transition, not idempotent."""
        tables = _tables("a")
        once = populate_restore_plan(tables, [], tables, "T1")
        twice = populate_restore_plan(tables, once, tables, "T1")
        assert [e.timestamp for e in twice] == ["T1", "T1"]


class TestFullBackupRestorePlan:
    """Verify a full backup's plan holds every table."""

    def test_single_entry_with_all_tables(self):
        result = full_backup_restore_plan(_tables("a", "b"), "T0")
        assert _as_tuples(result) == [("T0", ["a", "b"])]
