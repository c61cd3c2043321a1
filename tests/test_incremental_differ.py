"""Tests for filter_tables_for_incremental change detection."""

from db_backup.incremental.differ import filter_tables_for_incremental
from db_backup.tables import Table
from db_backup.toc.models import AOEntry, IncrementalMetadata
from db_backup.toc.toc import TOC


def _toc(ao: dict[str, tuple[int, int]]) -> TOC:
    return TOC(
        incremental_metadata=IncrementalMetadata(
            ao={fqn: AOEntry(modcount=m, last_ddl_timestamp=d) for fqn, (m, d) in ao.items()}
        )
    )


T1 = Table(oid=1, schema_name="public", name="t1")
T2 = Table(oid=2, schema_name="public", name="t2")


def _fqns(tables: list[Table]) -> list[str]:
    return [t.fqn for t in tables]


class TestFilterTablesForIncremental:
    """Verify which tables an incremental backup captures again."""

    def test_unchanged_ao_table_skipped_heap_table_kept(self):
        reference = _toc({"public.t1": (5, 100)})
        current = _toc({"public.t1": (5, 100)})
        assert _fqns(filter_tables_for_incremental(reference, current, [T1, T2])) == ["public.t2"]

    def test_modcount_change_selects_table(self):
        reference = _toc({"public.t1": (5, 100)})
        current = _toc({"public.t1": (6, 100)})
        assert _fqns(filter_tables_for_incremental(reference, current, [T1, T2])) == [
            "public.t1",
            "public.t2",
        ]

    def test_ddl_timestamp_change_selects_table(self):
        """A rewrite without row changes still invalidates the old data."""
        reference = _toc({"public.t1": (5, 100)})
        current = _toc({"public.t1": (5, 200)})
        assert _fqns(filter_tables_for_incremental(reference, current, [T1, T2])) == [
            "public.t1",
            "public.t2",
        ]

    def test_ao_table_missing_from_reference_selected(self):
        reference = _toc({})
        current = _toc({"public.t1": (0, 0)})
        assert _fqns(filter_tables_for_incremental(reference, current, [T1])) == ["public.t1"]

    def test_non_ao_tables_always_selected(self):
        """Tables without current AO metadata are included even if the reference has some."""
        reference = _toc({"public.t1": (5, 100)})
        current = _toc({})
        assert _fqns(filter_tables_for_incremental(reference, current, [T1, T2])) == [
            "public.t1",
            "public.t2",
        ]

    def test_preserves_candidate_order(self):
        reference = _toc({"public.t1": (1, 1)})
        current = _toc({"public.t1": (2, 1)})
        assert _fqns(filter_tables_for_incremental(reference, current, [T2, T1])) == [
            "public.t2",
            "public.t1",
        ]

    def test_no_candidates(self):
        assert filter_tables_for_incremental(_toc({}), _toc({}), []) == []

    def test_returns_same_table_objects(self):
        result = filter_tables_for_incremental(_toc({}), _toc({}), [T1])
        assert result[0] is T1
