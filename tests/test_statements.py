"""Tests for reading statements back out of a metadata dump.

Verifies that:
- statements_for_types applies type, schema, and table filters together
- Table filters also select objects that reference the table
- Results keep emission order
- Ranged reads past the end of the file raise ByteRangeError
- substitute_redirect_database only rewrites whole database names
- remove_active_role drops only the connected role
"""

import io

import pytest

from db_backup.errors import ByteRangeError
from db_backup.toc.models import MetadataEntry, Section, StatementWithType
from db_backup.toc.statements import (
    all_statements,
    read_byte_range,
    remove_active_role,
    statements_for_types,
    substitute_redirect_database,
)
from db_backup.toc.toc import TOC
from db_backup.toc.writer import ByteCountingWriter, write_statement


# (schema, name, object_type, reference_object, statement) in emission order
_PREDATA = [
    ("public", "t1", "TABLE", "", "CREATE TABLE public.t1 (i int);\n"),
    ("public", "t2", "TABLE", "", "CREATE TABLE public.t2 (j int);\n"),
    ("public", "t1_idx", "INDEX", "public.t1", "CREATE INDEX t1_idx ON public.t1 (i);\n"),
    ("public", "t2_trig", "TRIGGER", "public.t2", "CREATE TRIGGER t2_trig ...;\n"),
    ("hr", "t1", "TABLE", "", "CREATE TABLE hr.t1 (k int);\n"),
    ("public", "t1_check", "CONSTRAINT", "public.t1", "ALTER TABLE public.t1 ADD CONSTRAINT ...;\n"),
    ("public", "v1", "VIEW", "", "CREATE VIEW public.v1 AS SELECT 1;\n"),
]


def _build_dump() -> tuple[TOC, io.BytesIO]:
    """Write the sample predata section with a comment before each statement."""
    buffer = io.BytesIO()
    writer = ByteCountingWriter(buffer)
    toc = TOC()
    for schema_name, name, object_type, reference_object, statement in _PREDATA:
        writer.write(f"\n-- Name: {name}; Type: {object_type}\n")
        write_statement(
            writer, toc, Section.PREDATA, schema_name, name, object_type, statement,
            reference_object=reference_object,
        )
    return toc, io.BytesIO(buffer.getvalue())


def _names(statements: list[StatementWithType]) -> list[str]:
    return [f"{s.schema_name}.{s.name}" for s in statements]


def _statement(object_type: str, name: str, text: str) -> StatementWithType:
    return StatementWithType(schema_name="", name=name, object_type=object_type, statement=text)


# ------------------------------------------------------------------
# statements_for_types
# ------------------------------------------------------------------


class TestStatementsForTypes:
    """Verify combined type/schema/table filtering."""

    def test_no_filters_returns_everything_in_order(self):
        toc, dump = _build_dump()
        result = statements_for_types(toc, "predata", dump)
        assert _names(result) == [f"{s}.{n}" for s, n, *_ in _PREDATA]

    def test_statement_text_is_exact(self):
        toc, dump = _build_dump()
        result = statements_for_types(toc, "predata", dump)
        assert [s.statement for s in result] == [row[4] for row in _PREDATA]

    def test_include_types(self):
        toc, dump = _build_dump()
        result = statements_for_types(toc, "predata", dump, include_types=["TABLE"])
        assert _names(result) == ["public.t1", "public.t2", "hr.t1"]

    def test_exclude_types(self):
        toc, dump = _build_dump()
        result = statements_for_types(toc, "predata", dump, exclude_types=["TABLE", "VIEW"])
        assert _names(result) == ["public.t1_idx", "public.t2_trig", "public.t1_check"]

    def test_exclude_wins_over_include(self):
        toc, dump = _build_dump()
        result = statements_for_types(
            toc, "predata", dump, include_types=["TABLE", "INDEX"], exclude_types=["INDEX"]
        )
        assert _names(result) == ["public.t1", "public.t2", "hr.t1"]

    def test_include_schemas(self):
        toc, dump = _build_dump()
        result = statements_for_types(toc, "predata", dump, include_schemas=["hr"])
        assert _names(result) == ["hr.t1"]

    def test_include_tables_selects_table_and_dependents(self):
        """Entries named public.t1 or referencing public.t1 are selected, in order."""
        toc, dump = _build_dump()
        result = statements_for_types(toc, "predata", dump, include_tables=["public.t1"])
        assert _names(result) == ["public.t1", "public.t1_idx", "public.t1_check"]
        assert [s.object_type for s in result] == ["TABLE", "INDEX", "CONSTRAINT"]

    def test_include_tables_does_not_match_same_name_other_schema(self):
        toc, dump = _build_dump()
        result = statements_for_types(toc, "predata", dump, include_tables=["public.t1"])
        assert "hr.t1" not in _names(result)

    def test_include_tables_multiple(self):
        toc, dump = _build_dump()
        result = statements_for_types(
            toc, "predata", dump, include_tables=["public.t2", "hr.t1"]
        )
        assert _names(result) == ["public.t2", "public.t2_trig", "hr.t1"]

    def test_all_filters_combined(self):
        toc, dump = _build_dump()
        result = statements_for_types(
            toc, "predata", dump,
            include_types=["INDEX", "TRIGGER", "CONSTRAINT"],
            exclude_types=["CONSTRAINT"],
            include_schemas=["public"],
            include_tables=["public.t1"],
        )
        assert _names(result) == ["public.t1_idx"]

    def test_no_match_returns_empty_list(self):
        toc, dump = _build_dump()
        assert statements_for_types(toc, "predata", dump, include_tables=["public.nope"]) == []

    def test_empty_section_returns_empty_list(self):
        toc, dump = _build_dump()
        assert statements_for_types(toc, Section.POSTDATA, dump) == []

    def test_reference_object_carried_through(self):
        toc, dump = _build_dump()
        result = statements_for_types(toc, "predata", dump, include_types=["INDEX"])
        assert result[0].reference_object == "public.t1"


class TestAllStatements:
    """Verify the unfiltered variant."""

    def test_returns_every_entry_in_order(self):
        toc, dump = _build_dump()
        result = all_statements(toc, Section.PREDATA, dump)
        assert len(result) == len(_PREDATA)
        assert [s.statement for s in result] == [row[4] for row in _PREDATA]

    def test_file_handle_on_disk(self, tmp_path):
        path = tmp_path / "metadata.sql"
        toc = TOC()
        with ByteCountingWriter.open(path) as writer:
            writer.write("SET search_path = '';\n")
            write_statement(writer, toc, "global", "", "admin", "ROLE", "CREATE ROLE admin;\n")
        with open(path, "rb") as f:
            result = all_statements(toc, "global", f)
        assert result[0].statement == "CREATE ROLE admin;\n"


class TestByteRange:
    """Verify ranged reads."""

    def test_reads_exact_range(self):
        assert read_byte_range(io.BytesIO(b"0123456789"), 2, 5) == "234"

    def test_read_past_end_raises(self):
        with pytest.raises(ByteRangeError):
            read_byte_range(io.BytesIO(b"0123456789"), 8, 12)

    def test_entry_past_end_of_dump_raises(self):
        toc = TOC()
        toc.predata_entries.append(
            MetadataEntry(schema_name="s", name="t", object_type="TABLE", start_byte=0, end_byte=100)
        )
        with pytest.raises(ByteRangeError):
            all_statements(toc, "predata", io.BytesIO(b"short"))

    def test_undecodable_bytes_raise(self):
        with pytest.raises(ByteRangeError, match=r"Bytes \[0, 4\) are not valid utf-8"):
            read_byte_range(io.BytesIO(b"ab\xffd"), 0, 4)

    def test_corrupt_dump_raises(self):
        toc, dump = _build_dump()
        corrupt = bytearray(dump.getvalue())
        corrupt[toc.predata_entries[0].start_byte] = 0xFF
        with pytest.raises(ByteRangeError):
            all_statements(toc, "predata", io.BytesIO(bytes(corrupt)))


# ------------------------------------------------------------------
# Post-processing
# ------------------------------------------------------------------


class TestSubstituteRedirectDatabase:
    """Verify database renames only touch whole database names."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("CREATE DATABASE sales;", "CREATE DATABASE sales_copy;"),
            ("ALTER DATABASE sales OWNER TO admin;", "ALTER DATABASE sales_copy OWNER TO admin;"),
            ("ALTER DATABASE sales SET search_path TO public;",
             "ALTER DATABASE sales_copy SET search_path TO public;"),
            ("GRANT ALL ON DATABASE sales TO admin;", "GRANT ALL ON DATABASE sales_copy TO admin;"),
            ("REVOKE ALL ON DATABASE sales FROM public;", "REVOKE ALL ON DATABASE sales_copy FROM public;"),
            ("COMMENT ON DATABASE sales IS 'x';", "COMMENT ON DATABASE sales_copy IS 'x';"),
            ("CREATE DATABASE sales TEMPLATE template0;", "CREATE DATABASE sales_copy TEMPLATE template0;"),
        ],
    )
    def test_rewrites_terminated_name(self, text, expected):
        result = substitute_redirect_database([_statement("DATABASE", "sales", text)], "sales", "sales_copy")
        assert result[0].statement == expected

    def test_longer_identifier_untouched(self):
        """A database named sales2 is not renamed when redirecting sales."""
        text = "ALTER DATABASE sales2 OWNER TO admin;"
        result = substitute_redirect_database([_statement("DATABASE", "sales2", text)], "sales", "x")
        assert result[0].statement == text

    def test_rewrites_database_guc_and_metadata_types(self):
        statements = [
            _statement("DATABASE GUC", "sales", "ALTER DATABASE sales SET work_mem TO '1GB';"),
            _statement("DATABASE METADATA", "sales", "ALTER DATABASE sales OWNER TO admin;"),
        ]
        result = substitute_redirect_database(statements, "sales", "dev")
        assert result[0].statement == "ALTER DATABASE dev SET work_mem TO '1GB';"
        assert result[1].statement == "ALTER DATABASE dev OWNER TO admin;"

    def test_other_object_types_untouched(self):
        text = "COMMENT ON TABLE t IS 'copied from DATABASE sales;';"
        result = substitute_redirect_database([_statement("COMMENT", "t", text)], "sales", "dev")
        assert result[0].statement == text

    def test_special_characters_in_names(self):
        statements = [_statement("DATABASE", "a.b", 'ALTER DATABASE "a.b" OWNER TO admin;')]
        result = substitute_redirect_database(statements, '"a.b"', '"c\\d"')
        assert result[0].statement == 'ALTER DATABASE "c\\d" OWNER TO admin;'

    def test_inputs_not_mutated(self):
        original = _statement("DATABASE", "sales", "CREATE DATABASE sales;")
        substitute_redirect_database([original], "sales", "dev")
        assert original.statement == "CREATE DATABASE sales;"


class TestRemoveActiveRole:
    """Verify the connected role's statements are dropped."""

    def test_drops_active_role_only(self):
        statements = [
            _statement("ROLE", "gpadmin", "CREATE ROLE gpadmin;"),
            _statement("ROLE", "analyst", "CREATE ROLE analyst;"),
            _statement("DATABASE", "gpadmin", "CREATE DATABASE gpadmin;"),
        ]
        result = remove_active_role("gpadmin", statements)
        assert [(s.object_type, s.name) for s in result] == [("ROLE", "analyst"), ("DATABASE", "gpadmin")]

    def test_no_active_role_statement_keeps_all(self):
        statements = [_statement("ROLE", "analyst", "CREATE ROLE analyst;")]
        assert remove_active_role("gpadmin", statements) == statements
