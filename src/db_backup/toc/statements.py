"""Read statements back out of a metadata dump using its TOC.

Statement text is fetched with ranged reads on a caller-supplied binary
file handle, so restoring a subset of objects never re-parses the whole
dump. Results always come back in emission order, which is also the
order they must be replayed in.

Usage:
    from db_backup.toc.statements import statements_for_types
    from db_backup.toc.toc import load_toc

    toc = load_toc("gpbackup_20240101120000_toc.json")
    with open("gpbackup_20240101120000_metadata.sql", "rb") as f:
        statements = statements_for_types(
            toc, "predata", f,
            include_types=[], exclude_types=["INDEX"],
            include_schemas=["public"], include_tables=["public.orders"],
        )
"""

import re
from typing import BinaryIO

from db_backup.errors import ByteRangeError
from db_backup.filters import FilterSet
from db_backup.toc.models import MetadataEntry, Section, StatementWithType
from db_backup.toc.toc import TOC

# Object types whose statements name the database itself
DATABASE_OBJECT_TYPES = frozenset({"DATABASE", "DATABASE GUC", "DATABASE METADATA"})

# Tokens that may directly follow a database name in those statements
_DATABASE_NAME_TERMINATORS = (";", " OWNER", " SET", " TO", " FROM", " IS", " TEMPLATE")


def read_byte_range(file: BinaryIO, start: int, end: int, encoding: str = "utf-8") -> str:
    """Read ``[start, end)`` from *file* and decode it.

    Raises:
        ByteRangeError: If the file ends before *end* or the range does not
            decode as *encoding*.
    """
    file.seek(start)
    data = file.read(end - start)
    if len(data) != end - start:
        raise ByteRangeError(
            f"Requested bytes [{start}, {end}) but file ends at byte {start + len(data)}"
        )
    try:
        return data.decode(encoding)
    except UnicodeDecodeError as e:
        raise ByteRangeError(f"Bytes [{start}, {end}) are not valid {encoding}") from e


def _read_statement(entry: MetadataEntry, file: BinaryIO) -> StatementWithType:
    return StatementWithType(
        schema_name=entry.schema_name,
        name=entry.name,
        object_type=entry.object_type,
        reference_object=entry.reference_object,
        statement=read_byte_range(file, entry.start_byte, entry.end_byte),
    )


def statements_for_types(
    toc: TOC,
    section: Section | str,
    file: BinaryIO,
    include_types: list[str] | None = None,
    exclude_types: list[str] | None = None,
    include_schemas: list[str] | None = None,
    include_tables: list[str] | None = None,
) -> list[StatementWithType]:
    """Return the statements of *section* that pass every filter.

    An entry is selected when all of the following hold:

    - its object type is in *include_types* (empty = all types) and not
      in *exclude_types*;
    - its schema is in *include_schemas* (empty = all schemas);
    - *include_tables* is empty, or the entry's own FQN is in it, or its
      ``reference_object`` is in it. The last case pulls in indexes,
      triggers and other objects that belong to a selected table.

    Args:
        toc: Loaded TOC of the backup.
        section: Section to read (``"global"``, ``"predata"``, ...).
        file: Binary handle on the section's metadata file.
        include_types: Object types to keep.
        exclude_types: Object types to drop even if included.
        include_schemas: Schemas to keep.
        include_tables: Table FQNs to keep.

    Returns:
        Matching statements in emission order. Empty when nothing matches.

    Raises:
        ByteRangeError: If an entry points past the end of *file*.
    """
    include_type_set = FilterSet.include(include_types)
    exclude_type_set = FilterSet.exclude(exclude_types)
    schema_set = FilterSet.include(include_schemas)
    table_set = FilterSet.include(include_tables)

    statements: list[StatementWithType] = []
    for entry in toc.entries_for(section):
        if not (include_type_set.matches(entry.object_type) and exclude_type_set.matches(entry.object_type)):
            continue
        if not schema_set.matches(entry.schema_name):
            continue
        if not (table_set.is_empty or entry.fqn in table_set or entry.reference_object in table_set):
            continue
        statements.append(_read_statement(entry, file))
    return statements


def all_statements(toc: TOC, section: Section | str, file: BinaryIO) -> list[StatementWithType]:
    """Return every statement of *section* in emission order."""
    return [_read_statement(entry, file) for entry in toc.entries_for(section)]


def substitute_redirect_database(
    statements: list[StatementWithType], old_name: str, new_name: str
) -> list[StatementWithType]:
    """Point database-level statements at *new_name* instead of *old_name*.

    Only ``DATABASE <old_name>`` followed by ``;`` or one of the keywords
    ``OWNER``, ``SET``, ``TO``, ``FROM``, ``IS``, ``TEMPLATE`` is rewritten,
    so identifiers that merely contain the old name are left alone.
    Statements of other object types pass through unchanged.

    Example:
        >>> stmt = StatementWithType(
        ...     schema_name="", name="sales", object_type="DATABASE",
        ...     statement="ALTER DATABASE sales OWNER TO admin;",
        ... )
        >>> substitute_redirect_database([stmt], "sales", "sales_copy")[0].statement
        'ALTER DATABASE sales_copy OWNER TO admin;'
    """
    terminators = "|".join(re.escape(t) for t in _DATABASE_NAME_TERMINATORS)
    pattern = re.compile(f"DATABASE {re.escape(old_name)}({terminators})")
    replacement = f"DATABASE {new_name}"

    result: list[StatementWithType] = []
    for statement in statements:
        if statement.object_type in DATABASE_OBJECT_TYPES:
            text = pattern.sub(lambda m: replacement + m.group(1), statement.statement)
            statement = statement.model_copy(update={"statement": text})
        result.append(statement)
    return result


def remove_active_role(active_user: str, statements: list[StatementWithType]) -> list[StatementWithType]:
    """Drop ``ROLE`` statements for the role the restore session is connected as."""
    return [
        statement
        for statement in statements
        if not (statement.object_type == "ROLE" and statement.name == active_user)
    ]
