"""Table-of-contents indexing for dump files.

Records where each statement and table lands inside a backup's dump
streams and reads selected statements back at restore time.

Usage:
    from db_backup.toc import TOC, SegmentTOC, load_toc, write_toc
    from db_backup.toc import ByteCountingWriter, write_statement
    from db_backup.toc import statements_for_types, all_statements
"""

from db_backup.toc.models import (
    AOEntry,
    IncrementalMetadata,
    MasterDataEntry,
    MetadataEntry,
    Section,
    SegmentDataEntry,
    StatementWithType,
)
from db_backup.toc.statements import (
    all_statements,
    read_byte_range,
    remove_active_role,
    statements_for_types,
    substitute_redirect_database,
)
from db_backup.toc.toc import (
    TOC,
    SegmentTOC,
    load_segment_toc,
    load_toc,
    write_segment_toc,
    write_toc,
)
from db_backup.toc.writer import ByteCountingWriter, write_statement

__all__ = [
    "AOEntry",
    "IncrementalMetadata",
    "MasterDataEntry",
    "MetadataEntry",
    "Section",
    "SegmentDataEntry",
    "StatementWithType",
    "TOC",
    "SegmentTOC",
    "load_toc",
    "write_toc",
    "load_segment_toc",
    "write_segment_toc",
    "ByteCountingWriter",
    "write_statement",
    "statements_for_types",
    "all_statements",
    "read_byte_range",
    "substitute_redirect_database",
    "remove_active_role",
]
