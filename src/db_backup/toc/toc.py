"""Table-of-contents containers for coordinator and segment dump files.

A ``TOC`` is built once while a backup streams statements into its
metadata file, written at backup completion, and made read-only. At
restore time (or as the reference snapshot of a later incremental
backup) it is loaded and never mutated.

Usage:
    from db_backup.toc.toc import TOC, load_toc, write_toc

    toc = TOC()
    toc.add_predata_entry("public", "orders", "TABLE", "", start, writer)
    toc.add_master_data_entry("public", "orders", 16384, "(id, total)", 1200)
    write_toc(toc, "gpbackup_20240101120000_toc.json")

    toc = load_toc("gpbackup_20240101120000_toc.json")
    entries = toc.data_entries_matching(include_schemas=["public"], include_tables=[])
"""

from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from db_backup.artifacts import read_artifact, write_artifact
from db_backup.errors import ByteRangeError, InvalidEntryError
from db_backup.filters import FilterSet
from db_backup.toc.models import (
    IncrementalMetadata,
    MasterDataEntry,
    MetadataEntry,
    Section,
    SegmentDataEntry,
)

if TYPE_CHECKING:
    from db_backup.toc.writer import ByteCountingWriter

_SECTION_FIELDS: dict[Section, str] = {
    Section.GLOBAL: "global_entries",
    Section.PREDATA: "predata_entries",
    Section.POSTDATA: "postdata_entries",
    Section.STATISTICS: "statistics_entries",
}


class TOC(BaseModel):
    """Byte-range index over a backup's metadata stream plus its data entries."""

    global_entries: list[MetadataEntry] = Field(default_factory=list)
    predata_entries: list[MetadataEntry] = Field(default_factory=list)
    postdata_entries: list[MetadataEntry] = Field(default_factory=list)
    statistics_entries: list[MetadataEntry] = Field(default_factory=list)
    data_entries: list[MasterDataEntry] = Field(default_factory=list)
    incremental_metadata: IncrementalMetadata = Field(default_factory=IncrementalMetadata)

    # ------------------------------------------------------------------
    # Sections
    # ------------------------------------------------------------------

    def entries_for(self, section: Section | str) -> list[MetadataEntry]:
        """Return the ordered entry list for *section*.

        Raises:
            ValueError: If *section* is not a known section name.
        """
        return getattr(self, _SECTION_FIELDS[Section(section)])

    def validate_ranges(self, section: Section | str, file_length: int) -> None:
        """Check that every entry of *section* lies inside a file of *file_length* bytes.

        Raises:
            ByteRangeError: On the first entry extending past the end.
        """
        for entry in self.entries_for(section):
            if entry.end_byte > file_length:
                raise ByteRangeError(
                    f"{Section(section).value} entry {entry.fqn} ends at byte "
                    f"{entry.end_byte}, past end of file ({file_length} bytes)"
                )

    # ------------------------------------------------------------------
    # Building
    # ------------------------------------------------------------------

    def add_metadata_entry(
        self,
        section: Section | str,
        schema_name: str,
        name: str,
        object_type: str,
        reference_object: str,
        start: int,
        writer: "ByteCountingWriter",
    ) -> None:
        """Record a statement that was just written to *writer*.

        The end offset is the writer's byte count at call time, so call
        this immediately after the statement's bytes are written.

        Raises:
            InvalidEntryError: If the statement is empty or starts before
                the previous entry of the section ends.
        """
        entries = self.entries_for(section)
        end = writer.byte_count

        if end <= start:
            raise InvalidEntryError(
                f"Empty {object_type} entry for {schema_name}.{name}: "
                f"start={start}, end={end}"
            )
        if entries and start < entries[-1].end_byte:
            raise InvalidEntryError(
                f"{object_type} entry for {schema_name}.{name} starts at {start}, "
                f"inside previous entry ending at {entries[-1].end_byte}"
            )

        entries.append(
            MetadataEntry(
                schema_name=schema_name,
                name=name,
                object_type=object_type,
                reference_object=reference_object,
                start_byte=start,
                end_byte=end,
            )
        )

    def add_global_entry(
        self, schema_name: str, name: str, object_type: str, start: int, writer: "ByteCountingWriter"
    ) -> None:
        self.add_metadata_entry(Section.GLOBAL, schema_name, name, object_type, "", start, writer)

    def add_predata_entry(
        self,
        schema_name: str,
        name: str,
        object_type: str,
        reference_object: str,
        start: int,
        writer: "ByteCountingWriter",
    ) -> None:
        self.add_metadata_entry(
            Section.PREDATA, schema_name, name, object_type, reference_object, start, writer
        )

    def add_postdata_entry(
        self,
        schema_name: str,
        name: str,
        object_type: str,
        reference_object: str,
        start: int,
        writer: "ByteCountingWriter",
    ) -> None:
        self.add_metadata_entry(
            Section.POSTDATA, schema_name, name, object_type, reference_object, start, writer
        )

    def add_statistics_entry(
        self, schema_name: str, name: str, object_type: str, start: int, writer: "ByteCountingWriter"
    ) -> None:
        self.add_metadata_entry(Section.STATISTICS, schema_name, name, object_type, "", start, writer)

    def add_master_data_entry(
        self,
        schema_name: str,
        name: str,
        oid: int,
        attribute_string: str,
        rows_copied: int,
    ) -> None:
        self.data_entries.append(
            MasterDataEntry(
                schema_name=schema_name,
                name=name,
                oid=oid,
                attribute_string=attribute_string,
                rows_copied=rows_copied,
            )
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def data_entries_matching(
        self,
        include_schemas: list[str] | None = None,
        include_tables: list[str] | None = None,
    ) -> list[MasterDataEntry]:
        """Select data entries by schema and table FQN.

        An empty (or ``None``) filter matches every entry.

        Example:
            >>> toc = TOC()
            >>> toc.add_master_data_entry("public", "orders", 1, "", 0)
            >>> toc.add_master_data_entry("hr", "staff", 2, "", 0)
            >>> [e.fqn for e in toc.data_entries_matching(["hr"], [])]
            ['hr.staff']
        """
        schema_set = FilterSet.include(include_schemas)
        table_set = FilterSet.include(include_tables)
        return [
            entry
            for entry in self.data_entries
            if schema_set.matches(entry.schema_name) and table_set.matches(entry.fqn)
        ]


class SegmentTOC(BaseModel):
    """Per-segment map from table oid to its byte range in the segment data file."""

    last_byte_read: int = 0
    data_entries: dict[int, SegmentDataEntry] = Field(default_factory=dict)

    def add_segment_data_entry(self, oid: int, start_byte: int, end_byte: int) -> None:
        self.data_entries[oid] = SegmentDataEntry(start_byte=start_byte, end_byte=end_byte)
        self.last_byte_read = max(self.last_byte_read, end_byte)

    def get_data_entry(self, oid: int) -> SegmentDataEntry:
        """Look up the data range for *oid*.

        Raises:
            KeyError: If the segment holds no data for *oid*.
        """
        try:
            return self.data_entries[oid]
        except KeyError:
            raise KeyError(f"No data entry for oid {oid} in segment TOC") from None


# ============================================================================
# Persistence
# ============================================================================


def write_toc(toc: TOC, path: str | Path, read_only: bool = True) -> None:
    """Write *toc* to *path* and (by default) make the file read-only."""
    write_artifact(toc, path, read_only=read_only)


def load_toc(path: str | Path) -> TOC:
    """Load a TOC artifact.

    Raises:
        ArtifactError: If the file is missing or malformed.
    """
    return read_artifact(path, TOC)


def write_segment_toc(toc: SegmentTOC, path: str | Path, read_only: bool = True) -> None:
    write_artifact(toc, path, read_only=read_only)


def load_segment_toc(path: str | Path) -> SegmentTOC:
    return read_artifact(path, SegmentTOC)
