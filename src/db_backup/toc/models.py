"""Pydantic models for TOC entries.

This module contains the record types stored in TOC artifacts:
- Metadata entries: MetadataEntry (one emitted statement's byte range)
- Data entries: MasterDataEntry (coordinator), SegmentDataEntry (segment)
- Incremental metadata: AOEntry, IncrementalMetadata
- Extraction result: StatementWithType

The TOC containers themselves live in db_backup.toc.toc.
"""

from enum import Enum

from pydantic import BaseModel, Field, model_validator


class Section(str, Enum):
    """Ordered metadata sections of a backup."""

    GLOBAL = "global"
    PREDATA = "predata"
    POSTDATA = "postdata"
    STATISTICS = "statistics"


# ============================================================================
# Metadata Entries
# ============================================================================


class MetadataEntry(BaseModel):
    """Location of one statement inside a section's dump stream.

    The range is half-open: ``[start_byte, end_byte)``.

    Example:
        >>> entry = MetadataEntry(
        ...     schema_name="public", name="orders", object_type="TABLE",
        ...     start_byte=0, end_byte=42,
        ... )
        >>> entry.fqn
        'public.orders'
    """

    schema_name: str
    name: str
    object_type: str
    reference_object: str = ""  # owning table for indexes, triggers, etc.
    start_byte: int = Field(ge=0)
    end_byte: int

    @model_validator(mode="after")
    def _check_range(self) -> "MetadataEntry":
        if self.end_byte <= self.start_byte:
            raise ValueError(
                f"end_byte ({self.end_byte}) must be greater than "
                f"start_byte ({self.start_byte})"
            )
        return self

    @property
    def fqn(self) -> str:
        return f"{self.schema_name}.{self.name}"


class StatementWithType(BaseModel):
    """A statement read back from a dump file, with its TOC identity."""

    schema_name: str
    name: str
    object_type: str
    reference_object: str = ""
    statement: str


# ============================================================================
# Data Entries
# ============================================================================


class MasterDataEntry(BaseModel):
    """Per-table data placement recorded on the coordinator."""

    schema_name: str
    name: str
    oid: int
    attribute_string: str = ""  # column list used by COPY, e.g. "(id, total)"
    rows_copied: int = 0

    @property
    def fqn(self) -> str:
        return f"{self.schema_name}.{self.name}"


class SegmentDataEntry(BaseModel):
    """Byte range of one table's rows inside a segment's data file."""

    start_byte: int = Field(ge=0)
    end_byte: int

    @model_validator(mode="after")
    def _check_range(self) -> "SegmentDataEntry":
        # A table with no rows on a segment has an empty range
        if self.end_byte < self.start_byte:
            raise ValueError(
                f"end_byte ({self.end_byte}) precedes start_byte ({self.start_byte})"
            )
        return self


# ============================================================================
# Incremental Metadata
# ============================================================================


class AOEntry(BaseModel):
    """Change counters of an append-optimized table.

    ``AOEntry()`` (both fields ``None``) stands for "not recorded" and
    compares unequal to every recorded entry.
    """

    modcount: int | None = None
    last_ddl_timestamp: int | None = None


class IncrementalMetadata(BaseModel):
    """AO change counters keyed by table FQN."""

    ao: dict[str, AOEntry] = Field(default_factory=dict)
