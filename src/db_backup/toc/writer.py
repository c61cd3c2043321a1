"""Byte-counting dump writer.

TOC offsets are taken from the writer's running byte counter, so every
byte written to a dump stream must go through the same
``ByteCountingWriter``. One writer feeds one TOC; concurrent writers to
the same stream are not supported.

Usage:
    from db_backup.toc.models import Section
    from db_backup.toc.toc import TOC
    from db_backup.toc.writer import ByteCountingWriter, write_statement

    toc = TOC()
    with ByteCountingWriter.open("gpbackup_20240101120000_metadata.sql") as writer:
        writer.write("SET client_encoding = 'UTF8';\\n\\n")
        write_statement(
            writer, toc, Section.PREDATA,
            schema_name="public", name="orders", object_type="TABLE",
            statement="CREATE TABLE public.orders (id int);\\n",
        )
"""

from pathlib import Path
from typing import BinaryIO

from db_backup.toc.models import Section
from db_backup.toc.toc import TOC


class ByteCountingWriter:
    """Wraps a binary stream and tracks how many bytes have been written."""

    def __init__(self, stream: BinaryIO, encoding: str = "utf-8") -> None:
        self._stream = stream
        self._encoding = encoding
        self.byte_count = 0

    @classmethod
    def open(cls, path: str | Path) -> "ByteCountingWriter":
        """Create (or truncate) *path* and wrap it."""
        return cls(open(path, "wb"))

    def write(self, text: str) -> int:
        """Encode and write *text*, returning the number of bytes written."""
        data = text.encode(self._encoding)
        self._stream.write(data)
        self.byte_count += len(data)
        return len(data)

    def flush(self) -> None:
        self._stream.flush()

    def close(self) -> None:
        self._stream.close()

    def __enter__(self) -> "ByteCountingWriter":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


def write_statement(
    writer: ByteCountingWriter,
    toc: TOC,
    section: Section | str,
    schema_name: str,
    name: str,
    object_type: str,
    statement: str,
    reference_object: str = "",
) -> None:
    """Write *statement* to the dump and record its byte range in *toc*.

    Anything written between statements (comments, section headers) is
    left outside every entry.
    """
    start = writer.byte_count
    writer.write(statement)
    toc.add_metadata_entry(
        section, schema_name, name, object_type, reference_object, start, writer
    )
