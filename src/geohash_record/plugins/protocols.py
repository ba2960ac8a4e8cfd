"""Plugin protocols.

These define the contracts the batch processor relies on. The record
reader and writer are injected collaborators: the core never parses or
serializes bytes itself, it only sees Record sequences.

Protocols are for type checking. Built-in plugins subclass the base
classes in plugins/base.py, which satisfy these protocols.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from geohash_record.contracts import Record, RecordResult, RecordSchema


@runtime_checkable
class RecordReaderProtocol(Protocol):
    """Turns one raw input unit into a batch of records.

    Attributes:
        name: Registered plugin name
    """

    name: str

    def read_records(self, raw: bytes, schema: RecordSchema | None = None) -> list[Record]:
        """Parse raw bytes into records sharing one schema.

        Args:
            raw: Complete input unit
            schema: Schema to attach to every record. Readers fall back to a
                dynamic schema when None.

        Raises:
            RecordReaderError: If the input cannot be parsed. The whole
                batch is aborted before any record is transformed.
        """
        ...

    def close(self) -> None:
        """Release resources held by the reader."""
        ...


@runtime_checkable
class RecordWriterProtocol(Protocol):
    """Serializes one emitted batch of records."""

    name: str

    def write_records(self, records: Sequence[Record]) -> bytes:
        """Serialize records to bytes.

        Raises:
            RecordWriterError: If a record cannot be serialized.
        """
        ...

    def close(self) -> None:
        """Release resources held by the writer."""
        ...


@runtime_checkable
class RecordTransformProtocol(Protocol):
    """Transforms one record and reports the outcome as data."""

    name: str
    plugin_version: str

    def process(self, record: Record) -> RecordResult:
        """Transform a record. Must not raise for bad record data."""
        ...

    def close(self) -> None:
        """Release resources held by the transform."""
        ...
