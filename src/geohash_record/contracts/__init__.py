"""Shared contracts for geohash-record.

This package defines the types that cross subsystem boundaries:
enums, errors, the record schema, the record container, and results.

Import from here, not from the submodules, in code outside contracts/.
"""

from geohash_record.contracts.enums import (
    BatchDisposition,
    GeohashFormat,
    ProcessingMode,
    Relationship,
    RouterState,
    RoutingStrategy,
    TransformOutcome,
)
from geohash_record.contracts.errors import (
    EmptyGeohashError,
    GeohashCodecError,
    GeohashRecordError,
    InvalidCoordinateError,
    InvalidGeohashCharacterError,
    InvalidPrecisionError,
    InvalidRecordPathError,
    PathWriteError,
    RecordReaderError,
    RecordWriterError,
    RouterStateError,
    TransformErrorReason,
    TransformSuccessReason,
)
from geohash_record.contracts.record import Record
from geohash_record.contracts.results import BatchResult, RecordResult
from geohash_record.contracts.schema import FieldDefinition, RecordSchema

__all__ = [
    "BatchDisposition",
    "BatchResult",
    "EmptyGeohashError",
    "FieldDefinition",
    "GeohashCodecError",
    "GeohashFormat",
    "GeohashRecordError",
    "InvalidCoordinateError",
    "InvalidGeohashCharacterError",
    "InvalidPrecisionError",
    "InvalidRecordPathError",
    "PathWriteError",
    "ProcessingMode",
    "Record",
    "RecordReaderError",
    "RecordResult",
    "RecordSchema",
    "RecordWriterError",
    "Relationship",
    "RouterState",
    "RouterStateError",
    "RoutingStrategy",
    "TransformErrorReason",
    "TransformOutcome",
    "TransformSuccessReason",
]
