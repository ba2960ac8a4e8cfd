# src/geohash_record/testing/__init__.py
"""Test infrastructure for geohash-record.

Factories for constructing production types with sensible defaults.
When a backbone type's constructor changes, update the factory here.
Tests that use factories need ZERO changes.

Usage:
    from geohash_record.testing import make_record, make_schema, make_router
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Literal

from geohash_record.contracts import (
    GeohashFormat,
    ProcessingMode,
    Record,
    RecordResult,
    RecordSchema,
    RoutingStrategy,
    TransformErrorReason,
    TransformSuccessReason,
)
from geohash_record.engine import BatchProcessor, BatchRouter
from geohash_record.plugins.sinks.json_sink import JSONRecordWriter
from geohash_record.plugins.sources.json_source import JSONRecordReader
from geohash_record.plugins.transforms.geohash_record import GeohashRecordTransform

# =============================================================================
# Schemas and records
# =============================================================================


def make_schema(
    fields: Sequence[Any] | None = None,
    *,
    mode: Literal["strict", "free"] = "free",
) -> RecordSchema:
    """Build a RecordSchema; dynamic when no fields are given.

    Usage:
        schema = make_schema()                                   # Dynamic
        schema = make_schema(["latitude: float", "geohash: str?"])
        schema = make_schema(["latitude: float"], mode="strict")
    """
    if fields is None:
        return RecordSchema.dynamic()
    return RecordSchema.from_dict({"mode": mode, "fields": list(fields)})


def make_record(data: dict[str, Any] | None = None, *, schema: RecordSchema | None = None, **fields: Any) -> Record:
    """Build a Record from a dict and/or keyword fields.

    Usage:
        record = make_record(latitude=51.5, longitude=-0.12)
        record = make_record({"location": {"lat": 1.0}}, schema=schema)
    """
    payload = dict(data) if data is not None else {}
    payload.update(fields)
    return Record(payload, schema if schema is not None else RecordSchema.dynamic())


def make_records(rows: Sequence[dict[str, Any]], *, schema: RecordSchema | None = None) -> list[Record]:
    """Build a batch of records sharing one schema."""
    shared = schema if schema is not None else RecordSchema.dynamic()
    return [Record(dict(row), shared) for row in rows]


# =============================================================================
# Results
# =============================================================================


def make_enriched(record: Record | None = None, *, action: Literal["encoded", "decoded"] = "encoded") -> RecordResult:
    """Build an ENRICHED RecordResult."""
    success_reason: TransformSuccessReason = {"action": action}
    return RecordResult.enriched(record if record is not None else make_record(), success_reason=success_reason)


def make_unchanged(record: Record | None = None, *, field: str = "/latitude") -> RecordResult:
    """Build an UNCHANGED RecordResult with a missing_field reason."""
    reason: TransformErrorReason = {"reason": "missing_field", "field": field}
    return RecordResult.unchanged(record if record is not None else make_record(), reason)


def make_failed(record: Record | None = None, *, field: str = "/latitude") -> RecordResult:
    """Build a FAILED RecordResult with an invalid_coordinate reason."""
    reason: TransformErrorReason = {"reason": "invalid_coordinate", "field": field}
    return RecordResult.failed(record if record is not None else make_record(), reason)


# =============================================================================
# Plugins and engine
# =============================================================================


def make_transform(
    mode: ProcessingMode = ProcessingMode.ENCODE,
    *,
    geohash_format: GeohashFormat = GeohashFormat.BASE_32,
    precision: int = 12,
    latitude_path: str = "/latitude",
    longitude_path: str = "/longitude",
    geohash_path: str = "/geohash",
) -> GeohashRecordTransform:
    """Build a GeohashRecordTransform through its validated config path."""
    return GeohashRecordTransform(
        {
            "mode": mode.value,
            "geohash_format": geohash_format.value,
            "precision": precision,
            "latitude_path": latitude_path,
            "longitude_path": longitude_path,
            "geohash_path": geohash_path,
        }
    )


def make_router(
    strategy: RoutingStrategy = RoutingStrategy.SKIP_UNENRICHED,
    mode: ProcessingMode = ProcessingMode.ENCODE,
    **transform_options: Any,
) -> BatchRouter:
    """Build a BatchRouter around a geohash transform."""
    return BatchRouter(make_transform(mode, **transform_options), strategy)


def make_processor(
    strategy: RoutingStrategy = RoutingStrategy.SKIP_UNENRICHED,
    mode: ProcessingMode = ProcessingMode.ENCODE,
    *,
    schema: RecordSchema | None = None,
    reader_options: dict[str, Any] | None = None,
    writer_options: dict[str, Any] | None = None,
    **transform_options: Any,
) -> BatchProcessor:
    """Build a BatchProcessor with the JSON reader and writer."""
    return BatchProcessor(
        JSONRecordReader(reader_options or {}),
        JSONRecordWriter(writer_options or {}),
        make_router(strategy, mode, **transform_options),
        schema=schema,
    )
