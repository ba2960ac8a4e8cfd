"""Tests for the reader -> router -> writer batch processor."""

import json
from collections.abc import Sequence

from structlog.testing import capture_logs

from geohash_record.contracts import (
    BatchDisposition,
    ProcessingMode,
    Record,
    RecordWriterError,
    Relationship,
    RoutingStrategy,
)
from geohash_record.engine import BatchProcessor
from geohash_record.plugins.base import BaseRecordWriter
from geohash_record.plugins.sinks.json_sink import JSONRecordWriter
from geohash_record.plugins.sources.json_source import JSONRecordReader
from geohash_record.plugins.transforms.geohash_record import GeohashRecordTransform
from geohash_record.testing import make_processor, make_router, make_schema


class _ExplodingWriter(BaseRecordWriter):
    name = "exploding"

    def write_records(self, records: Sequence[Record]) -> bytes:
        raise RecordWriterError("disk on fire")


class _ClosingReader(JSONRecordReader):
    def __init__(self, closed: list[str]) -> None:
        super().__init__({})
        self._closed = closed

    def close(self) -> None:
        self._closed.append("reader")


class _ClosingWriter(JSONRecordWriter):
    def __init__(self, closed: list[str]) -> None:
        super().__init__({})
        self._closed = closed

    def close(self) -> None:
        self._closed.append("writer")


class _ClosingTransform(GeohashRecordTransform):
    def __init__(self, closed: list[str], *, fail: bool = False) -> None:
        super().__init__({"mode": "ENCODE", "latitude_path": "/latitude", "longitude_path": "/longitude", "geohash_path": "/geohash"})
        self._closed = closed
        self._fail = fail

    def close(self) -> None:
        if self._fail:
            raise RuntimeError("handle already released")
        self._closed.append("transform")


class TestBatchProcessor:
    """Serialized outputs per relationship."""

    def test_forward_all(self) -> None:
        processor = make_processor(RoutingStrategy.SKIP_UNENRICHED, precision=5)
        raw = json.dumps([{"latitude": 0.0, "longitude": 0.0}]).encode()

        result = processor.process(raw)

        assert not result.failed
        assert [o.relationship for o in result.outputs] == [Relationship.SUCCESS]
        success = result.output_for(Relationship.SUCCESS)
        assert success is not None
        assert success.record_count == 1
        assert json.loads(success.content) == [{"latitude": 0.0, "longitude": 0.0, "geohash": "s0000"}]

    def test_split_outputs_in_relationship_order(self) -> None:
        processor = make_processor(RoutingStrategy.SPLIT)
        raw = json.dumps([{"name": "none"}, {"latitude": 1.0, "longitude": 1.0}]).encode()

        result = processor.process(raw)

        assert [o.relationship for o in result.outputs] == [
            Relationship.SUCCESS,
            Relationship.FAILURE,
            Relationship.ORIGINAL,
        ]
        original = result.output_for(Relationship.ORIGINAL)
        assert original is not None
        assert json.loads(original.content) == [{"name": "none"}, {"latitude": 1.0, "longitude": 1.0}]

    def test_fail_all_emits_input_records(self) -> None:
        processor = make_processor(RoutingStrategy.REQUIRE_ALL_ENRICHED)
        rows = [{"latitude": 1.0, "longitude": 1.0}, {"name": "none"}]

        result = processor.process(json.dumps(rows).encode())

        assert result.failed
        assert result.batch is not None
        assert result.batch.disposition == BatchDisposition.FAIL_ALL
        failure = result.output_for(Relationship.FAILURE)
        assert failure is not None
        assert json.loads(failure.content) == rows

    def test_schema_applies_to_records(self) -> None:
        """A strict schema without the geohash field makes every write fail."""
        schema = make_schema(["latitude: float", "longitude: float"], mode="strict")
        processor = make_processor(RoutingStrategy.SPLIT, schema=schema)

        result = processor.process(b'[{"latitude": 1.0, "longitude": 1.0}]')

        assert result.batch is not None
        assert result.batch.failed_count == 1
        assert result.batch.failures[0]["reason"] == "path_write_failed"

    def test_reader_failure_routes_raw_input(self) -> None:
        processor = make_processor()
        raw = b"this is not json"

        with capture_logs() as logs:
            result = processor.process(raw)

        assert result.failed
        assert result.batch is None
        assert result.error is not None
        assert len(result.outputs) == 1
        assert result.outputs[0].relationship == Relationship.FAILURE
        assert result.outputs[0].content == raw
        assert any(entry["event"] == "reader_failed" for entry in logs)

    def test_writer_failure_routes_raw_input(self) -> None:
        processor = BatchProcessor(
            JSONRecordReader({}),
            _ExplodingWriter({}),
            make_router(RoutingStrategy.SKIP_UNENRICHED),
        )
        raw = b'[{"latitude": 1.0, "longitude": 1.0}]'

        result = processor.process(raw)

        assert result.failed
        assert result.error == "disk on fire"
        assert [(o.relationship, o.content) for o in result.outputs] == [(Relationship.FAILURE, raw)]

    def test_jsonl_round_trip(self) -> None:
        processor = make_processor(
            RoutingStrategy.SKIP_UNENRICHED,
            ProcessingMode.DECODE,
            reader_options={"format": "jsonl"},
            writer_options={"format": "jsonl"},
        )

        result = processor.process(b'{"geohash": "s"}\n{"geohash": "s"}\n')

        success = result.output_for(Relationship.SUCCESS)
        assert success is not None
        lines = [json.loads(line) for line in success.content.decode().splitlines()]
        assert lines == [{"geohash": "s", "latitude": 22.5, "longitude": 22.5}] * 2


class TestBatchProcessorClose:
    """close() releases every plugin the processor wraps."""

    def test_closes_reader_transform_and_writer(self) -> None:
        from geohash_record.engine import BatchRouter

        closed: list[str] = []
        processor = BatchProcessor(
            _ClosingReader(closed),
            _ClosingWriter(closed),
            BatchRouter(_ClosingTransform(closed), RoutingStrategy.SKIP_UNENRICHED),
        )
        processor.process(b'[{"latitude": 1.0, "longitude": 1.0}]')

        processor.close()

        assert closed == ["reader", "transform", "writer"]

    def test_close_failure_logged_and_rest_still_closed(self) -> None:
        from geohash_record.engine import BatchRouter

        closed: list[str] = []
        processor = BatchProcessor(
            _ClosingReader(closed),
            _ClosingWriter(closed),
            BatchRouter(_ClosingTransform(closed, fail=True), RoutingStrategy.SKIP_UNENRICHED),
        )

        with capture_logs() as logs:
            processor.close()

        assert closed == ["reader", "writer"]
        failures = [entry for entry in logs if entry["event"] == "plugin_close_failed"]
        assert len(failures) == 1
        assert failures[0]["plugin_kind"] == "transform"
        assert failures[0]["plugin"] == "geohash_record"
        assert failures[0]["error"] == "handle already released"
