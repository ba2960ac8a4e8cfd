"""End-to-end batch scenarios through the JSON reader and writer.

Counts are transfers per relationship: each relationship receives at most
one serialized batch per input.
"""

import json

import pytest

from geohash_record.contracts import ProcessingMode, Relationship, RoutingStrategy
from geohash_record.engine import ProcessorResult
from geohash_record.testing import make_processor


def _transfers(result: ProcessorResult) -> tuple[int, int, int]:
    """(failure, success, original) transfer counts."""
    present = {output.relationship for output in result.outputs}
    return (
        int(Relationship.FAILURE in present),
        int(Relationship.SUCCESS in present),
        int(Relationship.ORIGINAL in present),
    )


class TestEncodeScenarios:
    def test_skip_unenriched_forwards_whole_batch(self, encode_input: bytes) -> None:
        result = make_processor(RoutingStrategy.SKIP_UNENRICHED).process(encode_input)

        assert _transfers(result) == (0, 1, 0)
        success = result.output_for(Relationship.SUCCESS)
        assert success is not None
        rows = json.loads(success.content)
        assert len(rows) == 3
        assert sum(1 for row in rows if "geohash" in row) == 2
        assert all(len(row["geohash"]) == 12 for row in rows if "geohash" in row)

    def test_split(self, encode_input: bytes) -> None:
        result = make_processor(RoutingStrategy.SPLIT).process(encode_input)

        assert _transfers(result) == (1, 1, 1)
        success = result.output_for(Relationship.SUCCESS)
        failure = result.output_for(Relationship.FAILURE)
        original = result.output_for(Relationship.ORIGINAL)
        assert success is not None and failure is not None and original is not None
        assert (success.record_count, failure.record_count, original.record_count) == (2, 1, 3)
        assert json.loads(original.content) == json.loads(encode_input)

    def test_require_all_enriched_fails(self, encode_input: bytes) -> None:
        result = make_processor(RoutingStrategy.REQUIRE_ALL_ENRICHED).process(encode_input)

        assert _transfers(result) == (1, 0, 0)
        failure = result.output_for(Relationship.FAILURE)
        assert failure is not None
        assert json.loads(failure.content) == json.loads(encode_input)

    def test_encoding_records_without_coordinates_fails(self, decode_input: bytes) -> None:
        """Nothing to enrich: the batch goes to failure under SKIP_UNENRICHED."""
        result = make_processor(RoutingStrategy.SKIP_UNENRICHED).process(decode_input)
        assert _transfers(result) == (1, 0, 0)


class TestDecodeScenarios:
    def test_require_all_enriched_succeeds(self, decode_input: bytes) -> None:
        result = make_processor(RoutingStrategy.REQUIRE_ALL_ENRICHED, ProcessingMode.DECODE).process(decode_input)

        assert _transfers(result) == (0, 1, 0)
        success = result.output_for(Relationship.SUCCESS)
        assert success is not None
        rows = json.loads(success.content)
        assert rows[0]["latitude"] == pytest.approx(48.858, abs=1e-2)
        assert rows[0]["longitude"] == pytest.approx(2.294, abs=1e-2)

    def test_encode_then_decode_stays_in_cell(self, encode_input: bytes) -> None:
        encoded = make_processor(RoutingStrategy.SPLIT).process(encode_input).output_for(Relationship.SUCCESS)
        assert encoded is not None

        # Drop the coordinates so decoding has to recover them
        rows = json.loads(encoded.content)
        stripped = [{"id": row["id"], "geohash": row["geohash"]} for row in rows]
        decoded = make_processor(RoutingStrategy.REQUIRE_ALL_ENRICHED, ProcessingMode.DECODE).process(
            json.dumps(stripped).encode(),
        )

        success = decoded.output_for(Relationship.SUCCESS)
        assert success is not None
        for before, after in zip(rows, json.loads(success.content), strict=True):
            assert after["latitude"] == pytest.approx(before["latitude"], abs=1e-6)
            assert after["longitude"] == pytest.approx(before["longitude"], abs=1e-6)
