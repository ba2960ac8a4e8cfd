"""Tests for record path parsing and the slash path resolver."""

import pytest

from geohash_record.contracts import InvalidRecordPathError, PathWriteError
from geohash_record.core.record_path import MISSING, SlashPathResolver, parse_record_path
from geohash_record.testing import make_record, make_schema


class TestParseRecordPath:
    """Path expressions are '/name' segment sequences."""

    def test_single_segment(self) -> None:
        path = parse_record_path("/latitude")
        assert path.segments == ("latitude",)
        assert path.leaf == "latitude"
        assert path.parents == ()

    def test_nested(self) -> None:
        path = parse_record_path("/location/point/lat")
        assert path.segments == ("location", "point", "lat")
        assert path.parents == ("location", "point")
        assert str(path) == "/location/point/lat"

    def test_parsed_paths_compare_equal(self) -> None:
        assert parse_record_path("/a/b") == parse_record_path("/a/b")

    @pytest.mark.parametrize(
        "expression",
        [
            "latitude",
            "",
            "/",
            "//latitude",
            "/location/",
            "/location/../lat",
            "/./lat",
            "/items[0]",
            "/items/*",
            "/a/ /b",
        ],
    )
    def test_invalid_expressions(self, expression: str) -> None:
        with pytest.raises(InvalidRecordPathError):
            parse_record_path(expression)

    def test_non_string_rejected(self) -> None:
        with pytest.raises(InvalidRecordPathError):
            parse_record_path(42)  # type: ignore[arg-type]


class TestResolverGet:
    """get() returns the value, or MISSING when absent or null."""

    @pytest.fixture
    def resolver(self) -> SlashPathResolver:
        return SlashPathResolver()

    def test_top_level(self, resolver: SlashPathResolver) -> None:
        record = make_record(latitude=51.5)
        assert resolver.get(record, parse_record_path("/latitude")) == 51.5

    def test_nested(self, resolver: SlashPathResolver) -> None:
        record = make_record({"location": {"lat": 1.25}})
        assert resolver.get(record, parse_record_path("/location/lat")) == 1.25

    def test_absent_is_missing(self, resolver: SlashPathResolver) -> None:
        assert resolver.get(make_record(), parse_record_path("/latitude")) is MISSING

    def test_null_is_missing(self, resolver: SlashPathResolver) -> None:
        assert resolver.get(make_record(latitude=None), parse_record_path("/latitude")) is MISSING

    def test_through_scalar_is_missing(self, resolver: SlashPathResolver) -> None:
        record = make_record(location="somewhere")
        assert resolver.get(record, parse_record_path("/location/lat")) is MISSING

    def test_falsy_values_are_present(self, resolver: SlashPathResolver) -> None:
        record = make_record(latitude=0.0, geohash="")
        assert resolver.get(record, parse_record_path("/latitude")) == 0.0
        assert resolver.get(record, parse_record_path("/geohash")) == ""


class TestResolverSet:
    """set() validates the whole write before mutating anything."""

    @pytest.fixture
    def resolver(self) -> SlashPathResolver:
        return SlashPathResolver()

    def test_adds_field(self, resolver: SlashPathResolver) -> None:
        record = make_record(latitude=1.0)
        resolver.set(record, parse_record_path("/geohash"), "s0")
        assert record.data == {"latitude": 1.0, "geohash": "s0"}

    def test_overwrites_field(self, resolver: SlashPathResolver) -> None:
        record = make_record(geohash="old")
        resolver.set(record, parse_record_path("/geohash"), "new")
        assert record["geohash"] == "new"

    def test_creates_intermediate_records(self, resolver: SlashPathResolver) -> None:
        record = make_record()
        resolver.set(record, parse_record_path("/location/geo/hash"), "s0")
        assert record.data == {"location": {"geo": {"hash": "s0"}}}

    def test_replaces_null_intermediate(self, resolver: SlashPathResolver) -> None:
        record = make_record(location=None)
        resolver.set(record, parse_record_path("/location/hash"), "s0")
        assert record.data == {"location": {"hash": "s0"}}

    def test_scalar_intermediate_rejected(self, resolver: SlashPathResolver) -> None:
        record = make_record(location="Paris")
        with pytest.raises(PathWriteError) as exc_info:
            resolver.set(record, parse_record_path("/location/hash"), "s0")
        assert exc_info.value.path == "/location/hash"
        assert record.data == {"location": "Paris"}

    def test_strict_schema_rejects_undeclared_field(self, resolver: SlashPathResolver) -> None:
        schema = make_schema(["latitude: float", "longitude: float"], mode="strict")
        record = make_record(latitude=1.0, longitude=2.0, schema=schema)
        with pytest.raises(PathWriteError, match="not declared"):
            resolver.set(record, parse_record_path("/geohash"), "s0")
        assert "geohash" not in record

    def test_free_schema_accepts_undeclared_field(self, resolver: SlashPathResolver) -> None:
        schema = make_schema(["latitude: float"], mode="free")
        record = make_record(latitude=1.0, schema=schema)
        resolver.set(record, parse_record_path("/geohash"), "s0")
        assert record["geohash"] == "s0"

    def test_declared_type_must_accept_value(self, resolver: SlashPathResolver) -> None:
        schema = make_schema(["geohash: int"])
        record = make_record(schema=schema)
        with pytest.raises(PathWriteError, match="declared as int"):
            resolver.set(record, parse_record_path("/geohash"), "s0")

    def test_scalar_declared_intermediate_rejected(self, resolver: SlashPathResolver) -> None:
        schema = make_schema(["location: str?"])
        record = make_record(schema=schema)
        with pytest.raises(PathWriteError, match="cannot contain nested fields"):
            resolver.set(record, parse_record_path("/location/hash"), "s0")

    def test_nested_strict_schema_enforced(self, resolver: SlashPathResolver) -> None:
        schema = make_schema([{"location?": {"mode": "strict", "fields": ["lat: float?"]}}])
        record = make_record(schema=schema)

        resolver.set(record, parse_record_path("/location/lat"), 1.5)
        assert record.data == {"location": {"lat": 1.5}}

        with pytest.raises(PathWriteError):
            resolver.set(record, parse_record_path("/location/lon"), 2.5)
        assert record.data == {"location": {"lat": 1.5}}

    def test_failed_deep_write_creates_nothing(self, resolver: SlashPathResolver) -> None:
        """Validation runs before any intermediate record is created."""
        schema = make_schema([{"location?": {"mode": "strict", "fields": ["lat: float?"]}}])
        record = make_record(schema=schema)
        with pytest.raises(PathWriteError):
            resolver.set(record, parse_record_path("/location/hash"), "s0")
        assert record.data == {}
