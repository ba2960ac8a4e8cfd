"""GeohashRecord transform plugin.

Converts between a latitude/longitude field pair and a geohash field.

IMPORTANT: This transform never raises for bad record data. Absent source
fields give UNCHANGED; present-but-invalid values and unwritable targets
give FAILED. The batch router applies policy to those outcomes.
"""

from typing import Any, Literal, Self

from pydantic import Field, field_validator, model_validator

from geohash_record.contracts import (
    EmptyGeohashError,
    GeohashCodecError,
    GeohashFormat,
    InvalidCoordinateError,
    InvalidGeohashCharacterError,
    InvalidPrecisionError,
    PathWriteError,
    ProcessingMode,
    Record,
    RecordResult,
    TransformErrorReason,
    TransformSuccessReason,
)
from geohash_record.core.geohash import decode, encode, max_precision
from geohash_record.core.record_path import MISSING, RecordPath, RecordPathResolver, SlashPathResolver, parse_record_path
from geohash_record.plugins.base import BaseTransform
from geohash_record.plugins.config_base import PluginConfig, validate_record_path


class GeohashRecordConfig(PluginConfig):
    """Configuration for the geohash record transform."""

    mode: ProcessingMode = Field(description="ENCODE (lat/lon -> geohash) or DECODE (geohash -> lat/lon)")
    geohash_format: GeohashFormat = Field(default=GeohashFormat.BASE_32)
    precision: int = Field(
        default=12,
        ge=1,
        description="Geohash length: characters for BASE_32, bits for BINARY. Ignored when decoding.",
    )
    latitude_path: str = Field(description="Record path of the latitude field, e.g. /latitude")
    longitude_path: str = Field(description="Record path of the longitude field")
    geohash_path: str = Field(description="Record path of the geohash field")

    @field_validator("latitude_path", "longitude_path", "geohash_path")
    @classmethod
    def _validate_paths(cls, v: str) -> str:
        return validate_record_path(v)

    @model_validator(mode="after")
    def _validate_precision_and_paths(self) -> Self:
        ceiling = max_precision(self.geohash_format)
        if self.precision > ceiling:
            raise ValueError(f"precision {self.precision} exceeds the maximum of {ceiling} for {self.geohash_format.value}")

        paths = [self.latitude_path, self.longitude_path, self.geohash_path]
        if len(set(paths)) != len(paths):
            raise ValueError(f"latitude_path, longitude_path and geohash_path must be distinct, got {paths}")
        return self


def transform_record(
    record: Record,
    *,
    mode: ProcessingMode,
    latitude_path: RecordPath,
    longitude_path: RecordPath,
    geohash_path: RecordPath,
    precision: int,
    geohash_format: GeohashFormat,
    resolver: RecordPathResolver | None = None,
) -> RecordResult:
    """Apply the geohash conversion to one record.

    The input record is never modified. ENRICHED results carry a copy with
    the target field(s) written; UNCHANGED and FAILED results carry the
    input record itself.

    Args:
        record: Input record
        mode: Conversion direction
        latitude_path: Latitude field (read on ENCODE, written on DECODE)
        longitude_path: Longitude field (read on ENCODE, written on DECODE)
        geohash_path: Geohash field (written on ENCODE, read on DECODE)
        precision: Geohash length for ENCODE
        geohash_format: Geohash representation
        resolver: Path resolver (default: SlashPathResolver)

    Returns:
        RecordResult describing the outcome
    """
    resolver = resolver if resolver is not None else SlashPathResolver()

    match mode:
        case ProcessingMode.ENCODE:
            return _encode_record(record, resolver, latitude_path, longitude_path, geohash_path, precision, geohash_format)
        case ProcessingMode.DECODE:
            return _decode_record(record, resolver, latitude_path, longitude_path, geohash_path, geohash_format)


def _encode_record(
    record: Record,
    resolver: RecordPathResolver,
    latitude_path: RecordPath,
    longitude_path: RecordPath,
    geohash_path: RecordPath,
    precision: int,
    geohash_format: GeohashFormat,
) -> RecordResult:
    latitude = resolver.get(record, latitude_path)
    longitude = resolver.get(record, longitude_path)

    for path, value in ((latitude_path, latitude), (longitude_path, longitude)):
        if value is MISSING:
            return RecordResult.unchanged(
                record,
                {"reason": "missing_field", "field": str(path), "message": f"No value at '{path}'"},
            )

    paths = {"latitude": latitude_path, "longitude": longitude_path}
    try:
        geohash = encode(
            _coerce_coordinate("latitude", latitude),
            _coerce_coordinate("longitude", longitude),
            precision,
            geohash_format,
        )
    except InvalidCoordinateError as e:
        field_path = paths[e.coordinate] if e.coordinate is not None else latitude_path
        offending = latitude if field_path is latitude_path else longitude
        return RecordResult.failed(
            record,
            {"reason": "invalid_coordinate", "field": str(field_path), "message": str(e), "value": offending},
        )
    except InvalidPrecisionError as e:
        return RecordResult.failed(record, {"reason": "invalid_precision", "message": str(e)})

    existed = resolver.get(record, geohash_path) is not MISSING
    enriched = record.copy()
    try:
        resolver.set(enriched, geohash_path, geohash)
    except PathWriteError as e:
        return RecordResult.failed(record, {"reason": "path_write_failed", "field": str(geohash_path), "message": str(e)})

    if existed:
        return RecordResult.enriched(enriched, success_reason={"action": "encoded", "fields_modified": [str(geohash_path)]})
    return RecordResult.enriched(enriched, success_reason={"action": "encoded", "fields_added": [str(geohash_path)]})


def _decode_record(
    record: Record,
    resolver: RecordPathResolver,
    latitude_path: RecordPath,
    longitude_path: RecordPath,
    geohash_path: RecordPath,
    geohash_format: GeohashFormat,
) -> RecordResult:
    geohash = resolver.get(record, geohash_path)
    if geohash is MISSING:
        return RecordResult.unchanged(
            record,
            {"reason": "missing_field", "field": str(geohash_path), "message": f"No value at '{geohash_path}'"},
        )

    if not isinstance(geohash, str):
        return RecordResult.failed(
            record,
            {
                "reason": "invalid_geohash",
                "field": str(geohash_path),
                "message": f"Geohash must be a string, got {type(geohash).__name__}",
                "value": geohash,
            },
        )

    try:
        latitude, longitude = decode(geohash, geohash_format)
    except GeohashCodecError as e:
        return RecordResult.failed(record, _codec_failure(e, geohash_path, geohash))

    # Both writes land on one copy; a failure on the second discards the first
    enriched = record.copy()
    try:
        resolver.set(enriched, latitude_path, latitude)
        resolver.set(enriched, longitude_path, longitude)
    except PathWriteError as e:
        return RecordResult.failed(record, {"reason": "path_write_failed", "field": e.path, "message": str(e)})

    added: list[str] = []
    modified: list[str] = []
    for path in (latitude_path, longitude_path):
        (modified if resolver.get(record, path) is not MISSING else added).append(str(path))

    success_reason: TransformSuccessReason = {"action": "decoded"}
    if added:
        success_reason["fields_added"] = added
    if modified:
        success_reason["fields_modified"] = modified
    return RecordResult.enriched(enriched, success_reason=success_reason)


def _coerce_coordinate(name: Literal["latitude", "longitude"], value: Any) -> float:
    """Turn a record value into a float coordinate.

    Numbers pass through, numeric strings are parsed. Everything else,
    including booleans, is an invalid coordinate.

    Raises:
        InvalidCoordinateError: If the value is not numeric
    """
    if isinstance(value, bool):
        raise InvalidCoordinateError(f"{name} must be a number, got bool", coordinate=name)
    if isinstance(value, (int, float)):
        try:
            return float(value)
        except OverflowError:
            raise InvalidCoordinateError(f"{name} {value!r} is too large", coordinate=name) from None
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            raise InvalidCoordinateError(f"{name} {value!r} is not a number", coordinate=name) from None
    raise InvalidCoordinateError(f"{name} must be a number, got {type(value).__name__}", coordinate=name)


def _codec_failure(error: GeohashCodecError, geohash_path: RecordPath, geohash: str) -> TransformErrorReason:
    field = str(geohash_path)
    if isinstance(error, EmptyGeohashError):
        return {"reason": "empty_geohash", "field": field, "message": str(error)}
    if isinstance(error, InvalidGeohashCharacterError):
        return {"reason": "invalid_geohash", "field": field, "message": str(error), "value": geohash}
    if isinstance(error, InvalidPrecisionError):
        return {"reason": "invalid_precision", "field": field, "message": str(error), "value": geohash}
    # Decoding raises nothing else; surface a new codec error type as a bug
    raise error


class GeohashRecordTransform(BaseTransform):
    """Encode lat/lon fields to a geohash, or decode a geohash to lat/lon.

    Config options:
        mode: Required. ENCODE or DECODE
        latitude_path: Required. Record path of the latitude field
        longitude_path: Required. Record path of the longitude field
        geohash_path: Required. Record path of the geohash field
        geohash_format: BASE_32 (default) or BINARY
        precision: Geohash length (default: 12). Characters for BASE_32
            (max 12), bits for BINARY (max 64)

    Example YAML:
        transform:
          mode: ENCODE
          latitude_path: /latitude
          longitude_path: /longitude
          geohash_path: /geohash
          geohash_format: BASE_32
          precision: 12
    """

    name = "geohash_record"
    plugin_version = "1.0.0"

    def __init__(self, config: dict[str, Any], *, resolver: RecordPathResolver | None = None) -> None:
        super().__init__(config)
        cfg = GeohashRecordConfig.from_dict(config)
        self._mode = cfg.mode
        self._geohash_format = cfg.geohash_format
        self._precision = cfg.precision
        self._latitude_path = parse_record_path(cfg.latitude_path)
        self._longitude_path = parse_record_path(cfg.longitude_path)
        self._geohash_path = parse_record_path(cfg.geohash_path)
        self._resolver: RecordPathResolver = resolver if resolver is not None else SlashPathResolver()

    @property
    def mode(self) -> ProcessingMode:
        """Conversion direction."""
        return self._mode

    def process(self, record: Record) -> RecordResult:
        """Convert one record.

        Args:
            record: Input record (never mutated)

        Returns:
            RecordResult with outcome ENRICHED, UNCHANGED or FAILED
        """
        return transform_record(
            record,
            mode=self._mode,
            latitude_path=self._latitude_path,
            longitude_path=self._longitude_path,
            geohash_path=self._geohash_path,
            precision=self._precision,
            geohash_format=self._geohash_format,
            resolver=self._resolver,
        )
