"""Geohash encode/decode.

Pure, side-effect-free functions. A geohash is produced by bisecting the
longitude range [-180, 180] and the latitude range [-90, 90] alternately,
longitude first, emitting 1 when the coordinate lies in the upper half
(>= midpoint) and 0 otherwise. The interleaved bits are rendered either
as a '0'/'1' bitstring (BINARY) or in groups of 5 with the standard
32-symbol geohash alphabet (BASE_32).

Precision is counted in output characters: bits for BINARY, characters
for BASE_32.

Example:
    >>> encode(57.64911, 10.40744, 11, GeohashFormat.BASE_32)
    'u4pruydqqvj'
    >>> encode(0.0, 0.0, 4, GeohashFormat.BINARY)
    '1100'
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Iterator
from typing import Final, Literal

from geohash_record.contracts import (
    EmptyGeohashError,
    GeohashFormat,
    InvalidCoordinateError,
    InvalidGeohashCharacterError,
    InvalidPrecisionError,
)

BASE32_ALPHABET: Final[str] = "0123456789bcdefghjkmnpqrstuvwxyz"
BINARY_ALPHABET: Final[str] = "01"

_BASE32_INDEX: Final[dict[str, int]] = {char: i for i, char in enumerate(BASE32_ALPHABET)}

LATITUDE_RANGE: Final[tuple[float, float]] = (-90.0, 90.0)
LONGITUDE_RANGE: Final[tuple[float, float]] = (-180.0, 180.0)

BITS_PER_CHARACTER: Final[dict[GeohashFormat, int]] = {
    GeohashFormat.BASE_32: 5,
    GeohashFormat.BINARY: 1,
}

# Textual levels supported by each representation: 12 base-32 characters
# (60 bits) and a 64-bit bitstring.
MAX_PRECISION: Final[dict[GeohashFormat, int]] = {
    GeohashFormat.BASE_32: 12,
    GeohashFormat.BINARY: 64,
}


def max_precision(geohash_format: GeohashFormat) -> int:
    """Largest precision supported by a geohash format."""
    return MAX_PRECISION[geohash_format]


def encode(latitude: float, longitude: float, precision: int, geohash_format: GeohashFormat) -> str:
    """Encode a coordinate pair as a geohash.

    Args:
        latitude: Latitude in degrees, within [-90, 90]
        longitude: Longitude in degrees, within [-180, 180]
        precision: Output length (bits for BINARY, characters for BASE_32)
        geohash_format: Output representation

    Returns:
        Geohash string of exactly `precision` characters

    Raises:
        InvalidCoordinateError: If a coordinate is out of range or non-finite
        InvalidPrecisionError: If precision is not within 1..max_precision(format)
    """
    _validate_coordinate("latitude", latitude, LATITUDE_RANGE)
    _validate_coordinate("longitude", longitude, LONGITUDE_RANGE)
    _validate_precision(precision, geohash_format)

    bits = _interleave(latitude, longitude, precision * BITS_PER_CHARACTER[geohash_format])

    match geohash_format:
        case GeohashFormat.BINARY:
            return "".join(BINARY_ALPHABET[bit] for bit in bits)
        case GeohashFormat.BASE_32:
            return _bits_to_base32(bits)


def decode(geohash: str, geohash_format: GeohashFormat) -> tuple[float, float]:
    """Decode a geohash to the centre of its cell.

    Args:
        geohash: Geohash string in the given format
        geohash_format: Input representation

    Returns:
        (latitude, longitude) midpoint of the decoded cell

    Raises:
        EmptyGeohashError: If geohash is empty
        InvalidGeohashCharacterError: If a character is outside the alphabet
        InvalidPrecisionError: If geohash is longer than the format supports
    """
    lat_min, lat_max, lon_min, lon_max = decode_bounds(geohash, geohash_format)
    return (lat_min + lat_max) / 2, (lon_min + lon_max) / 2


def decode_bounds(geohash: str, geohash_format: GeohashFormat) -> tuple[float, float, float, float]:
    """Decode a geohash to its bounding box.

    Returns:
        (lat_min, lat_max, lon_min, lon_max)

    Raises:
        Same as decode().
    """
    if not geohash:
        raise EmptyGeohashError("Geohash must be a non-empty string")
    if len(geohash) > MAX_PRECISION[geohash_format]:
        raise InvalidPrecisionError(
            f"Geohash of length {len(geohash)} exceeds the maximum of {MAX_PRECISION[geohash_format]} for {geohash_format.value}"
        )

    lat_interval = list(LATITUDE_RANGE)
    lon_interval = list(LONGITUDE_RANGE)

    for i, bit in enumerate(_expand_bits(geohash, geohash_format)):
        interval = lon_interval if i % 2 == 0 else lat_interval
        mid = (interval[0] + interval[1]) / 2
        if bit:
            interval[0] = mid
        else:
            interval[1] = mid

    return lat_interval[0], lat_interval[1], lon_interval[0], lon_interval[1]


def _validate_coordinate(name: Literal["latitude", "longitude"], value: float, bounds: tuple[float, float]) -> None:
    # bool is an int subclass; True is not a latitude
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidCoordinateError(f"{name} must be a number, got {type(value).__name__}", coordinate=name)
    if not math.isfinite(value):
        raise InvalidCoordinateError(f"{name} must be finite, got {value!r}", coordinate=name)
    low, high = bounds
    if not low <= value <= high:
        raise InvalidCoordinateError(f"{name} {value!r} outside valid range [{low:g}, {high:g}]", coordinate=name)


def _validate_precision(precision: int, geohash_format: GeohashFormat) -> None:
    if isinstance(precision, bool) or not isinstance(precision, int):
        raise InvalidPrecisionError(f"precision must be an integer, got {type(precision).__name__}")
    ceiling = MAX_PRECISION[geohash_format]
    if not 1 <= precision <= ceiling:
        raise InvalidPrecisionError(f"precision {precision} outside supported range [1, {ceiling}] for {geohash_format.value}")


def _interleave(latitude: float, longitude: float, bit_count: int) -> Iterator[int]:
    """Yield bisection bits, longitude on even positions, latitude on odd."""
    lat_interval = list(LATITUDE_RANGE)
    lon_interval = list(LONGITUDE_RANGE)

    for i in range(bit_count):
        if i % 2 == 0:
            value, interval = longitude, lon_interval
        else:
            value, interval = latitude, lat_interval
        mid = (interval[0] + interval[1]) / 2
        if value >= mid:
            interval[0] = mid
            yield 1
        else:
            interval[1] = mid
            yield 0


def _bits_to_base32(bits: Iterable[int]) -> str:
    """Pack bits MSB-first into 5-bit characters, zero-padding a short tail."""
    chars: list[str] = []
    value = 0
    width = 0
    for bit in bits:
        value = (value << 1) | bit
        width += 1
        if width == 5:
            chars.append(BASE32_ALPHABET[value])
            value = 0
            width = 0
    if width:
        chars.append(BASE32_ALPHABET[value << (5 - width)])
    return "".join(chars)


def _expand_bits(geohash: str, geohash_format: GeohashFormat) -> Iterator[int]:
    """Yield the interleaved bits encoded by a geohash string."""
    for position, char in enumerate(geohash):
        match geohash_format:
            case GeohashFormat.BINARY:
                if char not in BINARY_ALPHABET:
                    raise InvalidGeohashCharacterError(char, position, BINARY_ALPHABET)
                yield 1 if char == "1" else 0
            case GeohashFormat.BASE_32:
                index = _BASE32_INDEX.get(char)
                if index is None:
                    raise InvalidGeohashCharacterError(char, position, BASE32_ALPHABET)
                for shift in range(4, -1, -1):
                    yield (index >> shift) & 1
