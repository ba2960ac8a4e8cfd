"""Error taxonomy and reason schema contracts.

Exceptions raised by the codec and the record path resolver never escape
the core: the record transformer downgrades them to a FAILED outcome with
a structured reason payload (TypedDicts below).
"""

from typing import Any, Literal, NotRequired, TypedDict


class GeohashRecordError(Exception):
    """Base class for all errors raised by this package."""


# =============================================================================
# Codec errors
# =============================================================================


class GeohashCodecError(GeohashRecordError, ValueError):
    """Base class for geohash encode/decode failures."""


class InvalidCoordinateError(GeohashCodecError):
    """Latitude/longitude outside the valid range, non-finite, or non-numeric.

    Attributes:
        coordinate: "latitude" or "longitude", when known
    """

    def __init__(self, message: str, *, coordinate: Literal["latitude", "longitude"] | None = None) -> None:
        self.coordinate = coordinate
        super().__init__(message)


class InvalidPrecisionError(GeohashCodecError):
    """Requested precision outside what the geohash format supports."""


class InvalidGeohashCharacterError(GeohashCodecError):
    """Geohash string contains a character outside the format's alphabet.

    Attributes:
        character: The offending character
        position: Zero-based index of the character in the input
    """

    def __init__(self, character: str, position: int, alphabet: str) -> None:
        self.character = character
        self.position = position
        super().__init__(f"Invalid geohash character {character!r} at position {position}. Allowed characters: {alphabet!r}")


class EmptyGeohashError(GeohashCodecError):
    """Geohash string is empty."""


# =============================================================================
# Record path errors
# =============================================================================


class InvalidRecordPathError(GeohashRecordError, ValueError):
    """Path expression is not a sequence of '/name' segments."""


class PathWriteError(GeohashRecordError):
    """A value cannot be written at a record path.

    Raised when an intermediate segment is not a container, when the
    schema forbids the field, or when the declared field type does not
    accept the value.

    Attributes:
        path: Text form of the path being written
    """

    def __init__(self, path: str, message: str) -> None:
        self.path = path
        super().__init__(f"Cannot write '{path}': {message}")


# =============================================================================
# Collaborator and engine errors
# =============================================================================


class RecordReaderError(GeohashRecordError):
    """Raw input could not be turned into records.

    Aborts the whole batch before any record is transformed.
    """


class RecordWriterError(GeohashRecordError):
    """Records could not be serialized for an output."""


class RouterStateError(GeohashRecordError, RuntimeError):
    """Illegal transition of the batch routing state machine.

    This is a programming error in the caller, not a data problem.
    """


# =============================================================================
# Reason payloads
# =============================================================================

TransformErrorCategory = Literal[
    "missing_field",
    "invalid_coordinate",
    "invalid_precision",
    "invalid_geohash",
    "empty_geohash",
    "path_write_failed",
]


class TransformErrorReason(TypedDict):
    """Schema for non-enriched record outcomes.

    Carried by RecordResult for UNCHANGED and FAILED outcomes.
    """

    reason: TransformErrorCategory
    field: NotRequired[str]  # Path of the offending field
    message: NotRequired[str]
    value: NotRequired[Any]  # Offending value, when one was present


class TransformSuccessReason(TypedDict):
    """Schema for ENRICHED record outcomes."""

    action: Literal["encoded", "decoded"]
    fields_added: NotRequired[list[str]]
    fields_modified: NotRequired[list[str]]
