"""All status codes, modes, and kinds used across subsystem boundaries.

Every configuration switch is an enum, and every decision point matches
on it exhaustively. There is no open-ended string dispatch.
"""

from enum import StrEnum


class GeohashFormat(StrEnum):
    """Textual representation of a geohash.

    Values:
        BASE_32: 5 bits per character, standard geohash alphabet
        BINARY: 1 bit per character, '0'/'1' bitstring
    """

    BASE_32 = "BASE_32"
    BINARY = "BINARY"


class ProcessingMode(StrEnum):
    """Direction of the record transformation.

    Values:
        ENCODE: latitude + longitude -> geohash
        DECODE: geohash -> latitude + longitude
    """

    ENCODE = "ENCODE"
    DECODE = "DECODE"


class RoutingStrategy(StrEnum):
    """Policy deciding the disposition of a whole batch.

    Values:
        SKIP_UNENRICHED: Forward the batch unless a record failed or nothing
            was enriched. Unchanged records pass through untouched.
        SPLIT: Enriched records to success, the rest to failure, and the
            untouched input to original.
        REQUIRE_ALL_ENRICHED: Forward only if every record was enriched.
    """

    SKIP_UNENRICHED = "SKIP_UNENRICHED"
    SPLIT = "SPLIT"
    REQUIRE_ALL_ENRICHED = "REQUIRE_ALL_ENRICHED"


class TransformOutcome(StrEnum):
    """Outcome of transforming a single record.

    - ENRICHED: Transformation succeeded and the target field(s) were written
    - UNCHANGED: Source value absent at its path, nothing to do
    - FAILED: Source value present but invalid, or target not writable
    """

    ENRICHED = "enriched"
    UNCHANGED = "unchanged"
    FAILED = "failed"


class BatchDisposition(StrEnum):
    """Terminal routing decision for a batch."""

    FORWARD_ALL = "forward_all"
    FORWARD_SPLIT = "forward_split"
    FAIL_ALL = "fail_all"


class RouterState(StrEnum):
    """States of the batch routing state machine.

    COLLECTING -> DECIDING -> one of the terminal states. Terminal states
    mirror BatchDisposition so a finished run reports where it ended.
    """

    COLLECTING = "collecting"
    DECIDING = "deciding"
    FORWARD_ALL = "forward_all"
    FORWARD_SPLIT = "forward_split"
    FAIL_ALL = "fail_all"

    @property
    def is_terminal(self) -> bool:
        """Check if no further transitions are allowed from this state."""
        return self not in (RouterState.COLLECTING, RouterState.DECIDING)

    @classmethod
    def for_disposition(cls, disposition: BatchDisposition) -> "RouterState":
        """Terminal state reached by a given disposition."""
        return cls(disposition.value)


class Relationship(StrEnum):
    """Named outputs a processed batch can be transferred to."""

    SUCCESS = "success"
    FAILURE = "failure"
    ORIGINAL = "original"
