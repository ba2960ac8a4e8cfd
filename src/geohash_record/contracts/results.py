"""Operation outcomes and results.

These types answer: "What did an operation produce?"

IMPORTANT:
- RecordResult is per record and transient: it only lives until the batch
  routing decision is made
- BatchResult is the only thing the router hands to the output stage
- Use the factory methods; __post_init__ enforces the outcome invariants
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from geohash_record.contracts.enums import BatchDisposition, Relationship, TransformOutcome
from geohash_record.contracts.errors import TransformErrorReason, TransformSuccessReason
from geohash_record.contracts.record import Record


@dataclass(frozen=True)
class RecordResult:
    """Result of transforming a single record.

    Invariants:
    - ENRICHED carries success_reason and no reason
    - UNCHANGED and FAILED carry reason and no success_reason
    - record is always present: the enriched copy, or the input untouched
    """

    outcome: TransformOutcome
    record: Record
    reason: TransformErrorReason | None = None
    success_reason: TransformSuccessReason | None = None

    def __post_init__(self) -> None:
        """Validate invariants between outcome and reasons."""
        if self.outcome == TransformOutcome.ENRICHED:
            if self.success_reason is None:
                raise ValueError("RecordResult with outcome=ENRICHED MUST provide success_reason.")
            if self.reason is not None:
                raise ValueError("RecordResult with outcome=ENRICHED must not carry an error reason.")
        elif self.reason is None:
            raise ValueError(f"RecordResult with outcome={self.outcome.name} MUST provide reason.")

    @classmethod
    def enriched(cls, record: Record, *, success_reason: TransformSuccessReason) -> RecordResult:
        """Create result for a record whose target field(s) were written."""
        return cls(outcome=TransformOutcome.ENRICHED, record=record, success_reason=success_reason)

    @classmethod
    def unchanged(cls, record: Record, reason: TransformErrorReason) -> RecordResult:
        """Create result for a record with nothing to transform."""
        return cls(outcome=TransformOutcome.UNCHANGED, record=record, reason=reason)

    @classmethod
    def failed(cls, record: Record, reason: TransformErrorReason) -> RecordResult:
        """Create result for a record whose source value is invalid."""
        return cls(outcome=TransformOutcome.FAILED, record=record, reason=reason)

    @property
    def is_enriched(self) -> bool:
        """True if the transformation succeeded."""
        return self.outcome == TransformOutcome.ENRICHED


@dataclass(frozen=True)
class BatchResult:
    """Final routing decision for one batch.

    Attributes:
        disposition: Terminal decision of the router
        outputs: Emitted record sequences keyed by relationship. Suppressed
            (empty) outputs are absent from the mapping.
        enriched_count / unchanged_count / failed_count: Per-outcome counts
        failures: Reasons for every non-enriched record, in batch order
    """

    disposition: BatchDisposition
    outputs: dict[Relationship, list[Record]]
    enriched_count: int
    unchanged_count: int
    failed_count: int
    failures: tuple[TransformErrorReason, ...] = field(default=(), repr=False)

    @property
    def record_count(self) -> int:
        """Total records in the input batch."""
        return self.enriched_count + self.unchanged_count + self.failed_count

    def records_for(self, relationship: Relationship) -> Sequence[Record]:
        """Records emitted to a relationship (empty if suppressed)."""
        return self.outputs.get(relationship, [])

    def transfer_counts(self) -> dict[Relationship, int]:
        """Number of emitted batches per relationship (0 or 1 each)."""
        return {relationship: int(relationship in self.outputs) for relationship in Relationship}
