# src/geohash_record/engine/router.py
"""Batch routing state machine.

The router drives the record transform across one batch, partitions the
outcomes, and decides where the batch goes:

    COLLECTING --(input exhausted)--> DECIDING --> FORWARD_ALL
                                               --> FORWARD_SPLIT
                                               --> FAIL_ALL

Per-batch state lives in a BatchRoutingRun created for each route() call,
so a single BatchRouter can be shared by threads processing different
batches. The router performs no I/O; it hands a BatchResult to the caller.

Disposition table:

    strategy              | condition                         | disposition
    ----------------------+-----------------------------------+--------------
    SKIP_UNENRICHED       | every record enriched             | FORWARD_ALL
                          | any record FAILED                 | FAIL_ALL
                          | no record enriched                | FAIL_ALL
                          | otherwise (enriched + unchanged)  | FORWARD_ALL
    SPLIT                 | always                            | FORWARD_SPLIT
    REQUIRE_ALL_ENRICHED  | every record enriched             | FORWARD_ALL
                          | otherwise                         | FAIL_ALL

FORWARD_ALL emits the transformed batch (unchanged records untouched, in
their original positions) to success. FAIL_ALL emits the untouched input
batch to failure. FORWARD_SPLIT emits enriched records to success, the
rest to failure and the untouched input to original, suppressing any of
the three that would be empty.
"""

from __future__ import annotations

from collections.abc import Iterable

from geohash_record.contracts import (
    BatchDisposition,
    BatchResult,
    Record,
    RecordResult,
    Relationship,
    RouterState,
    RouterStateError,
    RoutingStrategy,
    TransformErrorReason,
    TransformOutcome,
)
from geohash_record.core.logging import get_logger
from geohash_record.plugins.protocols import RecordTransformProtocol

logger = get_logger(__name__)


class BatchRoutingRun:
    """State of routing one batch.

    Sequences are append-only and keep batch order:
    - inputs: every record as received (the "original" batch)
    - transformed: every record as returned by the transform
    - enriched: records with outcome ENRICHED
    - rest: records with outcome UNCHANGED or FAILED

    Usage:
        run = BatchRoutingRun(RoutingStrategy.SPLIT)
        for record in records:
            run.collect(record, transform.process(record))
        result = run.decide()
    """

    def __init__(self, strategy: RoutingStrategy) -> None:
        self._strategy = strategy
        self._state = RouterState.COLLECTING
        self._inputs: list[Record] = []
        self._transformed: list[Record] = []
        self._enriched: list[Record] = []
        self._rest: list[Record] = []
        self._failures: list[TransformErrorReason] = []
        self._counts: dict[TransformOutcome, int] = dict.fromkeys(TransformOutcome, 0)

    @property
    def state(self) -> RouterState:
        """Current state of the run."""
        return self._state

    def collect(self, record: Record, result: RecordResult) -> None:
        """Record the outcome for the next record of the batch.

        Args:
            record: The record as it was handed to the transform
            result: What the transform produced for it

        Raises:
            RouterStateError: If the run has already left COLLECTING
        """
        if self._state is not RouterState.COLLECTING:
            raise RouterStateError(f"Cannot collect records in state {self._state.value}; the batch has already been decided")

        self._inputs.append(record)
        self._transformed.append(result.record)
        self._counts[result.outcome] += 1

        match result.outcome:
            case TransformOutcome.ENRICHED:
                self._enriched.append(result.record)
            case TransformOutcome.UNCHANGED | TransformOutcome.FAILED:
                self._rest.append(result.record)
                # RecordResult guarantees a reason for non-enriched outcomes
                assert result.reason is not None
                self._failures.append(result.reason)

    def decide(self) -> BatchResult:
        """Apply the routing strategy to the collected outcomes.

        Returns:
            BatchResult for the terminal state reached

        Raises:
            RouterStateError: If called more than once
        """
        if self._state is not RouterState.COLLECTING:
            raise RouterStateError(f"Cannot decide in state {self._state.value}; a batch is decided exactly once")
        self._state = RouterState.DECIDING

        disposition, outputs = self._apply_strategy()

        self._state = RouterState.for_disposition(disposition)
        return BatchResult(
            disposition=disposition,
            outputs=outputs,
            enriched_count=self._counts[TransformOutcome.ENRICHED],
            unchanged_count=self._counts[TransformOutcome.UNCHANGED],
            failed_count=self._counts[TransformOutcome.FAILED],
            failures=tuple(self._failures),
        )

    def _apply_strategy(self) -> tuple[BatchDisposition, dict[Relationship, list[Record]]]:
        match self._strategy:
            case RoutingStrategy.SKIP_UNENRICHED:
                if not self._rest:
                    return self._forward_all()
                if self._counts[TransformOutcome.FAILED] > 0:
                    return self._fail_all()
                if not self._enriched:
                    return self._fail_all()
                return self._forward_all()

            case RoutingStrategy.SPLIT:
                outputs: dict[Relationship, list[Record]] = {}
                if self._enriched:
                    outputs[Relationship.SUCCESS] = list(self._enriched)
                if self._rest:
                    outputs[Relationship.FAILURE] = list(self._rest)
                if self._inputs:
                    outputs[Relationship.ORIGINAL] = list(self._inputs)
                return BatchDisposition.FORWARD_SPLIT, outputs

            case RoutingStrategy.REQUIRE_ALL_ENRICHED:
                if self._rest:
                    return self._fail_all()
                return self._forward_all()

    def _forward_all(self) -> tuple[BatchDisposition, dict[Relationship, list[Record]]]:
        return BatchDisposition.FORWARD_ALL, {Relationship.SUCCESS: list(self._transformed)}

    def _fail_all(self) -> tuple[BatchDisposition, dict[Relationship, list[Record]]]:
        return BatchDisposition.FAIL_ALL, {Relationship.FAILURE: list(self._inputs)}


class BatchRouter:
    """Route whole batches through a record transform.

    Holds only immutable configuration; see BatchRoutingRun for the
    per-batch state.

    Example:
        router = BatchRouter(GeohashRecordTransform(config), RoutingStrategy.SKIP_UNENRICHED)
        result = router.route(records)
        for record in result.records_for(Relationship.SUCCESS):
            ...
    """

    def __init__(self, transform: RecordTransformProtocol, strategy: RoutingStrategy) -> None:
        self._transform = transform
        self._strategy = strategy

    @property
    def strategy(self) -> RoutingStrategy:
        """Routing strategy applied to every batch."""
        return self._strategy

    @property
    def transform_name(self) -> str:
        """Registered name of the wrapped transform."""
        return self._transform.name

    def route(self, records: Iterable[Record]) -> BatchResult:
        """Transform every record of a batch and decide its disposition.

        Args:
            records: The complete batch, in order

        Returns:
            BatchResult with counts and the emitted record sequences
        """
        run = BatchRoutingRun(self._strategy)
        for record in records:
            run.collect(record, self._transform.process(record))

        result = run.decide()
        logger.info(
            "batch_routed",
            transform=self._transform.name,
            strategy=self._strategy.value,
            disposition=result.disposition.value,
            records=result.record_count,
            enriched=result.enriched_count,
            unchanged=result.unchanged_count,
            failed=result.failed_count,
        )
        return result

    def close(self) -> None:
        """Close the wrapped transform."""
        self._transform.close()
