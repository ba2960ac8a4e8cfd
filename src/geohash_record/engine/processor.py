# src/geohash_record/engine/processor.py
"""Batch processor: reader -> router -> writer.

One call to process() handles one input unit (a "flow file"): the raw
bytes are parsed into a batch of records, the batch is routed, and every
emitted record sequence is serialized back to bytes.

Collaborator failures are routed, not raised: if the reader or the writer
fails, the untouched raw input is emitted to failure and no other output
is produced.

A processor serves any number of process() calls; close() releases the
plugins once the caller is done with it.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from geohash_record.contracts import (
    BatchDisposition,
    BatchResult,
    RecordReaderError,
    RecordSchema,
    RecordWriterError,
    Relationship,
)
from geohash_record.core.logging import get_logger
from geohash_record.engine.router import BatchRouter
from geohash_record.plugins.protocols import RecordReaderProtocol, RecordWriterProtocol

logger = get_logger(__name__)


@dataclass(frozen=True)
class FlowOutput:
    """One serialized batch transferred to a relationship."""

    relationship: Relationship
    content: bytes = field(repr=False)
    record_count: int


@dataclass(frozen=True)
class ProcessorResult:
    """Everything produced for one input unit.

    Attributes:
        outputs: Serialized outputs in relationship order (success,
            failure, original). Suppressed outputs are absent.
        batch: Routing result, or None when a collaborator failed
        error: Collaborator error message, when one failed
    """

    outputs: tuple[FlowOutput, ...]
    batch: BatchResult | None = None
    error: str | None = None

    @property
    def failed(self) -> bool:
        """True if the input as a whole went to failure."""
        return self.batch is None or self.batch.disposition == BatchDisposition.FAIL_ALL

    def output_for(self, relationship: Relationship) -> FlowOutput | None:
        """Output transferred to a relationship, if any."""
        for output in self.outputs:
            if output.relationship == relationship:
                return output
        return None


class BatchProcessor:
    """Wire an injected reader and writer around a BatchRouter.

    Example:
        processor = BatchProcessor(reader, writer, router, schema=schema)
        result = processor.process(raw_bytes)
        for output in result.outputs:
            deliver(output.relationship, output.content)
    """

    def __init__(
        self,
        reader: RecordReaderProtocol,
        writer: RecordWriterProtocol,
        router: BatchRouter,
        *,
        schema: RecordSchema | None = None,
    ) -> None:
        self._reader = reader
        self._writer = writer
        self._router = router
        self._schema = schema

    def process(self, raw: bytes) -> ProcessorResult:
        """Process one input unit as one batch.

        Args:
            raw: Complete input unit

        Returns:
            ProcessorResult with the serialized outputs
        """
        try:
            records = self._reader.read_records(raw, self._schema)
        except RecordReaderError as e:
            logger.warning("reader_failed", reader=self._reader.name, input_bytes=len(raw), error=str(e))
            return _raw_to_failure(raw, str(e))

        batch = self._router.route(records)

        outputs: list[FlowOutput] = []
        for relationship in Relationship:
            if relationship not in batch.outputs:
                continue
            emitted = batch.outputs[relationship]
            try:
                content = self._writer.write_records(emitted)
            except RecordWriterError as e:
                logger.warning(
                    "writer_failed",
                    writer=self._writer.name,
                    relationship=relationship.value,
                    records=len(emitted),
                    error=str(e),
                )
                return _raw_to_failure(raw, str(e))
            outputs.append(FlowOutput(relationship=relationship, content=content, record_count=len(emitted)))

        return ProcessorResult(outputs=tuple(outputs), batch=batch)

    def close(self) -> None:
        """Close the reader, the transform and the writer.

        Every collaborator is closed even if an earlier one fails; failures
        are logged, not raised, so cleanup never masks the run's outcome.
        """
        closers = (
            ("reader", self._reader.name, self._reader.close),
            ("transform", self._router.transform_name, self._router.close),
            ("writer", self._writer.name, self._writer.close),
        )
        for kind, name, close in closers:
            try:
                close()
            except Exception as e:
                logger.warning("plugin_close_failed", plugin_kind=kind, plugin=name, error=str(e))


def _raw_to_failure(raw: bytes, error: str) -> ProcessorResult:
    return ProcessorResult(
        outputs=(FlowOutput(relationship=Relationship.FAILURE, content=raw, record_count=0),),
        error=error,
    )
