# src/geohash_record/plugins/base.py
"""Base classes for plugin implementations.

These provide common functionality and ensure proper interface compliance.
Built-in plugins subclass BaseTransform, BaseRecordReader or BaseRecordWriter;
the plugin manager looks them up by their `name` class attribute.

Lifecycle Contract:
    __init__(config) -> [process / read_records / write_records]* -> close()

- __init__ validates the config dict through the plugin's PluginConfig
  subclass and raises PluginConfigError on invalid options.
- Plugins hold no per-batch state, so one instance may serve many
  batches, including batches processed in parallel threads.
- close() releases resources. BatchProcessor.close() calls it on the reader,
  the transform and the writer once the CLI has finished all inputs.
  Built-ins hold none.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any

from geohash_record.contracts import Record, RecordResult, RecordSchema


class BaseTransform(ABC):
    """Base class for record transforms.

    The batch router calls process() once per record, in batch order, and
    partitions records by the returned outcome. process() must never raise
    for bad record data: invalid values become a FAILED RecordResult.

        class MyTransform(BaseTransform):
            name = "my_transform"

            def process(self, record: Record) -> RecordResult:
                enriched = record.copy()
                enriched.data["new_field"] = "value"
                return RecordResult.enriched(enriched, success_reason={"action": "encoded"})
    """

    name: str
    plugin_version: str = "0.0.0"

    def __init__(self, config: dict[str, Any]) -> None:
        """Initialize with configuration.

        Args:
            config: Plugin configuration
        """
        self.config = config

    @abstractmethod
    def process(self, record: Record) -> RecordResult:
        """Transform a single record.

        Args:
            record: Input record. Implementations must not mutate it.

        Returns:
            RecordResult with the outcome and resulting record
        """
        ...

    def close(self) -> None:  # noqa: B027 - optional override, no resources by default
        """Release resources."""


class BaseRecordReader(ABC):
    """Base class for record readers (raw bytes -> records)."""

    name: str
    plugin_version: str = "0.0.0"

    def __init__(self, config: dict[str, Any]) -> None:
        self.config = config

    @abstractmethod
    def read_records(self, raw: bytes, schema: RecordSchema | None = None) -> list[Record]:
        """Parse one input unit into a batch of records."""
        ...

    def close(self) -> None:  # noqa: B027
        """Release resources."""


class BaseRecordWriter(ABC):
    """Base class for record writers (records -> raw bytes)."""

    name: str
    plugin_version: str = "0.0.0"

    def __init__(self, config: dict[str, Any]) -> None:
        self.config = config

    @abstractmethod
    def write_records(self, records: Sequence[Record]) -> bytes:
        """Serialize one emitted batch."""
        ...

    def close(self) -> None:  # noqa: B027
        """Release resources."""
