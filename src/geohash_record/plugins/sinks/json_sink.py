# src/geohash_record/plugins/sinks/json_sink.py
"""JSON record writer plugin.

Serializes one emitted batch as a JSON array or as JSON Lines.
Non-finite floats are refused rather than written as NaN/Infinity.
"""

import json
from collections.abc import Sequence
from typing import Any, Literal

from geohash_record.contracts import Record, RecordWriterError
from geohash_record.plugins.base import BaseRecordWriter
from geohash_record.plugins.config_base import PluginConfig


class JSONWriterConfig(PluginConfig):
    """Configuration for the JSON record writer."""

    format: Literal["json", "jsonl"] = "json"
    indent: int | None = None
    encoding: str = "utf-8"


class JSONRecordWriter(BaseRecordWriter):
    """Write records as JSON bytes.

    Config options:
        format: "json" (array, default) or "jsonl" (lines)
        indent: Indentation for pretty-printing (default: None for compact).
            Ignored for jsonl.
        encoding: Output encoding (default: "utf-8")
    """

    name = "json"
    plugin_version = "1.0.0"

    def __init__(self, config: dict[str, Any]) -> None:
        super().__init__(config)
        cfg = JSONWriterConfig.from_dict(config)
        self._format = cfg.format
        self._indent = cfg.indent
        self._encoding = cfg.encoding

    def write_records(self, records: Sequence[Record]) -> bytes:
        """Serialize records in order.

        Raises:
            RecordWriterError: If a value is not JSON-serializable or the
                text cannot be encoded
        """
        rows = [record.data for record in records]
        try:
            if self._format == "jsonl":
                text = "".join(json.dumps(row, allow_nan=False, ensure_ascii=False) + "\n" for row in rows)
            else:
                text = json.dumps(rows, indent=self._indent, allow_nan=False, ensure_ascii=False)
            return text.encode(self._encoding)
        except (TypeError, ValueError) as e:
            raise RecordWriterError(f"Cannot serialize records as {self._format}: {e}") from e
        except LookupError as e:
            raise RecordWriterError(f"Unknown encoding {self._encoding!r}: {e}") from e
