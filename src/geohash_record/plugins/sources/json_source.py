# src/geohash_record/plugins/sources/json_source.py
"""JSON record reader plugin.

Parses one input unit into a batch of records. Supports a JSON array of
objects (a single top-level object is read as a one-record batch) and
JSON Lines.

NOTE: Non-standard JSON constants (NaN, Infinity, -Infinity) are rejected
at parse time. Use null for missing values.
"""

import json
from typing import Any, Literal

from geohash_record.contracts import Record, RecordReaderError, RecordSchema
from geohash_record.plugins.base import BaseRecordReader
from geohash_record.plugins.config_base import PluginConfig


def _reject_nonfinite_constant(value: str) -> None:
    """Reject non-standard JSON constants (NaN, Infinity, -Infinity).

    Passed to json.loads via parse_constant. Python's json module accepts
    these constants by default, but RFC 8259 does not.

    Raises:
        ValueError: Always
    """
    raise ValueError(f"Non-standard JSON constant '{value}' not allowed. Use null for missing values, not NaN/Infinity.")


class JSONReaderConfig(PluginConfig):
    """Configuration for the JSON record reader."""

    format: Literal["json", "jsonl"] = "json"
    encoding: str = "utf-8"


class JSONRecordReader(BaseRecordReader):
    """Read records from JSON bytes.

    Config options:
        format: "json" (array or single object, default) or "jsonl" (one object per line)
        encoding: Input encoding (default: "utf-8")

    Every element must be a JSON object. Anything else aborts the batch
    with RecordReaderError.
    """

    name = "json"
    plugin_version = "1.0.0"

    def __init__(self, config: dict[str, Any]) -> None:
        super().__init__(config)
        cfg = JSONReaderConfig.from_dict(config)
        self._format = cfg.format
        self._encoding = cfg.encoding

    def read_records(self, raw: bytes, schema: RecordSchema | None = None) -> list[Record]:
        """Parse raw JSON bytes into records.

        Args:
            raw: Complete input unit
            schema: Schema attached to every record (dynamic when None)

        Returns:
            Records in input order

        Raises:
            RecordReaderError: On undecodable bytes, malformed JSON,
                non-finite constants, or non-object elements
        """
        schema = schema if schema is not None else RecordSchema.dynamic()

        try:
            text = raw.decode(self._encoding)
        except (UnicodeDecodeError, LookupError) as e:
            raise RecordReaderError(f"Input is not valid {self._encoding}: {e}") from e

        if self._format == "jsonl":
            rows = self._parse_lines(text)
        else:
            rows = self._parse_document(text)

        return [Record(row, schema) for row in rows]

    def _parse_document(self, text: str) -> list[dict[str, Any]]:
        try:
            data = json.loads(text, parse_constant=_reject_nonfinite_constant)
        except json.JSONDecodeError as e:
            raise RecordReaderError(f"JSON parse error at line {e.lineno} col {e.colno}: {e.msg}") from e
        except ValueError as e:
            # From _reject_nonfinite_constant
            raise RecordReaderError(f"JSON parse error: {e}") from e

        if isinstance(data, dict):
            return [data]
        if not isinstance(data, list):
            raise RecordReaderError(f"Expected a JSON array of objects or a single object, got {type(data).__name__}")

        for index, item in enumerate(data):
            if not isinstance(item, dict):
                raise RecordReaderError(f"Element {index} is {type(item).__name__}, expected a JSON object")
        return data

    def _parse_lines(self, text: str) -> list[dict[str, Any]]:
        rows: list[dict[str, Any]] = []
        for line_num, raw_line in enumerate(text.splitlines(), start=1):
            line = raw_line.strip()
            if not line:  # Skip empty lines
                continue
            try:
                row = json.loads(line, parse_constant=_reject_nonfinite_constant)
            except (json.JSONDecodeError, ValueError) as e:
                raise RecordReaderError(f"JSON parse error at line {line_num}: {e}") from e
            if not isinstance(row, dict):
                raise RecordReaderError(f"Expected a JSON object at line {line_num}, got {type(row).__name__}")
            rows.append(row)
        return rows
