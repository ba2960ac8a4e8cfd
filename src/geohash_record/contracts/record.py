"""Record container passed between reader, transformer, router and writer."""

from __future__ import annotations

import copy
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

from geohash_record.contracts.schema import RecordSchema


@dataclass
class Record:
    """A tree of named fields paired with the batch schema.

    Data is a plain nested dict. Nested records are nested dicts; the
    schema decides which of them may be created or written.

    The transformer never mutates a Record it is given. It works on
    copy() and returns the copy, so the caller's batch stays intact.
    """

    data: dict[str, Any]
    schema: RecordSchema = field(default_factory=RecordSchema.dynamic)

    def __getitem__(self, key: str) -> Any:
        return self.data[key]

    def __contains__(self, key: object) -> bool:
        return key in self.data

    def __iter__(self) -> Iterator[str]:
        return iter(self.data)

    def __len__(self) -> int:
        return len(self.data)

    def copy(self) -> Record:
        """Deep copy of the data, sharing the (immutable) schema."""
        return Record(copy.deepcopy(self.data), self.schema)

    def to_dict(self) -> dict[str, Any]:
        """Deep copy of the data as a plain dict."""
        return copy.deepcopy(self.data)
