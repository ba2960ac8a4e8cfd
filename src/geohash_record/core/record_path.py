"""Record path parsing and resolution.

A record path addresses one scalar field inside a record as a sequence of
'/name' segments, e.g. "/location/latitude". Wildcards, array indices and
predicates are not part of the language.

Resolution sits behind the RecordPathResolver protocol so a richer path
engine can replace SlashPathResolver without touching the transformer or
the router.

Example usage:
    from geohash_record.core.record_path import MISSING, SlashPathResolver, parse_record_path

    resolver = SlashPathResolver()
    path = parse_record_path("/location/latitude")
    value = resolver.get(record, path)
    if value is MISSING:
        # Field absent or null: nothing to do for this record
        ...
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Final, Protocol

from geohash_record.contracts import InvalidRecordPathError, PathWriteError, Record, RecordSchema

_FORBIDDEN_SEGMENT_CHARS: Final = frozenset("[]*")


class MissingSentinel:
    """Sentinel for a field that is absent or null.

    Singleton - use the MISSING instance and compare with `is`.
    """

    __slots__ = ()

    def __repr__(self) -> str:
        return "<MISSING>"


MISSING: Final[MissingSentinel] = MissingSentinel()


@dataclass(frozen=True)
class RecordPath:
    """Parsed path expression.

    Attributes:
        segments: Field names from the root to the target field
    """

    segments: tuple[str, ...]

    def __str__(self) -> str:
        return "/" + "/".join(self.segments)

    @property
    def parents(self) -> tuple[str, ...]:
        """Segments naming the containers above the target field."""
        return self.segments[:-1]

    @property
    def leaf(self) -> str:
        """Name of the target field."""
        return self.segments[-1]


@lru_cache(maxsize=256)
def parse_record_path(expression: str) -> RecordPath:
    """Parse a '/name/name' path expression.

    Args:
        expression: Path text, e.g. "/latitude" or "/location/lat"

    Returns:
        Parsed RecordPath (cached; instances are immutable)

    Raises:
        InvalidRecordPathError: If the expression is not a plain segment path
    """
    if not isinstance(expression, str) or not expression.startswith("/"):
        raise InvalidRecordPathError(f"Record path must start with '/', got {expression!r}")

    segments = tuple(expression[1:].split("/"))
    for segment in segments:
        if not segment.strip():
            raise InvalidRecordPathError(f"Record path {expression!r} contains an empty segment")
        if segment in (".", ".."):
            raise InvalidRecordPathError(f"Record path {expression!r}: relative segment {segment!r} is not supported")
        if _FORBIDDEN_SEGMENT_CHARS.intersection(segment):
            raise InvalidRecordPathError(
                f"Record path {expression!r}: segment {segment!r} uses wildcards, indices or predicates, which are not supported"
            )
    return RecordPath(segments)


class RecordPathResolver(Protocol):
    """Locate and write fields inside a record."""

    def get(self, record: Record, path: RecordPath) -> Any:
        """Value at path, or MISSING if absent or null."""
        ...

    def set(self, record: Record, path: RecordPath, value: Any) -> Record:
        """Write value at path and return the record.

        Raises:
            PathWriteError: If the schema or the record shape forbids the write.
                The record is left unmodified in that case.
        """
        ...


class SlashPathResolver:
    """Resolver for '/name' segment paths over nested dict records.

    set() mutates the given record in place, but only after the whole
    write has been validated: a PathWriteError leaves the record untouched.
    Callers that need the input preserved pass a copy.
    """

    def get(self, record: Record, path: RecordPath) -> Any:
        node: Any = record.data
        for name in path.segments:
            if not isinstance(node, Mapping) or name not in node:
                return MISSING
            node = node[name]
        return MISSING if node is None else node

    def set(self, record: Record, path: RecordPath, value: Any) -> Record:
        self._check_writable(record, path, value)

        node = record.data
        for name in path.parents:
            child = node.get(name)
            if child is None:
                child = {}
                node[name] = child
            node = child
        node[path.leaf] = value
        return record

    def _check_writable(self, record: Record, path: RecordPath, value: Any) -> None:
        node: Any = record.data
        schema: RecordSchema = record.schema

        for depth, name in enumerate(path.parents):
            field_def = schema.get_field(name)
            if field_def is None and not schema.allows_extra_fields:
                raise PathWriteError(str(path), f"field '{name}' is not declared in a strict schema")

            # node is None once we are below a container that will be created
            child = node.get(name) if node is not None else None
            if child is not None and not isinstance(child, Mapping):
                location = "/" + "/".join(path.segments[: depth + 1])
                raise PathWriteError(str(path), f"'{location}' holds a {type(child).__name__}, not a nested record")

            child_schema = schema.child_schema(name)
            if child_schema is None:
                # field_def cannot be None here: undeclared fields get a dynamic child schema
                assert field_def is not None
                raise PathWriteError(str(path), f"field '{name}' is declared as {field_def.field_type} and cannot contain nested fields")

            schema = child_schema
            node = child

        field_def = schema.get_field(path.leaf)
        if field_def is None:
            if not schema.allows_extra_fields:
                raise PathWriteError(str(path), f"field '{path.leaf}' is not declared in a strict schema")
            return
        if not field_def.accepts(value):
            raise PathWriteError(
                str(path),
                f"field '{path.leaf}' is declared as {field_def.field_type}"
                f"{'' if field_def.required else '?'} and does not accept {type(value).__name__} value {value!r}",
            )
