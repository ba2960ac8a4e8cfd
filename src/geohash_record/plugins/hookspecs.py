# src/geohash_record/plugins/hookspecs.py
"""pluggy hook specifications for geohash_record plugins.

Plugins implement these hooks to register record readers, record writers
and record transforms with the plugin manager.

Usage (implementing a plugin):
    from geohash_record.plugins.hookspecs import hookimpl

    class MyPlugin:
        @hookimpl  # NOT @hookspec - that's for defining specs
        def geohash_record_get_readers(self):
            return [MyReader]
"""

from typing import TYPE_CHECKING

import pluggy

if TYPE_CHECKING:
    from geohash_record.plugins.protocols import (
        RecordReaderProtocol,
        RecordTransformProtocol,
        RecordWriterProtocol,
    )

PROJECT_NAME = "geohash_record"

hookspec = pluggy.HookspecMarker(PROJECT_NAME)

hookimpl = pluggy.HookimplMarker(PROJECT_NAME)


class RecordReaderSpec:
    """Hook specifications for record reader plugins."""

    @hookspec
    def geohash_record_get_readers(self) -> list[type["RecordReaderProtocol"]]:  # type: ignore[empty-body]
        """Return record reader classes (not instances)."""


class RecordWriterSpec:
    """Hook specifications for record writer plugins."""

    @hookspec
    def geohash_record_get_writers(self) -> list[type["RecordWriterProtocol"]]:  # type: ignore[empty-body]
        """Return record writer classes (not instances)."""


class RecordTransformSpec:
    """Hook specifications for record transform plugins."""

    @hookspec
    def geohash_record_get_transforms(self) -> list[type["RecordTransformProtocol"]]:  # type: ignore[empty-body]
        """Return record transform classes (not instances)."""
