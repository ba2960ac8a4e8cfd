# src/geohash_record/plugins/manager.py
"""Plugin manager for registration and lookup.

Uses pluggy for hook-based plugin registration. Built-in readers, writers
and the geohash transform are registered through the same hooks that
third-party plugins use.
"""

from typing import Any

import pluggy

from geohash_record.plugins.hookspecs import (
    PROJECT_NAME,
    RecordReaderSpec,
    RecordTransformSpec,
    RecordWriterSpec,
    hookimpl,
)
from geohash_record.plugins.protocols import (
    RecordReaderProtocol,
    RecordTransformProtocol,
    RecordWriterProtocol,
)


class _BuiltinPlugins:
    """Hook implementations for the plugins shipped with this package."""

    @hookimpl
    def geohash_record_get_readers(self) -> list[type[RecordReaderProtocol]]:
        from geohash_record.plugins.sources.json_source import JSONRecordReader

        return [JSONRecordReader]

    @hookimpl
    def geohash_record_get_writers(self) -> list[type[RecordWriterProtocol]]:
        from geohash_record.plugins.sinks.json_sink import JSONRecordWriter

        return [JSONRecordWriter]

    @hookimpl
    def geohash_record_get_transforms(self) -> list[type[RecordTransformProtocol]]:
        from geohash_record.plugins.transforms.geohash_record import GeohashRecordTransform

        return [GeohashRecordTransform]


def _collect_by_name(kind: str, results: list[list[Any]]) -> dict[str, Any]:
    """Flatten hook results into a name -> class map.

    Raises:
        ValueError: If two plugins of the same kind share a name
    """
    collected: dict[str, Any] = {}
    for classes in results:
        for cls in classes:
            name = cls.name
            if name in collected:
                raise ValueError(f"Duplicate {kind} plugin name: '{name}'. Already registered by {collected[name].__name__}")
            collected[name] = cls
    return collected


class PluginManager:
    """Manages plugin registration and lookup.

    Usage:
        manager = PluginManager()
        manager.register_builtin_plugins()

        reader_cls = manager.get_reader_by_name("json")
    """

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)

        self._pm.add_hookspecs(RecordReaderSpec)
        self._pm.add_hookspecs(RecordWriterSpec)
        self._pm.add_hookspecs(RecordTransformSpec)

        self._readers: dict[str, type[RecordReaderProtocol]] = {}
        self._writers: dict[str, type[RecordWriterProtocol]] = {}
        self._transforms: dict[str, type[RecordTransformProtocol]] = {}

    def register_builtin_plugins(self) -> None:
        """Register the readers, writers and transforms shipped with the package."""
        self.register(_BuiltinPlugins())

    def register(self, plugin: Any) -> None:
        """Register a plugin.

        Args:
            plugin: Object implementing one or more hook methods

        Raises:
            ValueError: If the plugin introduces a duplicate name
        """
        self._pm.register(plugin)
        try:
            self._refresh_caches()
        except ValueError:
            self._pm.unregister(plugin)
            raise

    def _refresh_caches(self) -> None:
        readers = _collect_by_name("reader", self._pm.hook.geohash_record_get_readers())
        writers = _collect_by_name("writer", self._pm.hook.geohash_record_get_writers())
        transforms = _collect_by_name("transform", self._pm.hook.geohash_record_get_transforms())

        # All validated, update caches
        self._readers = readers
        self._writers = writers
        self._transforms = transforms

    # === Getters ===

    def get_readers(self) -> list[type[RecordReaderProtocol]]:
        """Get all registered reader plugins."""
        return list(self._readers.values())

    def get_writers(self) -> list[type[RecordWriterProtocol]]:
        """Get all registered writer plugins."""
        return list(self._writers.values())

    def get_transforms(self) -> list[type[RecordTransformProtocol]]:
        """Get all registered transform plugins."""
        return list(self._transforms.values())

    # === Lookup by name ===

    def get_reader_by_name(self, name: str) -> type[RecordReaderProtocol] | None:
        """Get reader plugin by name."""
        return self._readers.get(name)

    def get_writer_by_name(self, name: str) -> type[RecordWriterProtocol] | None:
        """Get writer plugin by name."""
        return self._writers.get(name)

    def get_transform_by_name(self, name: str) -> type[RecordTransformProtocol] | None:
        """Get transform plugin by name."""
        return self._transforms.get(name)
