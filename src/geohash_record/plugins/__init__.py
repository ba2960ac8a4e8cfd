# src/geohash_record/plugins/__init__.py
"""Plugin system: record readers, writers and transforms via pluggy.

- Protocols: Type contracts for plugin implementations
- Base classes: Convenient base classes with lifecycle hooks
- Config: Frozen pydantic base for plugin options
- Manager: Plugin registration and lookup
- Hookspecs: pluggy hook definitions
"""

from geohash_record.plugins.base import (
    BaseRecordReader,
    BaseRecordWriter,
    BaseTransform,
)
from geohash_record.plugins.config_base import PluginConfig, PluginConfigError
from geohash_record.plugins.hookspecs import hookimpl, hookspec
from geohash_record.plugins.manager import PluginManager
from geohash_record.plugins.protocols import (
    RecordReaderProtocol,
    RecordTransformProtocol,
    RecordWriterProtocol,
)

__all__ = [
    "BaseRecordReader",
    "BaseRecordWriter",
    "BaseTransform",
    "PluginConfig",
    "PluginConfigError",
    "PluginManager",
    "RecordReaderProtocol",
    "RecordTransformProtocol",
    "RecordWriterProtocol",
    "hookimpl",
    "hookspec",
]
