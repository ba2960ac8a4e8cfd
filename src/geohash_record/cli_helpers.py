"""CLI helper functions for plugin instantiation."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from geohash_record.core.config import GeohashRecordSettings
    from geohash_record.engine.processor import BatchProcessor
    from geohash_record.plugins.manager import PluginManager

# Settings have no transform section to choose from: the geohash section
# configures this one registered transform.
GEOHASH_TRANSFORM = "geohash_record"


def build_processor(config: "GeohashRecordSettings", manager: "PluginManager") -> "BatchProcessor":
    """Instantiate the reader, transform, router and writer described by settings.

    Args:
        config: Validated settings
        manager: Plugin manager with plugins registered

    Returns:
        BatchProcessor ready to process input units

    Raises:
        ValueError: If settings reference an unregistered plugin
        PluginConfigError: If plugin options are invalid
    """
    from geohash_record.engine import BatchProcessor, BatchRouter

    reader_cls = manager.get_reader_by_name(config.reader.plugin)
    if reader_cls is None:
        raise ValueError(f"Unknown reader plugin: '{config.reader.plugin}'. Available: {sorted(c.name for c in manager.get_readers())}")
    writer_cls = manager.get_writer_by_name(config.writer.plugin)
    if writer_cls is None:
        raise ValueError(f"Unknown writer plugin: '{config.writer.plugin}'. Available: {sorted(c.name for c in manager.get_writers())}")

    transform_cls = manager.get_transform_by_name(GEOHASH_TRANSFORM)
    if transform_cls is None:
        available = sorted(c.name for c in manager.get_transforms())
        raise ValueError(f"Transform plugin '{GEOHASH_TRANSFORM}' is not registered. Available: {available}")

    reader = reader_cls(dict(config.reader.options))  # type: ignore[call-arg]
    writer = writer_cls(dict(config.writer.options))  # type: ignore[call-arg]
    transform = transform_cls(config.geohash.transform_options())  # type: ignore[call-arg]
    router = BatchRouter(transform, config.geohash.routing_strategy)

    return BatchProcessor(reader, writer, router, schema=config.build_schema())
