"""Tests for building a processor from settings."""

from typing import Any

import pytest

from geohash_record.contracts import Record, RecordResult, Relationship
from geohash_record.core.config import GeohashRecordSettings
from geohash_record.plugins import PluginManager, hookimpl
from geohash_record.plugins.sinks.json_sink import JSONRecordWriter
from geohash_record.plugins.sources.json_source import JSONRecordReader
from geohash_record.plugins.transforms.geohash_record import GeohashRecordTransform


class _JsonOnlyPlugins:
    @hookimpl
    def geohash_record_get_readers(self) -> list[type]:
        return [JSONRecordReader]

    @hookimpl
    def geohash_record_get_writers(self) -> list[type]:
        return [JSONRecordWriter]


class _CountingGeohashTransform(GeohashRecordTransform):
    """Geohash transform that counts processed records."""

    processed = 0

    def process(self, record: Record) -> RecordResult:
        type(self).processed += 1
        return super().process(record)


class _CountingTransformPlugin:
    @hookimpl
    def geohash_record_get_transforms(self) -> list[type]:
        return [_CountingGeohashTransform]


def _settings(**geohash: Any) -> GeohashRecordSettings:
    return GeohashRecordSettings.model_validate({"geohash": {"mode": "ENCODE", **geohash}})


class TestBuildProcessor:
    """Plugins are resolved by name through the manager."""

    @pytest.fixture
    def manager(self) -> PluginManager:
        manager = PluginManager()
        manager.register(_JsonOnlyPlugins())
        return manager

    def test_transform_resolved_from_manager(self, manager: PluginManager) -> None:
        from geohash_record.cli_helpers import build_processor

        manager.register(_CountingTransformPlugin())
        _CountingGeohashTransform.processed = 0

        processor = build_processor(_settings(precision=5), manager)
        result = processor.process(b'[{"latitude": 0.0, "longitude": 0.0}]')

        assert _CountingGeohashTransform.processed == 1
        success = result.output_for(Relationship.SUCCESS)
        assert success is not None
        assert b'"s0000"' in success.content

    def test_unregistered_transform_rejected(self, manager: PluginManager) -> None:
        from geohash_record.cli_helpers import build_processor

        with pytest.raises(ValueError, match="Transform plugin 'geohash_record' is not registered"):
            build_processor(_settings(), manager)

    def test_unknown_reader_rejected(self) -> None:
        from geohash_record.cli_helpers import build_processor

        manager = PluginManager()
        manager.register_builtin_plugins()
        settings = GeohashRecordSettings.model_validate({"geohash": {"mode": "ENCODE"}, "reader": {"plugin": "parquet"}})

        with pytest.raises(ValueError, match="Unknown reader plugin: 'parquet'"):
            build_processor(settings, manager)
