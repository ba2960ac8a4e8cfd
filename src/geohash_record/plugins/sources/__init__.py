"""Built-in record reader plugins."""

from geohash_record.plugins.sources.json_source import JSONRecordReader

__all__ = ["JSONRecordReader"]
