"""Built-in record writer plugins."""

from geohash_record.plugins.sinks.json_sink import JSONRecordWriter

__all__ = ["JSONRecordWriter"]
