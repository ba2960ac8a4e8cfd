"""
geohash-record: geohash enrichment and batch routing for structured records.

Converts between latitude/longitude field pairs and geohash fields inside
schema-described records, then decides where each batch of records goes.
"""

__version__ = "0.1.0"
