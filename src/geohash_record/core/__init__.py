# src/geohash_record/core/__init__.py
"""Core infrastructure: geohash codec, record paths, configuration, logging."""
