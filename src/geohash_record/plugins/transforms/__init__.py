"""Built-in transform plugins.

Transforms process one record at a time. Each transform receives a record
and returns a RecordResult saying whether it was enriched, left unchanged,
or failed.
"""
