"""Write sink layer.

This module builds entity ids and receives cell writes emitted by the
record mapper, either in memory or as JSONL bulk-load files.
"""
