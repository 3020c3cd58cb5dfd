"""Record mapping engine.

This module resolves dot-delimited paths inside parsed JSON records
and maps each record onto typed writes for destination columns.
"""
