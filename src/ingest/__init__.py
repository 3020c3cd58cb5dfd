"""Bulk import driver.

This module reads JSON-lines sources and feeds each line through the
record mapper, applying the job-level failure policy.
"""
