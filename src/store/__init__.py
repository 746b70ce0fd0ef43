"""Snapshot persistence layer.

This module caches one session payload across runs and owns the JSON
serialization of records and aggregate snapshots.
"""
