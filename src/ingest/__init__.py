"""Collision data ingestion.

This module streams raw collision rows, samples and validates them,
and produces the immutable enriched-record collection for aggregation.
"""
