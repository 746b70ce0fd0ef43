"""Aggregation layer.

This module computes snapshot views, hexagonal bins, and filtered
subsets from immutable enriched-record collections.
"""
