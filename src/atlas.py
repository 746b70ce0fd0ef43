"""Public SDK surface for Atlas.

This module provides a stable import path for library users.
It re-exports the session controller, typed models, and the
aggregation entry points.
"""

from __future__ import annotations

from aggregate.engine import build_snapshot
from aggregate.filtering import apply_filters
from aggregate.hexbin import bin_records, hexagon_vertices
from aggregate.insights import build_key_findings
from core.config import AtlasConfig
from core.filter_spec import load_filter_state
from core.types import (
    AggregateSnapshot,
    EnrichedRecord,
    FilterState,
    HexBin,
    IngestOptions,
    IngestResult,
    KeyFinding,
)
from ingest.pipeline import ingest_records
from session.controller import DashboardSession
from session.state import DashboardState
from store.cache_store import SnapshotCache

__all__ = [
    "AggregateSnapshot",
    "AtlasConfig",
    "DashboardSession",
    "DashboardState",
    "EnrichedRecord",
    "FilterState",
    "HexBin",
    "IngestOptions",
    "IngestResult",
    "KeyFinding",
    "SnapshotCache",
    "apply_filters",
    "bin_records",
    "build_key_findings",
    "build_snapshot",
    "hexagon_vertices",
    "ingest_records",
    "load_filter_state",
]
