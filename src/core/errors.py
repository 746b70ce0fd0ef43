"""Atlas exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each subsystem raises a specific error type for debuggability.
Per-row validation failures are not exceptions; see RecordRejection.
"""

from __future__ import annotations


class AtlasError(Exception):
    """Base exception for all Atlas failures."""


class AtlasConfigError(AtlasError):
    """Raised for invalid runtime configuration."""


class AtlasIngestError(AtlasError):
    """Raised when the row source is unreachable or the parser faults."""


class AtlasAggregationError(AtlasError):
    """Raised when an aggregate view cannot be computed."""


class AtlasCacheError(AtlasError):
    """Raised for cache payloads that cannot be decoded."""


class AtlasFilterError(AtlasError):
    """Raised for invalid filter state or filter preset files."""


class AtlasDependencyError(AtlasError):
    """Raised when an optional runtime dependency is missing."""
