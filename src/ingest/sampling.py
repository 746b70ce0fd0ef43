"""Deterministic row sampling for streaming ingest.

Sampling happens before validation: rejected rows still consume their
sampling slot, so exactly one row in every ``ratio`` reaches validation.
"""

from __future__ import annotations

from core.errors import AtlasConfigError


class RowSampler:
    """Modulo counter that keeps the Nth, 2Nth, ... row of a stream."""

    def __init__(self, ratio: int) -> None:
        if ratio < 1:
            raise AtlasConfigError(
                f"Invalid sampling ratio {ratio}: expected an integer >= 1. "
                "Use 1 to keep every row."
            )
        self._ratio = ratio
        self._counter = 0

    @property
    def ratio(self) -> int:
        """Number of rows per kept row."""
        return self._ratio

    def keep(self) -> bool:
        """Advance the counter by one row and report whether to keep it."""
        self._counter += 1
        if self._counter < self._ratio:
            return False
        self._counter = 0
        return True
