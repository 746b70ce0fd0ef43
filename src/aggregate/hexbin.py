"""Hexagonal spatial binning.

This module groups collision records into fixed-radius hexagonal cells
on the d3-hexbin lattice, keyed on x=longitude and y=latitude. Cell
geometry depends only on coordinates and radius, so identical points
always land in the same cell whatever the input order.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import math
from typing import Iterable

from core.types import EnrichedRecord, HexBin

_SIN_60 = math.sin(math.pi / 3)


@dataclass
class _CellAccumulator:
    """Running totals for one populated cell."""

    count: int = 0
    killed: int = 0
    injured: int = 0
    severity_score: int = 0
    factor_counts: dict[str, int] = field(default_factory=dict)

    def add(self, record: EnrichedRecord) -> None:
        self.count += 1
        self.killed += record.killed
        self.injured += record.injured
        self.severity_score += record.severity_score
        factor = record.primary_factor
        self.factor_counts[factor] = self.factor_counts.get(factor, 0) + 1

    def top_factor(self) -> str:
        # max() returns the first maximal item, so ties go to the first-seen factor.
        if not self.factor_counts:
            return "Unknown"
        return max(self.factor_counts.items(), key=lambda item: item[1])[0]


def bin_records(records: Iterable[EnrichedRecord], radius: float) -> list[HexBin]:
    """Aggregate records into populated hexagonal cells.

    Args:
        records: Records to bin, either the full dataset or a filtered subset.
        radius: Hexagon radius in coordinate degrees.

    Returns:
        One HexBin per populated cell, ordered by first population.
    """
    cells: dict[tuple[int, int], _CellAccumulator] = {}
    for record in records:
        cell = cell_for(record.longitude, record.latitude, radius)
        accumulator = cells.get(cell)
        if accumulator is None:
            accumulator = _CellAccumulator()
            cells[cell] = accumulator
        accumulator.add(record)
    return [_build_hexbin(cell, accumulator, radius) for cell, accumulator in cells.items()]


def cell_for(x: float, y: float, radius: float) -> tuple[int, int]:
    """Return the (column, row) lattice key containing a point.

    Args:
        x: Point longitude.
        y: Point latitude.
        radius: Hexagon radius in coordinate degrees.

    Returns:
        Lattice key of the nearest hexagon center.
    """
    dx = radius * 2 * _SIN_60
    dy = radius * 1.5
    py = y / dy
    row = _round_half_up(py)
    px = x / dx - (row & 1) / 2
    column = _round_half_up(px)
    py1 = py - row
    if abs(py1) * 3 > 1:
        px1 = px - column
        column2 = column + (-1 if px < column else 1) / 2
        row2 = row + (-1 if py < row else 1)
        px2 = px - column2
        py2 = py - row2
        if px1 * px1 + py1 * py1 > px2 * px2 + py2 * py2:
            column = int(column2 + (1 if row & 1 else -1) / 2)
            row = row2
    return column, row


def cell_center(cell: tuple[int, int], radius: float) -> tuple[float, float]:
    """Return the (x, y) center of a lattice cell."""
    column, row = cell
    dx = radius * 2 * _SIN_60
    dy = radius * 1.5
    return (column + (row & 1) / 2) * dx, row * dy


def bin_members(
    records: Iterable[EnrichedRecord],
    cell: tuple[int, int],
    radius: float,
) -> list[EnrichedRecord]:
    """Return the records falling inside one cell, in input order."""
    return [
        record
        for record in records
        if cell_for(record.longitude, record.latitude, radius) == cell
    ]


def hexagon_vertices(hexbin: HexBin, radius: float) -> list[tuple[float, float]]:
    """Return six flat-top polygon vertices as (lat, lon) pairs for map layers."""
    vertices: list[tuple[float, float]] = []
    for index in range(6):
        angle = math.pi / 3 * index
        vertices.append(
            (hexbin.y + radius * math.sin(angle), hexbin.x + radius * math.cos(angle))
        )
    return vertices


def _build_hexbin(
    cell: tuple[int, int],
    accumulator: _CellAccumulator,
    radius: float,
) -> HexBin:
    x, y = cell_center(cell, radius)
    return HexBin(
        cell=cell,
        x=x,
        y=y,
        count=accumulator.count,
        killed=accumulator.killed,
        injured=accumulator.injured,
        severity_score=accumulator.severity_score,
        avg_severity=accumulator.severity_score / accumulator.count,
        top_factor=accumulator.top_factor(),
    )


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)
