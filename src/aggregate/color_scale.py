"""Color scale helpers for map and chart consumers."""

from __future__ import annotations

from typing import Sequence

from core.constants import DENSITY_PALETTE


def color_from_scale(value: float, minimum: float, maximum: float, palette: Sequence[str]) -> str:
    """Pick the palette color for a value within [minimum, maximum].

    Zero always maps to the first color. A degenerate range maps every
    non-zero value to the last color.
    """
    if value == 0:
        return palette[0]
    if maximum == minimum:
        return palette[-1]
    normalized = (value - minimum) / (maximum - minimum)
    index = min(int(normalized * len(palette)), len(palette) - 1)
    return palette[max(index, 0)]


def legend_breaks(
    max_count: int,
    palette: Sequence[str] = DENSITY_PALETTE,
) -> list[tuple[str, int]]:
    """Return (color, lower bound) legend rows, darkest first."""
    steps = len(palette) - 1
    rows: list[tuple[str, int]] = []
    for index, color in enumerate(reversed(palette)):
        threshold = int(max_count * (steps - index) / steps + 0.5) if steps else max_count
        rows.append((color, threshold))
    return rows
