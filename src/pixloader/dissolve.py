"""Dissolve / break-apart effect.

Each grid cell arrives once the animation progress clears its own hash
threshold, so cells pop in unevenly instead of as a uniform wipe. A revealed
cell is drawn displaced by a per-cell jitter that shrinks to zero as progress
reaches 1, which makes the pieces appear to fly into place.
"""

from __future__ import annotations

import math

import numpy as np

from .grid import empty_raster, ensure_rgba
from .noise import JITTER_X_OFFSET, JITTER_Y_OFFSET, cell_noise

JITTER_FACTOR = 1.4


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def build_break_frame(
    settled: np.ndarray,
    grid_size: int,
    cell_size: int,
    progress: float,
) -> np.ndarray:
    """Render one dissolve frame of *settled* at *progress*.

    Args:
        settled: Settled variant raster, ``grid_size * cell_size`` square
        grid_size: Logical grid size
        cell_size: Output pixels per grid cell
        progress: Animation progress, clamped to ``[0, 1]``

    Returns:
        New RGBA raster. At progress 1 it equals *settled*; at progress 0 it
        is empty.
    """
    settled = ensure_rgba(settled)
    progress = min(1.0, max(0.0, float(progress)))
    out_size = grid_size * cell_size
    out = empty_raster(out_size)
    jitter_scale = (1.0 - progress) * cell_size * JITTER_FACTOR
    max_origin = out_size - cell_size

    thresholds = cell_noise(grid_size)
    jitter_xs = cell_noise(grid_size, JITTER_X_OFFSET)
    jitter_ys = cell_noise(grid_size, JITTER_Y_OFFSET)

    for y in range(grid_size):
        for x in range(grid_size):
            if progress < thresholds[y, x]:
                continue

            src_x = x * cell_size
            src_y = y * cell_size
            source = settled[src_y : src_y + cell_size, src_x : src_x + cell_size]
            opaque = source[:, :, 3] != 0
            if not opaque.any():
                continue

            jitter_x = _round_half_up((float(jitter_xs[y, x]) * 2 - 1) * jitter_scale)
            jitter_y = _round_half_up((float(jitter_ys[y, x]) * 2 - 1) * jitter_scale)
            dest_x = _clamp(src_x + jitter_x, 0, max_origin)
            dest_y = _clamp(src_y + jitter_y, 0, max_origin)

            target = out[dest_y : dest_y + cell_size, dest_x : dest_x + cell_size]
            target[opaque] = source[opaque]

    return out
