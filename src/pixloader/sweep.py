"""Angular sweep effect: a radial wipe that clears and rebuilds the icon.

Every cell gets an angular fraction in ``[0, 1)`` measuring its clockwise
position around the grid centre, starting from the top-left bearing. Clear
hides cells whose fraction is below the progress; rebuild shows cells whose
fraction is at most the progress.

The icon's central vertical stroke (the "bar") does not take part in the
wipe. On rebuild it fills bottom-up on its own schedule once the sweep has
passed a delay fraction; on clear it retracts top-down as the time mirror of
the rebuild.
"""

from __future__ import annotations

import math
from functools import lru_cache

import numpy as np

from .grid import empty_raster, ensure_rgba, expand_mask, segments

START_ANGLE = -3 * math.pi / 4
SWEEP_STEP_CELLS = 3


@lru_cache(maxsize=16)
def _angle_field(grid_size: int, start_angle: float) -> np.ndarray:
    centre = grid_size / 2
    ys, xs = np.mgrid[0:grid_size, 0:grid_size]
    angles = np.arctan2(ys + 0.5 - centre, xs + 0.5 - centre)
    field = np.mod(angles - start_angle + 2 * math.pi, 2 * math.pi) / (2 * math.pi)
    field = np.where(field >= 1.0, field - 1.0, field)
    field.setflags(write=False)
    return field


def angle_field(grid_size: int, start_angle: float = START_ANGLE) -> np.ndarray:
    """Return the read-only ``(N, N)`` angular-fraction field, indexed ``[y, x]``.

    0 sits at *start_angle* (top-left, -135 degrees by default) and values grow
    clockwise on screen, wrapping once just before 1.0.
    """
    return _angle_field(grid_size, start_angle)


def sweep_progress(local_index: int, grid_size: int) -> float:
    """Progress of a clear/rebuild frame; the sweep completes in ``N / 3`` frames."""
    return min(1.0, (local_index + 1) * (SWEEP_STEP_CELLS / grid_size))


def bar_progress(progress: float, delay: float) -> float:
    """Progress of the bar once the sweep has passed *delay*."""
    if delay >= 1.0:
        return 1.0 if progress >= 1.0 else 0.0
    return min(1.0, max(0.0, (progress - delay) / (1.0 - delay)))


def detect_bar_columns(
    mask: np.ndarray,
    band: tuple[float, float] = (0.25, 0.75),
    max_width: int = 3,
    min_segments: int = 3,
) -> tuple[int, ...]:
    """Find the icon's central vertical stroke.

    Columns inside the horizontal *band* (fractions of the grid width) are
    scored by how many "on" cells they hold in the middle third of rows. The
    best column, ties broken towards the centre, is widened with adjacent
    columns of equal score up to *max_width* columns.

    The heuristic only applies when some row has at least *min_segments* runs
    (outline, stroke, outline); otherwise, or when the band is empty, the
    horizontal midpoint column is returned.

    Returns:
        Sorted tuple of 1 to *max_width* adjacent column indices
    """
    rows, width = mask.shape
    midpoint = (width // 2,)
    if not any(len(segments(row)) >= min_segments for row in mask):
        return midpoint

    first_row = rows // 3
    last_row = max(first_row + 1, (2 * rows) // 3)
    counts = mask[first_row:last_row].sum(axis=0)

    lo = max(0, int(band[0] * width))
    hi = min(width, max(lo + 1, int(math.ceil(band[1] * width))))
    band_counts = counts[lo:hi]
    if band_counts.size == 0 or band_counts.max() == 0:
        return midpoint

    best_score = band_counts.max()
    centre = (width - 1) / 2
    candidates = [lo + i for i, score in enumerate(band_counts) if score == best_score]
    best = min(candidates, key=lambda col: (abs(col - centre), col))

    columns = [best]
    left, right = best - 1, best + 1
    while len(columns) < max_width:
        grew = False
        if right < hi and counts[right] == best_score:
            columns.append(right)
            right += 1
            grew = True
        if len(columns) < max_width and left >= lo and counts[left] == best_score:
            columns.append(left)
            left -= 1
            grew = True
        if not grew:
            break
    return tuple(sorted(columns))


def _bar_cells(grid_size: int, bars: tuple[int, ...]) -> np.ndarray:
    cells = np.zeros((grid_size, grid_size), dtype=bool)
    for col in bars:
        if 0 <= col < grid_size:
            cells[:, col] = True
    return cells


def _bar_fill(grid_size: int, progress: float) -> np.ndarray:
    """Rows of the bar that are drawn at bar *progress*, filling bottom-up."""
    rows = np.arange(grid_size)
    if progress <= 0:
        return np.zeros(grid_size, dtype=bool)
    top = grid_size - 1 - math.floor(progress * (grid_size - 1))
    return rows >= top


def rebuild_visibility(
    mask: np.ndarray,
    field: np.ndarray,
    bars: tuple[int, ...],
    progress: float,
    delay: float,
) -> np.ndarray:
    """Cells shown during the rebuild sweep at *progress*."""
    grid_size = mask.shape[0]
    bar_cells = _bar_cells(grid_size, bars)
    visible = mask & ~bar_cells & (field <= progress)
    filled_rows = _bar_fill(grid_size, bar_progress(progress, delay))
    visible |= mask & bar_cells & filled_rows[:, None]
    return visible


def clear_visibility(
    mask: np.ndarray,
    field: np.ndarray,
    bars: tuple[int, ...],
    progress: float,
    delay: float,
) -> np.ndarray:
    """Cells still shown during the clear sweep at *progress*."""
    grid_size = mask.shape[0]
    bar_cells = _bar_cells(grid_size, bars)
    visible = mask & ~bar_cells & (field >= progress)
    filled_rows = _bar_fill(grid_size, bar_progress(1.0 - progress, delay))
    visible |= mask & bar_cells & filled_rows[:, None]
    return visible


def render_visible_cells(settled: np.ndarray, visibility: np.ndarray, cell_size: int) -> np.ndarray:
    """Copy the settled blocks of visible cells into an empty raster."""
    settled = ensure_rgba(settled)
    out = empty_raster(settled.shape[1], settled.shape[0])
    pixels = expand_mask(visibility, cell_size)
    height = min(pixels.shape[0], out.shape[0])
    width = min(pixels.shape[1], out.shape[1])
    region = pixels[:height, :width]
    out[:height, :width][region] = settled[:height, :width][region]
    return out


class AngularSweep:
    """Precomputed sweep state for one mask: angle field and bar columns."""

    def __init__(self, mask: np.ndarray, bar_delay: float = 0.55, bars: tuple[int, ...] | None = None):
        self.mask = mask
        self.grid_size = mask.shape[0]
        self.bar_delay = bar_delay
        self.field = angle_field(self.grid_size)
        self.bars = bars if bars is not None else detect_bar_columns(mask)

    def clear_frame(self, settled: np.ndarray, cell_size: int, progress: float) -> np.ndarray:
        visible = clear_visibility(self.mask, self.field, self.bars, progress, self.bar_delay)
        return render_visible_cells(settled, visible, cell_size)

    def rebuild_frame(self, settled: np.ndarray, cell_size: int, progress: float) -> np.ndarray:
        visible = rebuild_visibility(self.mask, self.field, self.bars, progress, self.bar_delay)
        return render_visible_cells(settled, visible, cell_size)


def build_clear_frame(
    settled: np.ndarray,
    mask: np.ndarray,
    cell_size: int,
    progress: float,
    bar_delay: float = 0.55,
) -> np.ndarray:
    """One-shot clear frame; prefer :class:`AngularSweep` inside a render loop."""
    return AngularSweep(mask, bar_delay).clear_frame(settled, cell_size, progress)


def build_rebuild_frame(
    settled: np.ndarray,
    mask: np.ndarray,
    cell_size: int,
    progress: float,
    bar_delay: float = 0.55,
) -> np.ndarray:
    """One-shot rebuild frame; prefer :class:`AngularSweep` inside a render loop."""
    return AngularSweep(mask, bar_delay).rebuild_frame(settled, cell_size, progress)
