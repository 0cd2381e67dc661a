"""Pixel grid model: RGBA rasters, logical cell masks and mask utilities.

A raster is a ``(height, width, 4)`` ``uint8`` NumPy array. A grid mask is an
``(N, N)`` boolean array indexed ``[y, x]`` where each entry is one logical
icon pixel, rendered as a ``cell_size x cell_size`` block in the output.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

import numpy as np
from PIL import Image

Segment = tuple[int, int]


def empty_raster(width: int, height: int | None = None) -> np.ndarray:
    """Return a fully transparent RGBA raster."""
    if height is None:
        height = width
    return np.zeros((height, width, 4), dtype=np.uint8)


def ensure_rgba(raster: np.ndarray) -> np.ndarray:
    """Validate *raster* is an RGBA ``uint8`` array and return it."""
    if raster.ndim != 3 or raster.shape[2] != 4:
        raise ValueError(f"Expected an RGBA raster, got shape {raster.shape}")
    if raster.dtype != np.uint8:
        raster = raster.astype(np.uint8)
    return raster


def mask_from_raster(raster: np.ndarray, grid_size: int) -> np.ndarray:
    """Derive the grid mask (``alpha > 0``) from a grid-resolution raster.

    Args:
        raster: RGBA raster already resized to ``grid_size x grid_size``
        grid_size: Logical grid size

    Returns:
        Boolean ``(grid_size, grid_size)`` mask

    Raises:
        ValueError: If the raster is not exactly ``grid_size`` square
    """
    raster = ensure_rgba(raster)
    if raster.shape[:2] != (grid_size, grid_size):
        raise ValueError(
            f"Mask source must be {grid_size}x{grid_size}, got {raster.shape[1]}x{raster.shape[0]}"
        )
    return raster[:, :, 3] > 0


def mask_from_rows(rows: Sequence[str], on: str = "#") -> np.ndarray:
    """Build a boolean mask from rows of ``'#'`` / ``'.'`` characters."""
    width = max((len(row) for row in rows), default=0)
    mask = np.zeros((len(rows), width), dtype=bool)
    for y, row in enumerate(rows):
        for x, char in enumerate(row):
            mask[y, x] = char == on
    return mask


def mask_to_rows(mask: np.ndarray, on: str = "#", off: str = ".") -> list[str]:
    """Inverse of :func:`mask_from_rows`, handy for debugging and snapshots."""
    return ["".join(on if cell else off for cell in row) for row in mask]


def in_bounds(mask: np.ndarray, x: int, y: int) -> bool:
    return 0 <= y < mask.shape[0] and 0 <= x < mask.shape[1]


def get_cell(mask: np.ndarray, x: int, y: int) -> bool:
    """Return the cell at ``(x, y)``; out-of-bounds cells read as off."""
    if not in_bounds(mask, x, y):
        return False
    return bool(mask[y, x])


def set_cell(mask: np.ndarray, x: int, y: int, value: bool = True) -> None:
    """Set the cell at ``(x, y)``; writes outside the grid are ignored."""
    if in_bounds(mask, x, y):
        mask[y, x] = value


def segments(row: Iterable[bool]) -> list[Segment]:
    """Return contiguous "on" runs of *row* as inclusive ``(start, end)`` pairs."""
    runs: list[Segment] = []
    start: int | None = None
    x = -1
    for x, on in enumerate(row):
        if on and start is None:
            start = x
        elif not on and start is not None:
            runs.append((start, x - 1))
            start = None
    if start is not None:
        runs.append((start, x))
    return runs


def find_center_segment(mask: np.ndarray, min_segments: int = 3) -> Segment | None:
    """Return the middle run of the first row with at least *min_segments* runs."""
    for row in mask:
        runs = segments(row)
        if len(runs) >= min_segments:
            return runs[len(runs) // 2]
    return None


def has_visible_diff(a: np.ndarray, b: np.ndarray, visibility: np.ndarray | None = None) -> bool:
    """Return True if *a* and *b* differ on any cell *visibility* marks relevant."""
    if a.shape != b.shape:
        return True
    diff = a != b
    if visibility is not None:
        diff &= visibility
    return bool(diff.any())


def frames_equal_within(a: np.ndarray, b: np.ndarray, visibility: np.ndarray | None = None) -> bool:
    return not has_visible_diff(a, b, visibility)


def cell_block(raster: np.ndarray, x: int, y: int, cell_size: int) -> np.ndarray:
    """Return a view of the output pixel block for grid cell ``(x, y)``."""
    top = y * cell_size
    left = x * cell_size
    return raster[top : top + cell_size, left : left + cell_size]


def expand_mask(mask: np.ndarray, cell_size: int) -> np.ndarray:
    """Upscale a cell mask to pixel resolution (each cell becomes a block)."""
    return np.repeat(np.repeat(mask, cell_size, axis=0), cell_size, axis=1)


def composite_over(bottom: np.ndarray, top: np.ndarray) -> np.ndarray:
    """Alpha-composite *top* over *bottom* and return a new raster."""
    base = Image.fromarray(ensure_rgba(bottom))
    overlay = Image.fromarray(ensure_rgba(top))
    return np.asarray(Image.alpha_composite(base, overlay), dtype=np.uint8).copy()
