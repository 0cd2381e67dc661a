"""Style renderer for the settled (static) look of each loader variant.

Every opaque icon pixel becomes a flat ``cell_size x cell_size`` block. The
four standard variants combine two choices:

- solid vs bordered: bordered blocks drop the alpha of their outer ring,
  carving a visible grid line between neighbouring cells
- light vs dark: light variants are drawn black (for light backgrounds),
  dark variants white
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from .grid import empty_raster, ensure_rgba

logger = logging.getLogger(__name__)

ALPHA_THRESHOLD = 128


@dataclass(frozen=True)
class StyleVariant:
    """One stylistic variant of the loader."""

    name: str
    bordered: bool
    dark: bool

    @property
    def border_alpha(self) -> int | None:
        return 0 if self.bordered else None


BORDER_LIGHT = StyleVariant("border-light", bordered=True, dark=False)
BORDER_DARK = StyleVariant("border-dark", bordered=True, dark=True)
SOLID_LIGHT = StyleVariant("solid-light", bordered=False, dark=False)
SOLID_DARK = StyleVariant("solid-dark", bordered=False, dark=True)

STANDARD_VARIANTS: tuple[StyleVariant, ...] = (
    BORDER_LIGHT,
    BORDER_DARK,
    SOLID_LIGHT,
    SOLID_DARK,
)


def _block_alpha(cell_size: int, border_alpha: int | None) -> np.ndarray:
    """Alpha pattern of a single cell block."""
    alpha = np.full((cell_size, cell_size), 255, dtype=np.uint8)
    if border_alpha is not None:
        alpha[0, :] = border_alpha
        alpha[-1, :] = border_alpha
        alpha[:, 0] = border_alpha
        alpha[:, -1] = border_alpha
    return alpha


def _paint_cells(
    out: np.ndarray,
    cells: np.ndarray,
    colors: np.ndarray,
    cell_size: int,
    border_alpha: int | None,
) -> None:
    block_alpha = _block_alpha(cell_size, border_alpha)
    # Transparent pixels are always (0, 0, 0, 0).
    clear = block_alpha == 0
    height, width = out.shape[:2]
    for y, x in zip(*np.nonzero(cells)):
        top = y * cell_size
        left = x * cell_size
        if top + cell_size > height or left + cell_size > width:
            continue
        block = out[top : top + cell_size, left : left + cell_size]
        block[:, :, :3] = colors[y, x]
        block[:, :, 3] = block_alpha
        block[clear, :3] = 0


def render_pixels(
    base: np.ndarray,
    grid_size: int,
    cell_size: int,
    invert: bool = False,
    border_alpha: int | None = None,
    binary: bool = True,
) -> np.ndarray:
    """Render a grid-resolution icon raster as a pixel-art variant.

    Args:
        base: RGBA raster at ``grid_size x grid_size``
        grid_size: Logical grid size
        cell_size: Output pixels per grid cell
        invert: Draw white instead of black (dark variants)
        border_alpha: Alpha for each block's outer ring, ``None`` keeps it opaque
        binary: Flatten every cell to black/white; otherwise keep the source
            colour (negated when *invert* is set)

    Returns:
        RGBA raster of ``grid_size * cell_size`` square
    """
    base = ensure_rgba(base)
    out_size = grid_size * cell_size
    out = empty_raster(out_size)

    cells = base[:grid_size, :grid_size, 3] >= ALPHA_THRESHOLD
    if binary:
        value = 255 if invert else 0
        colors = np.full(cells.shape + (3,), value, dtype=np.uint8)
    elif invert:
        colors = 255 - base[:grid_size, :grid_size, :3]
    else:
        colors = base[:grid_size, :grid_size, :3]

    _paint_cells(out, cells, colors, cell_size, border_alpha)
    return out


def render_mask(
    mask: np.ndarray,
    grid_size: int,
    cell_size: int,
    invert: bool = False,
    border_alpha: int | None = None,
) -> np.ndarray:
    """Render a static design mask, centred inside the working grid."""
    out_size = grid_size * cell_size
    out = empty_raster(out_size)
    offset_y = (grid_size - mask.shape[0]) // 2
    offset_x = (grid_size - mask.shape[1]) // 2

    cells = np.zeros((grid_size, grid_size), dtype=bool)
    for y, x in zip(*np.nonzero(mask)):
        gy, gx = y + offset_y, x + offset_x
        if 0 <= gy < grid_size and 0 <= gx < grid_size:
            cells[gy, gx] = True

    value = 255 if invert else 0
    colors = np.full((grid_size, grid_size, 3), value, dtype=np.uint8)
    _paint_cells(out, cells, colors, cell_size, border_alpha)
    return out


def render_variant(
    variant: StyleVariant,
    grid_size: int,
    cell_size: int,
    base: np.ndarray | None = None,
    design_mask: np.ndarray | None = None,
) -> np.ndarray:
    """Render the settled raster of *variant* from an icon raster or a design mask.

    Exactly one of *base* and *design_mask* must be given.
    """
    if (base is None) == (design_mask is None):
        raise ValueError("Provide exactly one of base or design_mask")
    if design_mask is not None:
        return render_mask(design_mask, grid_size, cell_size, variant.dark, variant.border_alpha)
    return render_pixels(base, grid_size, cell_size, variant.dark, variant.border_alpha)


def render_all_variants(
    grid_size: int,
    cell_size: int,
    base: np.ndarray | None = None,
    design_mask: np.ndarray | None = None,
    variants: tuple[StyleVariant, ...] = STANDARD_VARIANTS,
) -> dict[str, np.ndarray]:
    """Render the settled raster of every variant, keyed by variant name."""
    rendered = {}
    for variant in variants:
        rendered[variant.name] = render_variant(variant, grid_size, cell_size, base, design_mask)
        logger.debug(f"Rendered settled raster for {variant.name}")
    return rendered
