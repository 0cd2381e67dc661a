"""Deterministic per-cell noise used by the dissolve effect.

The hash is a small integer mixer: two large odd multipliers spread the
coordinates, then the high bits are folded back into the low bits twice
(xorshift style). All arithmetic wraps at 32 bits so the scalar and the
vectorised versions agree bit for bit.
"""

from __future__ import annotations

import numpy as np

_PRIME_X = 374761393
_PRIME_Y = 668265263
_MIX = 1274126177
_UINT32_RANGE = 4294967296.0

# Coordinate offsets for the two jitter axes, kept away from the reveal
# threshold at (0, 0) so the three streams are decorrelated.
JITTER_X_OFFSET = (17, 29)
JITTER_Y_OFFSET = (41, 11)


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value >= 0x80000000 else value


def hash01(x: int, y: int) -> float:
    """Return a reproducible pseudo-random value in ``[0, 1)`` for ``(x, y)``.

    Args:
        x: Cell column (negative values are allowed)
        y: Cell row (negative values are allowed)

    Returns:
        Float in ``[0, 1)``; identical inputs always give identical output
    """
    seed = _to_int32((x + 1) * _PRIME_X + (y + 1) * _PRIME_Y)
    mangled = _to_int32((seed ^ (seed >> 13)) * _MIX)
    return ((mangled ^ (mangled >> 16)) & 0xFFFFFFFF) / _UINT32_RANGE


def _to_int32_array(values: np.ndarray) -> np.ndarray:
    return ((values & 0xFFFFFFFF) ^ 0x80000000) - 0x80000000


def hash01_grid(xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
    """Vectorised :func:`hash01` over broadcastable integer arrays."""
    xs = np.asarray(xs, dtype=np.int64)
    ys = np.asarray(ys, dtype=np.int64)
    seed = _to_int32_array((xs + 1) * _PRIME_X + (ys + 1) * _PRIME_Y)
    mangled = _to_int32_array((seed ^ (seed >> 13)) * _MIX)
    return ((mangled ^ (mangled >> 16)) & 0xFFFFFFFF).astype(np.float64) / _UINT32_RANGE


def cell_noise(grid_size: int, offset: tuple[int, int] = (0, 0)) -> np.ndarray:
    """Return an ``(N, N)`` array of :func:`hash01` values indexed ``[y, x]``."""
    ys, xs = np.mgrid[0:grid_size, 0:grid_size]
    return hash01_grid(xs + offset[0], ys + offset[1])
