"""Custom build animation grown over a fixed 24x24 icon mask.

A three-pixel-thick diagonal stroke starts in the top-left corner, runs along
the top edge, turns down the right edge, comes back along the bottom and
climbs the left edge while the centre bar grows bottom-up in lockstep. Each
construction step yields a candidate frame that is kept only when it changes
something inside the icon mask. The build is then padded to a fixed length
and mirrored into a "clear" run, giving a clear -> build loop.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from .grid import empty_raster, ensure_rgba, find_center_segment, has_visible_diff, mask_from_rows, segments, set_cell

logger = logging.getLogger(__name__)

MASK_SIZE = 24
DEFAULT_TARGET_LENGTH = 73
STROKE_SEED_STEPS = 20

_ICON_ROWS_24 = (
    "..####################..",
    ".######################.",
    "########################",
    *("###....##............###",) * 18,
    "########################",
    ".######################.",
    "..####################..",
)

ICON_MASK_24 = mask_from_rows(_ICON_ROWS_24)
ICON_MASK_24.setflags(write=False)


@dataclass(frozen=True)
class CustomSequence:
    """Clear and build frames of the custom animation, as 24x24 boolean masks."""

    clear_frames: tuple[np.ndarray, ...]
    build_frames: tuple[np.ndarray, ...]
    built_length: int

    @property
    def frames(self) -> tuple[np.ndarray, ...]:
        """Clear run followed by the build run."""
        return self.clear_frames + self.build_frames

    def __len__(self) -> int:
        return len(self.clear_frames) + len(self.build_frames)


class _FrameRecorder:
    """Collects frames, skipping candidates with no visible change."""

    def __init__(self, visibility: np.ndarray):
        self.visibility = visibility
        self.frames: list[np.ndarray] = []

    def push(self, grid: np.ndarray) -> None:
        if not self.frames or has_visible_diff(self.frames[-1], grid, self.visibility):
            self.frames.append(grid.copy())


def _seed_diagonal(recorder: _FrameRecorder, size: int) -> np.ndarray:
    """Step 1: the stroke grows from the top-left corner."""
    grid = np.zeros((size, size), dtype=bool)
    for k in range(1, STROKE_SEED_STEPS + 1):
        grid[0, 2 : 2 + k] = True
        grid[1, 1 : 1 + k] = True
        grid[2, 0:k] = True
        recorder.push(grid)
    return grid


def _top_right_corner(recorder: _FrameRecorder, grid: np.ndarray, size: int) -> None:
    """Step 2: finish the top edge keeping the stroke three pixels thick."""
    for x in (size - 2, size - 1):
        set_cell(grid, x, 0)
        set_cell(grid, x - 1, 1)
        set_cell(grid, x - 2, 2)
        if x == size - 1:
            set_cell(grid, x - 1, 2)
        recorder.push(grid)


def _right_edge(recorder: _FrameRecorder, grid: np.ndarray, size: int) -> None:
    """Step 3: turn the corner, then run the stroke down the right edge."""
    for y in (1, 2, 3):
        _right_stroke(grid, size, y)
        recorder.push(grid)
    for y in range(size):
        _right_stroke(grid, size, y)
        recorder.push(grid)


def _right_stroke(grid: np.ndarray, size: int, y: int) -> None:
    set_cell(grid, size - 1, y)
    set_cell(grid, size - 2, y - 1)
    set_cell(grid, size - 3, y - 2)


def _bottom_edge(recorder: _FrameRecorder, grid: np.ndarray, size: int) -> None:
    """Step 4: carry the stroke leftwards along the bottom edge."""
    start_x = size - 1
    for x in range(size - 1, -1, -1):
        if not grid[size - 1, x]:
            break
        start_x = x - 1

    for x in range(start_x, -1, -1):
        set_cell(grid, x, size - 1)
        set_cell(grid, x + 1, size - 2)
        set_cell(grid, x + 2, size - 3)
        # Inner pixels of the bottom-right corner.
        if x == start_x - 1:
            set_cell(grid, x - 1, size - 1)
            set_cell(grid, x, size - 2)
        recorder.push(grid)


def _center_bar(visibility: np.ndarray) -> tuple[list[int], int]:
    """Columns of the centre bar and the lowest row where it appears."""
    segment = find_center_segment(visibility)
    if segment is None:
        return [], -1
    columns = list(range(segment[0], segment[1] + 1))

    size = visibility.shape[0]
    for y in range(size - 1, -1, -1):
        runs = segments(visibility[y])
        if len(runs) < 3:
            continue
        middle = runs[len(runs) // 2]
        if middle[0] <= columns[0] <= middle[1]:
            return columns, y
    return columns, -1


def _left_edge_and_bar(recorder: _FrameRecorder, grid: np.ndarray, visibility: np.ndarray, size: int) -> None:
    """Step 5: climb the left edge while the centre bar grows bottom-up."""
    columns, bottom_row = _center_bar(visibility)

    for y in range(size - 1, -1, -1):
        set_cell(grid, 0, y)
        set_cell(grid, 1, y + 1)
        set_cell(grid, 2, y + 2)

        # Inner pixels of the bottom-left corner.
        if y == size - 3:
            set_cell(grid, 0, y - 1)
            set_cell(grid, 1, y)

        if columns and bottom_row >= 0 and y == bottom_row + 1:
            set_cell(grid, columns[0], bottom_row)

        # The bar rises diagonally with the edge, adding no frames of its own.
        for i, col in enumerate(columns):
            row = y + i
            if 0 <= row < size and visibility[row, col]:
                set_cell(grid, col, row)

        recorder.push(grid)


def _fill_remaining(recorder: _FrameRecorder, grid: np.ndarray, visibility: np.ndarray) -> None:
    """Step 6: any masked cell the stroke missed gets its own frame."""
    for y, x in zip(*np.nonzero(visibility & ~grid)):
        grid[y, x] = True
        recorder.push(grid)


def build_custom_sequence(
    mask: np.ndarray | None = None,
    target_length: int = DEFAULT_TARGET_LENGTH,
) -> CustomSequence:
    """Build the clear -> build frame sequence over *mask*.

    Args:
        mask: Square visibility mask, defaults to :data:`ICON_MASK_24`
        target_length: Build frames are padded with the last frame up to
            this length; a longer build is kept whole

    Returns:
        CustomSequence whose final build frame covers every masked cell
    """
    visibility = ICON_MASK_24 if mask is None else np.asarray(mask, dtype=bool)
    size = visibility.shape[0]
    recorder = _FrameRecorder(visibility)

    grid = _seed_diagonal(recorder, size)
    _top_right_corner(recorder, grid, size)
    _right_edge(recorder, grid, size)
    _bottom_edge(recorder, grid, size)
    _left_edge_and_bar(recorder, grid, visibility, size)
    _fill_remaining(recorder, grid, visibility)

    built = recorder.frames
    built_length = len(built)
    if built_length > target_length:
        logger.debug(f"Custom build has {built_length} frames, above target {target_length}")
    build_frames = built + [built[-1]] * max(0, target_length - built_length)

    final = build_frames[-1]
    clear_frames = [visibility & (frame != final) for frame in build_frames]

    for frame in clear_frames + build_frames:
        frame.setflags(write=False)

    return CustomSequence(
        clear_frames=tuple(clear_frames),
        build_frames=tuple(build_frames),
        built_length=built_length,
    )


def expand_loading_frames(frames: Sequence[np.ndarray], slow_count: int, multiplier: int) -> list[np.ndarray]:
    """Repeat the first *slow_count* frames *multiplier* times each."""
    if multiplier <= 1:
        return list(frames)
    cutoff = min(slow_count, len(frames))
    expanded = []
    for index, frame in enumerate(frames):
        repeat = multiplier if index < cutoff else 1
        expanded.extend([frame] * repeat)
    return expanded


def centred_mask(design_mask: np.ndarray, grid_size: int) -> np.ndarray:
    """Place *design_mask* in the middle of a ``grid_size`` square mask."""
    out = np.zeros((grid_size, grid_size), dtype=bool)
    offset_y = (grid_size - design_mask.shape[0]) // 2
    offset_x = (grid_size - design_mask.shape[1]) // 2
    for y, x in zip(*np.nonzero(design_mask)):
        set_cell(out, x + offset_x, y + offset_y)
    return out


def render_custom_frame(
    settled: np.ndarray,
    frame_mask: np.ndarray,
    grid_size: int,
    cell_size: int,
) -> np.ndarray:
    """Expand a 24x24 frame to full resolution using the settled raster's pixels.

    Only opaque settled pixels under "on" cells are copied; cells that fall
    outside the working grid after centring are skipped.
    """
    settled = ensure_rgba(settled)
    out = empty_raster(settled.shape[1], settled.shape[0])
    cells = centred_mask(frame_mask, grid_size)

    for y, x in zip(*np.nonzero(cells)):
        top = y * cell_size
        left = x * cell_size
        source = settled[top : top + cell_size, left : left + cell_size]
        opaque = source[:, :, 3] != 0
        out[top : top + cell_size, left : left + cell_size][opaque] = source[opaque]
    return out
