"""Tests for pixloader.sweep module."""

import numpy as np
import pytest

from pixloader.custom_build import ICON_MASK_24, centred_mask
from pixloader.grid import mask_from_rows
from pixloader.style import render_mask, render_pixels
from pixloader.sweep import (
    AngularSweep,
    angle_field,
    bar_progress,
    build_clear_frame,
    build_rebuild_frame,
    clear_visibility,
    detect_bar_columns,
    rebuild_visibility,
    sweep_progress,
)


class TestAngleField:
    """Tests for the angular fraction field."""

    def test_range_and_shape(self):
        field = angle_field(32)
        assert field.shape == (32, 32)
        assert field.min() >= 0.0
        assert field.max() < 1.0

    def test_read_only(self):
        field = angle_field(16)
        with pytest.raises(ValueError):
            field[0, 0] = 0.5

    def test_top_left_diagonal_is_start(self):
        """Cells on the up-left diagonal sit on the start bearing (0, or just below the wrap)."""
        field = angle_field(32)
        for cell in (field[15, 15], field[0, 0]):
            assert min(cell, 1.0 - cell) == pytest.approx(0.0, abs=1e-9)

    def test_clockwise_quarters(self):
        """Top-right, bottom-right and bottom-left corners follow clockwise."""
        field = angle_field(32)
        assert field[0, 31] == pytest.approx(0.25)
        assert field[31, 31] == pytest.approx(0.5)
        assert field[31, 0] == pytest.approx(0.75)

    def test_monotonic_along_top_row(self):
        """Moving right along the top row the fraction grows until it wraps once."""
        row = angle_field(32)[0, 1:]
        diffs = np.diff(row)
        assert (diffs >= 0).all()

    def test_clockwise_around_border(self):
        """Walking the border clockwise from just past the top-left corner, the fraction only grows."""
        n = 16
        field = angle_field(n)
        path = (
            [(0, x) for x in range(1, n)]
            + [(y, n - 1) for y in range(1, n)]
            + [(n - 1, x) for x in range(n - 2, -1, -1)]
            + [(y, 0) for y in range(n - 2, 0, -1)]
        )
        values = [field[y, x] for y, x in path]
        assert all(b > a for a, b in zip(values, values[1:]))
        assert values[0] < 0.05
        assert values[-1] > 0.95


class TestProgress:
    def test_sweep_progress(self):
        assert sweep_progress(0, 30) == pytest.approx(0.1)
        assert sweep_progress(4, 30) == pytest.approx(0.5)
        assert sweep_progress(9, 30) == 1.0
        assert sweep_progress(50, 30) == 1.0

    def test_bar_progress(self):
        assert bar_progress(0.3, 0.55) == 0.0
        assert bar_progress(0.55, 0.55) == 0.0
        assert bar_progress(1.0, 0.55) == pytest.approx(1.0)
        assert bar_progress(0.775, 0.55) == pytest.approx(0.5)


class TestBarDetection:
    """Tests for locating the centre bar."""

    def test_design_mask_bar(self):
        mask = centred_mask(ICON_MASK_24, 32)
        assert detect_bar_columns(mask) == (11, 12)

    def test_ring_fixture_bar(self, ring_mask):
        assert detect_bar_columns(ring_mask) == (8,)

    def test_fallback_to_midpoint(self):
        mask = mask_from_rows(["########", "#......#", "#......#", "########"])
        assert detect_bar_columns(mask) == (4,)

    def test_max_width(self):
        rows = ["##########"] + ["#..####..#"] * 8 + ["##########"]
        columns = detect_bar_columns(mask_from_rows(rows), max_width=2)
        assert len(columns) == 2
        assert columns in ((4, 5), (5, 6))


class TestVisibility:
    """Tests for the clear and rebuild visibility masks."""

    @pytest.fixture
    def mask(self):
        return centred_mask(ICON_MASK_24, 32)

    def test_rebuild_endpoints(self, mask):
        field = angle_field(32)
        bars = detect_bar_columns(mask)
        assert np.array_equal(rebuild_visibility(mask, field, bars, 1.0, 0.55), mask)

    def test_clear_endpoints(self, mask):
        field = angle_field(32)
        bars = detect_bar_columns(mask)
        assert np.array_equal(clear_visibility(mask, field, bars, 0.0, 0.55), mask)
        assert not clear_visibility(mask, field, bars, 1.0, 0.55).any()

    def test_bar_waits_for_delay(self, mask):
        field = angle_field(32)
        bars = detect_bar_columns(mask)
        visible = rebuild_visibility(mask, field, bars, 0.5, 0.55)
        for col in bars:
            assert not visible[:, col].any()

    def test_bar_fills_bottom_up(self, mask):
        field = angle_field(32)
        bars = detect_bar_columns(mask)
        visible = rebuild_visibility(mask, field, bars, 0.8, 0.55)
        col = visible[:, bars[0]] & mask[:, bars[0]]
        rows = np.nonzero(col)[0]
        assert rows.size > 0
        # Every masked bar cell below the topmost drawn one is drawn too.
        assert col[rows.min() :].sum() == mask[rows.min() :, bars[0]].sum()

    def test_rebuild_is_monotonic(self, mask):
        field = angle_field(32)
        bars = detect_bar_columns(mask)
        previous = np.zeros_like(mask)
        for step in range(12):
            current = rebuild_visibility(mask, field, bars, sweep_progress(step, 32), 0.55)
            assert not (previous & ~current).any()
            previous = current

    @pytest.mark.parametrize("progress", [0.0, 0.1, 0.3, 0.55, 0.7, 0.9, 1.0])
    def test_clear_rebuild_round_trip(self, mask, progress):
        """Clear at p and rebuild at p split the wipe; the bar retracts as rebuild at 1 - p."""
        field = angle_field(32)
        bars = detect_bar_columns(mask)
        bar_cells = np.zeros_like(mask)
        bar_cells[:, list(bars)] = True
        wiped = mask & ~bar_cells

        cleared = clear_visibility(mask, field, bars, progress, 0.55)
        rebuilt = rebuild_visibility(mask, field, bars, progress, 0.55)
        assert np.array_equal((cleared | rebuilt) & wiped, wiped)
        overlap = cleared & rebuilt & wiped
        assert np.allclose(field[overlap], progress)

        mirrored = rebuild_visibility(mask, field, bars, 1.0 - progress, 0.55)
        assert np.array_equal(cleared & bar_cells, mirrored & bar_cells)


class TestAngularSweep:
    def test_frames_use_settled_pixels(self):
        mask = centred_mask(ICON_MASK_24, 32)
        settled = render_mask(ICON_MASK_24, 32, 2)
        sweep = AngularSweep(mask)
        full = sweep.rebuild_frame(settled, 2, 1.0)
        assert np.array_equal(full, settled)
        empty = sweep.clear_frame(settled, 2, 1.0)
        assert not empty.any()

    def test_one_shot_helpers(self, ring_raster, ring_mask):
        settled = render_pixels(ring_raster, 16, 2)
        assert np.array_equal(build_clear_frame(settled, ring_mask, 2, 0.0), settled)
        assert np.array_equal(build_rebuild_frame(settled, ring_mask, 2, 1.0), settled)

    def test_explicit_bars(self, ring_mask):
        sweep = AngularSweep(ring_mask, bars=(3,))
        assert sweep.bars == (3,)
        assert sweep.field.shape == (16, 16)
