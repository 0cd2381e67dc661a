"""Tests for pixloader.dissolve module."""

import math

import numpy as np
import pytest

from pixloader.dissolve import build_break_frame
from pixloader.noise import JITTER_X_OFFSET, JITTER_Y_OFFSET, hash01
from pixloader.style import BORDER_LIGHT, SOLID_DARK, render_pixels, render_variant


@pytest.fixture
def settled(ring_raster):
    return render_pixels(ring_raster, 16, 4)


class TestBreakFrame:
    """Tests for the dissolve endpoints and cell reveal order."""

    def test_progress_one_equals_settled(self, settled):
        frame = build_break_frame(settled, 16, 4, 1.0)
        assert np.array_equal(frame, settled)

    @pytest.mark.parametrize("variant", [BORDER_LIGHT, SOLID_DARK])
    def test_progress_one_equals_settled_for_variants(self, ring_raster, variant):
        settled = render_variant(variant, 16, 4, base=ring_raster)
        assert np.array_equal(build_break_frame(settled, 16, 4, 1.0), settled)

    def test_progress_zero_is_empty(self, settled):
        frame = build_break_frame(settled, 16, 4, 0.0)
        assert not frame.any()

    def test_progress_is_clamped(self, settled):
        assert np.array_equal(build_break_frame(settled, 16, 4, 1.7), settled)
        assert not build_break_frame(settled, 16, 4, -0.5).any()

    def test_output_shape(self, settled):
        frame = build_break_frame(settled, 16, 4, 0.5)
        assert frame.shape == settled.shape
        assert frame.dtype == np.uint8

    def test_revealed_cell_count_follows_hash(self, settled, ring_mask):
        """At progress p only the opaque cells with hash01 <= p are drawn."""
        progress = 0.5
        expected = sum(1 for y, x in zip(*np.nonzero(ring_mask)) if hash01(int(x), int(y)) <= progress)
        frame = build_break_frame(settled, 16, 4, progress)
        # Blocks may overlap after jitter, so the drawn area is bounded by the count.
        drawn = int((frame[:, :, 3] > 0).sum())
        assert 0 < drawn <= expected * 16

    def test_revealed_pixels_only_grow(self, settled):
        """More progress never draws fewer pixels in total."""
        counts = [int((build_break_frame(settled, 16, 4, p)[:, :, 3] > 0).sum()) for p in (0.0, 0.25, 1.0)]
        assert counts[0] <= counts[1] <= counts[2]

    def test_jitter_stays_inside_canvas(self, settled):
        """Displaced blocks are clamped to the output; nothing wraps around."""
        frame = build_break_frame(settled, 16, 4, 0.9)
        assert frame.shape == (64, 64, 4)
        colours = frame[frame[:, :, 3] > 0][:, :3]
        assert (colours == 0).all()

    def test_deterministic(self, settled):
        assert np.array_equal(build_break_frame(settled, 16, 4, 0.4), build_break_frame(settled, 16, 4, 0.4))


class TestSingleCellReveal:
    """One opaque cell checked against the scalar hash at its coordinates."""

    CELL = (5, 9)

    @pytest.fixture
    def lone_cell(self):
        x, y = self.CELL
        raster = np.zeros((64, 64, 4), dtype=np.uint8)
        raster[y * 4 : y * 4 + 4, x * 4 : x * 4 + 4] = (200, 40, 40, 255)
        return raster

    def _expected_origin(self, progress):
        x, y = self.CELL
        scale = (1.0 - progress) * 4 * 1.4
        jx = math.floor((hash01(x + JITTER_X_OFFSET[0], y + JITTER_X_OFFSET[1]) * 2 - 1) * scale + 0.5)
        jy = math.floor((hash01(x + JITTER_Y_OFFSET[0], y + JITTER_Y_OFFSET[1]) * 2 - 1) * scale + 0.5)
        return max(0, min(60, x * 4 + jx)), max(0, min(60, y * 4 + jy))

    def test_hidden_just_below_threshold(self, lone_cell):
        threshold = hash01(*self.CELL)
        assert not build_break_frame(lone_cell, 16, 4, threshold - 1e-9).any()

    @pytest.mark.parametrize("offset", [0.0, 0.3])
    def test_drawn_at_scalar_jitter(self, lone_cell, offset):
        progress = min(1.0, hash01(*self.CELL) + offset)
        frame = build_break_frame(lone_cell, 16, 4, progress)

        dest_x, dest_y = self._expected_origin(progress)
        ys, xs = np.nonzero(frame[:, :, 3])
        assert len(xs) == 16
        assert (xs.min(), ys.min()) == (dest_x, dest_y)
