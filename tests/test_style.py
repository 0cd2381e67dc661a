"""Tests for pixloader.style module."""

import numpy as np
import pytest

from pixloader.custom_build import ICON_MASK_24, centred_mask
from pixloader.style import (
    BORDER_DARK,
    BORDER_LIGHT,
    SOLID_DARK,
    SOLID_LIGHT,
    STANDARD_VARIANTS,
    render_all_variants,
    render_mask,
    render_pixels,
    render_variant,
)


class TestVariants:
    def test_standard_variant_names(self):
        assert [v.name for v in STANDARD_VARIANTS] == ["border-light", "border-dark", "solid-light", "solid-dark"]

    def test_border_alpha(self):
        assert BORDER_LIGHT.border_alpha == 0
        assert SOLID_DARK.border_alpha is None


class TestRenderPixels:
    """Tests for rendering a grid raster as flat cell blocks."""

    def test_output_size(self, ring_raster):
        out = render_pixels(ring_raster, 16, 3)
        assert out.shape == (48, 48, 4)

    def test_solid_light_cells_are_black(self, ring_raster):
        out = render_pixels(ring_raster, 16, 4)
        block = out[8:12, 8:12]
        assert (block[:, :, 3] == 255).all()
        assert (block[:, :, :3] == 0).all()

    def test_dark_cells_are_white(self, ring_raster):
        out = render_pixels(ring_raster, 16, 4, invert=True)
        assert (out[8:12, 8:12, :3] == 255).all()

    def test_empty_cells_stay_transparent(self, ring_raster):
        out = render_pixels(ring_raster, 16, 4)
        assert not out[0:4, 0:4].any()

    def test_bordered_cells_have_transparent_ring(self, ring_raster):
        out = render_pixels(ring_raster, 16, 4, border_alpha=0)
        block = out[8:12, 8:12]
        assert (block[1:3, 1:3, 3] == 255).all()
        assert (block[0, :, 3] == 0).all()
        assert (block[:, -1, 3] == 0).all()
        # Transparent border pixels carry no colour.
        assert not block[0, :].any()

    def test_low_alpha_source_pixels_are_dropped(self):
        base = np.zeros((4, 4, 4), dtype=np.uint8)
        base[1, 1, 3] = 127
        base[2, 2, 3] = 128
        out = render_pixels(base, 4, 2)
        assert not out[2:4, 2:4].any()
        assert (out[4:6, 4:6, 3] == 255).all()

    def test_colour_mode_keeps_source_colour(self, ring_raster):
        out = render_pixels(ring_raster, 16, 2, binary=False)
        assert tuple(out[4, 4, :3]) == (200, 40, 40)


class TestRenderMask:
    def test_centred_design_mask(self):
        out = render_mask(ICON_MASK_24, 32, 1)
        expected = centred_mask(ICON_MASK_24, 32)
        assert np.array_equal(out[:, :, 3] == 255, expected)

    def test_render_variant_requires_one_source(self, ring_raster):
        with pytest.raises(ValueError):
            render_variant(SOLID_LIGHT, 16, 2)
        with pytest.raises(ValueError):
            render_variant(SOLID_LIGHT, 16, 2, base=ring_raster, design_mask=ICON_MASK_24)

    def test_render_all_variants(self, ring_raster):
        rendered = render_all_variants(16, 2, base=ring_raster)
        assert set(rendered) == {"border-light", "border-dark", "solid-light", "solid-dark"}
        assert (rendered[BORDER_DARK.name][:, :, 3] <= rendered[SOLID_DARK.name][:, :, 3]).all()
