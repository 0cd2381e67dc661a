"""Shared fixtures: small synthetic icons and configs that render quickly."""

from pathlib import Path

import numpy as np
import pytest
from PIL import Image

from pixloader.config import EngineConfig, LoaderConfig, PathConfig


def _ring_raster(grid_size: int) -> np.ndarray:
    """Square outline with a vertical stroke through the middle."""
    raster = np.zeros((grid_size, grid_size, 4), dtype=np.uint8)
    lo, hi = 2, grid_size - 3
    raster[lo, lo : hi + 1, 3] = 255
    raster[hi, lo : hi + 1, 3] = 255
    raster[lo : hi + 1, lo, 3] = 255
    raster[lo : hi + 1, hi, 3] = 255
    mid = grid_size // 2
    raster[lo : hi + 1, mid, 3] = 255
    raster[:, :, :3][raster[:, :, 3] > 0] = (200, 40, 40)
    return raster


@pytest.fixture
def ring_raster():
    """16x16 grid-resolution icon raster."""
    return _ring_raster(16)


@pytest.fixture
def ring_mask(ring_raster):
    return ring_raster[:, :, 3] > 0


@pytest.fixture
def icon_file(tmp_path: Path) -> Path:
    """A 64x64 PNG icon on disk, upscaled from the 16x16 ring."""
    path = tmp_path / "icon-source.png"
    Image.fromarray(_ring_raster(16)).resize((64, 64), Image.Resampling.NEAREST).save(path)
    return path


@pytest.fixture
def project_root(tmp_path: Path, icon_file: Path) -> Path:
    """Project root with the icon placed at src/assets/icon-source.png."""
    root = tmp_path / "project"
    assets = root / "src" / "assets"
    assets.mkdir(parents=True)
    (assets / "icon-source.png").write_bytes(icon_file.read_bytes())
    return root


@pytest.fixture
def path_config(project_root: Path) -> PathConfig:
    return PathConfig(ROOT_DIR=project_root)


@pytest.fixture
def pillow_engine(monkeypatch) -> EngineConfig:
    monkeypatch.delenv("PIXLOADER_ENCODER", raising=False)
    return EngineConfig(ENCODER="pillow")


@pytest.fixture
def small_sweep_config() -> LoaderConfig:
    """Sweep mode on a 16-cell grid with 2px cells."""
    return LoaderConfig(
        GRID_SIZE=16,
        CELL_SIZE=2,
        FRAME_COUNT=4,
        TRANSITION_FRAMES=4,
        CLEAR_FRAMES=3,
        REBUILD_FRAMES=5,
        MODE="sweep",
        USE_ICON_MASK=False,
    )


@pytest.fixture
def small_custom_config() -> LoaderConfig:
    """Custom-build mode on a 32-cell grid with 1px cells."""
    return LoaderConfig(
        GRID_SIZE=32,
        CELL_SIZE=1,
        FRAME_COUNT=3,
        TRANSITION_FRAMES=4,
        TRANSITION_HOLD_FRAMES=2,
        CUSTOM_TARGET_LENGTH=10,
        MODE="custom",
        USE_ICON_MASK=True,
    )
