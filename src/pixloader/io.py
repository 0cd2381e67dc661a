"""I/O utilities: logging setup, icon loading, frame staging and manifests."""

import json
import logging
import shutil
import tempfile
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from shutil import move
from typing import Any

import numpy as np
from PIL import Image, ImageOps

from .error_handling import BuildError

logger = logging.getLogger(__name__)

FRAME_NAME_TEMPLATE = "frame-{index:03d}.png"
FRAME_INPUT_PATTERN = "frame-%03d.png"
MANIFEST_NAME = "manifest.json"


def setup_logging(log_dir: Path | None = None, log_level: str = "INFO") -> logging.Logger:
    """Set up logging configuration for pixloader.

    Args:
        log_dir: Directory to store log files, ``None`` logs to stderr only
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)

    Returns:
        Configured logger instance
    """
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        handlers.append(logging.FileHandler(log_dir / f"pixloader_{timestamp}.log"))

    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=handlers,
        force=True,
    )

    return logging.getLogger("pixloader")


@contextmanager
def atomic_write(target_path: Path, mode: str = "w"):
    """Context manager for atomic file writes using temporary files.

    Example:
        with atomic_write(Path("manifest.json")) as f:
            json.dump(data, f)
    """
    target_path.parent.mkdir(parents=True, exist_ok=True)

    with tempfile.NamedTemporaryFile(
        mode=mode,
        dir=target_path.parent,
        delete=False,
        suffix=f".tmp_{target_path.name}",
    ) as temp_file:
        try:
            yield temp_file
            temp_file.flush()
            move(temp_file.name, target_path)
        except Exception:
            Path(temp_file.name).unlink(missing_ok=True)
            raise


def save_json(data: dict[str, Any], json_path: Path) -> None:
    """Atomically save data as JSON file."""
    with atomic_write(json_path) as f:
        json.dump(data, f, indent=2)


# ---------------------------------------------------------------------------
# Source icon
# ---------------------------------------------------------------------------


def load_icon(path: Path, size: int, nearest: bool = True) -> np.ndarray:
    """Load *path* and fit it into a transparent ``size`` square ("contain").

    Args:
        path: Pillow-readable image file
        size: Target width and height
        nearest: Nearest-neighbour resampling (grid raster) instead of Lanczos
            (full-size original)

    Returns:
        RGBA raster of ``size x size``

    Raises:
        BuildError: If the file is missing or cannot be decoded
    """
    if not path.exists():
        raise BuildError(
            f"Missing input icon: {path}. Copy your source icon to {path.name}",
            context={"path": str(path)},
        )

    resample = Image.Resampling.NEAREST if nearest else Image.Resampling.LANCZOS
    try:
        with Image.open(path) as img:
            icon = img.convert("RGBA")
    except (OSError, ValueError) as e:
        raise BuildError(f"Cannot decode input icon {path}", cause=e) from e

    fitted = ImageOps.contain(icon, (size, size), method=resample)
    canvas = Image.new("RGBA", (size, size), (0, 0, 0, 0))
    canvas.paste(fitted, ((size - fitted.width) // 2, (size - fitted.height) // 2))
    return np.asarray(canvas, dtype=np.uint8).copy()


def negate_rgb(raster: np.ndarray) -> np.ndarray:
    """Invert the colour channels of *raster*, leaving alpha untouched."""
    out = raster.copy()
    out[:, :, :3] = 255 - out[:, :, :3]
    return out


# ---------------------------------------------------------------------------
# Frame staging
# ---------------------------------------------------------------------------


def frame_name(index: int) -> str:
    return FRAME_NAME_TEMPLATE.format(index=index)


def prepare_frames_dir(frames_dir: Path) -> Path:
    """Empty and recreate *frames_dir*."""
    shutil.rmtree(frames_dir, ignore_errors=True)
    frames_dir.mkdir(parents=True, exist_ok=True)
    return frames_dir


def write_frame(raster: np.ndarray, frames_dir: Path, index: int) -> Path:
    """Write *raster* as ``frame-NNN.png`` in *frames_dir*."""
    frame_path = frames_dir / frame_name(index)
    Image.fromarray(raster).save(frame_path, format="PNG")
    return frame_path


def write_frames(frames, frames_dir: Path) -> int:
    """Write an iterable of rasters as a contiguous, zero-based frame sequence.

    Returns:
        Number of frames written
    """
    count = 0
    for index, raster in enumerate(frames):
        write_frame(raster, frames_dir, index)
        count += 1
    return count


def read_frames(frames_dir: Path, frame_count: int) -> list[Image.Image]:
    """Load a staged frame sequence back as RGBA Pillow images."""
    images = []
    for index in range(frame_count):
        with Image.open(frames_dir / frame_name(index)) as img:
            images.append(img.convert("RGBA"))
    return images


def export_frames(frames_dir: Path, out_dir: Path, frame_count: int, manifest: dict[str, int]) -> Path:
    """Copy a staged sequence to *out_dir* alongside its ``manifest.json``.

    Raises:
        BuildError: If a staged frame is missing
    """
    prepare_frames_dir(out_dir)
    for index in range(frame_count):
        name = frame_name(index)
        source = frames_dir / name
        if not source.exists():
            raise BuildError(f"Staged frame missing: {source}", context={"index": index})
        shutil.copyfile(source, out_dir / name)

    save_json(manifest, out_dir / MANIFEST_NAME)
    logger.debug(f"Exported {frame_count} frames to {out_dir}")
    return out_dir


def format_bytes(size: int) -> str:
    """Human readable byte count (B, KB, MB)."""
    if size < 1024:
        return f"{size} B"
    kb = size / 1024
    if kb < 1024:
        return f"{kb:.1f} KB"
    return f"{kb / 1024:.2f} MB"


def image_dimensions(path: Path) -> tuple[int, int] | None:
    """Return ``(width, height)`` of an image file, or None if unreadable."""
    try:
        with Image.open(path) as img:
            return img.size
    except (OSError, ValueError):
        return None
