from __future__ import annotations

import os
import time
from pathlib import Path
from typing import Any

from PIL import Image

from ..io import read_frames

__all__ = [
    "build_gif",
]

# GIF transparency needs one palette slot.
_MAX_COLORS = 255


def _quantize(frame: Image.Image, colors: int) -> Image.Image:
    """Palette-reduce an RGBA frame, keeping fully transparent pixels transparent."""
    alpha = frame.getchannel("A")
    quantized = frame.convert("RGB").quantize(colors=colors, dither=Image.Dither.NONE)
    palette = quantized.getpalette() or []
    palette = palette[: colors * 3]
    palette += [0, 0, 0] * (colors + 1 - len(palette) // 3)
    quantized.putpalette(palette)

    transparent = Image.eval(alpha, lambda a: 255 if a == 0 else 0)
    quantized.paste(colors, mask=transparent)
    quantized.info["transparency"] = colors
    return quantized


def build_gif(
    frames_dir: Path,
    output_path: Path,
    *,
    frame_ms: int,
    frame_count: int,
    palette_size: int = 0,
) -> dict[str, Any]:
    """Assemble a staged frame sequence into a looping GIF in-process."""
    start = time.perf_counter()
    colors = palette_size if 0 < palette_size <= _MAX_COLORS else _MAX_COLORS
    frames = [_quantize(frame, colors) for frame in read_frames(frames_dir, frame_count)]

    output_path.parent.mkdir(parents=True, exist_ok=True)
    frames[0].save(
        output_path,
        format="GIF",
        save_all=True,
        append_images=frames[1:],
        duration=frame_ms,
        loop=0,
        disposal=2,
        transparency=colors,
        optimize=False,
    )

    return {
        "render_ms": int((time.perf_counter() - start) * 1000),
        "engine": "pillow",
        "command": f"pillow save_all frames={frame_count} colors={colors}",
        "kilobytes": int(os.path.getsize(output_path) / 1024),
    }
