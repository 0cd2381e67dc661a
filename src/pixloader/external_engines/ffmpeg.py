from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Any

from ..io import FRAME_INPUT_PATTERN
from ..system_tools import discover_tool
from .common import run_command

__all__ = [
    "build_gif",
]


def _ffmpeg_binary(engine_config=None) -> str:
    info = discover_tool("ffmpeg", engine_config)
    info.require()
    return info.name


def _frame_rate(frame_ms: int) -> str:
    return f"{1000 / frame_ms:g}"


# ----------------------------------------------------------------------------
# Public API
# ----------------------------------------------------------------------------


def build_gif(
    frames_dir: Path,
    output_path: Path,
    *,
    frame_ms: int,
    palette_size: int = 0,
    palette_path: Path | None = None,
    engine_config=None,
    timeout: int | None = 120,
) -> dict[str, Any]:
    """Assemble ``frame-NNN.png`` files in *frames_dir* into a looping GIF.

    With a positive *palette_size* the GIF is built in two passes: a palette
    of at most *palette_size* colours is generated from all frames, then
    applied without dithering. Otherwise FFmpeg's default palette is used.
    """
    ffmpeg = _ffmpeg_binary(engine_config)
    rate = _frame_rate(frame_ms)
    frame_input = str(frames_dir / FRAME_INPUT_PATTERN)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    if not palette_size or palette_size <= 0:
        cmd = [ffmpeg, "-y", "-v", "error", "-framerate", rate, "-i", frame_input, "-loop", "0", str(output_path)]
        return run_command(cmd, engine="ffmpeg", output_path=output_path, timeout=timeout)

    with tempfile.TemporaryDirectory() as tmpdir:
        palette = palette_path or Path(tmpdir) / "palette.png"
        palette.parent.mkdir(parents=True, exist_ok=True)

        # 1️⃣ generate palette
        gen_cmd = [
            ffmpeg,
            "-y",
            "-v",
            "error",
            "-framerate",
            rate,
            "-i",
            frame_input,
            "-vf",
            f"palettegen=max_colors={palette_size}",
            "-frames:v",
            "1",
            "-update",
            "1",
            str(palette),
        ]
        meta1 = run_command(gen_cmd, engine="ffmpeg", output_path=palette, timeout=timeout)

        # 2️⃣ apply palette without dithering
        use_cmd = [
            ffmpeg,
            "-y",
            "-v",
            "error",
            "-framerate",
            rate,
            "-i",
            frame_input,
            "-i",
            str(palette),
            "-lavfi",
            "paletteuse=dither=none",
            "-loop",
            "0",
            str(output_path),
        ]
        meta2 = run_command(use_cmd, engine="ffmpeg", output_path=output_path, timeout=timeout)

    return {
        "render_ms": meta1.get("render_ms", 0) + meta2.get("render_ms", 0),
        "engine": "ffmpeg",
        "command": f"{meta1.get('command', '')}\n{meta2.get('command', '')}",
        "kilobytes": meta2.get("kilobytes", 0),
    }
