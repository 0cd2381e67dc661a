from __future__ import annotations

from pathlib import Path
from typing import Any

from ..system_tools import discover_tool
from .common import run_command

__all__ = [
    "optimize_gif",
]


def optimize_gif(
    input_path: Path,
    output_path: Path,
    *,
    engine_config=None,
    timeout: int | None = 120,
) -> dict[str, Any]:
    """Losslessly re-optimise *input_path* with ``gifsicle -O3 --careful``."""
    info = discover_tool("gifsicle", engine_config)
    info.require()

    output_path.parent.mkdir(parents=True, exist_ok=True)
    cmd = [info.name, "-O3", "--careful", "-o", str(output_path), str(input_path)]
    return run_command(cmd, engine="gifsicle", output_path=output_path, timeout=timeout)
