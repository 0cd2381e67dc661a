from __future__ import annotations

from pathlib import Path
from typing import Any
import os
import subprocess
import time

from ..error_handling import EngineError

__all__ = [
    "run_command",
]


def run_command(cmd: list[str], *, engine: str, output_path: Path, timeout: int | None = 120) -> dict[str, Any]:
    """Execute *cmd* and return build metadata.

    The helper blocks until *cmd* completes, raises *EngineError* on a
    non-zero exit status or a missing binary and captures the elapsed
    wall-clock time in milliseconds.

    Parameters
    ----------
    cmd
        Full command as a list of strings (preferred over shell=True).
    engine
        Human-readable engine key, e.g. "ffmpeg", "gifsicle".
    output_path
        Path expected to be produced by the command – used to calculate the
        final file size in kilobytes.
    timeout
        Optional hard timeout (seconds) – *None* disables the limit.

    Returns
    -------
    dict
        Metadata dict with the keys ``render_ms``, ``engine``, ``command``,
        ``kilobytes``.
    """
    start = time.perf_counter()
    try:
        completed = subprocess.run(cmd, capture_output=True, text=True, timeout=timeout)
    except FileNotFoundError as e:
        raise EngineError(f"Failed to run {engine}: {cmd[0]} not found", cause=e) from e
    except subprocess.TimeoutExpired as e:
        raise EngineError(f"{engine} command timed out after {timeout}s", cause=e) from e
    duration_ms = int((time.perf_counter() - start) * 1000)

    if completed.returncode != 0:
        raise EngineError(
            f"{engine} command failed (exit {completed.returncode}).\n\n"
            f"STDERR:\n{completed.stderr.strip()}",
            context={"command": " ".join(cmd)},
        )

    try:
        size_kb = int(os.path.getsize(output_path) / 1024)
    except OSError:
        # Intermediate outputs (e.g. a palette) may be cleaned up already.
        size_kb = 0

    return {
        "render_ms": duration_ms,
        "engine": engine,
        "command": " ".join(cmd),
        "kilobytes": size_kb,
    }
