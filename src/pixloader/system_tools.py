from __future__ import annotations

"""Utility helpers for verifying external system tools.

These lightweight checks make sure FFmpeg and gifsicle are present *before*
a build starts, so a missing binary fails fast with install guidance instead
of half way through a variant.
"""

import re
import subprocess
from dataclasses import dataclass
from shutil import which

from .error_handling import EngineError

_INSTALL_HINTS: dict[str, str] = {
    "ffmpeg": "Install it on macOS with: brew install ffmpeg",
    "gifsicle": "Install it on macOS with: brew install gifsicle",
}


@dataclass(frozen=True, slots=True)
class ToolInfo:
    """Metadata for an external binary discovered on the system."""

    key: str
    name: str
    available: bool
    version: str | None = None

    def require(self) -> None:
        """Raise *EngineError* if the tool isn't available."""
        if not self.available:
            hint = _INSTALL_HINTS.get(self.key, "")
            raise EngineError(
                f"{self.key} is required but '{self.name}' was not found in PATH. {hint}".strip()
            )


def _extract_version(output: str, pattern: str) -> str | None:
    match = re.search(pattern, output)
    if match:
        return match.group(1)
    return None


def _run_version_cmd(cmd: list[str], regex: str) -> str | None:
    try:
        completed = subprocess.run(cmd, capture_output=True, text=True, timeout=5)
    except (OSError, subprocess.SubprocessError):
        return None

    return _extract_version(completed.stdout, regex) or _extract_version(completed.stderr, regex)


_VERSION_COMMANDS: dict[str, tuple[str, str]] = {
    "ffmpeg": ("-version", r"ffmpeg version (\S+)"),
    "gifsicle": ("--version", r"LCDF Gifsicle (\S+)"),
}

_CONFIG_MAPPING: dict[str, str] = {
    "ffmpeg": "FFMPEG_PATH",
    "gifsicle": "GIFSICLE_PATH",
}


def discover_tool(tool_key: str, engine_config=None) -> ToolInfo:
    """Return *ToolInfo* for *tool_key* using the configured binary path.

    Args:
        tool_key: Tool identifier (ffmpeg, gifsicle)
        engine_config: EngineConfig instance (uses DEFAULT_ENGINE_CONFIG if None)
    """
    if tool_key not in _CONFIG_MAPPING:
        raise ValueError(f"Unknown tool: {tool_key}")

    if engine_config is None:
        from .config import DEFAULT_ENGINE_CONFIG

        engine_config = DEFAULT_ENGINE_CONFIG

    binary = getattr(engine_config, _CONFIG_MAPPING[tool_key])
    if not which(binary):
        return ToolInfo(key=tool_key, name=binary, available=False)

    flag, regex = _VERSION_COMMANDS[tool_key]
    version = _run_version_cmd([binary, flag], regex)
    return ToolInfo(key=tool_key, name=binary, available=True, version=version)


def get_available_tools(engine_config=None) -> dict[str, ToolInfo]:
    """Availability of every supported tool, without requiring any of them."""
    return {key: discover_tool(key, engine_config) for key in _CONFIG_MAPPING}
