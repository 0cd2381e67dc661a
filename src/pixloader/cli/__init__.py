"""CLI module for pixloader commands.

Each command lives in its own module; this module assembles them into the
``pixloader`` entry point.
"""

import click

from .assets_cmd import export_zip_cmd, optimize, stats
from .build_cmd import build
from .tools_cmd import tools


@click.group()
@click.version_option(version="0.1.0", prog_name="pixloader")
def main() -> None:
    """🟩 pixloader: pixel-art loading icon generator."""
    pass


main.add_command(build)
main.add_command(optimize)
main.add_command(export_zip_cmd)
main.add_command(stats)
main.add_command(tools)

__all__ = [
    "build",
    "export_zip_cmd",
    "main",
    "optimize",
    "stats",
    "tools",
]
