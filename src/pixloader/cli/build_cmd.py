"""Build the loader GIF variants from the source icon."""

from pathlib import Path

import click

from ..config import VALID_MODES, EngineConfig, LoaderConfig
from ..error_handling import PixLoaderError
from ..pipeline import build_resolutions
from .utils import configure_logging, handle_generic_error, handle_keyboard_interrupt, path_config_for


@click.command()
@click.option(
    "--root",
    type=click.Path(file_okay=False, dir_okay=True, path_type=Path),
    default=Path("."),
    help="Project root holding src/assets (default: current directory)",
)
@click.option(
    "--icon",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Source icon (default: src/assets/icon-source.png under --root)",
)
@click.option("--frames", type=int, default=16, help="Idle loop length in frames (default: 16)")
@click.option("--frame-ms", type=int, default=40, help="Frame duration in milliseconds (default: 40)")
@click.option("--palette", type=int, default=32, help="Palette size, 0 disables palette generation (default: 32)")
@click.option("--transition", type=int, default=10, help="Dissolve length in frames (default: 10)")
@click.option("--speed", type=int, default=2, help="Multiplier applied to hold and dissolve lengths (default: 2)")
@click.option(
    "--mode",
    type=click.Choice(VALID_MODES),
    default="custom",
    help="Transition after the dissolve: custom build or angular sweep (default: custom)",
)
@click.option(
    "--cell-size",
    "cell_sizes",
    type=int,
    multiple=True,
    help="Output pixels per grid cell, repeat for several resolutions (default: 8)",
)
@click.option(
    "--encoder",
    type=click.Choice(["ffmpeg", "pillow"]),
    default=None,
    help="GIF encoder (default: ffmpeg, or $PIXLOADER_ENCODER)",
)
@click.option(
    "--source-mask",
    is_flag=True,
    help="Derive the pixel mask from the icon instead of the built-in 24x24 design",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def build(
    root: Path,
    icon: Path | None,
    frames: int,
    frame_ms: int,
    palette: int,
    transition: int,
    speed: int,
    mode: str,
    cell_sizes: tuple[int, ...],
    encoder: str | None,
    source_mask: bool,
    verbose: bool,
) -> None:
    """🧱 Generate static and transition loader GIFs for every style variant."""
    path_config = path_config_for(root)
    configure_logging(path_config, verbose)

    try:
        config = LoaderConfig(
            FRAME_COUNT=frames,
            FRAME_MS=frame_ms,
            PALETTE_SIZE=palette,
            TRANSITION_FRAMES=transition,
            SPEED_MULTIPLIER=speed,
            MODE=mode,
            USE_ICON_MASK=not source_mask,
        )
        engine_config = EngineConfig()
        if encoder:
            engine_config.ENCODER = encoder

        click.echo(f"🎞️  Building loaders ({mode} mode, encoder: {engine_config.ENCODER})")
        results = build_resolutions(
            config,
            cell_sizes or (config.CELL_SIZE,),
            path_config=path_config,
            engine_config=engine_config,
            icon_path=icon,
        )

        for cell_size, variants in results.items():
            size = config.GRID_SIZE * cell_size
            for result in variants:
                click.echo(f"✅ {result.variant} ({size}px): {result.static_path}")
                if result.transition_path is not None:
                    click.echo(f"   ↳ {result.transition_path} ({result.manifest.get('frames', 0)} frames)")

    except KeyboardInterrupt:
        handle_keyboard_interrupt("Build")
    except PixLoaderError as e:
        handle_generic_error("Build", e)
