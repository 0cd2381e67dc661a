"""Post-build commands: optimisation, zip export and asset statistics."""

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from ..config import EngineConfig
from ..error_handling import PixLoaderError
from ..pipeline import asset_stats, export_zip, optimize_outputs
from .utils import configure_logging, handle_generic_error, path_config_for

_root_option = click.option(
    "--root",
    type=click.Path(file_okay=False, dir_okay=True, path_type=Path),
    default=Path("."),
    help="Project root holding src/assets (default: current directory)",
)


@click.command()
@_root_option
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def optimize(root: Path, verbose: bool) -> None:
    """⚡ Write gifsicle-optimised ``-opt`` copies of the transition GIFs."""
    path_config = path_config_for(root)
    configure_logging(path_config, verbose)
    try:
        optimized = optimize_outputs(path_config, EngineConfig())
    except PixLoaderError as e:
        handle_generic_error("Optimize", e)
        return

    for name, path in optimized.items():
        click.echo(f"✅ {name}: {path}")


@click.command("export-zip")
@_root_option
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def export_zip_cmd(root: Path, verbose: bool) -> None:
    """📦 Optimise the transition GIFs and package them into a zip archive."""
    path_config = path_config_for(root)
    configure_logging(path_config, verbose)
    try:
        zip_path = export_zip(path_config, EngineConfig())
    except PixLoaderError as e:
        handle_generic_error("Export", e)
        return

    click.echo(f"📦 Wrote {zip_path}")


@click.command()
@_root_option
def stats(root: Path) -> None:
    """📊 Show dimensions and file sizes of the icon and loader GIFs."""
    console = Console()
    table = Table(title="📊 Loader assets", show_header=True, header_style="bold magenta")
    table.add_column("File", style="cyan", no_wrap=True)
    table.add_column("Dimensions", justify="center")
    table.add_column("Size", justify="right")

    for row in asset_stats(path_config_for(root)):
        if not row["exists"]:
            table.add_row(str(row["path"]), "[red]missing[/red]", "-")
            continue
        table.add_row(str(row["path"]), row["dimensions"], row["size"])

    console.print(table)
