"""External tool availability check."""

import click
from rich.console import Console
from rich.table import Table

from ..config import EngineConfig
from ..system_tools import get_available_tools


@click.command()
def tools() -> None:
    """🔍 Check that FFmpeg and gifsicle are installed."""
    console = Console()
    table = Table(title="🔧 External tools", show_header=True, header_style="bold magenta")
    table.add_column("Tool", style="cyan", no_wrap=True)
    table.add_column("Status", justify="center")
    table.add_column("Details", style="dim")

    all_available = True
    for key, info in get_available_tools(EngineConfig()).items():
        if info.available:
            table.add_row(key, "[green]✅ Available[/green]", f"{info.name} {info.version or ''}".strip())
        else:
            all_available = False
            table.add_row(key, "[red]❌ Missing[/red]", f"brew install {key}")

    console.print(table)
    if not all_available:
        console.print("💡 The pillow encoder works without FFmpeg: [bold]pixloader build --encoder pillow[/bold]")
