"""Shared utilities for CLI commands."""

import sys
from pathlib import Path

import click

from ..config import PathConfig
from ..io import setup_logging


def handle_generic_error(command_name: str, error: Exception) -> None:
    """Handle generic command errors with consistent formatting."""
    click.echo(f"❌ {command_name} failed: {error}", err=True)
    sys.exit(1)


def handle_keyboard_interrupt(command_name: str) -> None:
    """Handle keyboard interrupt with consistent formatting."""
    click.echo(f"\n⏹️  {command_name} interrupted by user", err=True)
    sys.exit(1)


def configure_logging(path_config: PathConfig, verbose: bool) -> None:
    """Log to stderr and a timestamped file under the project's logs directory."""
    setup_logging(path_config.ROOT_DIR / path_config.LOGS_DIR, "DEBUG" if verbose else "INFO")


def path_config_for(root: Path) -> PathConfig:
    return PathConfig(ROOT_DIR=root)
