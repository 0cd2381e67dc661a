"""Entry point for ``python -m pixloader.cli_entry``."""

from .cli import main

__all__ = ["main"]

if __name__ == "__main__":
    main()
