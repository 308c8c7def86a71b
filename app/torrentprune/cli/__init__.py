"""CLI package for torrentprune.

This package contains the Typer application and all subcommands.
"""

from torrentprune.cli.main import app

__all__ = ["app"]
