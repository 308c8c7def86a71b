"""CLI commands for torrentprune.

This package contains all subcommand implementations.
"""

from torrentprune.cli.commands import check, clean, config, diff, info, snapshot

__all__ = ["check", "clean", "config", "diff", "info", "snapshot"]
