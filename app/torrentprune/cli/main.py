"""Main CLI application entry point.

Defines the Typer application and global options.
"""

import logging
from typing import Annotated

import typer

from torrentprune import __version__
from torrentprune.cli.commands import check, clean, config, diff, info, snapshot

# Create main Typer app
app = typer.Typer(
    name="torrentprune",
    help="Remove files a multi-file torrent no longer references.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"torrentprune version {__version__}")
        raise typer.Exit()


def configure_logging(verbose: bool, quiet: bool) -> None:
    """Set the root log level from the global flags."""
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.CRITICAL
    else:
        level = logging.ERROR
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")
    logging.getLogger().setLevel(level)


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable debug logging.",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress log output.",
        ),
    ] = False,
) -> None:
    """torrentprune - Reconcile a torrent's data directory with its file list.

    Decode a multi-file .torrent, compare the files it declares with
    the files on disk and delete what the torrent no longer references.
    """
    configure_logging(verbose, quiet)

    # Store options in context for subcommands
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet


# Register commands
app.command(name="clean")(clean.clean)
app.command(name="check")(check.check)
app.command(name="info")(info.info)
app.command(name="diff")(diff.diff)
app.command(name="snapshot")(snapshot.snapshot)
app.add_typer(config.app, name="config")


if __name__ == "__main__":
    app()
