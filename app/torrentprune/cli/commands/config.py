"""Config command implementation.

Shows, creates and locates the user configuration file.
"""

from typing import Annotated

import tomli_w
import typer
from rich.markup import escape

from torrentprune.cli.types import require_config
from torrentprune.core.config import ConfigError, PruneConfig, save_config
from torrentprune.core.paths import get_config_path
from torrentprune.utils.formatting import console, print_error, print_info, print_success

app = typer.Typer(
    help="Show or create the configuration file.",
    no_args_is_help=True,
)


@app.command()
def show() -> None:
    """Print the effective configuration as TOML."""
    config = require_config()
    config_path = get_config_path()
    source = str(config_path) if config_path.exists() else "defaults"
    console.print(f"[muted]# {escape(source)}[/muted]")
    console.print(escape(tomli_w.dumps(config.model_dump())), highlight=False)


@app.command()
def init(
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Overwrite an existing config file."),
    ] = False,
) -> None:
    """Write a config file holding the default settings."""
    config_path = get_config_path()

    if config_path.exists() and not force:
        print_error(f"Config already exists: {escape(str(config_path))}")
        print_info("Use --force to overwrite.")
        raise typer.Exit(code=1)

    try:
        path = save_config(PruneConfig(), config_path)
    except ConfigError as e:
        print_error(escape(str(e)))
        raise typer.Exit(code=1) from e

    print_success(f"Config written to {escape(str(path))}")


@app.command()
def path() -> None:
    """Print the config file location."""
    typer.echo(str(get_config_path()))
