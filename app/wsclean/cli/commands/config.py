"""Configuration commands.

Provides commands to create a starter configuration file and to show
the effective cleanup configuration.
"""

import json
from pathlib import Path
from typing import Annotated

import typer

from wsclean.core.config import CleanupConfig, PatternConfig, load_config, save_config
from wsclean.core.paths import get_config_path
from wsclean.engine.errors import ConfigurationError
from wsclean.models.rule import RuleType
from wsclean.utils.formatting import console, print_error, print_info, print_success

app = typer.Typer(
    help="Manage cleanup configuration.",
    no_args_is_help=True,
)


@app.command()
def init(
    path: Annotated[
        Path | None,
        typer.Option("--path", help="Where to write the configuration."),
    ] = None,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Overwrite an existing file."),
    ] = False,
) -> None:
    """Write a starter configuration file."""
    config_path = path or get_config_path()
    if config_path.exists() and not force:
        print_info(f"Configuration already exists: {config_path} (use --force)")
        raise typer.Exit(code=1)

    starter = CleanupConfig(
        patterns=[
            PatternConfig(pattern="**/*.tmp"),
            PatternConfig(pattern="**/*.keep", type=RuleType.EXCLUDE),
        ],
    )
    try:
        written = save_config(starter, config_path)
    except ConfigurationError as e:
        print_error(str(e))
        raise typer.Exit(code=2) from e
    print_success(f"Configuration written to {written}")


@app.command()
def show(
    path: Annotated[
        Path | None,
        typer.Option("--path", help="Configuration file to read."),
    ] = None,
) -> None:
    """Show the effective configuration as JSON."""
    try:
        config = load_config(path, required=path is not None)
    except ConfigurationError as e:
        print_error(str(e))
        raise typer.Exit(code=2) from e
    console.print_json(json.dumps(config.model_dump(mode="json")))
