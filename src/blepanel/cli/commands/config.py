from __future__ import annotations

import os

import typer

from blepanel.cli.common import load_settings_or_exit, resolve_config_path_or_exit
from blepanel.config import CONFIG_ENV_VAR, render_settings_toml

app = typer.Typer(no_args_is_help=True, help="Inspect the blepanel configuration")


def _origin() -> str:
    return CONFIG_ENV_VAR if os.environ.get(CONFIG_ENV_VAR) else "default location"


@app.command("show")
def show_config() -> None:
    """Show the effective scanning, connection and permission settings."""
    settings = load_settings_or_exit()
    path, exists = resolve_config_path_or_exit(allow_missing=True)

    if exists:
        typer.echo(f"Config source: {path} ({_origin()})")
    else:
        typer.echo("Config source: built-in defaults (run `blepanel init`)")
    typer.echo(render_settings_toml(settings))


@app.command("path")
def config_path() -> None:
    """Print the config file blepanel reads, even if it does not exist yet."""
    path, exists = resolve_config_path_or_exit(allow_missing=True)
    typer.echo(str(path))
    if not exists:
        typer.echo(f"(missing; resolved from {_origin()})", err=True)
