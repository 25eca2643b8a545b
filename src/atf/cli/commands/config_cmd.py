"""atf config — configuration management."""

from __future__ import annotations

from pathlib import Path

import typer
import yaml

from atf.core.config import (
    CONFIG_DIRNAME,
    DEFAULT_CONFIG_FILENAME,
    load_config,
    save_config,
    set_config_value,
)
from atf.core.exceptions import ConfigError

config_app = typer.Typer(
    name="config",
    help="Configuration management commands.",
    no_args_is_help=True,
)


@config_app.command(name="show")
def config_show(
    config_path: str | None = typer.Option(None, "--config", "-c", help="Config file path."),
) -> None:
    """Show the effective configuration."""
    try:
        path = Path(config_path) if config_path else None
        config = load_config(config_path=path)
        data = config.model_dump(mode="json")
        output = yaml.dump(data, default_flow_style=False, allow_unicode=True, sort_keys=False)
        typer.echo(output)
    except ConfigError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from None


@config_app.command(name="set")
def config_set(
    key: str = typer.Argument(help="Dotted config key (e.g. runner.delays.post_step)."),
    value: str = typer.Argument(help="Value to set."),
    config_path: str | None = typer.Option(None, "--config", "-c", help="Config file path."),
) -> None:
    """Set a configuration value by dotted key."""
    try:
        path = Path(config_path) if config_path else _find_config_path()
        config = set_config_value(load_config(config_path=path), key, value)
        save_config(config, path)
        typer.echo(f"Set {key} = {value}")
    except ConfigError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from None


def _find_config_path() -> Path:
    """Config file in cwd (or cwd/.atf), defaulting to atf.config.yaml in cwd."""
    cwd = Path.cwd()
    candidate = cwd / CONFIG_DIRNAME / DEFAULT_CONFIG_FILENAME
    if candidate.exists():
        return candidate
    return cwd / DEFAULT_CONFIG_FILENAME
