"""ATF CLI entry point."""

import typer

app = typer.Typer(
    name="atf",
    help="ATF — run and validate widget-level test scripts",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    if value:
        from atf import __version__

        typer.echo(f"atf {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """ATF — run and validate widget-level test scripts."""


# -- Register commands --------------------------------------------------------

from atf.cli.commands.config_cmd import config_app  # noqa: E402
from atf.cli.commands.run_cmd import run_command  # noqa: E402
from atf.cli.commands.steps_cmd import steps_command  # noqa: E402
from atf.cli.commands.validate_cmd import validate_command  # noqa: E402

app.add_typer(config_app, name="config")
app.command(name="validate")(validate_command)
app.command(name="run")(run_command)
app.command(name="steps")(steps_command)
