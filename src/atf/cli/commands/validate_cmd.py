"""atf validate — test file and step record validation."""

from __future__ import annotations

from pathlib import Path

import typer

from atf.core.exceptions import ATFError, TestLoadError
from atf.core.test_loader import build_steps, find_test_files, load_test
from atf.steps.registry import StepRegistry


def validate_command(
    path: str = typer.Argument(help="Test file or directory path."),
) -> None:
    """Validate test files and every step record in them."""
    try:
        files = find_test_files(Path(path))
    except TestLoadError as e:
        typer.echo(typer.style(str(e), fg=typer.colors.RED), err=True)
        raise typer.Exit(code=1) from None

    registry = StepRegistry.with_builtins()
    errors: list[str] = []
    for file in files:
        try:
            test = load_test(file)
            steps = build_steps(test, registry)
            status = typer.style("OK", fg=typer.colors.GREEN)
            typer.echo(f"  {file.name}: {status} ({len(steps)} steps)")
        except ATFError as e:
            status = typer.style("ERROR", fg=typer.colors.RED)
            typer.echo(f"  {file.name}: {status} - {e}")
            errors.append(file.name)

    typer.echo("")
    total = len(files)
    passed = total - len(errors)
    typer.echo(f"Validated {total} file(s): {passed} OK, {len(errors)} ERROR")

    if errors:
        raise typer.Exit(code=1)
