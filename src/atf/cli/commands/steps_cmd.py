"""atf steps — list the registered step types."""

from __future__ import annotations

import typer

from atf.steps import STEP_REGISTRY


def steps_command() -> None:
    """List built-in step ids with their description."""
    for step_id in sorted(STEP_REGISTRY):
        step_cls = STEP_REGISTRY[step_id]
        name = typer.style(step_id, fg=typer.colors.CYAN)
        typer.echo(f"  {name}: {step_cls.behavior_driven_descriptions[-1]}")
