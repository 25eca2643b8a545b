"""atf run — execute test files against the configured driver."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any

import typer

from atf.core.config import load_config
from atf.core.controller import TestController
from atf.core.events import CLIEventHandler, LogStream
from atf.core.exceptions import ATFError, ConfigError
from atf.core.models import StepStatus, VariableScope
from atf.core.test_loader import build_steps, load_tests
from atf.engine import DRIVER_REGISTRY


def run_command(
    tests_path: str = typer.Argument(help="Test file or directory path."),
    config_path: str | None = typer.Option(None, "--config", "-c", help="Config file path."),
    variables: list[str] | None = typer.Option(
        None, "--var", help="Global variable as NAME=VALUE. Repeatable."
    ),
    continue_on_failure: bool = typer.Option(
        False, "--continue-on-failure", help="Keep running after a failed step."
    ),
    url: str | None = typer.Option(None, "--url", help="Override the start URL."),
) -> None:
    """Run test files."""
    try:
        parsed = _parse_vars(variables or [])
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--var") from None

    overrides: dict[str, Any] = {}
    if url:
        overrides["url"] = url
    if continue_on_failure:
        overrides["runner"] = {"stop_on_first_failure": False}

    try:
        asyncio.run(_run(tests_path, config_path, parsed, overrides))
    except ATFError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from None


def _parse_vars(items: list[str]) -> dict[str, str]:
    result: dict[str, str] = {}
    for item in items:
        name, sep, value = item.partition("=")
        if not sep or not name.strip():
            msg = f"expected NAME=VALUE, got '{item}'"
            raise ValueError(msg)
        result[name.strip()] = value
    return result


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


async def _run(
    tests_path: str,
    config_path: str | None,
    variables: dict[str, str],
    overrides: dict[str, Any],
) -> None:
    cfg_path = Path(config_path) if config_path else None
    config = load_config(config_path=cfg_path, overrides=overrides or None)
    _setup_logging(config.log_level)

    tests = load_tests(Path(tests_path))

    driver_cls = DRIVER_REGISTRY.get(config.driver.type)
    if driver_cls is None:
        msg = f"Unknown driver type: {config.driver.type}"
        raise ConfigError(msg)
    driver = driver_cls(config.driver, url=config.url)

    emitter = CLIEventHandler()
    controller = TestController(driver, config.runner, emitter=emitter)
    for name, value in variables.items():
        controller.set_variable(name, value, VariableScope.GLOBAL)

    # Fail on malformed records before a browser is launched.
    for test in tests:
        build_steps(test, controller.registry)

    # Surface atf warnings alongside step results.
    log_stream = LogStream(emitter, logging.WARNING)
    await driver.start()
    log_stream.start()
    try:
        suite = await controller.run_tests(tests)
    finally:
        log_stream.stop()
        await driver.stop()

    passed = failed = total = 0
    for report in suite.reports:
        total += len(report.steps)
        passed += report.passed_steps
        failed += report.failed_steps
        label = f"{report.name} ({report.duration_ms:.0f}ms)"
        if report.success:
            emitter.success(label)
        elif report.cancelled:
            emitter.warning(f"{label} cancelled")
        else:
            statuses = {s.status for s in report.steps}
            kind = "error" if StepStatus.ERROR in statuses else "failed"
            emitter.error(f"{label} {kind}")

    typer.echo(f"\nSummary: {passed} passed, {failed} failed, {total} total")

    if not suite.success:
        raise typer.Exit(code=1)
