"""Event system for run notifications.

EventEmitter is injected into the TestController by the composition root
(the CLI, or a host application). LogStream forwards `atf` log records to an
emitter between explicit start() and stop() calls.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any


class EventEmitter(ABC):
    """Base event emitter for ATF notifications."""

    @abstractmethod
    def info(self, message: str) -> None:
        """Informational message."""
        ...

    @abstractmethod
    def success(self, message: str) -> None:
        """Success message."""
        ...

    @abstractmethod
    def warning(self, message: str) -> None:
        """Warning message."""
        ...

    @abstractmethod
    def error(self, message: str) -> None:
        """Error message."""
        ...

    @abstractmethod
    def step_start(self, step_num: int, total: int, description: str) -> None:
        """A test step is starting."""
        ...

    @abstractmethod
    def step_result(
        self, step_num: int, passed: bool, description: str, error: str | None = None
    ) -> None:
        """A test step completed."""
        ...

    @abstractmethod
    def progress(self, label: str, current: int, total: int) -> None:
        """Progress tick of an in-flight wait."""
        ...

    @abstractmethod
    def section(self, title: str) -> None:
        """Start a new section (visual separator)."""
        ...


class CLIEventHandler(EventEmitter):
    """Terminal output handler using typer."""

    def __init__(self, show_progress: bool = False) -> None:
        self._show_progress = show_progress

    def info(self, message: str) -> None:
        import typer

        typer.echo(message)

    def success(self, message: str) -> None:
        import typer

        typer.echo(typer.style(f"  [OK] {message}", fg=typer.colors.GREEN))

    def warning(self, message: str) -> None:
        import typer

        typer.echo(typer.style(f"  [WARN] {message}", fg=typer.colors.YELLOW))

    def error(self, message: str) -> None:
        import typer

        typer.echo(typer.style(f"  [ERROR] {message}", fg=typer.colors.RED), err=True)

    def step_start(self, step_num: int, total: int, description: str) -> None:
        import typer

        typer.echo(f"  Step {step_num}/{total}: {description}")

    def step_result(
        self, step_num: int, passed: bool, description: str, error: str | None = None
    ) -> None:
        import typer

        if passed:
            typer.echo(typer.style(f"         Step {step_num}: OK", fg=typer.colors.GREEN))
        else:
            typer.echo(typer.style(f"         Step {step_num}: FAILED", fg=typer.colors.RED))
            if error:
                typer.echo(typer.style(f"         Reason: {error}", fg=typer.colors.RED))

    def progress(self, label: str, current: int, total: int) -> None:
        if not self._show_progress:
            return
        import typer

        typer.echo(f"  ({current}/{total}) {label}")

    def section(self, title: str) -> None:
        import typer

        typer.echo(f"\n{'=' * 50}")
        typer.echo(f"  {title}")
        typer.echo(f"{'=' * 50}")


class MessageBuffer(EventEmitter):
    """Collects messages for batch forwarding (and for tests)."""

    def __init__(self) -> None:
        self.messages: list[dict[str, Any]] = []

    def info(self, message: str) -> None:
        self.messages.append({"type": "info", "text": message})

    def success(self, message: str) -> None:
        self.messages.append({"type": "success", "text": message})

    def warning(self, message: str) -> None:
        self.messages.append({"type": "warning", "text": message})

    def error(self, message: str) -> None:
        self.messages.append({"type": "error", "text": message})

    def step_start(self, step_num: int, total: int, description: str) -> None:
        self.messages.append(
            {
                "type": "step_start",
                "step": step_num,
                "total": total,
                "text": description,
            }
        )

    def step_result(
        self, step_num: int, passed: bool, description: str, error: str | None = None
    ) -> None:
        self.messages.append(
            {
                "type": "step_result",
                "step": step_num,
                "passed": passed,
                "text": description,
                "error": error,
            }
        )

    def progress(self, label: str, current: int, total: int) -> None:
        self.messages.append(
            {
                "type": "progress",
                "text": label,
                "current": current,
                "total": total,
            }
        )

    def section(self, title: str) -> None:
        self.messages.append({"type": "section", "text": title})

    def of_type(self, mtype: str) -> list[dict[str, Any]]:
        return [m for m in self.messages if m["type"] == mtype]

    def to_text(self) -> str:
        """Format all messages as plain text."""
        lines: list[str] = []
        for msg in self.messages:
            mtype = msg["type"]
            if mtype == "section":
                lines.append(f"--- {msg['text']} ---")
            elif mtype == "success":
                lines.append(f"[OK] {msg['text']}")
            elif mtype == "error":
                lines.append(f"[ERROR] {msg['text']}")
            elif mtype == "step_result":
                status = "OK" if msg["passed"] else "FAILED"
                lines.append(f"  Step {msg['step']}: {status} - {msg['text']}")
            elif mtype == "progress":
                continue
            else:
                lines.append(msg.get("text", ""))
        return "\n".join(lines)


class _EmitterHandler(logging.Handler):
    def __init__(self, emitter: EventEmitter) -> None:
        super().__init__()
        self._emitter = emitter

    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = self.format(record)
            if record.levelno >= logging.ERROR:
                self._emitter.error(message)
            elif record.levelno >= logging.WARNING:
                self._emitter.warning(message)
            else:
                self._emitter.info(message)
        except Exception:
            self.handleError(record)


class LogStream:
    """Streams `atf` log records at or above `level` into an EventEmitter.

    Nothing is attached until start(); stop() detaches and restores the
    logger level. Usable as a context manager.
    """

    def __init__(
        self,
        emitter: EventEmitter,
        level: int = logging.INFO,
        logger_name: str = "atf",
    ) -> None:
        self._emitter = emitter
        self._level = level
        self._logger = logging.getLogger(logger_name)
        self._handler: _EmitterHandler | None = None
        self._previous_level = logging.NOTSET

    @property
    def active(self) -> bool:
        return self._handler is not None

    def start(self) -> None:
        if self._handler is not None:
            return
        handler = _EmitterHandler(self._emitter)
        handler.setLevel(self._level)
        handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
        self._previous_level = self._logger.level
        if self._logger.getEffectiveLevel() > self._level:
            self._logger.setLevel(self._level)
        self._logger.addHandler(handler)
        self._handler = handler

    def stop(self) -> None:
        if self._handler is None:
            return
        self._logger.removeHandler(self._handler)
        self._logger.setLevel(self._previous_level)
        self._handler = None

    def __enter__(self) -> LogStream:
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()
