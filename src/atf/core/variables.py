"""VariableResolver — layered variable store with {{name}} substitution.

Lookup order: run-local scope, global scope, then `env.NAME` from the
process environment. Names are case-sensitive.
"""

from __future__ import annotations

import os
import re
from typing import Any

from atf.core.exceptions import UnknownVariableError, VariableError
from atf.core.models import VariableScope

_VAR_PATTERN = re.compile(r"\{\{\s*([\w.\-]+)\s*\}\}")
_MISSING = object()


def has_variables(text: str) -> bool:
    return _VAR_PATTERN.search(text) is not None


def stringify(value: Any) -> str:
    """String form of a typed variable value."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class VariableResolver:
    """Global + run-local variable scopes."""

    def __init__(self, *, strict: bool = False) -> None:
        self.strict = strict
        self._global: dict[str, Any] = {}
        self._local: dict[str, Any] = {}

    # ------------------------------------------------------------------
    # Store
    # ------------------------------------------------------------------

    def _scope(self, scope: VariableScope) -> dict[str, Any]:
        return self._global if scope == VariableScope.GLOBAL else self._local

    def set(self, name: str, value: Any, scope: VariableScope = VariableScope.LOCAL) -> None:
        self._scope(scope)[name] = value

    def get(self, name: str, scope: VariableScope | None = None) -> Any:
        """Return a variable's raw value, or None if unset.

        With no scope, run-local shadows global.
        """
        if scope is not None:
            return self._scope(scope).get(name)
        value = self._lookup(name)
        return None if value is _MISSING else value

    def remove(self, name: str, scope: VariableScope = VariableScope.LOCAL) -> None:
        self._scope(scope).pop(name, None)

    def clear_local(self) -> None:
        self._local.clear()

    def snapshot(self) -> dict[str, Any]:
        """Merged view, run-local winning."""
        return {**self._global, **self._local}

    def _lookup(self, name: str) -> Any:
        if name in self._local:
            return self._local[name]
        if name in self._global:
            return self._global[name]
        if name.startswith("env."):
            return os.environ.get(name[4:], _MISSING)
        return _MISSING

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def resolve(self, template: str | None, *, strict: bool | None = None) -> str | None:
        """Substitute every {{name}} token in template.

        Substituted values containing tokens are resolved in turn.
        Unknown names stay literal, or raise UnknownVariableError in strict
        mode. `strict` overrides the resolver default for this call.
        """
        if template is None:
            return None
        return self._resolve(str(template), (), self.strict if strict is None else strict)

    def resolve_value(self, template: str | None) -> Any:
        """Like resolve(), but a template that is exactly one token yields the raw value."""
        if template is None:
            return None
        match = _VAR_PATTERN.fullmatch(str(template).strip())
        if match is not None:
            value = self._lookup(match.group(1))
            if value is not _MISSING and not isinstance(value, str):
                return value
        return self.resolve(template)

    def _resolve(self, template: str, chain: tuple[str, ...], strict: bool) -> str:
        def replace(match: re.Match[str]) -> str:
            name = match.group(1)
            if name in chain:
                msg = f"Circular variable reference: {' -> '.join((*chain, name))}"
                raise VariableError(msg)
            value = self._lookup(name)
            if value is _MISSING:
                if strict:
                    raise UnknownVariableError(name)
                return match.group(0)
            text = stringify(value)
            if _VAR_PATTERN.search(text):
                return self._resolve(text, (*chain, name), strict)
            return text

        return _VAR_PATTERN.sub(replace, template)
