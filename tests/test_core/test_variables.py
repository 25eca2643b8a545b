"""Tests for VariableResolver."""

from __future__ import annotations

import pytest

from atf.core.exceptions import UnknownVariableError, VariableError
from atf.core.models import VariableScope
from atf.core.variables import VariableResolver, has_variables, stringify


@pytest.fixture
def resolver() -> VariableResolver:
    return VariableResolver()


class TestStore:
    def test_local_shadows_global(self, resolver: VariableResolver) -> None:
        resolver.set("user", "global-user", VariableScope.GLOBAL)
        resolver.set("user", "local-user")
        assert resolver.get("user") == "local-user"
        assert resolver.get("user", VariableScope.GLOBAL) == "global-user"

    def test_clear_local_keeps_global(self, resolver: VariableResolver) -> None:
        resolver.set("a", 1)
        resolver.set("b", 2, VariableScope.GLOBAL)
        resolver.clear_local()
        assert resolver.get("a") is None
        assert resolver.get("b") == 2

    def test_remove(self, resolver: VariableResolver) -> None:
        resolver.set("a", 1)
        resolver.remove("a")
        resolver.remove("missing")
        assert resolver.get("a") is None

    def test_snapshot(self, resolver: VariableResolver) -> None:
        resolver.set("a", 1, VariableScope.GLOBAL)
        resolver.set("a", 2)
        resolver.set("b", 3, VariableScope.GLOBAL)
        assert resolver.snapshot() == {"a": 2, "b": 3}


class TestResolve:
    def test_none(self, resolver: VariableResolver) -> None:
        assert resolver.resolve(None) is None

    def test_plain_text(self, resolver: VariableResolver) -> None:
        assert resolver.resolve("no tokens") == "no tokens"

    def test_two_tokens(self, resolver: VariableResolver) -> None:
        resolver.set("a", 1)
        resolver.set("b", 2)
        assert resolver.resolve("{{a}}-{{b}}") == "1-2"

    def test_whitespace_inside_braces(self, resolver: VariableResolver) -> None:
        resolver.set("name", "x")
        assert resolver.resolve("{{ name }}") == "x"

    def test_names_are_case_sensitive(self, resolver: VariableResolver) -> None:
        resolver.set("Name", "x")
        assert resolver.resolve("{{name}}") == "{{name}}"

    def test_stringifies_values(self, resolver: VariableResolver) -> None:
        resolver.set("flag", True)
        resolver.set("count", 3)
        assert resolver.resolve("{{flag}}/{{count}}") == "true/3"

    def test_lenient_leaves_unknown(self, resolver: VariableResolver) -> None:
        assert resolver.resolve("hi {{nobody}}") == "hi {{nobody}}"

    def test_strict_raises_unknown(self) -> None:
        resolver = VariableResolver(strict=True)
        with pytest.raises(UnknownVariableError, match="nobody"):
            resolver.resolve("hi {{nobody}}")

    def test_strict_override_per_call(self) -> None:
        resolver = VariableResolver(strict=True)
        assert resolver.resolve("{{nobody}}", strict=False) == "{{nobody}}"

    def test_nested_templates(self, resolver: VariableResolver) -> None:
        resolver.set("host", "example.com")
        resolver.set("url", "https://{{host}}/login")
        assert resolver.resolve("{{url}}") == "https://example.com/login"

    def test_cycle_raises(self, resolver: VariableResolver) -> None:
        resolver.set("a", "{{b}}")
        resolver.set("b", "{{a}}")
        with pytest.raises(VariableError, match="Circular"):
            resolver.resolve("{{a}}")

    def test_env_namespace(
        self, resolver: VariableResolver, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("ATF_TEST_SECRET", "s3cret")
        assert resolver.resolve("{{env.ATF_TEST_SECRET}}") == "s3cret"

    def test_missing_env_is_unknown(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("ATF_TEST_MISSING", raising=False)
        with pytest.raises(UnknownVariableError):
            VariableResolver(strict=True).resolve("{{env.ATF_TEST_MISSING}}")


class TestResolveValue:
    def test_single_token_keeps_type(self, resolver: VariableResolver) -> None:
        resolver.set("count", 3)
        assert resolver.resolve_value("{{count}}") == 3

    def test_mixed_template_is_text(self, resolver: VariableResolver) -> None:
        resolver.set("count", 3)
        assert resolver.resolve_value("n={{count}}") == "n=3"


class TestHelpers:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [(None, "null"), (True, "true"), (False, "false"), (1.5, "1.5"), ("x", "x")],
    )
    def test_stringify(self, value: object, expected: str) -> None:
        assert stringify(value) == expected

    def test_has_variables(self) -> None:
        assert has_variables("{{type}}")
        assert not has_variables("String")
