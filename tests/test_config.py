"""Tests for Config loading, saving, and layered merge."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from atf.core.config import (
    CONFIG_DIRNAME,
    DEFAULT_CONFIG_FILENAME,
    _deep_merge,
    _load_yaml,
    find_config_file,
    load_config,
    save_config,
    set_config_value,
)
from atf.core.exceptions import ConfigError
from atf.core.models import Config

# ── Defaults ──


class TestConfigDefaults:
    def test_default_values(self) -> None:
        config = Config()
        assert config.project_name == "atf-project"
        assert config.url == ""
        assert config.tests_dir == "tests"

    def test_nested_defaults(self) -> None:
        config = Config()
        assert config.driver.browser == "chromium"
        assert config.runner.stop_on_first_failure is True
        assert config.runner.delays.scroll_settle == 0.3

    def test_is_base_settings(self) -> None:
        from pydantic_settings import BaseSettings

        assert issubclass(Config, BaseSettings)


# ── YAML Loading ──


class TestYAMLLoading:
    def test_load_from_yaml(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / DEFAULT_CONFIG_FILENAME
        yaml_file.write_text(
            yaml.dump({"project_name": "my-project", "url": "https://example.com"}),
            encoding="utf-8",
        )
        config = load_config(config_path=yaml_file)
        assert config.project_name == "my-project"
        assert config.url == "https://example.com"

    def test_load_nested_yaml(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / DEFAULT_CONFIG_FILENAME
        yaml_file.write_text(
            yaml.dump(
                {
                    "runner": {
                        "strict_variables": True,
                        "variables": {"user": "alice"},
                        "delays": {"post_step": 0},
                    },
                }
            ),
            encoding="utf-8",
        )
        config = load_config(config_path=yaml_file)
        assert config.runner.strict_variables is True
        assert config.runner.variables == {"user": "alice"}
        assert config.runner.delays.post_step == 0.0
        assert config.runner.delays.post_found_target == 0.25

    def test_load_empty_yaml(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / DEFAULT_CONFIG_FILENAME
        yaml_file.write_text("", encoding="utf-8")
        config = load_config(config_path=yaml_file)
        assert config.project_name == "atf-project"

    def test_load_nonexistent_path_uses_defaults(self) -> None:
        config = load_config(config_path=Path("/nonexistent/atf.config.yaml"))
        assert config.project_name == "atf-project"

    def test_load_invalid_yaml(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / DEFAULT_CONFIG_FILENAME
        yaml_file.write_text("project_name: [invalid: yaml: {{", encoding="utf-8")
        with pytest.raises(ConfigError, match="Failed to parse YAML"):
            load_config(config_path=yaml_file)

    def test_load_non_mapping_yaml(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / DEFAULT_CONFIG_FILENAME
        yaml_file.write_text("- item1\n- item2\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="must be a YAML mapping"):
            _load_yaml(yaml_file)


# ── File Discovery ──


class TestFindConfigFile:
    def test_finds_in_parent(self, tmp_path: Path) -> None:
        (tmp_path / DEFAULT_CONFIG_FILENAME).write_text("{}", encoding="utf-8")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        assert find_config_file(nested) == tmp_path / DEFAULT_CONFIG_FILENAME

    def test_finds_in_dot_dir(self, tmp_path: Path) -> None:
        (tmp_path / CONFIG_DIRNAME).mkdir()
        target = tmp_path / CONFIG_DIRNAME / DEFAULT_CONFIG_FILENAME
        target.write_text("{}", encoding="utf-8")
        assert find_config_file(tmp_path) == target


# ── Environment Variable Merge ──


class TestEnvVarMerge:
    def test_env_prefix(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ATF_PROJECT_NAME", "env-project")
        config = load_config(config_path=Path("/nonexistent/config.yaml"))
        assert config.project_name == "env-project"

    def test_env_nested(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ATF_RUNNER__DELAYS__POST_STEP", "0")
        monkeypatch.setenv("ATF_DRIVER__BROWSER", "firefox")
        config = load_config(config_path=Path("/nonexistent/config.yaml"))
        assert config.runner.delays.post_step == 0.0
        assert config.driver.browser == "firefox"

    def test_env_overrides_yaml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        yaml_file = tmp_path / DEFAULT_CONFIG_FILENAME
        yaml_file.write_text(yaml.dump({"project_name": "yaml-project"}), encoding="utf-8")
        monkeypatch.setenv("ATF_PROJECT_NAME", "env-project")
        config = load_config(config_path=yaml_file)
        assert config.project_name == "env-project"


# ── CLI Override Merge ──


class TestCLIOverrides:
    def test_override_flat(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / DEFAULT_CONFIG_FILENAME
        yaml_file.write_text(yaml.dump({"project_name": "yaml-project"}), encoding="utf-8")
        config = load_config(config_path=yaml_file, overrides={"project_name": "cli-project"})
        assert config.project_name == "cli-project"

    def test_override_does_not_destroy_yaml(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / DEFAULT_CONFIG_FILENAME
        yaml_file.write_text(
            yaml.dump({"runner": {"strict_variables": True}}),
            encoding="utf-8",
        )
        config = load_config(
            config_path=yaml_file,
            overrides={"runner": {"stop_on_first_failure": False}},
        )
        assert config.runner.strict_variables is True
        assert config.runner.stop_on_first_failure is False

    def test_validation_error_raises_config_error(self) -> None:
        with pytest.raises(ConfigError, match="Config validation failed"):
            load_config(
                config_path=Path("/nonexistent/config.yaml"),
                overrides={"runner": {"delays": {"poll_interval": -1}}},
            )


# ── Save / Set ──


class TestSaveConfig:
    def test_save_and_reload(self, tmp_path: Path) -> None:
        config = Config(project_name="saved-project", url="https://test.com")
        out_path = tmp_path / DEFAULT_CONFIG_FILENAME
        save_config(config, out_path)

        reloaded = load_config(config_path=out_path)
        assert reloaded.project_name == "saved-project"
        assert reloaded.url == "https://test.com"

    def test_save_creates_parent_dirs(self, tmp_path: Path) -> None:
        out_path = tmp_path / "nested" / "dir" / DEFAULT_CONFIG_FILENAME
        save_config(Config(), out_path)
        assert out_path.exists()


class TestSetConfigValue:
    def test_nested_key(self) -> None:
        config = set_config_value(Config(), "runner.delays.post_step", "0.1")
        assert config.runner.delays.post_step == 0.1

    def test_bool_from_string(self) -> None:
        config = set_config_value(Config(), "driver.headless", "false")
        assert config.driver.headless is False

    def test_unknown_key(self) -> None:
        with pytest.raises(ConfigError, match="Unknown config key"):
            set_config_value(Config(), "runner.nope", "1")

    def test_invalid_value(self) -> None:
        with pytest.raises(ConfigError, match="Invalid value"):
            set_config_value(Config(), "runner.delays.poll_interval", "fast")


# ── Deep Merge ──


class TestDeepMerge:
    def test_nested(self) -> None:
        base = {"a": {"b": 1, "c": 2}, "d": 3}
        merged = _deep_merge(base, {"a": {"c": 20}})
        assert merged == {"a": {"b": 1, "c": 20}, "d": 3}
        assert base["a"]["c"] == 2

    def test_scalar_replaces_dict(self) -> None:
        assert _deep_merge({"a": {"b": 1}}, {"a": 5}) == {"a": 5}
