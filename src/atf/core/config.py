"""ATF project configuration — load / save / merge.

Layers, later wins:
    defaults < atf.config.yaml < ATF_* environment < overrides dict

Environment keys nest on `__`: ATF_RUNNER__DELAYS__POST_STEP=0.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from atf.core.exceptions import ConfigError
from atf.core.models import Config

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILENAME = "atf.config.yaml"
CONFIG_DIRNAME = ".atf"
ENV_PREFIX = "ATF_"
ENV_DELIMITER = "__"


def load_config(
    config_path: Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> Config:
    """Build the effective Config.

    Args:
        config_path: YAML file to read. None searches cwd and its parents.
        overrides: Nested dict applied last (CLI flags).

    Raises:
        ConfigError: The file cannot be parsed or the result does not validate.
    """
    if config_path is None:
        config_path = find_config_file()

    file_data: dict[str, Any] = {}
    if config_path is not None and config_path.exists():
        logger.debug("Loading config: %s", config_path)
        file_data = _load_yaml(config_path)

    merged = _deep_merge(file_data, _collect_env_vars())
    if overrides:
        merged = _deep_merge(merged, overrides)

    try:
        return Config(**merged)
    except ValidationError as e:
        msg = f"Config validation failed: {e}"
        raise ConfigError(msg) from e


def save_config(config: Config, path: Path) -> None:
    """Write Config to a YAML file, creating parent directories."""
    data = config.model_dump(mode="json")
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:  # noqa: PTH123
        yaml.dump(data, f, default_flow_style=False, allow_unicode=True, sort_keys=False)


def set_config_value(config: Config, key: str, value: Any) -> Config:
    """Return a copy of config with a dotted key (`runner.delays.post_step`) replaced.

    Raises:
        ConfigError: Unknown key, or the new value does not validate.
    """
    data = config.model_dump(mode="json")
    parts = key.split(".")
    current = data
    for part in parts[:-1]:
        if not isinstance(current.get(part), dict):
            msg = f"Unknown config key: {key}"
            raise ConfigError(msg)
        current = current[part]
    if parts[-1] not in current:
        msg = f"Unknown config key: {key}"
        raise ConfigError(msg)
    current[parts[-1]] = value

    try:
        return Config.model_validate(data)
    except ValidationError as e:
        msg = f"Invalid value for {key}: {e}"
        raise ConfigError(msg) from e


def find_config_file(start: Path | None = None) -> Path | None:
    """Look for atf.config.yaml (or .atf/atf.config.yaml) in start and its parents."""
    current = start or Path.cwd()
    for directory in [current, *current.parents]:
        for candidate in (
            directory / DEFAULT_CONFIG_FILENAME,
            directory / CONFIG_DIRNAME / DEFAULT_CONFIG_FILENAME,
        ):
            if candidate.exists():
                return candidate
    return None


def _load_yaml(path: Path) -> dict[str, Any]:
    try:
        with open(path, encoding="utf-8") as f:  # noqa: PTH123
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        msg = f"Failed to parse YAML: {path}: {e}"
        raise ConfigError(msg) from e
    except OSError as e:
        msg = f"Failed to read config: {path}: {e}"
        raise ConfigError(msg) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        msg = f"Config file must be a YAML mapping, got {type(data).__name__}: {path}"
        raise ConfigError(msg)
    return data


def _collect_env_vars() -> dict[str, Any]:
    """ATF_ prefixed env vars as a nested dict."""
    result: dict[str, Any] = {}
    for key, value in os.environ.items():
        if not key.startswith(ENV_PREFIX):
            continue
        parts = key[len(ENV_PREFIX) :].lower().split(ENV_DELIMITER)
        current = result
        for part in parts[:-1]:
            if not isinstance(current.get(part), dict):
                current[part] = {}
            current = current[part]
        current[parts[-1]] = value
    return result


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge override into base. Override wins on conflicts."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result
