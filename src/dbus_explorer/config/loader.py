"""Load ExplorerConfig from an optional YAML file, the environment and CLI options."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pydantic
import yaml

from dbus_explorer.config.settings import ExplorerConfig
from dbus_explorer.errors import ConfigValidationError


class ConfigLoadError(Exception):
    """The config file is missing, unreadable or not a YAML mapping."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.details = dict(details or {})


def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.is_file():
        raise ConfigLoadError(f"Config file not found: {path}", {"path": str(path)})

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigLoadError(
            f"{path} is not valid YAML: {e}",
            {"path": str(path), "yaml_error": str(e)},
        ) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigLoadError(
            f"{path} must hold a mapping of settings, not a {type(data).__name__}",
            {"path": str(path)},
        )
    return data


def _invalid_value(error: pydantic.ValidationError) -> ConfigValidationError:
    """Turn pydantic's type/parse errors into a ConfigValidationError."""
    first = error.errors()[0]
    field = ".".join(str(part) for part in first["loc"]) or None
    problems = "; ".join(
        f"{'.'.join(str(part) for part in item['loc'])}: {item['msg']}"
        for item in error.errors()
    )
    return ConfigValidationError(
        message=f"Invalid configuration: {problems}",
        field=field,
        value=first.get("input"),
        cause=error,
    )


def load_config(config_path: str | Path | None = None, **overrides: Any) -> ExplorerConfig:
    """Build the effective configuration.

    Values from ``config_path`` sit below DBUS_EXPLORER_* environment
    variables. ``overrides`` (CLI options, already range-checked by click)
    sit above both; None means "not given".

    Raises:
        ConfigLoadError: If the file cannot be used.
        ConfigValidationError: If a value is invalid.
    """
    file_values = _read_yaml(Path(config_path)) if config_path is not None else {}
    try:
        config = ExplorerConfig(**file_values)
    except pydantic.ValidationError as e:
        raise _invalid_value(e) from e

    given = {key: value for key, value in overrides.items() if value is not None}
    return config.model_copy(update=given) if given else config
