"""YAML settings source with environment-based file merging."""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml
from pydantic_settings import PydanticBaseSettingsSource


if TYPE_CHECKING:
    from pydantic.fields import FieldInfo


CONFIG_DIR_ENV_VAR = "REPO_ANALYZER_CONFIG_DIR"


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge override into base dict, returning a new dict."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _load_dir(directory: Path, merged: dict[str, Any]) -> dict[str, Any]:
    if not directory.exists():
        return merged
    for yaml_file in sorted(directory.glob("*.yaml")):
        with yaml_file.open(encoding="utf-8") as f:
            merged = deep_merge(merged, yaml.safe_load(f) or {})
    return merged


class MultiYamlConfigSettingsSource(PydanticBaseSettingsSource):
    """Load and merge multiple YAML files based on APP_ENV.

    Files are read in two stages:
    1. every ``*.yaml`` in ``config/base/``
    2. overrides from ``config/environments/{APP_ENV}/``

    The config directory defaults to ``<project root>/config`` and can be moved
    with the ``REPO_ANALYZER_CONFIG_DIR`` environment variable.
    """

    def __init__(
        self,
        settings_cls: type[Any],
        config_dir: Path | None = None,
    ) -> None:
        super().__init__(settings_cls)
        self._config_dir = config_dir or self._find_config_dir()
        self._app_env = os.getenv("APP_ENV", "development")
        self._yaml_data: dict[str, Any] = {}
        self._load_yaml_files()

    def _find_config_dir(self) -> Path:
        override = os.getenv(CONFIG_DIR_ENV_VAR)
        if override:
            return Path(override)
        # src/repo_analyzer/core/config/yaml_source.py -> project root
        return Path(__file__).resolve().parents[4] / "config"

    def _load_yaml_files(self) -> None:
        merged = _load_dir(self._config_dir / "base", {})
        merged = _load_dir(self._config_dir / "environments" / self._app_env, merged)
        self._yaml_data = merged

    def get_field_value(
        self,
        _field: FieldInfo,
        field_name: str,
    ) -> tuple[Any, str, bool]:
        """Get the value for a specific field from YAML data."""
        value = self._yaml_data.get(field_name)
        return value, field_name, isinstance(value, (dict, list))

    def __call__(self) -> dict[str, Any]:
        """Return all merged YAML configuration data."""
        return self._yaml_data
