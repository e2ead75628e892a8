"""Configuration management for the CLI."""

import os
from pathlib import Path
from typing import Any

import yaml

# Environment variable -> wire-form option key
ENV_OPTIONS = {
    "DOCQUERY_IGNORE_CASE": "ignoreCase",
    "DOCQUERY_IGNORE_ACCENTS": "ignoreAccents",
    "DOCQUERY_FUZZY_THRESHOLD": "fuzzyThreshold",
    "DOCQUERY_DATE_OPERATOR": "dateComparisonOperator",
}

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


class Config:
    """Configuration management for the CLI application."""

    @staticmethod
    def from_file(path: Path) -> dict[str, Any]:
        """Load configuration from a YAML file."""
        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in config file: {e}")
        except OSError as e:
            raise ValueError(f"Error reading config file: {e}")

        if not isinstance(data, dict):
            raise ValueError(f"Config file must contain a mapping: {path}")
        return data

    @staticmethod
    def get_config_paths() -> list[Path]:
        """Get the default configuration file paths to check."""
        paths = []

        # User config
        xdg_config_home = Path(
            os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")
        )
        paths.append(xdg_config_home / "docquery" / "config.yaml")

        # Project config
        paths.append(Path(".docquery.yaml"))
        paths.append(Path("docquery.yaml"))

        return paths

    @staticmethod
    def merge_configs(*configs: dict[str, Any]) -> dict[str, Any]:
        """Merge multiple configuration dictionaries."""
        result = {}
        for config in configs:
            result = _deep_merge(result, config)
        return result


def load_config(extra_file: Path | None = None) -> dict[str, Any]:
    """Load configuration from files and environment variables.

    Later sources win: default paths in order, then ``extra_file``, then
    environment variables.
    """
    config = {}

    for path in Config.get_config_paths():
        if path.exists():
            config = Config.merge_configs(config, Config.from_file(path))

    if extra_file:
        config = Config.merge_configs(config, Config.from_file(extra_file))

    env_options = env_overrides()
    if env_options:
        config = Config.merge_configs(config, {"options": env_options})

    return config


def env_overrides() -> dict[str, Any]:
    """Read match options from environment variables."""
    overrides = {}
    for variable, key in ENV_OPTIONS.items():
        raw = os.environ.get(variable)
        if raw is None or not raw.strip():
            continue
        if key in ("ignoreCase", "ignoreAccents"):
            overrides[key] = _parse_bool(variable, raw)
        elif key == "fuzzyThreshold":
            try:
                overrides[key] = float(raw)
            except ValueError:
                raise ValueError(f"{variable} must be a number, got {raw!r}")
        else:
            overrides[key] = raw.strip()
    return overrides


def options_from_config(config: dict[str, Any]) -> dict[str, Any]:
    """Get the wire-form match options section of a configuration."""
    options = config.get("options") or {}
    if not isinstance(options, dict):
        raise ValueError("'options' in config must be a mapping")
    return dict(options)


def _parse_bool(variable: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"{variable} must be a boolean, got {raw!r}")


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries."""
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result
