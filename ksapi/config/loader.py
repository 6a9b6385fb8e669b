"""
Configuration loader for ksapi.

Settings are merged from defaults, an optional JSON or YAML file, and
``KSAPI_*`` environment variables, in that order of precedence.
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple, Union

import yaml

from .models import ClientSettings, EnvironmentType, ServerConfig


class ConfigLoader:
    """Configuration loader with support for multiple sources."""

    def __init__(self, environ: Optional[Mapping[str, str]] = None) -> None:
        """
        Initialize configuration loader.

        Args:
            environ: Environment mapping to read from (defaults to os.environ)
        """
        self.config_paths = [
            Path("ksapi.yaml"),
            Path("ksapi.yml"),
            Path("ksapi.json"),
            Path.home() / ".ksapi" / "config.yaml",
            Path.home() / ".ksapi" / "config.json",
        ]
        self.env_prefix = "KSAPI_"
        self._environ = environ if environ is not None else os.environ

    def load_config(self, config_file: Optional[Union[str, Path]] = None) -> ClientSettings:
        """
        Load settings from all available sources.

        Args:
            config_file: Specific config file to load instead of searching

        Returns:
            ClientSettings with merged configuration
        """
        config_data: Dict[str, Any] = {}

        file_config = self._load_from_file(config_file)
        if file_config:
            config_data.update(file_config)

        env_config = self._load_from_environment()
        if env_config:
            config_data = self._deep_merge(config_data, env_config)

        return ClientSettings(**self._complete_server(config_data))

    def _load_from_file(
        self, config_file: Optional[Union[str, Path]] = None
    ) -> Optional[Dict[str, Any]]:
        if config_file:
            config_path = Path(config_file)
            if not config_path.exists():
                raise ValueError(f"Config file not found: {config_path}")
            return self._parse_config_file(config_path)

        for config_path in self.config_paths:
            if config_path.exists():
                return self._parse_config_file(config_path)

        return None

    def _parse_config_file(self, config_path: Path) -> Dict[str, Any]:
        """Parse configuration file based on extension."""
        suffix = config_path.suffix.lower()
        if suffix not in (".yaml", ".yml", ".json"):
            raise ValueError(f"Unsupported config file format: {config_path.suffix}")

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                if suffix == ".json":
                    data = json.load(f)
                else:
                    data = yaml.safe_load(f)
        except (OSError, json.JSONDecodeError, yaml.YAMLError) as e:
            raise ValueError(f"Failed to parse config file {config_path}: {e}") from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ValueError(f"Config file {config_path} must contain a mapping")
        return data

    def _load_from_environment(self) -> Dict[str, Any]:
        """Load configuration from environment variables."""
        config: Dict[str, Any] = {}

        env_mappings: Dict[str, Tuple[str, ...]] = {
            f"{self.env_prefix}ENVIRONMENT": ("environment",),
            f"{self.env_prefix}APP_ID": ("app_id",),
            f"{self.env_prefix}LANGUAGE": ("language",),
            f"{self.env_prefix}CURRENCY": ("currency",),
            f"{self.env_prefix}BUILD_VERSION": ("build_version",),
            f"{self.env_prefix}OAUTH_TOKEN": ("oauth_token",),
            # Logging
            f"{self.env_prefix}LOG_LEVEL": ("logging", "level"),
            f"{self.env_prefix}LOG_FILE": ("logging", "file_path"),
            # Transport
            f"{self.env_prefix}TIMEOUT": ("transport", "total_timeout"),
            f"{self.env_prefix}VERIFY_SSL": ("transport", "verify_ssl"),
        }

        # Values stay strings, pydantic coerces them to the field types
        for env_var, config_path in env_mappings.items():
            value = self._environ.get(env_var)
            if value is not None:
                self._set_nested_value(config, config_path, value)

        server_mappings = {
            f"{self.env_prefix}API_BASE_URL": "api_base_url",
            f"{self.env_prefix}GRAPHQL_ENDPOINT": "graphql_endpoint",
            f"{self.env_prefix}WEB_BASE_URL": "web_base_url",
        }
        for env_var, key in server_mappings.items():
            value = self._environ.get(env_var)
            if value is not None:
                self._set_nested_value(config, ("server", key), value)

        return config

    def _complete_server(self, config_data: Dict[str, Any]) -> Dict[str, Any]:
        """Fill endpoints missing from a partial ``server`` section from the preset."""
        server = config_data.get("server")
        if not isinstance(server, dict):
            return config_data

        environment = EnvironmentType(config_data.get("environment", EnvironmentType.PRODUCTION))
        if environment is EnvironmentType.CUSTOM:
            return config_data

        preset = ServerConfig.for_environment(environment).model_dump(mode="json")
        preset.update(server)
        return {**config_data, "server": preset}

    def _set_nested_value(
        self, config: Dict[str, Any], path: Tuple[str, ...], value: Any
    ) -> None:
        current = config
        for key in path[:-1]:
            current = current.setdefault(key, {})
        current[path[-1]] = value

    def _deep_merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Deep merge two dictionaries."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result


def load_settings(config_file: Optional[Union[str, Path]] = None) -> ClientSettings:
    """Load ClientSettings from the default sources."""
    return ConfigLoader().load_config(config_file)
