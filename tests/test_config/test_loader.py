"""
Tests for the configuration loader.
"""

import json

import pytest
import yaml
from pydantic import ValidationError

from ksapi.config import ConfigLoader, EnvironmentType, LogLevel, load_settings


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path, monkeypatch):
    """Keep config file discovery away from the real working directory."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))
    return tmp_path


class TestConfigLoader:
    """Test merging of defaults, files and environment variables."""

    def test_defaults(self):
        settings = ConfigLoader(environ={}).load_config()

        assert settings.environment is EnvironmentType.PRODUCTION
        assert settings.oauth_token is None
        assert str(settings.server_config().graphql_endpoint) == "https://www.kickstarter.com/graph"

    def test_environment_variables(self):
        environ = {
            "KSAPI_ENVIRONMENT": "staging",
            "KSAPI_APP_ID": "com.example.app",
            "KSAPI_LANGUAGE": "fr",
            "KSAPI_CURRENCY": "CAD",
            "KSAPI_BUILD_VERSION": "1",
            "KSAPI_OAUTH_TOKEN": "env-token",
            "KSAPI_LOG_LEVEL": "DEBUG",
            "KSAPI_TIMEOUT": "5",
            "KSAPI_VERIFY_SSL": "false",
        }

        settings = ConfigLoader(environ=environ).load_config()

        assert settings.environment is EnvironmentType.STAGING
        assert settings.app_id == "com.example.app"
        assert settings.language == "fr"
        assert settings.currency == "CAD"
        assert settings.build_version == "1"
        assert settings.oauth_token == "env-token"
        assert settings.logging.level is LogLevel.DEBUG
        assert settings.transport.total_timeout == 5.0
        assert settings.transport.verify_ssl is False

    def test_partial_server_override(self):
        """Test a single endpoint override keeps the other preset endpoints."""
        environ = {"KSAPI_API_BASE_URL": "https://api.example.test"}

        settings = ConfigLoader(environ=environ).load_config()
        server = settings.server_config()

        assert str(server.api_base_url).startswith("https://api.example.test")
        assert str(server.graphql_endpoint) == "https://www.kickstarter.com/graph"

    def test_custom_environment_requires_all_endpoints(self):
        environ = {"KSAPI_ENVIRONMENT": "custom", "KSAPI_API_BASE_URL": "https://api.example.test"}

        with pytest.raises(ValidationError):
            ConfigLoader(environ=environ).load_config()

    def test_yaml_file(self, isolated_cwd):
        config_file = isolated_cwd / "settings.yaml"
        config_file.write_text(
            yaml.safe_dump(
                {
                    "environment": "local",
                    "app_id": "com.example.yaml",
                    "transport": {"max_connections": 5},
                    "logging": {"level": "WARNING", "component_levels": {"ksapi.http": "DEBUG"}},
                }
            )
        )

        settings = ConfigLoader(environ={}).load_config(config_file)

        assert settings.environment is EnvironmentType.LOCAL
        assert settings.app_id == "com.example.yaml"
        assert settings.transport.max_connections == 5
        assert settings.logging.component_levels == {"ksapi.http": LogLevel.DEBUG}
        assert str(settings.to_identity().server_config.api_base_url).startswith("http://api.ksr.test")

    def test_json_file_is_discovered(self, isolated_cwd):
        (isolated_cwd / "ksapi.json").write_text(json.dumps({"currency": "GBP"}))

        settings = ConfigLoader(environ={}).load_config()

        assert settings.currency == "GBP"

    def test_environment_overrides_file(self, isolated_cwd):
        config_file = isolated_cwd / "ksapi.yaml"
        config_file.write_text("language: es\ntransport:\n  total_timeout: 20\n  verify_ssl: true\n")

        settings = ConfigLoader(environ={"KSAPI_LANGUAGE": "it", "KSAPI_VERIFY_SSL": "0"}).load_config()

        assert settings.language == "it"
        assert settings.transport.total_timeout == 20.0
        assert settings.transport.verify_ssl is False

    def test_missing_file(self, isolated_cwd):
        with pytest.raises(ValueError, match="not found"):
            ConfigLoader(environ={}).load_config(isolated_cwd / "missing.yaml")

    def test_unsupported_format(self, isolated_cwd):
        config_file = isolated_cwd / "settings.toml"
        config_file.write_text("a = 1")

        with pytest.raises(ValueError, match="Unsupported"):
            ConfigLoader(environ={}).load_config(config_file)

    def test_invalid_yaml(self, isolated_cwd):
        config_file = isolated_cwd / "settings.yaml"
        config_file.write_text("app_id: [unclosed")

        with pytest.raises(ValueError, match="Failed to parse"):
            ConfigLoader(environ={}).load_config(config_file)

    def test_non_mapping_file(self, isolated_cwd):
        config_file = isolated_cwd / "settings.json"
        config_file.write_text("[1, 2, 3]")

        with pytest.raises(ValueError, match="mapping"):
            ConfigLoader(environ={}).load_config(config_file)

    def test_empty_yaml_file(self, isolated_cwd):
        config_file = isolated_cwd / "settings.yml"
        config_file.write_text("")

        settings = ConfigLoader(environ={}).load_config(config_file)

        assert settings.environment is EnvironmentType.PRODUCTION

    def test_load_settings_reads_os_environ(self, monkeypatch):
        monkeypatch.setenv("KSAPI_CURRENCY", "JPY")

        assert load_settings().currency == "JPY"
