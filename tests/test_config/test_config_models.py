"""
Tests for configuration models and the client identity.
"""

import pytest
from pydantic import ValidationError

from ksapi import __version__
from ksapi.config import (
    ClientIdentity,
    ClientSettings,
    EnvironmentType,
    ServerConfig,
    TransportConfig,
)


class TestServerConfig:
    """Test endpoint presets."""

    @pytest.mark.parametrize(
        "environment,api",
        [
            (EnvironmentType.PRODUCTION, "https://api.kickstarter.com/"),
            (EnvironmentType.STAGING, "https://api-staging.kickstarter.com/"),
            (EnvironmentType.LOCAL, "http://api.ksr.test/"),
        ],
    )
    def test_presets(self, environment, api):
        server = ServerConfig.for_environment(environment)

        assert server.environment is environment
        assert str(server.api_base_url) == api

    def test_custom_has_no_preset(self):
        with pytest.raises(ValueError):
            ServerConfig.for_environment(EnvironmentType.CUSTOM)

    def test_invalid_url(self):
        with pytest.raises(ValidationError):
            ServerConfig(
                api_base_url="not a url",
                graphql_endpoint="https://a.com/graph",
                web_base_url="https://a.com",
            )

    def test_frozen(self):
        server = ServerConfig.production()

        with pytest.raises(ValidationError):
            server.environment = EnvironmentType.LOCAL


class TestClientIdentity:
    """Test the immutable client identity."""

    def test_defaults(self):
        identity = ClientIdentity()

        assert identity.app_id == "com.kickstarter.kickstarter"
        assert identity.server_config == ServerConfig.production()
        assert not identity.is_authenticated

    def test_blank_token_is_logged_out(self):
        assert ClientIdentity(oauth_token="   ").oauth_token is None
        assert ClientIdentity().with_token("").oauth_token is None

    def test_with_token_returns_new_value(self):
        identity = ClientIdentity()

        logged_in = identity.with_token("abc")

        assert logged_in.oauth_token == "abc"
        assert logged_in.is_authenticated
        assert identity.oauth_token is None
        assert logged_in.logged_out().oauth_token is None
        assert logged_in.logged_out().app_id == identity.app_id

    def test_token_not_in_repr(self):
        assert "abc" not in repr(ClientIdentity(oauth_token="abc"))

    def test_user_agent(self):
        identity = ClientIdentity(app_id="com.example", build_version="77")

        assert identity.user_agent == f"ksapi/{__version__} (com.example; build 77)"

    def test_immutable(self):
        with pytest.raises(ValidationError):
            ClientIdentity().oauth_token = "abc"


class TestClientSettings:
    """Test aggregated settings."""

    def test_to_identity(self):
        settings = ClientSettings(
            environment=EnvironmentType.STAGING,
            app_id="com.example",
            oauth_token="tok",
            language="ja",
            currency="JPY",
            build_version="9",
        )

        identity = settings.to_identity()

        assert identity.server_config == ServerConfig.staging()
        assert identity.oauth_token == "tok"
        assert identity.language == "ja"
        assert identity.currency == "JPY"
        assert identity.build_version == "9"

    def test_explicit_server_wins(self):
        server = ServerConfig(
            api_base_url="https://api.example.test",
            graphql_endpoint="https://example.test/graph",
            web_base_url="https://example.test",
        )

        settings = ClientSettings(environment=EnvironmentType.STAGING, server=server)

        assert settings.server_config() is server

    def test_transport_validation(self):
        with pytest.raises(ValidationError):
            TransportConfig(total_timeout=0)
        with pytest.raises(ValidationError):
            TransportConfig(max_connections=0)
