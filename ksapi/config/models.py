"""
Configuration models for ksapi.

This module defines the server endpoints, transport tuning, logging options
and the immutable client identity attached to every request.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, HttpUrl, field_validator

from .. import __version__


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class EnvironmentType(str, Enum):
    """Platform environments the client can talk to."""

    PRODUCTION = "production"
    STAGING = "staging"
    LOCAL = "local"
    CUSTOM = "custom"


class ServerConfig(BaseModel):
    """Endpoints of one platform environment."""

    model_config = ConfigDict(frozen=True)

    api_base_url: HttpUrl = Field(description="Base URL that REST route paths are joined to")
    graphql_endpoint: HttpUrl = Field(description="Single GraphQL endpoint URL")
    web_base_url: HttpUrl = Field(description="Base URL of the public website")
    environment: EnvironmentType = Field(
        default=EnvironmentType.CUSTOM, description="Environment these endpoints belong to"
    )

    @classmethod
    def production(cls) -> "ServerConfig":
        return cls(
            api_base_url="https://api.kickstarter.com",
            graphql_endpoint="https://www.kickstarter.com/graph",
            web_base_url="https://www.kickstarter.com",
            environment=EnvironmentType.PRODUCTION,
        )

    @classmethod
    def staging(cls) -> "ServerConfig":
        return cls(
            api_base_url="https://api-staging.kickstarter.com",
            graphql_endpoint="https://staging.kickstarter.com/graph",
            web_base_url="https://staging.kickstarter.com",
            environment=EnvironmentType.STAGING,
        )

    @classmethod
    def local(cls) -> "ServerConfig":
        return cls(
            api_base_url="http://api.ksr.test",
            graphql_endpoint="http://ksr.test/graph",
            web_base_url="http://ksr.test",
            environment=EnvironmentType.LOCAL,
        )

    @classmethod
    def for_environment(cls, environment: EnvironmentType) -> "ServerConfig":
        """Return the preset endpoints of a named environment."""
        presets = {
            EnvironmentType.PRODUCTION: cls.production,
            EnvironmentType.STAGING: cls.staging,
            EnvironmentType.LOCAL: cls.local,
        }
        if environment not in presets:
            raise ValueError(f"No preset endpoints for environment '{environment.value}'")
        return presets[environment]()


class ClientIdentity(BaseModel):
    """
    Immutable identity of the client application.

    Created once per session. Logging in or out produces a new identity
    value; nothing mutates an existing one.

    Attributes:
        app_id: Bundle identifier of the calling application
        server_config: Endpoints requests are sent to
        oauth_token: Access token, None when logged out
        language: Preferred content language
        currency: Preferred display currency
        build_version: Build number of the calling application
    """

    model_config = ConfigDict(frozen=True)

    app_id: str = Field(default="com.kickstarter.kickstarter", min_length=1)
    server_config: ServerConfig = Field(default_factory=ServerConfig.production)
    oauth_token: Optional[str] = Field(default=None, repr=False)
    language: str = Field(default="en")
    currency: str = Field(default="USD")
    build_version: str = Field(default="1")

    @field_validator("oauth_token")
    @classmethod
    def _blank_token_is_none(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            return None
        return value

    @property
    def is_authenticated(self) -> bool:
        return self.oauth_token is not None

    @property
    def user_agent(self) -> str:
        return f"ksapi/{__version__} ({self.app_id}; build {self.build_version})"

    def with_token(self, token: Optional[str]) -> "ClientIdentity":
        """Return a copy of this identity carrying a different token."""
        if token is not None and not token.strip():
            token = None
        return self.model_copy(update={"oauth_token": token})

    def logged_out(self) -> "ClientIdentity":
        return self.with_token(None)


class TransportConfig(BaseModel):
    """Tuning of the pooled HTTP transport."""

    total_timeout: float = Field(default=30.0, gt=0, description="Total request timeout in seconds")
    connect_timeout: float = Field(default=10.0, gt=0, description="Connection timeout in seconds")
    max_connections: int = Field(default=100, ge=1, description="Connection pool size")
    max_connections_per_host: int = Field(
        default=30, ge=1, description="Connections per host"
    )
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: LogLevel = Field(default=LogLevel.INFO, description="Default logging level")
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log message format",
    )
    file_path: Optional[Path] = Field(default=None, description="Log file path")
    enable_console: bool = Field(default=True, description="Enable console logging")
    enable_structured: bool = Field(
        default=False, description="Enable structured JSON logging"
    )
    component_levels: Dict[str, LogLevel] = Field(
        default_factory=dict, description="Per-component log levels"
    )


class ClientSettings(BaseModel):
    """Everything needed to stand up a Service."""

    environment: EnvironmentType = Field(default=EnvironmentType.PRODUCTION)
    server: Optional[ServerConfig] = Field(
        default=None, description="Explicit endpoints, overrides the environment preset"
    )
    transport: TransportConfig = Field(default_factory=TransportConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    app_id: str = Field(default="com.kickstarter.kickstarter")
    language: str = Field(default="en")
    currency: str = Field(default="USD")
    build_version: str = Field(default="1")
    oauth_token: Optional[str] = Field(default=None, repr=False)

    def server_config(self) -> ServerConfig:
        if self.server is not None:
            return self.server
        return ServerConfig.for_environment(self.environment)

    def to_identity(self) -> ClientIdentity:
        """Build the client identity described by these settings."""
        return ClientIdentity(
            app_id=self.app_id,
            server_config=self.server_config(),
            oauth_token=self.oauth_token,
            language=self.language,
            currency=self.currency,
            build_version=self.build_version,
        )
