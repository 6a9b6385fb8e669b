"""
Configuration management for ksapi.

This module provides server endpoint presets, the immutable client identity,
and loading of settings from files and environment variables.
"""

from .loader import ConfigLoader, load_settings
from .models import (
    ClientIdentity,
    ClientSettings,
    EnvironmentType,
    LoggingConfig,
    LogLevel,
    ServerConfig,
    TransportConfig,
)

__all__ = [
    "ConfigLoader",
    "load_settings",
    "ClientIdentity",
    "ClientSettings",
    "EnvironmentType",
    "LoggingConfig",
    "LogLevel",
    "ServerConfig",
    "TransportConfig",
]
