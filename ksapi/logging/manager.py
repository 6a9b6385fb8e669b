"""
Logging manager for ksapi.

This module provides centralized logging configuration for applications
embedding the client and for the command-line tool.
"""

import logging
import sys
from pathlib import Path
from typing import Dict, Optional

from ..config.models import LoggingConfig, LogLevel
from .filters import ComponentFilter, SensitiveDataFilter
from .formatters import ColoredFormatter, StructuredFormatter


class LoggingManager:
    """Centralized logging manager."""

    def __init__(self, root_name: str = "ksapi") -> None:
        """
        Initialize logging manager.

        Args:
            root_name: Name of the logger the configuration is applied to
        """
        self.root_name = root_name
        self._configured = False
        self._handlers: Dict[str, logging.Handler] = {}

    @property
    def root_logger(self) -> logging.Logger:
        return logging.getLogger(self.root_name)

    def setup_logging(self, config: LoggingConfig) -> None:
        """
        Setup logging based on configuration.

        Args:
            config: Logging configuration
        """
        if self._configured:
            self.cleanup()

        root_logger = self.root_logger
        root_logger.setLevel(getattr(logging, config.level.value))

        if config.enable_console:
            self._setup_console_handler(config)

        if config.file_path:
            self._setup_file_handler(config, config.file_path)

        self._setup_component_loggers(config)

        self._configured = True
        root_logger.debug("Logging system configured")

    def _formatter(self, config: LoggingConfig, console: bool) -> logging.Formatter:
        if config.enable_structured:
            return StructuredFormatter()
        if console:
            return ColoredFormatter(config.format)
        return logging.Formatter(config.format)

    def _setup_console_handler(self, config: LoggingConfig) -> None:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(self._formatter(config, console=True))
        handler.setLevel(getattr(logging, config.level.value))
        handler.addFilter(SensitiveDataFilter())
        self.add_handler("console", handler)

    def _setup_file_handler(self, config: LoggingConfig, file_path: Path) -> None:
        file_path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(str(file_path), encoding="utf-8")
        handler.setFormatter(self._formatter(config, console=False))
        handler.setLevel(getattr(logging, config.level.value))
        handler.addFilter(SensitiveDataFilter())
        self.add_handler("file", handler)

    def _setup_component_loggers(self, config: LoggingConfig) -> None:
        for component, level in config.component_levels.items():
            logging.getLogger(component).setLevel(getattr(logging, level.value))

    def set_level(self, level: LogLevel, component: Optional[str] = None) -> None:
        """
        Set logging level.

        Args:
            level: New logging level
            component: Specific component (None for the package logger)
        """
        log_level = getattr(logging, level.value)

        if component:
            logging.getLogger(component).setLevel(log_level)
            return

        self.root_logger.setLevel(log_level)
        for handler in self._handlers.values():
            handler.setLevel(log_level)

    def restrict_to(self, component: str) -> None:
        """Only emit records from loggers under ``component``."""
        component_filter = ComponentFilter(component)
        for handler in self._handlers.values():
            handler.addFilter(component_filter)

    def add_handler(self, name: str, handler: logging.Handler) -> None:
        self.root_logger.addHandler(handler)
        self._handlers[name] = handler

    def remove_handler(self, name: str) -> None:
        handler = self._handlers.pop(name, None)
        if handler is not None:
            self.root_logger.removeHandler(handler)
            handler.close()

    def cleanup(self) -> None:
        """Remove and close every handler installed by this manager."""
        for name in list(self._handlers):
            self.remove_handler(name)
        self._configured = False

    def is_configured(self) -> bool:
        return self._configured


_logging_manager = LoggingManager()


def setup_logging(config: Optional[LoggingConfig] = None) -> None:
    """
    Setup logging with configuration.

    Args:
        config: Logging configuration (defaults apply when omitted)
    """
    _logging_manager.setup_logging(config or LoggingConfig())


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def cleanup_logging() -> None:
    _logging_manager.cleanup()
