"""
Custom logging filters for ksapi.

Request logs carry URLs and headers, so access tokens are masked before a
record reaches any handler.
"""

import logging
import re
from typing import List, Optional, Pattern, Set


class SensitiveDataFilter(logging.Filter):
    """Filter to mask credentials in log messages."""

    def __init__(self) -> None:
        super().__init__()

        self.patterns: List[Pattern[str]] = [
            re.compile(r"((?:bearer|basic)\s+)([A-Za-z0-9._~+/=-]+)", re.IGNORECASE),
            re.compile(
                r"""(authorization["']?\s*[:=]\s*["']?)(?!(?:bearer|basic)\s)([^\s"',}]+)""",
                re.IGNORECASE,
            ),
            re.compile(r"((?:oauth_)?token=)([^&\s\"']+)", re.IGNORECASE),
            re.compile(r"(https?://[^:/\s]+):([^@\s]+)@", re.IGNORECASE),
        ]
        self.replacements = [
            r"\1***MASKED***",
            r"\1***MASKED***",
            r"\1***MASKED***",
            r"\1:***MASKED***@",
        ]

    def mask(self, message: str) -> str:
        for pattern, replacement in zip(self.patterns, self.replacements):
            message = pattern.sub(replacement, message)
        return message

    def filter(self, record: logging.LogRecord) -> bool:
        """Filter log record to mask sensitive data."""
        try:
            message = record.getMessage()
        except (TypeError, ValueError):
            # Malformed format arguments, let the handler report it
            return True

        record.msg = self.mask(message)
        record.args = ()
        return True


class ComponentFilter(logging.Filter):
    """Filter for component-specific logging."""

    def __init__(self, component: str, allowed_levels: Optional[Set[str]] = None) -> None:
        """
        Initialize component filter.

        Args:
            component: Logger name prefix to let through
            allowed_levels: Set of allowed log levels
        """
        super().__init__()
        self.component = component
        self.allowed_levels = allowed_levels or {
            "DEBUG",
            "INFO",
            "WARNING",
            "ERROR",
            "CRITICAL",
        }

    def filter(self, record: logging.LogRecord) -> bool:
        if not record.name.startswith(self.component):
            return False
        return record.levelname in self.allowed_levels
