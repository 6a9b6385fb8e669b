"""
URL validation and composition utilities.

Route paths are joined to the API base URL here, and every URL the client
sends to is validated before a request object is built.
"""

from __future__ import annotations

import ipaddress
import re
from enum import Enum
from typing import Any, List, Mapping, Tuple
from urllib.parse import urlencode, urlsplit

from ..exceptions import InvalidURLError


class URLValidator:
    """Utility class for URL validation and composition."""

    VALID_SCHEMES = {"http", "https"}

    DOMAIN_PATTERN = re.compile(
        r"^(?:[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?\.)*[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?$"
    )
    # Whitespace and ASCII control characters are never valid in a URL
    FORBIDDEN_CHARS = re.compile(r"[\s\x00-\x1f\x7f]")

    @classmethod
    def is_valid_url(cls, url: str) -> bool:
        """
        Validate that a string is an absolute http(s) URL with a valid host.

        Args:
            url: URL string to validate

        Returns:
            bool: True if URL is valid, False otherwise
        """
        if not isinstance(url, str) or not url or cls.FORBIDDEN_CHARS.search(url):
            return False

        try:
            parsed = urlsplit(url)
            hostname = parsed.hostname
            # Accessing port validates it
            parsed.port
        except ValueError:
            return False

        if parsed.scheme.lower() not in cls.VALID_SCHEMES or not hostname:
            return False

        return cls._is_valid_host(hostname)

    @classmethod
    def _is_valid_host(cls, hostname: str) -> bool:
        if cls.DOMAIN_PATTERN.match(hostname):
            return True
        try:
            ipaddress.ip_address(hostname)
        except ValueError:
            return False
        return True

    @classmethod
    def join(cls, base_url: str, path: str) -> str:
        """
        Join a route path onto a base URL.

        The base URL's own path is kept and exactly one slash separates it
        from the route path.

        Args:
            base_url: Absolute base URL
            path: Path relative to the base URL

        Returns:
            The composed absolute URL

        Raises:
            InvalidURLError: If the result is not a valid URL
        """
        if not isinstance(path, str) or cls.FORBIDDEN_CHARS.search(path):
            raise InvalidURLError(
                f"Route path {path!r} contains characters not allowed in a URL",
                path=str(path),
                base_url=base_url,
            )

        try:
            path_parts = urlsplit(path)
        except ValueError as e:
            raise InvalidURLError(
                f"Route path {path!r} could not be parsed", path=path, base_url=base_url,
                original_error=e,
            ) from e

        if path_parts.scheme or path_parts.netloc:
            raise InvalidURLError(
                f"Route path {path!r} is not relative to the base URL",
                path=path,
                base_url=base_url,
            )

        url = base_url.rstrip("/")
        if path.strip("/"):
            url = f"{url}/{path.lstrip('/')}"

        if not cls.is_valid_url(url):
            raise InvalidURLError(
                f"{path!r} joined with {base_url!r} is not a valid URL",
                path=path,
                base_url=base_url,
            )
        return url

    @classmethod
    def with_query(cls, url: str, params: Mapping[str, Any]) -> str:
        """Append encoded query parameters to a URL."""
        pairs = flatten_params(params)
        if not pairs:
            return url
        separator = "&" if "?" in url else "?"
        return f"{url}{separator}{urlencode(pairs)}"


def format_param(value: Any) -> str:
    """Render a scalar parameter value the way the API expects it."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return format_param(value.value)
    return str(value)


def flatten_params(params: Mapping[str, Any], prefix: str = "") -> List[Tuple[str, str]]:
    """
    Flatten nested parameters into key/value pairs.

    Keys are sorted so the encoding is stable. Nested mappings become
    ``parent[child]`` keys and sequences become repeated ``key[]`` entries;
    None values are dropped.
    """
    pairs: List[Tuple[str, str]] = []
    for key in sorted(params, key=str):
        value = params[key]
        name = f"{prefix}[{key}]" if prefix else str(key)
        if value is None:
            continue
        if isinstance(value, Mapping):
            pairs.extend(flatten_params(value, name))
        elif isinstance(value, (list, tuple, set, frozenset)):
            items = sorted(value, key=str) if isinstance(value, (set, frozenset)) else value
            for item in items:
                if item is not None:
                    pairs.append((f"{name}[]", format_param(item)))
        else:
            pairs.append((name, format_param(value)))
    return pairs
