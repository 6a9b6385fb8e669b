"""
HTTP layer for ksapi.

This module provides URL composition, request building, the transport
abstraction with its aiohttp implementation, and the executor that runs
requests as cancellable calls.
"""

from .executor import TransportExecutor
from .request_builder import RequestBuilder, encode_json
from .transport import AiohttpTransport, Transport
from .url import URLValidator, flatten_params, format_param

__all__ = [
    "TransportExecutor",
    "RequestBuilder",
    "encode_json",
    "AiohttpTransport",
    "Transport",
    "URLValidator",
    "flatten_params",
    "format_param",
]
