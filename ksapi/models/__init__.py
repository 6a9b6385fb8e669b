"""
Data models shared across the ksapi client.
"""

from .envelope import ErrorEnvelope, ErrorException
from .http import PreparedRequest, TransportOutcome
from .route import HTTPMethod, Route, UploadFile, UploadMimeType

__all__ = [
    "ErrorEnvelope",
    "ErrorException",
    "PreparedRequest",
    "TransportOutcome",
    "HTTPMethod",
    "Route",
    "UploadFile",
    "UploadMimeType",
]
