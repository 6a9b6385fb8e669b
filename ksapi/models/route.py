"""
REST route descriptors.

A Route names one logical endpoint call: method, path relative to the API
base URL, query parameters, whether it needs the access token, and an
optional file to upload.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional


class HTTPMethod(str, Enum):
    """HTTP methods supported by routes."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    HEAD = "HEAD"

    @property
    def sends_body(self) -> bool:
        """Whether parameters travel in the request body rather than the URL."""
        return self in (HTTPMethod.POST, HTTPMethod.PUT, HTTPMethod.PATCH)


class UploadMimeType(str, Enum):
    """Content types accepted for file uploads."""

    GIF = "image/gif"
    JPEG = "image/jpeg"
    PNG = "image/png"
    OCTET_STREAM = "application/octet-stream"


@dataclass(frozen=True)
class UploadFile:
    """
    A file to send as one part of a multipart body.

    Attributes:
        field_name: Form field the file is attached to
        data: Raw file bytes
        filename: File name reported to the server
        content_type: MIME type of the part
    """

    field_name: str
    data: bytes
    filename: str = "upload"
    content_type: str = UploadMimeType.OCTET_STREAM.value

    def __post_init__(self) -> None:
        if not self.field_name:
            raise ValueError("Upload field name must not be empty")
        if isinstance(self.content_type, UploadMimeType):
            object.__setattr__(self, "content_type", self.content_type.value)


@dataclass(frozen=True)
class Route:
    """
    Logical REST endpoint descriptor.

    Attributes:
        method: HTTP method
        path: Path relative to the API base URL
        query: Query parameters (URL query string or JSON body depending on method)
        requires_auth: Whether the access token is attached when available
        upload: Optional file sent as a multipart body

    Routes compare by value but are not hashable, since query values may be
    nested dicts and lists.
    """

    method: HTTPMethod
    path: str
    query: Mapping[str, Any] = field(default_factory=dict)
    requires_auth: bool = True
    upload: Optional[UploadFile] = None

    __hash__ = None  # type: ignore[assignment]

    @classmethod
    def get(cls, path: str, query: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> Route:
        return cls(HTTPMethod.GET, path, dict(query or {}), **kwargs)

    @classmethod
    def post(cls, path: str, query: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> Route:
        return cls(HTTPMethod.POST, path, dict(query or {}), **kwargs)

    @classmethod
    def put(cls, path: str, query: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> Route:
        return cls(HTTPMethod.PUT, path, dict(query or {}), **kwargs)

    @classmethod
    def delete(cls, path: str, query: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> Route:
        return cls(HTTPMethod.DELETE, path, dict(query or {}), **kwargs)
