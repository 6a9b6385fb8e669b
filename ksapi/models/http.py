"""
HTTP request and response models.

PreparedRequest is what the request builder produces and the transport
consumes; TransportOutcome is the single raw result of executing one.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

import aiohttp

from .route import HTTPMethod, UploadFile


@dataclass(frozen=True)
class PreparedRequest:
    """
    A fully-formed HTTP request.

    Attributes:
        method: HTTP method
        url: Absolute URL including any encoded query string
        headers: Request headers
        body: Encoded body bytes (JSON requests)
        upload: File part of a multipart body
        form_fields: Plain fields sent alongside ``upload``
    """

    method: HTTPMethod
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[bytes] = None
    upload: Optional[UploadFile] = None
    form_fields: Tuple[Tuple[str, str], ...] = ()

    @property
    def is_multipart(self) -> bool:
        return self.upload is not None

    def form_data(self) -> aiohttp.FormData:
        """Encode the multipart body for aiohttp."""
        if self.upload is None:
            raise ValueError("Request has no upload")

        form = aiohttp.FormData()
        for name, value in self.form_fields:
            form.add_field(name, value)
        form.add_field(
            self.upload.field_name,
            self.upload.data,
            filename=self.upload.filename,
            content_type=self.upload.content_type,
        )
        return form

    def describe(self) -> str:
        """Short description for logs, without headers."""
        return f"{self.method.value} {self.url}"


@dataclass(frozen=True)
class TransportOutcome:
    """
    Raw result of one completed HTTP exchange.

    Attributes:
        status_code: HTTP status code
        headers: Response headers
        body: Raw response body
        url: Final URL of the response
    """

    status_code: int
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    url: Optional[str] = None

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def is_empty(self) -> bool:
        return not self.body.strip()

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")
