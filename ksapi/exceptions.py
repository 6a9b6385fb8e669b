"""
Error taxonomy for the ksapi client.

Every failure produced by the client, whatever stage it comes from, is
surfaced as exactly one of the ServiceError subclasses defined here. The
ErrorClassifier translates raw library exceptions (aiohttp, json, pydantic)
into this closed set while keeping the original exception for diagnostics.
"""

from __future__ import annotations

import asyncio
import json
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, Optional, Union

import aiohttp
from pydantic import ValidationError

if TYPE_CHECKING:
    from .graphql.models import GraphAPIError
    from .models.envelope import ErrorEnvelope


class ErrorKind(str, Enum):
    """The closed set of failure kinds a call can terminate with."""

    INVALID_URL = "invalid_url"
    INVALID_PAGINATION_URL = "invalid_pagination_url"
    INVALID_INPUT = "invalid_input"
    REQUEST_ERROR = "request_error"
    EMPTY_RESPONSE = "empty_response"
    DECODE_ERROR = "decode_error"
    JSON_DECODING_ERROR = "json_decoding_error"


class ServiceError(Exception):
    """
    Base exception for all client operations.

    Attributes:
        message: Human-readable error message
        url: URL involved in the failure (if any)
        original_error: The underlying exception this error classifies
        details: Additional error details as keyword arguments
    """

    kind: ErrorKind

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        original_error: Optional[BaseException] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.url = url
        self.original_error = original_error
        self.details = kwargs


class InvalidURLError(ServiceError):
    """Raised when a route path does not compose with the base endpoint."""

    kind = ErrorKind.INVALID_URL

    def __init__(
        self,
        message: str,
        path: str,
        base_url: str,
        original_error: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message, original_error=original_error)
        self.path = path
        self.base_url = base_url


class InvalidPaginationURLError(ServiceError):
    """Raised when a continuation URL string is malformed."""

    kind = ErrorKind.INVALID_PAGINATION_URL


class InvalidInputError(ServiceError):
    """Raised when mutation input cannot be serialized to JSON."""

    kind = ErrorKind.INVALID_INPUT


class RequestError(ServiceError):
    """
    Raised for transport-level failures.

    Covers connectivity problems, protocol errors, and REST responses with a
    failing status code whose body is not a recognizable error envelope.

    Attributes:
        status_code: Status of the partial response, if one was received
        headers: Headers of the partial response
        response_text: Body of the partial response
    """

    kind = ErrorKind.REQUEST_ERROR

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        original_error: Optional[BaseException] = None,
        status_code: Optional[int] = None,
        headers: Optional[Dict[str, str]] = None,
        response_text: Optional[str] = None,
    ) -> None:
        super().__init__(message, url, original_error)
        self.status_code = status_code
        self.headers = headers or {}
        self.response_text = response_text


class EmptyResponseError(ServiceError):
    """Raised when the transport succeeded but returned no usable data."""

    kind = ErrorKind.EMPTY_RESPONSE

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        super().__init__(message, url)
        self.status_code = status_code
        self.headers = headers or {}


class DecodeError(ServiceError):
    """
    Raised when the server reported a structured error.

    The reported error is either a REST ErrorEnvelope or the first entry of a
    GraphQL ``errors`` list.
    """

    kind = ErrorKind.DECODE_ERROR

    def __init__(
        self,
        error: Union["GraphAPIError", "ErrorEnvelope"],
        url: Optional[str] = None,
    ) -> None:
        super().__init__(_reported_message(error), url)
        self.error = error


class JSONDecodingError(ServiceError):
    """
    Raised when a response body does not parse into the expected shape.

    Attributes:
        response_text: The raw body text as received
    """

    kind = ErrorKind.JSON_DECODING_ERROR

    def __init__(
        self,
        message: str,
        response_text: Optional[str] = None,
        original_error: Optional[BaseException] = None,
        url: Optional[str] = None,
    ) -> None:
        super().__init__(message, url, original_error)
        self.response_text = response_text


def _reported_message(error: Any) -> str:
    message = getattr(error, "message", None)
    if message:
        return str(message)
    messages = getattr(error, "error_messages", None)
    if messages:
        return "; ".join(messages)
    return "Server reported an error"


class ErrorClassifier:
    """
    Maps raw failures from any stage into the ServiceError taxonomy.

    ServiceError instances pass through untouched. asyncio.CancelledError is
    never classified because cancellation is not a failure.
    """

    @staticmethod
    def classify(error: BaseException, url: Optional[str] = None) -> ServiceError:
        """
        Classify an arbitrary exception.

        Args:
            error: The exception raised by a pipeline stage
            url: URL of the request being processed

        Returns:
            The matching ServiceError subclass
        """
        if isinstance(error, ServiceError):
            if error.url is None:
                error.url = url
            return error

        if isinstance(error, (aiohttp.ClientError, asyncio.TimeoutError, OSError)):
            return ErrorClassifier.classify_transport_error(error, url)

        if isinstance(error, (json.JSONDecodeError, ValidationError)):
            return ErrorClassifier.classify_decoding_error(error, None, url)

        return RequestError(f"Unexpected error: {error}", url=url, original_error=error)

    @staticmethod
    def classify_transport_error(
        error: BaseException, url: Optional[str] = None
    ) -> RequestError:
        """Convert an aiohttp/socket level failure into a RequestError."""
        status_code = None
        headers = None

        if isinstance(error, asyncio.TimeoutError):
            message = f"Request timed out: {error}"
        elif isinstance(error, aiohttp.ClientResponseError):
            status_code = error.status
            headers = dict(error.headers) if error.headers else None
            message = f"HTTP error {error.status}: {error.message}"
        elif isinstance(error, aiohttp.ClientConnectionError):
            message = f"Connection error: {error}"
        elif isinstance(error, aiohttp.ClientPayloadError):
            message = f"Payload error: {error}"
        else:
            message = f"Network error: {error}"

        return RequestError(
            message,
            url=url,
            original_error=error,
            status_code=status_code,
            headers=headers,
        )

    @staticmethod
    def classify_decoding_error(
        error: BaseException,
        response_text: Optional[str],
        url: Optional[str] = None,
    ) -> JSONDecodingError:
        """Convert a parser or validation failure into a JSONDecodingError."""
        if isinstance(error, json.JSONDecodeError):
            message = f"Invalid JSON response: {error.msg} (line {error.lineno}, column {error.colno})"
        elif isinstance(error, ValidationError):
            message = f"Response did not match {error.title}: {error.error_count()} error(s)"
        else:
            message = f"Could not decode response: {error}"

        return JSONDecodingError(
            message, response_text=response_text, original_error=error, url=url
        )

    @staticmethod
    def classify_status_error(
        status_code: int,
        url: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
        response_text: Optional[str] = None,
    ) -> RequestError:
        """Build a RequestError for a failing status with no error envelope."""
        return RequestError(
            f"Request failed with status {status_code}",
            url=url,
            status_code=status_code,
            headers=headers,
            response_text=response_text,
        )
