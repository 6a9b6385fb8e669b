"""
Response decode pipeline.

Three policies for REST bodies (strict single, strict list, lenient
optional) and one envelope-aware policy for GraphQL bodies. Every failure
leaves as a classified ServiceError.
"""

from __future__ import annotations

import json
import logging
from typing import Any, List, Optional, Type, TypeVar, Union

from ..exceptions import (
    DecodeError,
    EmptyResponseError,
    ErrorClassifier,
    JSONDecodingError,
)
from ..graphql.models import GraphEnvelope
from ..models.envelope import ErrorEnvelope
from .result import Decoded, Failure, decode, decode_list

logger = logging.getLogger(__name__)

M = TypeVar("M")
A = TypeVar("A")

Body = Union[bytes, str]


def _model_name(model: Any) -> str:
    return getattr(model, "__name__", repr(model))


def body_text(body: Body) -> str:
    if isinstance(body, bytes):
        return body.decode("utf-8", errors="replace")
    return body


def parse_json(body: Body, url: Optional[str] = None) -> Any:
    """
    Parse a response body as JSON.

    Raises:
        EmptyResponseError: If the body is empty
        JSONDecodingError: If the body is not valid JSON
    """
    text = body_text(body)
    if not text.strip():
        raise EmptyResponseError("Response body is empty", url=url)
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise ErrorClassifier.classify_decoding_error(e, text, url) from e


def _unwrap(result: Decoded[M], url: Optional[str]) -> M:
    if isinstance(result, Failure):
        result.error.url = url
    return result.unwrap()


def decode_model(body: Body, model: Type[M], url: Optional[str] = None) -> M:
    """
    Strictly decode a body into one model.

    Raises:
        EmptyResponseError: If the body is empty
        JSONDecodingError: If the body is not JSON or does not fit ``model``
    """
    value = parse_json(body, url)
    return _unwrap(decode(model, value, body_text(body)), url)


def decode_models(body: Body, model: Type[M], url: Optional[str] = None) -> List[M]:
    """
    Strictly decode a JSON array; any bad element fails the whole decode.

    Raises:
        EmptyResponseError: If the body is empty
        JSONDecodingError: If the body is not a JSON array of ``model``
    """
    value = parse_json(body, url)
    return _unwrap(decode_list(model, value, body_text(body)), url)


def decode_optional_model(
    body: Body,
    model: Type[M],
    lenient: bool = True,
    url: Optional[str] = None,
) -> Optional[M]:
    """
    Decode a body that may legitimately carry no model.

    An empty body or JSON ``null`` yields None. With ``lenient`` (the
    default) a body that fails to decode also yields None and the failure
    is only logged; with ``lenient=False`` it raises JSONDecodingError.
    """
    text = body_text(body)
    if not text.strip():
        return None

    try:
        value = json.loads(text)
    except json.JSONDecodeError as e:
        if lenient:
            logger.warning("Ignoring undecodable %s response: %s", _model_name(model), e)
            return None
        raise ErrorClassifier.classify_decoding_error(e, text, url) from e

    if value is None:
        return None

    result = decode(model, value, text)
    if isinstance(result, Failure):
        if lenient:
            logger.warning("Ignoring %s that failed to decode: %s", _model_name(model), result.error)
            return None
        result.error.url = url
        raise result.error
    return result.value


def decode_graph_envelope(body: Body, model: Type[A], url: Optional[str] = None) -> A:
    """
    Decode a GraphQL response envelope.

    Policy, in order:
      1. a non-empty ``errors`` list fails with its first error, even when
         ``data`` is also present;
      2. otherwise present ``data`` is decoded into ``model``;
      3. otherwise the response is empty.

    Raises:
        DecodeError: The server reported errors
        EmptyResponseError: Neither errors nor data were returned
        JSONDecodingError: The body is not a valid envelope or data does not fit ``model``
    """
    text = body_text(body)
    value = parse_json(text, url)
    if not isinstance(value, dict):
        raise JSONDecodingError(
            f"GraphQL response must be a JSON object, got {type(value).__name__}",
            response_text=text,
            url=url,
        )

    envelope = _unwrap(decode(GraphEnvelope[Any], value, text), url)

    if envelope.first_error is not None:
        logger.debug("GraphQL error reported: %s", envelope.first_error.message)
        raise DecodeError(envelope.first_error, url=url)

    if envelope.data is None:
        raise EmptyResponseError("GraphQL response contained no data", url=url)

    return _unwrap(decode(model, envelope.data, text), url)


def decode_error_envelope(body: Body) -> Optional[ErrorEnvelope]:
    """Decode a REST error envelope, or None if the body is not one."""
    text = body_text(body)
    if not text.strip():
        return None
    try:
        value = json.loads(text)
    except json.JSONDecodeError:
        return None
    result = decode(ErrorEnvelope, value, text)
    return result.value_or_none()
