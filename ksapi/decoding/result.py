"""
Decode results.

A decode either succeeds with a value or fails with a JSONDecodingError that
keeps the validator's own error. Results compose with ``map`` and
``flat_map``, and ``decode_field`` reads one key of a JSON object at a time
so hand-written decoders can be assembled field by field.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Callable, Generic, List, Mapping, Optional, Type, TypeVar, Union

from pydantic import TypeAdapter, ValidationError

from ..exceptions import ErrorClassifier, JSONDecodingError

M = TypeVar("M")
N = TypeVar("N")


@dataclass(frozen=True)
class Success(Generic[M]):
    """Successfully decoded value."""

    value: M

    @property
    def is_success(self) -> bool:
        return True

    def map(self, fn: Callable[[M], N]) -> "Decoded[N]":
        return Success(fn(self.value))

    def flat_map(self, fn: Callable[[M], "Decoded[N]"]) -> "Decoded[N]":
        return fn(self.value)

    def unwrap(self) -> M:
        return self.value

    def value_or_none(self) -> Optional[M]:
        return self.value


@dataclass(frozen=True)
class Failure:
    """Failed decode carrying the classified error."""

    error: JSONDecodingError

    @property
    def is_success(self) -> bool:
        return False

    def map(self, fn: Callable[[Any], Any]) -> "Failure":
        return self

    def flat_map(self, fn: Callable[[Any], Any]) -> "Failure":
        return self

    def unwrap(self) -> Any:
        raise self.error

    def value_or_none(self) -> None:
        return None


Decoded = Union[Success[M], Failure]


@lru_cache(maxsize=256)
def _adapter(model: Any) -> TypeAdapter[Any]:
    return TypeAdapter(model)


def decode(model: Type[M], value: Any, response_text: Optional[str] = None) -> Decoded[M]:
    """
    Validate an already parsed JSON value against a model type.

    Args:
        model: Pydantic model, dataclass, TypedDict or any type pydantic accepts
        value: Parsed JSON value
        response_text: Raw body kept on the failure for diagnostics

    Returns:
        Success with the model instance, or Failure
    """
    try:
        return Success(_adapter(model).validate_python(value))
    except ValidationError as e:
        return Failure(ErrorClassifier.classify_decoding_error(e, response_text))


def decode_list(model: Type[M], value: Any, response_text: Optional[str] = None) -> Decoded[List[M]]:
    """Validate a JSON array; one failing element fails the whole list."""
    if not isinstance(value, list):
        return Failure(
            JSONDecodingError(
                f"Expected a JSON array, got {type(value).__name__}",
                response_text=response_text,
            )
        )

    items: List[M] = []
    for index, element in enumerate(value):
        result = decode(model, element, response_text)
        if isinstance(result, Failure):
            error = result.error
            error.message = f"Element {index}: {error.message}"
            error.args = (error.message,)
            return result
        items.append(result.value)
    return Success(items)


def decode_field(
    obj: Any,
    key: str,
    model: Type[M],
    optional: bool = False,
) -> Decoded[Optional[M]]:
    """
    Decode one key of a JSON object.

    Args:
        obj: Parsed JSON object
        key: Key to read
        model: Type the value must validate against
        optional: Whether a missing or null key decodes to None

    Returns:
        Success or Failure for that single field
    """
    if not isinstance(obj, Mapping):
        return Failure(JSONDecodingError(f"Expected a JSON object while reading '{key}'"))

    if obj.get(key) is None:
        if optional:
            return Success(None)
        return Failure(JSONDecodingError(f"Missing required key '{key}'"))

    result = decode(model, obj[key])
    if isinstance(result, Failure):
        result.error.message = f"Key '{key}': {result.error.message}"
        result.error.args = (result.error.message,)
    return result
