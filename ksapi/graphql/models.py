"""
GraphQL models and data structures.

Queries are authored as independent QueryField fragments grouped in a
non-empty QuerySet; mutations pair a document with a typed input value.
Responses are decoded through GraphEnvelope.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from enum import Enum
from typing import (
    Any,
    Dict,
    FrozenSet,
    Generic,
    Iterable,
    Iterator,
    List,
    Mapping,
    Optional,
    Protocol,
    Tuple,
    TypeVar,
    Union,
    runtime_checkable,
)

from pydantic import BaseModel, ConfigDict, Field

A = TypeVar("A")


@dataclass(frozen=True)
class GraphQLEnum:
    """A GraphQL enum literal, rendered without quotes."""

    value: str

    def __str__(self) -> str:
        return self.value


def format_literal(value: Any) -> str:
    """
    Render a Python value as a GraphQL input literal.

    Strings starting with ``$`` are variable references and are emitted as
    is. Mapping keys are sorted so the output is stable.

    Raises:
        ValueError: If the value has no GraphQL literal form
    """
    if isinstance(value, GraphQLEnum):
        return value.value
    if isinstance(value, Enum):
        return str(value.value)
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        if value.startswith("$"):
            return value
        return json.dumps(value)
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ValueError(f"{value} is not a valid GraphQL Float")
        return repr(value)
    if isinstance(value, Mapping):
        items = ", ".join(
            f"{key}: {format_literal(value[key])}" for key in sorted(value, key=str)
        )
        return f"{{{items}}}"
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(format_literal(item) for item in value) + "]"
    raise ValueError(f"Cannot render {type(value).__name__} as a GraphQL literal")


@dataclass(frozen=True)
class QueryField:
    """
    One field of a GraphQL selection.

    Arguments are stored already rendered and sorted by name, which keeps
    the field hashable and gives equal fields equal keys.

    Attributes:
        name: Field name
        arguments: (argument name, rendered literal) pairs
        selections: Sub-fields selected on this field
        alias: Optional response key
    """

    name: str
    arguments: Tuple[Tuple[str, str], ...] = ()
    selections: FrozenSet["QueryField"] = frozenset()
    alias: Optional[str] = None

    @classmethod
    def make(
        cls,
        name: str,
        *selections: Union[str, "QueryField"],
        args: Optional[Mapping[str, Any]] = None,
        alias: Optional[str] = None,
    ) -> "QueryField":
        """
        Build a field from plain Python values.

        Examples:
            ```python
            QueryField.make("project", "id", "name", args={"slug": "my-project"})
            ```
        """
        if not name:
            raise ValueError("Field name must not be empty")
        arguments = tuple(
            (key, format_literal(value)) for key, value in sorted((args or {}).items())
        )
        children = frozenset(
            cls(child) if isinstance(child, str) else child for child in selections
        )
        return cls(name=name, arguments=arguments, selections=children, alias=alias)

    @property
    def key(self) -> Tuple[str, str, Tuple[Tuple[str, str], ...]]:
        """Merge and ordering key: fields with equal keys are the same field."""
        return (self.alias or self.name, self.name, self.arguments)

    def render(self) -> str:
        head = f"{self.alias}: {self.name}" if self.alias else self.name
        if self.arguments:
            head += "(" + ", ".join(f"{k}: {v}" for k, v in self.arguments) + ")"
        if not self.selections:
            return head
        body = " ".join(child.render() for child in sorted(self.selections, key=_field_key))
        return f"{head} {{ {body} }}"


def _field_key(field: QueryField) -> Tuple[str, str, Tuple[Tuple[str, str], ...]]:
    return field.key


class QuerySet:
    """A non-empty set of independently authored query fragments."""

    __slots__ = ("_fields",)

    def __init__(self, fields: Iterable[Union[str, QueryField]]) -> None:
        normalized = frozenset(
            QueryField(field) if isinstance(field, str) else field for field in fields
        )
        if not normalized:
            raise ValueError("A QuerySet needs at least one field")
        self._fields: FrozenSet[QueryField] = normalized

    @classmethod
    def of(cls, *fields: Union[str, QueryField]) -> "QuerySet":
        return cls(fields)

    @property
    def fields(self) -> FrozenSet[QueryField]:
        return self._fields

    def union(self, other: "QuerySet") -> "QuerySet":
        return QuerySet(self._fields | other.fields)

    def __iter__(self) -> Iterator[QueryField]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, QuerySet) and self._fields == other.fields

    def __hash__(self) -> int:
        return hash(self._fields)

    def __repr__(self) -> str:
        return f"QuerySet({sorted(f.name for f in self._fields)!r})"


@runtime_checkable
class GraphInput(Protocol):
    """Objects that know how to express themselves as mutation input."""

    def to_input_dict(self) -> Dict[str, Any]:
        ...


@dataclass(frozen=True)
class GraphMutation:
    """
    A GraphQL mutation document and its typed input.

    Attributes:
        document: Mutation document referencing ``$<input_variable>``
        input: Pydantic model, dataclass, mapping or GraphInput
        input_variable: Name of the variable the input is bound to
    """

    document: str
    input: Any
    input_variable: str = "input"


class ErrorLocation(BaseModel):
    """Location of an error in a GraphQL document."""

    line: int
    column: int


class GraphAPIError(BaseModel):
    """An error reported in a GraphQL response's ``errors`` list."""

    model_config = ConfigDict(extra="allow")

    message: str
    locations: Optional[List[ErrorLocation]] = None
    path: Optional[List[Union[str, int]]] = None
    extensions: Optional[Dict[str, Any]] = None


class GraphEnvelope(BaseModel, Generic[A]):
    """Outer structure of every GraphQL response."""

    data: Optional[A] = None
    errors: Optional[List[GraphAPIError]] = Field(default=None)

    @property
    def first_error(self) -> Optional[GraphAPIError]:
        return self.errors[0] if self.errors else None
