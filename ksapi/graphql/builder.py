"""
GraphQL document builders.

GraphQLQueryBuilder merges independently authored query fragments into one
document and turns a mutation's typed input into wire-format variables.
"""

from __future__ import annotations

import dataclasses
import json
import logging
from typing import Any, Dict, Iterable, List, Mapping, Tuple

from pydantic import BaseModel
from pydantic_core import PydanticSerializationError, to_jsonable_python

from ..exceptions import InvalidInputError
from .models import GraphInput, GraphMutation, QueryField, QuerySet

logger = logging.getLogger(__name__)


def merge_fields(fields: Iterable[QueryField]) -> List[QueryField]:
    """
    Merge fields sharing a key into one, recursively.

    Returns:
        The merged fields, sorted by key
    """
    grouped: Dict[Tuple[Any, ...], List[QueryField]] = {}
    for field in fields:
        grouped.setdefault(field.key, []).append(field)

    merged: List[QueryField] = []
    for key in sorted(grouped):
        group = grouped[key]
        first = group[0]
        children = [child for field in group for child in field.selections]
        merged.append(
            QueryField(
                name=first.name,
                arguments=first.arguments,
                selections=frozenset(merge_fields(children)),
                alias=first.alias,
            )
        )
    return merged


class GraphQLQueryBuilder:
    """Builds GraphQL query documents and mutation variables."""

    def build(self, query_set: QuerySet) -> str:
        """
        Merge every fragment of a query set into one document.

        The document holds the union of requested fields without duplicates.
        Field order depends only on the set's contents, so equal sets always
        produce byte-identical documents.

        Args:
            query_set: Non-empty set of query fragments

        Returns:
            GraphQL document string, e.g. ``{ me { id name } rootCategories { id } }``
        """
        fields = merge_fields(query_set)
        return "{ " + " ".join(field.render() for field in fields) + " }"

    def build_mutation(self, mutation: GraphMutation) -> Tuple[str, Dict[str, Any]]:
        """
        Serialize a mutation's input into GraphQL variables.

        Args:
            mutation: Mutation document and typed input

        Returns:
            (document, variables) where variables maps the input variable
            name to the JSON-compatible input object

        Raises:
            InvalidInputError: If the input cannot be represented as JSON
        """
        variables = {mutation.input_variable: serialize_input(mutation.input)}
        return mutation.document, variables


def _input_mapping(value: Any) -> Any:
    if isinstance(value, GraphInput):
        try:
            return value.to_input_dict()
        except Exception as e:
            raise InvalidInputError(
                f"{type(value).__name__}.to_input_dict() failed: {e}", original_error=e
            ) from e
    if isinstance(value, BaseModel):
        return value.model_dump(mode="python", by_alias=True, exclude_none=True)
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {
            f.name: getattr(value, f.name)
            for f in dataclasses.fields(value)
            if getattr(value, f.name) is not None
        }
    if isinstance(value, Mapping):
        return dict(value)
    raise InvalidInputError(
        f"Mutation input of type {type(value).__name__} is not an input object"
    )


def serialize_input(value: Any) -> Dict[str, Any]:
    """
    Convert a typed mutation input into a JSON-compatible mapping.

    Nested models, dataclasses, enums, dates and sequences are flattened to
    plain JSON values; None fields of models are omitted.

    Raises:
        InvalidInputError: If any value has no JSON representation
    """
    raw = _input_mapping(value)
    try:
        serialized = to_jsonable_python(raw, by_alias=True, exclude_none=True)
        # Rejects NaN and infinity
        json.dumps(serialized, allow_nan=False)
    except (PydanticSerializationError, TypeError, ValueError) as e:
        logger.debug("Mutation input rejected: %s", e)
        raise InvalidInputError(
            f"Mutation input cannot be serialized: {e}", original_error=e
        ) from e

    if not isinstance(serialized, dict):
        raise InvalidInputError("Mutation input must serialize to a JSON object")
    return serialized
