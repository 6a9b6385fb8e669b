"""
GraphQL support for ksapi.

This module provides query fragment composition, mutation input
serialization, and the response envelope models.
"""

from .builder import GraphQLQueryBuilder, merge_fields, serialize_input
from .models import (
    ErrorLocation,
    GraphAPIError,
    GraphEnvelope,
    GraphInput,
    GraphMutation,
    GraphQLEnum,
    QueryField,
    QuerySet,
    format_literal,
)

__all__ = [
    # Builder
    "GraphQLQueryBuilder",
    "merge_fields",
    "serialize_input",
    # Models
    "ErrorLocation",
    "GraphAPIError",
    "GraphEnvelope",
    "GraphInput",
    "GraphMutation",
    "GraphQLEnum",
    "QueryField",
    "QuerySet",
    "format_literal",
]
