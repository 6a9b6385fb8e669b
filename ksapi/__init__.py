"""
ksapi - asynchronous client for the Kickstarter REST and GraphQL APIs.

Features:
- Typed REST routes with JSON, query string and multipart encoding
- GraphQL query composition from independently authored fragments
- Mutations with typed, validated input
- Cold, cancellable calls with exactly one terminal outcome
- A closed error taxonomy for every failure
"""

__version__ = "0.1.0"

from .call import CallState, ServiceCall
from .config import (
    ClientIdentity,
    ClientSettings,
    ConfigLoader,
    EnvironmentType,
    LoggingConfig,
    LogLevel,
    ServerConfig,
    TransportConfig,
    load_settings,
)
from .decoding import (
    Decoded,
    Failure,
    Success,
    decode_graph_envelope,
    decode_model,
    decode_models,
    decode_optional_model,
)
from .exceptions import (
    DecodeError,
    EmptyResponseError,
    ErrorClassifier,
    ErrorKind,
    InvalidInputError,
    InvalidPaginationURLError,
    InvalidURLError,
    JSONDecodingError,
    RequestError,
    ServiceError,
)
from .graphql import (
    GraphAPIError,
    GraphEnvelope,
    GraphInput,
    GraphMutation,
    GraphQLEnum,
    GraphQLQueryBuilder,
    QueryField,
    QuerySet,
)
from .http import AiohttpTransport, RequestBuilder, Transport, TransportExecutor
from .models import (
    ErrorEnvelope,
    HTTPMethod,
    PreparedRequest,
    Route,
    TransportOutcome,
    UploadFile,
    UploadMimeType,
)
from .service import Service

__all__ = [
    "__version__",
    # Facade
    "Service",
    "ServiceCall",
    "CallState",
    # Configuration
    "ClientIdentity",
    "ClientSettings",
    "ConfigLoader",
    "EnvironmentType",
    "LoggingConfig",
    "LogLevel",
    "ServerConfig",
    "TransportConfig",
    "load_settings",
    # Routes and requests
    "HTTPMethod",
    "Route",
    "UploadFile",
    "UploadMimeType",
    "PreparedRequest",
    "TransportOutcome",
    "ErrorEnvelope",
    "RequestBuilder",
    "Transport",
    "AiohttpTransport",
    "TransportExecutor",
    # GraphQL
    "GraphQLQueryBuilder",
    "GraphQLEnum",
    "QueryField",
    "QuerySet",
    "GraphInput",
    "GraphMutation",
    "GraphAPIError",
    "GraphEnvelope",
    # Decoding
    "Decoded",
    "Success",
    "Failure",
    "decode_model",
    "decode_models",
    "decode_optional_model",
    "decode_graph_envelope",
    # Exceptions
    "ServiceError",
    "ErrorKind",
    "ErrorClassifier",
    "InvalidURLError",
    "InvalidPaginationURLError",
    "InvalidInputError",
    "RequestError",
    "EmptyResponseError",
    "DecodeError",
    "JSONDecodingError",
]
