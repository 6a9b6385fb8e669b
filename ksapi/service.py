"""
Service facade for the Kickstarter REST and GraphQL APIs.

A Service holds an immutable ClientIdentity and one transport. Every
operation builds its request eagerly, so invalid input fails at call time
without touching the network, and returns a cold ServiceCall that performs
the exchange and decodes the response once it is awaited or subscribed.

Examples:
    ```python
    async with Service.from_settings(load_settings()) as service:
        me = await service.fetch(QuerySet.of(QueryField.make("me", "id", "name")), MeEnvelope)
        projects = await service.request_list(Route.get("/v1/discover"), Project)
    ```
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, Type, TypeVar

from .call import ServiceCall
from .config.models import ClientIdentity, ClientSettings
from .decoding.pipeline import (
    decode_error_envelope,
    decode_graph_envelope,
    decode_model,
    decode_models,
    decode_optional_model,
)
from .exceptions import DecodeError, EmptyResponseError, ErrorClassifier
from .graphql.builder import GraphQLQueryBuilder
from .graphql.models import GraphMutation, QuerySet
from .http.executor import TransportExecutor
from .http.request_builder import RequestBuilder
from .http.transport import AiohttpTransport, Transport
from .models.http import PreparedRequest, TransportOutcome
from .models.route import Route

logger = logging.getLogger(__name__)

M = TypeVar("M")
A = TypeVar("A")


class Service:
    """
    Client for the REST and GraphQL APIs.

    Services are values: ``login``, ``logout`` and ``with_identity`` return
    new instances that share this one's transport.

    Args:
        identity: Client identity; the logged out production identity by default
        transport: Transport used for every call; a pooled aiohttp transport by default
        builder: REST request builder
        query_builder: GraphQL document builder
    """

    def __init__(
        self,
        identity: Optional[ClientIdentity] = None,
        transport: Optional[Transport] = None,
        builder: Optional[RequestBuilder] = None,
        query_builder: Optional[GraphQLQueryBuilder] = None,
    ) -> None:
        self.identity = identity or ClientIdentity()
        self.transport = transport or AiohttpTransport()
        self.builder = builder or RequestBuilder()
        self.query_builder = query_builder or GraphQLQueryBuilder()
        self.executor = TransportExecutor(self.transport)

    @classmethod
    def from_settings(cls, settings: ClientSettings) -> "Service":
        """Create a service with the identity and transport described by ``settings``."""
        return cls(
            identity=settings.to_identity(),
            transport=AiohttpTransport(settings.transport),
        )

    async def close(self) -> None:
        await self.transport.close()

    async def __aenter__(self) -> "Service":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    # Identity

    def with_identity(self, identity: ClientIdentity) -> "Service":
        return Service(
            identity=identity,
            transport=self.transport,
            builder=self.builder,
            query_builder=self.query_builder,
        )

    def login(self, token: str) -> "Service":
        """Return a service authenticated with ``token``."""
        logger.info("Logging in as %s", self.identity.app_id)
        return self.with_identity(self.identity.with_token(token))

    def logout(self) -> "Service":
        """Return a service that sends no Authorization header."""
        logger.info("Logging out")
        return self.with_identity(self.identity.logged_out())

    # GraphQL

    def query(
        self,
        document: str,
        model: Type[A],
        variables: Optional[Dict[str, Any]] = None,
    ) -> ServiceCall[A]:
        """
        Send an already written GraphQL document.

        Args:
            document: GraphQL document
            model: Type the ``data`` object is decoded into
            variables: GraphQL variables

        Returns:
            ServiceCall yielding the decoded ``data``
        """
        return ServiceCall.prepare(
            lambda: self.builder.build_graph(self.identity, document, variables),
            lambda request: self._perform_graph(request, model),
            description="graphql query",
        )

    def fetch(self, query_set: QuerySet, model: Type[A]) -> ServiceCall[A]:
        """
        Merge a set of query fragments into one document and fetch it.

        Returns:
            ServiceCall yielding the decoded ``data``. Fails with DecodeError
            when the server reports errors and EmptyResponseError when it
            returns no data.
        """

        def build() -> PreparedRequest:
            document = self.query_builder.build(query_set)
            logger.debug("GraphQL document: %s", document)
            return self.builder.build_graph(self.identity, document)

        return ServiceCall.prepare(
            build,
            lambda request: self._perform_graph(request, model),
            description=f"graphql fetch ({len(query_set)} fields)",
        )

    def apply_mutation(self, mutation: GraphMutation, model: Type[A]) -> ServiceCall[A]:
        """
        Run a mutation with its typed input.

        The input is serialized immediately; an unserializable input yields a
        call that fails with InvalidInputError without sending anything.
        """

        def build() -> PreparedRequest:
            document, variables = self.query_builder.build_mutation(mutation)
            return self.builder.build_graph(self.identity, document, variables)

        return ServiceCall.prepare(
            build,
            lambda request: self._perform_graph(request, model),
            description="graphql mutation",
        )

    async def _perform_graph(self, request: PreparedRequest, model: Type[A]) -> A:
        outcome = await self.executor.execute(request)
        # The HTTP status does not classify GraphQL responses
        return decode_graph_envelope(outcome.body, model, url=request.url)

    # REST

    def request(self, route: Route, model: Type[M]) -> ServiceCall[M]:
        """
        Request a route that returns exactly one model.

        Returns:
            ServiceCall yielding the decoded model
        """
        return self._rest(
            route,
            lambda outcome, url: decode_model(_require_body(outcome, url), model, url),
        )

    def request_list(self, route: Route, model: Type[M]) -> ServiceCall[List[M]]:
        """Request a route that returns a JSON array of models."""
        return self._rest(
            route,
            lambda outcome, url: decode_models(_require_body(outcome, url), model, url),
        )

    def request_optional(
        self, route: Route, model: Type[M], lenient: bool = True
    ) -> ServiceCall[Optional[M]]:
        """
        Request a route whose response may carry no model.

        Args:
            route: Route descriptor
            model: Type of the optional model
            lenient: Whether an undecodable body yields None instead of failing
        """
        return self._rest(
            route,
            lambda outcome, url: decode_optional_model(outcome.body, model, lenient, url),
        )

    def request_pagination(self, url: str, model: Type[M]) -> ServiceCall[M]:
        """
        Fetch the next page from a server supplied continuation URL.

        The URL is validated first; a malformed one yields a call failing
        with InvalidPaginationURLError that never reaches the transport.
        """
        return ServiceCall.prepare(
            lambda: self.builder.build_for_url(url, self.identity),
            lambda request: self._perform_rest(
                request,
                lambda outcome, u: decode_model(_require_body(outcome, u), model, u),
            ),
            description=f"page {url}",
        )

    def _rest(
        self,
        route: Route,
        decoder: Callable[[TransportOutcome, str], Any],
    ) -> ServiceCall[Any]:
        return ServiceCall.prepare(
            lambda: self.builder.build(route, self.identity),
            lambda request: self._perform_rest(request, decoder),
            description=f"{route.method.value} {route.path}",
        )

    async def _perform_rest(
        self,
        request: PreparedRequest,
        decoder: Callable[[TransportOutcome, str], Any],
    ) -> Any:
        outcome = await self.executor.execute(request)
        _check_status(outcome, request.url)
        return decoder(outcome, request.url)


def _check_status(outcome: TransportOutcome, url: str) -> None:
    """
    Fail a non-2xx REST response.

    Raises:
        DecodeError: The body is an ErrorEnvelope
        RequestError: Any other failing response
    """
    if outcome.is_success:
        return

    envelope = decode_error_envelope(outcome.body)
    if envelope is not None:
        logger.debug(
            "Server error %s (%s) for %s", outcome.status_code, envelope.ksr_code, url
        )
        raise DecodeError(envelope, url=url)

    raise ErrorClassifier.classify_status_error(
        outcome.status_code, url, outcome.headers, outcome.text
    )


def _require_body(outcome: TransportOutcome, url: str) -> bytes:
    if outcome.is_empty:
        raise EmptyResponseError(
            "Response body is empty",
            url=url,
            status_code=outcome.status_code,
            headers=outcome.headers,
        )
    return outcome.body
