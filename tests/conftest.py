"""
Shared test fixtures and configuration for the ksapi test suite.
"""

import asyncio
import json
from typing import Any, Callable, List, Optional, Union

import pytest
from aioresponses import aioresponses

from ksapi import ClientIdentity, ServerConfig, Service
from ksapi.http.transport import Transport
from ksapi.models.http import PreparedRequest, TransportOutcome


class FakeTransport(Transport):
    """
    In-memory transport.

    Returns queued outcomes (or raises queued exceptions) in order and
    records every request. With ``block=True`` each send waits until it is
    cancelled, counting the cancellations it receives.
    """

    def __init__(
        self,
        outcomes: Optional[List[Union[TransportOutcome, BaseException]]] = None,
        block: bool = False,
    ) -> None:
        self.outcomes = list(outcomes or [])
        self.block = block
        self.requests: List[PreparedRequest] = []
        self.cancellations = 0
        self.closed = False
        self.started = asyncio.Event()

    async def send(self, request: PreparedRequest) -> TransportOutcome:
        self.requests.append(request)
        if self.block:
            self.started.set()
            try:
                await asyncio.Event().wait()
            except asyncio.CancelledError:
                self.cancellations += 1
                raise

        result = self.outcomes.pop(0)
        if isinstance(result, BaseException):
            raise result
        return result

    async def close(self) -> None:
        self.closed = True


def json_outcome(payload: Any, status: int = 200, url: Optional[str] = None) -> TransportOutcome:
    """Outcome whose body is ``payload`` encoded as JSON."""
    return TransportOutcome(
        status_code=status,
        headers={"Content-Type": "application/json"},
        body=json.dumps(payload).encode("utf-8"),
        url=url,
    )


@pytest.fixture
def make_transport() -> Callable[..., FakeTransport]:
    """Factory for FakeTransport instances."""

    def factory(*outcomes: Union[TransportOutcome, BaseException], block: bool = False) -> FakeTransport:
        return FakeTransport(list(outcomes), block=block)

    return factory


@pytest.fixture
def outcome() -> Callable[..., TransportOutcome]:
    """Factory for JSON TransportOutcomes."""
    return json_outcome


@pytest.fixture
def identity() -> ClientIdentity:
    """Authenticated production identity."""
    return ClientIdentity(
        app_id="com.kickstarter.test",
        server_config=ServerConfig.production(),
        oauth_token="secret-token",
        language="de",
        currency="EUR",
        build_version="4242",
    )


@pytest.fixture
def logged_out_identity(identity: ClientIdentity) -> ClientIdentity:
    return identity.logged_out()


@pytest.fixture
def service_factory(identity: ClientIdentity) -> Callable[[Transport], Service]:
    """Build a Service around a given transport."""

    def factory(transport: Transport) -> Service:
        return Service(identity=identity, transport=transport)

    return factory


@pytest.fixture
def mock_aiohttp():
    """Mock aiohttp responses for testing."""
    with aioresponses() as m:
        yield m
