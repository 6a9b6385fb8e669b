"""
HTTP transports.

A Transport sends one PreparedRequest and returns its TransportOutcome. The
client holds exactly one transport instance; AiohttpTransport wraps a single
pooled aiohttp.ClientSession that is safe to share between concurrent calls.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from aiohttp import ClientSession, ClientTimeout, TCPConnector

from ..config.models import TransportConfig
from ..models.http import PreparedRequest, TransportOutcome

logger = logging.getLogger(__name__)


class Transport(ABC):
    """Sends prepared requests over the network."""

    @abstractmethod
    async def send(self, request: PreparedRequest) -> TransportOutcome:
        """
        Perform one HTTP exchange.

        Args:
            request: Request to send

        Returns:
            The raw outcome, whatever its status code

        Raises:
            aiohttp.ClientError, asyncio.TimeoutError, OSError: on transport failure
        """

    async def close(self) -> None:
        """Release any pooled resources."""

    async def __aenter__(self) -> "Transport":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()


class AiohttpTransport(Transport):
    """
    Transport backed by one pooled aiohttp session.

    The session is created lazily on first use so the transport can be
    constructed outside a running event loop.

    Examples:
        ```python
        async with AiohttpTransport(TransportConfig(total_timeout=10)) as transport:
            service = Service(identity, transport)
            project = await service.request(Route.get("/v1/projects/1"), Project)
        ```
    """

    def __init__(
        self,
        config: Optional[TransportConfig] = None,
        session: Optional[ClientSession] = None,
    ) -> None:
        """
        Initialize transport.

        Args:
            config: Pool and timeout configuration
            session: Existing session to use; it is not closed by this transport
        """
        self.config = config or TransportConfig()
        self._session = session
        self._owns_session = session is None

    def _create_session(self) -> ClientSession:
        connector = TCPConnector(
            limit=self.config.max_connections,
            limit_per_host=self.config.max_connections_per_host,
            ssl=self.config.verify_ssl,
            enable_cleanup_closed=True,
        )
        timeout = ClientTimeout(
            total=self.config.total_timeout,
            connect=self.config.connect_timeout,
        )
        return ClientSession(connector=connector, timeout=timeout, raise_for_status=False)

    @property
    def session(self) -> ClientSession:
        if self._session is None or self._session.closed:
            self._session = self._create_session()
            self._owns_session = True
        return self._session

    async def send(self, request: PreparedRequest) -> TransportOutcome:
        kwargs: Dict[str, Any] = {"headers": request.headers}
        if request.is_multipart:
            kwargs["data"] = request.form_data()
        elif request.body is not None:
            kwargs["data"] = request.body

        start_time = time.monotonic()
        async with self.session.request(request.method.value, request.url, **kwargs) as response:
            body = await response.read()
            outcome = TransportOutcome(
                status_code=response.status,
                headers=dict(response.headers),
                body=body,
                url=str(response.url),
            )

        logger.debug(
            "%s -> %d (%d bytes in %.3fs)",
            request.describe(),
            outcome.status_code,
            len(outcome.body),
            time.monotonic() - start_time,
        )
        return outcome

    async def close(self) -> None:
        """Close the session if this transport created it."""
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()
        self._session = None

